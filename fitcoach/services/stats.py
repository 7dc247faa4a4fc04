from fitcoach.models import User, Role, AssociationRequest, RequestStatus


def admin_stats():
    """Counts for the admin dashboard."""
    total_clients = User.query.filter_by(role=Role.CLIENT.value).count()
    assigned_clients = User.query.filter(
        User.role == Role.CLIENT.value,
        User.trainer_id.isnot(None),
    ).count()
    pending = AssociationRequest.query.filter_by(status=RequestStatus.PENDING.value)

    return {
        "total_users": User.query.count(),
        "active_trainers": User.query.filter_by(role=Role.TRAINER.value, is_validated=True).count(),
        "pending_trainers": User.query.filter_by(role=Role.TRAINER.value, is_validated=False).count(),
        "pending_requests": pending.count(),
        "pending_change_requests": pending.filter(AssociationRequest.current_trainer_id.isnot(None)).count(),
        "total_clients": total_clients,
        "assigned_clients": assigned_clients,
        "unassigned_clients": total_clients - assigned_clients,
    }
