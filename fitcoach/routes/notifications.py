from flask import Blueprint, request, jsonify

from fitcoach.errors import NotFoundError
from fitcoach.models import Notification
from fitcoach.schemas import NotificationSchema
from fitcoach.services import notifications
from fitcoach.utils.decorators import role_required

notifications_bp = Blueprint("notifications", __name__)
notification_schema = NotificationSchema()
notifications_schema = NotificationSchema(many=True)

MAX_PAGE_SIZE = 100


@notifications_bp.route("", methods=["GET"])
@role_required()
def list_notifications(current_user):
    query = Notification.query.filter_by(recipient_id=current_user.id)
    if request.args.get("unread") in ("1", "true"):
        query = query.filter_by(is_read=False)
    limit = min(max(request.args.get("limit", 50, type=int), 1), MAX_PAGE_SIZE)
    items = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()
    return jsonify({"count": len(items), "notifications": notifications_schema.dump(items)}), 200


@notifications_bp.route("/unread-count", methods=["GET"])
@role_required()
def unread_count(current_user):
    count = Notification.query.filter_by(recipient_id=current_user.id, is_read=False).count()
    return jsonify({"unread": count}), 200


@notifications_bp.route("/<int:notification_id>/read", methods=["PATCH"])
@role_required()
def mark_read(notification_id, current_user):
    notification = notifications.mark_read(notification_id, current_user.id)
    if notification is None:
        raise NotFoundError("Notification not found")
    return jsonify({"msg": "Marked as read", "notification": notification_schema.dump(notification)}), 200


@notifications_bp.route("/read-all", methods=["PATCH"])
@role_required()
def mark_all_read(current_user):
    updated = notifications.mark_all_read(current_user.id)
    return jsonify({"msg": "All notifications marked as read", "updated": updated}), 200


@notifications_bp.route("/<int:notification_id>", methods=["DELETE"])
@role_required()
def delete_notification(notification_id, current_user):
    notifications.delete_notification(notification_id, current_user.id)
    return jsonify({"msg": "Notification deleted"}), 200
