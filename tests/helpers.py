from fitcoach.extensions import db


def reload(model, pk):
    """Fetch a fresh copy of a row, dropping anything cached in the session."""
    db.session.expire_all()
    return db.session.get(model, pk)
