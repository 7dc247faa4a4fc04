import itertools

import pytest
from flask_jwt_extended import create_access_token

from fitcoach import create_app
from fitcoach.extensions import db
from fitcoach.models import User


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = itertools.count(1)

    def _make(role="client", validated=True, trainer=None, max_clients=15, name=None):
        n = next(counter)
        user = User(
            username=f"{role}{n}",
            email=f"{role}{n}@example.com",
            name=name or f"{role.title()} {n}",
            role=role,
            is_validated=validated,
            trainer_id=trainer.id if trainer else None,
            max_clients=max_clients,
        )
        user.set_password("secret123")
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def auth_headers(app):
    def _headers(user):
        token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
        return {"Authorization": f"Bearer {token}"}

    return _headers
