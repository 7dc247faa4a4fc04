import os
from fitcoach import create_app
from fitcoach.extensions import db
from fitcoach.models import User, Role

app = create_app()

with app.app_context():
    db.create_all()

    # First administrator; override through the environment
    email = os.getenv("ADMIN_EMAIL", "admin@example.com").strip().lower()
    username = os.getenv("ADMIN_USERNAME", "admin")
    password = os.getenv("ADMIN_PASSWORD", "admin1234")

    existing_user = User.query.filter((User.email == email) | (User.username == username)).first()
    if existing_user:
        print(f"User '{existing_user.username}' already exists.")
    else:
        user = User(
            username=username,
            email=email,
            name="Administrator",
            role=Role.ADMIN.value,
            is_validated=True,
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()

        print("Admin created successfully!")
        print(f"Email: {email}")
