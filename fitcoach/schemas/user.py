from marshmallow import EXCLUDE, fields, validate, validates, ValidationError, pre_load
from fitcoach.extensions import ma
from fitcoach.models import User, Role


class UserSchema(ma.SQLAlchemySchema):
    class Meta:
        model = User
        load_instance = False

    id = ma.auto_field(dump_only=True)
    username = ma.auto_field()
    email = ma.auto_field()
    name = ma.auto_field()
    role = ma.auto_field()
    is_validated = ma.auto_field()
    trainer_id = ma.auto_field()
    created_at = ma.auto_field(dump_only=True)


class UserSummarySchema(ma.SQLAlchemySchema):
    class Meta:
        model = User

    id = ma.auto_field()
    username = ma.auto_field()
    name = ma.auto_field()
    email = ma.auto_field()


class TrainerSummarySchema(UserSummarySchema):
    is_validated = ma.auto_field()
    max_clients = ma.auto_field()
    current_clients = fields.Integer(dump_only=True)
    has_capacity = fields.Method("get_has_capacity")

    def get_has_capacity(self, obj):
        return obj.current_clients < obj.max_clients


class RegisterSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=validate.Length(min=3, max=80))
    email = fields.Email(required=True)
    name = fields.String(required=True, validate=validate.Length(min=2, max=150))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=6))
    role = fields.String(
        load_default=Role.CLIENT.value,
        validate=validate.OneOf([Role.CLIENT.value, Role.TRAINER.value]),
    )

    @pre_load
    def normalize(self, data, **kwargs):
        data = dict(data or {})
        for key in ("username", "email", "name"):
            if isinstance(data.get(key), str):
                data[key] = data[key].strip()
        if isinstance(data.get("email"), str):
            data["email"] = data["email"].lower()
        return data


class LoginSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    # Either an email address or a username
    login = fields.String(load_default=None)
    email = fields.String(load_default=None)
    password = fields.String(required=True, load_only=True)

    @validates("password")
    def validate_password(self, value, **kwargs):
        if not value:
            raise ValidationError("Password is required")


class TrainerLimitSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    max_clients = fields.Integer(required=True, validate=validate.Range(min=1))
