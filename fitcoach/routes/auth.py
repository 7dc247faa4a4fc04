from flask import Blueprint, request, jsonify
from flask_jwt_extended import create_access_token, set_access_cookies, unset_jwt_cookies

from fitcoach.schemas import UserSchema, RegisterSchema, LoginSchema
from fitcoach.services import directory
from fitcoach.utils.decorators import role_required

auth_bp = Blueprint("auth", __name__)
user_schema = UserSchema()
register_schema = RegisterSchema()
login_schema = LoginSchema()


@auth_bp.route("/register", methods=["POST"])
def register():
    data = register_schema.load(request.get_json(silent=True) or {})
    user = directory.register_user(
        username=data["username"],
        email=data["email"],
        name=data["name"],
        password=data["password"],
        role=data["role"],
    )

    if user.is_trainer:
        msg = "Registered successfully. Please wait for admin approval."
    else:
        msg = "Registered successfully."
    return jsonify({"msg": msg, "user": user_schema.dump(user)}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    if not request.is_json:
        return jsonify({"msg": "Missing JSON"}), 400

    data = login_schema.load(request.get_json())
    login_value = data.get("login") or data.get("email")
    if not login_value:
        return jsonify({"msg": "Email or username and password are required"}), 400

    user = directory.authenticate(login_value, data["password"])
    if not user:
        return jsonify({"msg": "Invalid credentials"}), 401

    access_token = create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role},
    )
    response = jsonify({
        "msg": "Login successful",
        "access_token": access_token,
        "user": user_schema.dump(user),
    })
    set_access_cookies(response, access_token)
    return response, 200


@auth_bp.route("/logout", methods=["POST"])
def logout():
    response = jsonify({"msg": "Logged out"})
    unset_jwt_cookies(response)
    return response, 200


@auth_bp.route("/me", methods=["GET"])
@role_required()
def me(current_user):
    data = user_schema.dump(current_user)
    if current_user.is_trainer:
        data["max_clients"] = current_user.max_clients
        data["current_clients"] = current_user.current_clients
    return jsonify(data), 200
