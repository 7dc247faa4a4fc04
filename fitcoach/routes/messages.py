from flask import Blueprint, request, jsonify

from fitcoach.schemas import MessageSchema, SendMessageSchema
from fitcoach.services import messaging
from fitcoach.utils.decorators import role_required

messages_bp = Blueprint("messages", __name__)
message_schema = MessageSchema()
messages_schema = MessageSchema(many=True)
send_schema = SendMessageSchema()


@messages_bp.route("", methods=["POST"])
@role_required()
def send_message(current_user):
    data = send_schema.load(request.get_json(silent=True) or {})
    message = messaging.send_message(current_user.id, data["receiver_id"], data["content"])
    return jsonify({"msg": "Message sent successfully", "message": message_schema.dump(message)}), 201


@messages_bp.route("/unread", methods=["GET"])
@role_required()
def unread_messages(current_user):
    items = messaging.unread_for(current_user.id)
    return jsonify({"count": len(items), "messages": messages_schema.dump(items)}), 200


@messages_bp.route("/<int:contact_id>", methods=["GET"])
@role_required()
def get_conversation(contact_id, current_user):
    items = messaging.conversation(current_user.id, contact_id)
    return jsonify({"count": len(items), "messages": messages_schema.dump(items)}), 200
