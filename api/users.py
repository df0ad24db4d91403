from __future__ import annotations

from flask import Blueprint, request, jsonify, abort, current_app

from models import storage
from models.user import User
from models.schemas.user import UserOutSchema, UserUpdateSchema, PasswordChangeSchema
from services.errors import ValidationFailed, Unauthorized
from utils.decorators import jwt_required

bp = Blueprint("users", __name__)

user_out_schema = UserOutSchema()
user_update_schema = UserUpdateSchema()
password_change_schema = PasswordChangeSchema()


def _current_user(identity_id: str) -> User:
    user = current_app.extensions["user_store"].find_by_id(identity_id)
    if not user:
        raise Unauthorized("User not found")
    return user


@bp.get("/users/me")
@jwt_required()
def me(identity_id: str):
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    user = _current_user(identity_id)
    return jsonify(
        {
            "data": user_out_schema.dump(user),
            "message": "Current user accessed successfully",
        }
    ), 200


@bp.patch("/users/me")
@jwt_required()
def update_account(identity_id: str):
    """
    Update full name and email of the current user.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            full_name: { type: string }
            email: { type: string }
    responses:
      200: { description: OK }
      400: { description: Validation error }
      409: { description: Email already in use }
    """
    data = user_update_schema.load(request.get_json(silent=True) or {})
    user = _current_user(identity_id)

    session = storage.get_session()
    taken = session.query(User).filter(User.email == data["email"], User.id != user.id).first()
    if taken:
        abort(409, description="User with this email already exists")

    user.full_name = data["full_name"]
    user.email = data["email"]
    current_app.extensions["user_store"].save(user)
    return jsonify(
        {
            "data": user_out_schema.dump(user),
            "message": "Account details updated successfully",
        }
    ), 200


@bp.post("/users/me/password")
@jwt_required()
def change_password(identity_id: str):
    """
    Change the current user's password.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            old_password: { type: string }
            new_password: { type: string }
    responses:
      200: { description: Password updated }
      400: { description: Missing fields or incorrect old password }
      401: { description: Unauthorized }
    """
    data = password_change_schema.load(request.get_json(silent=True) or {})
    user = _current_user(identity_id)

    if not user.check_password(data["old_password"]):
        raise ValidationFailed("Incorrect old password")

    user.password = data["new_password"]
    current_app.extensions["user_store"].save(user, validate=False)
    return jsonify({"data": {}, "message": "Password updated successfully"}), 200
