"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout

Tokens come back both in the JSON body and as HttpOnly cookies
(accessToken / refreshToken). Refresh accepts the cookie or a JSON body
field for non-cookie clients.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, abort, current_app

from models import storage
from models.user import User
from models.schemas.user import UserCreateSchema, UserOutSchema, UserLoginSchema
from services.token_authority import TokenPair
from utils.decorators import jwt_required, token_authority, ACCESS_COOKIE, REFRESH_COOKIE

bp = Blueprint("auth", __name__, url_prefix="/auth")

user_create_schema = UserCreateSchema()
user_out_schema = UserOutSchema()
user_login_schema = UserLoginSchema()


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": current_app.config.get("AUTH_COOKIE_SECURE", True),
        "samesite": current_app.config.get("AUTH_COOKIE_SAMESITE", "Lax"),
    }


def _set_token_cookies(response, pair: TokenPair):
    settings = token_authority().settings
    options = _cookie_options()
    response.set_cookie(
        ACCESS_COOKIE, pair.access_token,
        max_age=int(settings.access_token_expires.total_seconds()), **options
    )
    response.set_cookie(
        REFRESH_COOKIE, pair.refresh_token,
        max_age=int(settings.refresh_token_expires.total_seconds()), **options
    )
    return response


@bp.post("/register")
def register():
    """
    register a new user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            email: { type: string }
            password: { type: string }
            full_name: { type: string }
            enrollment_number: { type: string }
    responses:
      201:
        description: Created
      400:
        description: Validation error
      409:
        description: Email or enrollment number already registered
    """
    payload = request.get_json(silent=True) or {}
    data = user_create_schema.load(payload)

    session = storage.get_session()
    if session.query(User).filter(User.email == data["email"]).first():
        abort(409, description="User with this email already exists")
    if session.query(User).filter(User.enrollment_number == data["enrollment_number"]).first():
        abort(409, description="User with this enrollment number already exists")

    user = User(
        email=data["email"],
        password=data["password"],
        full_name=data["full_name"],
        enrollment_number=data["enrollment_number"],
    )
    current_app.extensions["user_store"].save(user)

    return jsonify(
        {
            "data": user_out_schema.dump(user),
            "message": "User Registered successfully",
        }
    ), 201


@bp.post("/login")
def login():
    """
    Login: verify credentials, return access and refresh tokens
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens and sets cookies)
      400:
        description: Missing fields
      401:
        description: Incorrect password
      404:
        description: User not found
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)

    authority = token_authority()
    identity_id = authority.verify_credentials(data["email"], data["password"])
    pair = authority.issue(identity_id)

    user = current_app.extensions["user_store"].find_by_id(identity_id)
    response = jsonify(
        {
            "data": {"user": user_out_schema.dump(user), **pair.as_dict()},
            "message": "User logged in successfully",
        }
    )
    return _set_token_cookies(response, pair), 200


@bp.post("/refresh")
def refresh():
    """
    Use a refresh token to obtain a new access and refresh token (rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK (returns the new pair and sets cookies)
      401:
        description: Missing, invalid, expired or already used refresh token
    """
    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        payload = request.get_json(silent=True)
        if isinstance(payload, dict):
            token = payload.get("refreshToken") or payload.get("refresh_token")

    pair = token_authority().rotate(token)

    response = jsonify({"data": pair.as_dict(), "message": "Access token refreshed"})
    return _set_token_cookies(response, pair), 200


@bp.post("/logout")
@jwt_required()
def logout(identity_id: str):
    """
    logout: revokes the refresh token and clears the auth cookies
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    token_authority().revoke(identity_id)

    options = _cookie_options()
    response = jsonify({"data": {}, "message": "User logged out successfully"})
    response.delete_cookie(ACCESS_COOKIE, **options)
    response.delete_cookie(REFRESH_COOKIE, **options)
    return response, 200
