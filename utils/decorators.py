from __future__ import annotations
from functools import wraps
from flask import request, current_app

from services.errors import Unauthorized
from services.token_authority import TokenAuthority

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def token_authority() -> TokenAuthority:
    return current_app.extensions["token_authority"]


def _presented_access_token() -> str | None:
    token = request.cookies.get(ACCESS_COOKIE)
    if token:
        return token
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return None


def jwt_required():
    """
    Verify the access token (cookie first, then Bearer header) and pass
    the identity to the view as the ``identity_id`` keyword argument.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = _presented_access_token()
            if not token:
                raise Unauthorized("Unauthorized request")
            kwargs["identity_id"] = token_authority().verify_access_token(token)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
