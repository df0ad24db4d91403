"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT
- JTI generation for token identifiers

Nothing here reads application config; callers pass secrets and lifetimes.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError

ph = PasswordHasher()

ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    if not password or not password_hash:
        return False
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_token(
    subject: str,
    token_type: str,
    secret: str,
    expires_in: timedelta,
    algorithm: str = "HS256",
    issuer: str | None = None,
    jti: str | None = None,
) -> str:
    """
    Sign a JWT for ``subject``. A negative ``expires_in`` yields a token
    that is already expired.
    """
    now = _now()
    payload = {
        "sub": str(subject),
        "iat": int(now.timestamp()),
        "exp": int((now + expires_in).timestamp()),
        "type": token_type,
        "jti": jti or generate_jti(),
    }
    if issuer:
        payload["iss"] = issuer
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(
    token: str,
    secret: str,
    expected_type: str = ACCESS,
    algorithm: str = "HS256",
    issuer: str | None = None,
) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises jwt.InvalidTokenError (or one of its
    subclasses, e.g. ExpiredSignatureError) on invalid signature, expiry,
    missing claims or a token of the wrong type.
    """
    decoded = jwt.decode(
        token,
        secret,
        algorithms=[algorithm],
        issuer=issuer,
        options={"require": ["exp", "sub", "jti"]},
    )
    if decoded.get("type") != expected_type:
        raise jwt.InvalidTokenError("Wrong token type")
    return decoded
