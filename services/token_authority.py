"""
Token authority: issues, verifies, rotates and revokes access/refresh pairs.

Each identity has at most one live refresh token, the one persisted on its
user record. Rotation trades that token for a new pair and overwrites it,
so a refresh token can be used once. Access tokens are stateless and are
only ever invalidated by expiry.
"""
from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping

import jwt

from services.errors import NotFound, PersistenceError, Unauthorized, ValidationFailed
from services.user_store import UserStore
from utils.security import ACCESS, REFRESH, create_token, decode_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenSettings:
    access_token_secret: str
    access_token_expires: timedelta
    refresh_token_secret: str
    refresh_token_expires: timedelta
    algorithm: str = "HS256"
    issuer: str | None = None

    def __post_init__(self):
        if not self.access_token_secret or not self.refresh_token_secret:
            raise ValueError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET are required")
        if self.access_token_secret == self.refresh_token_secret:
            raise ValueError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "TokenSettings":
        return cls(
            access_token_secret=config.get("ACCESS_TOKEN_SECRET"),
            access_token_expires=config["ACCESS_TOKEN_EXPIRES"],
            refresh_token_secret=config.get("REFRESH_TOKEN_SECRET"),
            refresh_token_expires=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER"),
        )


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str

    def as_dict(self) -> dict:
        return {"accessToken": self.access_token, "refreshToken": self.refresh_token}


class TokenAuthority:
    def __init__(self, store: UserStore, settings: TokenSettings):
        self._store = store
        self._settings = settings

    @property
    def settings(self) -> TokenSettings:
        return self._settings

    def _mint(self, identity_id: str) -> TokenPair:
        s = self._settings
        access = create_token(
            identity_id, ACCESS, s.access_token_secret, s.access_token_expires, s.algorithm, s.issuer
        )
        refresh = create_token(
            identity_id, REFRESH, s.refresh_token_secret, s.refresh_token_expires, s.algorithm, s.issuer
        )
        return TokenPair(access, refresh)

    def _decode(self, token: str, token_type: str) -> dict:
        s = self._settings
        secret = s.access_token_secret if token_type == ACCESS else s.refresh_token_secret
        try:
            return decode_token(token, secret, expected_type=token_type, algorithm=s.algorithm, issuer=s.issuer)
        except jwt.ExpiredSignatureError:
            raise Unauthorized(f"{token_type.capitalize()} token expired")
        except jwt.InvalidTokenError:
            raise Unauthorized(f"Invalid {token_type} token")

    def issue(self, identity_id: str) -> TokenPair:
        """
        Mint a pair for ``identity_id`` and persist its refresh half,
        replacing (and so invalidating) any earlier refresh token.
        """
        record = self._store.find_by_id(identity_id)
        if record is None:
            raise PersistenceError("Something went wrong while generating refresh and access token")
        pair = self._mint(record.id)
        record.refresh_token = pair.refresh_token
        self._store.save(record, validate=False)
        logger.info("Issued token pair for user %s", record.id)
        return pair

    def verify_credentials(self, email: str, password: str) -> str:
        if not email or not password:
            raise ValidationFailed("All fields are required")
        record = self._store.find_by_email(email)
        if record is None:
            raise NotFound("User not found, kindly register")
        if not record.check_password(password):
            logger.info("Password mismatch for user %s", record.id)
            raise Unauthorized("Incorrect Password")
        return record.id

    def rotate(self, presented_refresh_token: str) -> TokenPair:
        """
        Exchange a refresh token for a new pair. The presented token must be
        the one currently persisted for its identity; the swap is conditioned
        on that value so concurrent rotations of one token yield one winner.
        """
        if not presented_refresh_token or not isinstance(presented_refresh_token, str):
            raise Unauthorized("Unauthorized request")

        claims = self._decode(presented_refresh_token, REFRESH)
        record = self._store.find_by_id(claims.get("sub"))
        if record is None:
            raise Unauthorized("Invalid refresh token")

        persisted = record.refresh_token or ""
        if not hmac.compare_digest(persisted.encode(), presented_refresh_token.encode()):
            logger.warning("Stale or replayed refresh token presented for user %s", record.id)
            raise Unauthorized("Refresh token is expired or used")

        pair = self._mint(record.id)
        if not self._store.swap_refresh_token(record.id, presented_refresh_token, pair.refresh_token):
            logger.warning("Lost concurrent refresh rotation for user %s", record.id)
            raise Unauthorized("Refresh token is expired or used")
        logger.info("Rotated refresh token for user %s", record.id)
        return pair

    def revoke(self, identity_id: str) -> None:
        self._store.unset_refresh_token(identity_id)
        logger.info("Revoked refresh token for user %s", identity_id)

    def verify_access_token(self, presented_access_token: str) -> str:
        if not presented_access_token:
            raise Unauthorized("Unauthorized request")
        return self._decode(presented_access_token, ACCESS)["sub"]
