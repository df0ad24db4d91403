"""
Identity-record store consumed by the token authority.

``UserStore`` is the contract; ``SQLUserStore`` implements it on top of the
DBStorage singleton. SQLAlchemy failures surface as PersistenceError, except
unique-constraint conflicts, which propagate as IntegrityError (HTTP 409).
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import wraps

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.user import User, normalize_email
from services.errors import PersistenceError

logger = logging.getLogger(__name__)


class UserStore(ABC):
    """Persistence contract for identity records."""

    @abstractmethod
    def find_by_email(self, email: str) -> User | None:
        raise NotImplementedError

    @abstractmethod
    def find_by_id(self, identity_id: str) -> User | None:
        raise NotImplementedError

    @abstractmethod
    def save(self, record: User, validate: bool = True) -> User:
        raise NotImplementedError

    @abstractmethod
    def unset_refresh_token(self, identity_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def swap_refresh_token(self, identity_id: str, expected: str, replacement: str) -> bool:
        """
        Replace the persisted refresh token only if it still equals
        ``expected``. Returns False when another writer got there first.
        """
        raise NotImplementedError


def _persistence_errors(fn):
    @wraps(fn)
    def wrapper(self, *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except IntegrityError:
            # unique-constraint conflicts are reported as such by the HTTP layer
            self._storage.rollback()
            raise
        except SQLAlchemyError as exc:
            logger.exception("User store operation %s failed", fn.__name__)
            self._storage.rollback()
            raise PersistenceError("Something went wrong while accessing user records") from exc

    return wrapper


class SQLUserStore(UserStore):
    def __init__(self, storage):
        self._storage = storage

    @_persistence_errors
    def find_by_email(self, email):
        session = self._storage.get_session()
        return (
            session.query(User)
            .filter(User.email == normalize_email(email))
            .populate_existing()
            .first()
        )

    @_persistence_errors
    def find_by_id(self, identity_id):
        if not identity_id:
            return None
        session = self._storage.get_session()
        return session.query(User).filter(User.id == str(identity_id)).populate_existing().first()

    @_persistence_errors
    def save(self, record, validate=True):
        if validate:
            record.validate()
        self._storage.new(record)
        self._storage.save()
        return record

    @_persistence_errors
    def unset_refresh_token(self, identity_id):
        session = self._storage.get_session()
        session.query(User).filter(User.id == str(identity_id)).update(
            {User.refresh_token: None}, synchronize_session="fetch"
        )
        self._storage.save()

    @_persistence_errors
    def swap_refresh_token(self, identity_id, expected, replacement):
        session = self._storage.get_session()
        updated = (
            session.query(User)
            .filter(User.id == str(identity_id), User.refresh_token == expected)
            .update({User.refresh_token: replacement}, synchronize_session="fetch")
        )
        self._storage.save()
        return updated == 1
