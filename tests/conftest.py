"""
Pytest configuration and fixtures for the Q&A forum API tests.

Token authority unit tests run against an in-memory user store; API and
store tests run against a throwaway SQLite file per test.
"""
import dataclasses
import threading
from datetime import timedelta

import pytest

from api import create_app
from models import storage
from services.token_authority import TokenAuthority, TokenSettings
from services.user_store import UserStore
from utils.security import hash_password, verify_password

ACCESS_SECRET = "test-access-secret-0123456789abcdef"
REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"
ISSUER = "qna-forum-api-tests"


@dataclasses.dataclass
class Identity:
    id: str
    email: str
    password_hash: str
    refresh_token: str | None = None

    def check_password(self, password):
        return verify_password(password, self.password_hash)


class InMemoryUserStore(UserStore):
    """Dict-backed store; hands out copies the way a database would."""

    def __init__(self):
        self._records = {}
        self._lock = threading.Lock()

    def add(self, identity_id, email, password):
        self._records[identity_id] = Identity(identity_id, email, hash_password(password))
        return identity_id

    def persisted_token(self, identity_id):
        return self._records[identity_id].refresh_token

    def find_by_email(self, email):
        for record in self._records.values():
            if record.email == email.strip().lower():
                return dataclasses.replace(record)
        return None

    def find_by_id(self, identity_id):
        record = self._records.get(identity_id)
        return dataclasses.replace(record) if record else None

    def save(self, record, validate=True):
        with self._lock:
            self._records[record.id] = dataclasses.replace(record)
        return record

    def unset_refresh_token(self, identity_id):
        with self._lock:
            if identity_id in self._records:
                self._records[identity_id].refresh_token = None

    def swap_refresh_token(self, identity_id, expected, replacement):
        with self._lock:
            record = self._records.get(identity_id)
            if record is None or record.refresh_token != expected:
                return False
            record.refresh_token = replacement
            return True


@pytest.fixture
def token_settings():
    return TokenSettings(
        access_token_secret=ACCESS_SECRET,
        access_token_expires=timedelta(minutes=15),
        refresh_token_secret=REFRESH_SECRET,
        refresh_token_expires=timedelta(days=10),
        issuer=ISSUER,
    )


@pytest.fixture
def memory_store():
    return InMemoryUserStore()


@pytest.fixture
def authority(memory_store, token_settings):
    return TokenAuthority(memory_store, token_settings)


@pytest.fixture
def app(tmp_path):
    app = create_app(
        "testing",
        config_overrides={
            "ACCESS_TOKEN_SECRET": ACCESS_SECRET,
            "REFRESH_TOKEN_SECRET": REFRESH_SECRET,
            "JWT_ISSUER": ISSUER,
            "DATABASE_URL": f"sqlite:///{tmp_path / 'forum.db'}",
        },
    )
    yield app
    storage.close()


@pytest.fixture
def client(app):
    # Cookies are inspected and sent explicitly so each test controls which token is presented
    return app.test_client(use_cookies=False)


@pytest.fixture
def register(client):
    def _register(email="a@x.com", password="p", full_name="Ada Lovelace", enrollment_number="EN-001"):
        resp = client.post(
            "/api/v1/auth/register",
            json={
                "email": email,
                "password": password,
                "full_name": full_name,
                "enrollment_number": enrollment_number,
            },
        )
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]

    return _register


@pytest.fixture
def login(client):
    def _login(email="a@x.com", password="p"):
        resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()["data"]

    return _login


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
