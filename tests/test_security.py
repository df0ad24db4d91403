from datetime import timedelta

import jwt
import pytest

from utils.security import (
    ACCESS,
    REFRESH,
    create_token,
    decode_token,
    hash_password,
    verify_password,
)

SECRET = "unit-test-secret-0123456789abcdef0"


def test_password_round_trip():
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("battery staple", hashed)


@pytest.mark.parametrize("password,hashed", [("", "x"), ("p", ""), ("p", "not-an-argon2-hash")])
def test_verify_password_never_raises(password, hashed):
    assert verify_password(password, hashed) is False


def test_tokens_carry_unique_jti():
    a = create_token("u1", ACCESS, SECRET, timedelta(minutes=1))
    b = create_token("u1", ACCESS, SECRET, timedelta(minutes=1))
    assert a != b
    assert decode_token(a, SECRET)["jti"] != decode_token(b, SECRET)["jti"]


def test_decode_checks_type():
    token = create_token("u1", REFRESH, SECRET, timedelta(minutes=1))
    assert decode_token(token, SECRET, expected_type=REFRESH)["sub"] == "u1"
    with pytest.raises(jwt.InvalidTokenError, match="Wrong token type"):
        decode_token(token, SECRET, expected_type=ACCESS)


def test_decode_checks_issuer():
    token = create_token("u1", ACCESS, SECRET, timedelta(minutes=1), issuer="someone-else")
    with pytest.raises(jwt.InvalidIssuerError):
        decode_token(token, SECRET, issuer="qna-forum-api")


def test_decode_rejects_expired():
    token = create_token("u1", ACCESS, SECRET, timedelta(seconds=-10))
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_token(token, SECRET)


def test_decode_rejects_unsigned_algorithm():
    token = jwt.encode({"sub": "u1", "exp": 4102444800, "jti": "x", "type": ACCESS}, key=None, algorithm="none")
    with pytest.raises(jwt.InvalidTokenError):
        decode_token(token, SECRET)
