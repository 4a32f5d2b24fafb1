import time

import jwt
import pytest

from seasonpass import config
from seasonpass.auth import tokens

def test_member_token_roundtrip():
    tok = tokens.encode_member_token(12, "ana_s")
    payload = tokens.decode_token(tok)
    assert payload["sub"] == "12"
    assert payload["kind"] == "member"
    assert payload["username"] == "ana_s"
    assert payload["iss"] == config.JWT_ISSUER
    assert payload["exp"] - payload["iat"] == config.MEMBER_TOKEN_TTL_DAYS * 86400

def test_admin_token_lifetime_and_role():
    payload = tokens.decode_token(tokens.encode_admin_token(3, "root", "super_admin"))
    assert payload["kind"] == "admin"
    assert payload["role"] == "super_admin"
    assert payload["exp"] - payload["iat"] == config.ADMIN_TOKEN_TTL_HOURS * 3600

def test_expired_token_rejected():
    now = int(time.time())
    tok = jwt.encode(
        {"iss": config.JWT_ISSUER, "iat": now - 100, "exp": now - 60, "sub": "1", "kind": "member"},
        config.JWT_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(jwt.ExpiredSignatureError):
        tokens.decode_token(tok)

def test_wrong_issuer_rejected():
    now = int(time.time())
    tok = jwt.encode(
        {"iss": "someone-else", "iat": now, "exp": now + 60, "sub": "1", "kind": "member"},
        config.JWT_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(jwt.InvalidIssuerError):
        tokens.decode_token(tok)

def test_wrong_secret_rejected():
    now = int(time.time())
    tok = jwt.encode(
        {"iss": config.JWT_ISSUER, "iat": now, "exp": now + 60, "sub": "1", "kind": "member"},
        "not-the-secret",
        algorithm="HS256",
    )
    with pytest.raises(jwt.InvalidSignatureError):
        tokens.decode_token(tok)

def test_missing_kind_rejected():
    now = int(time.time())
    tok = jwt.encode({"iss": config.JWT_ISSUER, "iat": now, "exp": now + 60, "sub": "1"}, config.JWT_SECRET, algorithm="HS256")
    with pytest.raises(jwt.InvalidTokenError):
        tokens.decode_token(tok)
