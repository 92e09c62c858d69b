"""Tests for the signed legacy cookie token."""

import base64
import json
from datetime import timedelta
from types import SimpleNamespace

import pytest
from jose import jwt

from gatehouse.models.user import Role
from gatehouse.services.errors import MalformedTokenError, NoTokenError, TokenExpiredError
from gatehouse.services.legacy_token import LegacyTokenCodec

SECRET = "legacy-secret"


@pytest.fixture()
def codec(clock) -> LegacyTokenCodec:
    return LegacyTokenCodec(SECRET, clock=clock)


@pytest.mark.parametrize(
    "subject",
    [
        SimpleNamespace(id=1, email="admin@example.com", name="Administrator", role=Role.ADMIN),
        SimpleNamespace(id="abc123", email="user@example.com", name=None, role=Role.USER),
        SimpleNamespace(id=7, email="mod@example.com", name="Mod", role="MODERATOR"),
    ],
)
def test_round_trip_preserves_claims(codec, subject) -> None:
    claims = codec.resolve(codec.issue(subject))
    assert claims.id == str(subject.id)
    assert claims.email == subject.email
    assert claims.name == subject.name
    assert claims.role == Role(subject.role)


def test_default_lifetime_is_one_day(codec, clock) -> None:
    subject = SimpleNamespace(id=1, email="a@example.com", name="A", role=Role.USER)
    claims = codec.resolve(codec.issue(subject))
    assert claims.exp == int(clock() + 86400)


def test_expired_token_is_rejected(codec, clock) -> None:
    subject = SimpleNamespace(id=1, email="a@example.com", name="A", role=Role.USER)
    token = codec.issue(subject, expires_in=timedelta(seconds=-1))
    with pytest.raises(TokenExpiredError):
        codec.resolve(token)


def test_token_expires_after_ttl(codec, clock) -> None:
    subject = SimpleNamespace(id=1, email="a@example.com", name="A", role=Role.USER)
    token = codec.issue(subject)
    clock.advance(86400)
    assert codec.resolve(token).id == "1"
    clock.advance(1)
    with pytest.raises(TokenExpiredError) as exc_info:
        codec.resolve(token)
    assert exc_info.value.detail == "Token expired"


@pytest.mark.parametrize("token", [None, ""])
def test_missing_token(codec, token) -> None:
    with pytest.raises(NoTokenError) as exc_info:
        codec.resolve(token)
    assert exc_info.value.detail == "Not logged in"


def test_unsigned_base64_payload_is_rejected(codec, clock) -> None:
    forged = base64.b64encode(
        json.dumps(
            {"id": 1, "email": "x@example.com", "name": "x", "role": "ADMIN", "exp": int(clock()) + 60}
        ).encode()
    ).decode()
    with pytest.raises(MalformedTokenError):
        codec.resolve(forged)


def test_token_signed_with_other_key_is_rejected(codec, clock) -> None:
    payload = {"id": "1", "email": "x@example.com", "name": "x", "role": "ADMIN", "exp": int(clock()) + 60}
    forged = jwt.encode(payload, "not-the-secret", algorithm="HS256")
    with pytest.raises(MalformedTokenError) as exc_info:
        codec.resolve(forged)
    assert exc_info.value.detail == "Invalid token"


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "x@example.com", "role": "USER"},
        {"id": "1", "role": "USER"},
        {"id": "1", "email": "x@example.com", "role": "SUPERUSER"},
        {"id": "1", "email": "x@example.com"},
    ],
)
def test_incomplete_claims_are_rejected(codec, clock, payload) -> None:
    token = jwt.encode({**payload, "exp": int(clock()) + 60}, SECRET, algorithm="HS256")
    with pytest.raises(MalformedTokenError):
        codec.resolve(token)


def test_missing_exp_is_rejected(codec) -> None:
    token = jwt.encode({"id": "1", "email": "x@example.com", "role": "USER"}, SECRET, algorithm="HS256")
    with pytest.raises(MalformedTokenError):
        codec.resolve(token)
