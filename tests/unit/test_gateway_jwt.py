"""Unit tests for bearer-token verification."""

from datetime import timedelta

import pytest

from src.at_common.errors import UnauthorizedError
from src.at_gateway.auth.jwt_handler import decode_access_token
from tests.unit.fakes import COLLECTOR_A, make_token


def test_valid_token_yields_claims() -> None:
    claims = decode_access_token(make_token(COLLECTOR_A, "a@example.com"))
    assert claims.sub == COLLECTOR_A
    assert claims.email == "a@example.com"


def test_email_is_optional() -> None:
    assert decode_access_token(make_token(COLLECTOR_A)).email is None


def test_wrong_secret_rejected() -> None:
    with pytest.raises(UnauthorizedError):
        decode_access_token(make_token(COLLECTOR_A, secret="someone-else"))


def test_expired_token_rejected() -> None:
    with pytest.raises(UnauthorizedError):
        decode_access_token(make_token(COLLECTOR_A, expires_in=timedelta(minutes=-5)))


def test_wrong_audience_rejected() -> None:
    with pytest.raises(UnauthorizedError):
        decode_access_token(make_token(COLLECTOR_A, audience="anon"))


def test_missing_subject_rejected() -> None:
    with pytest.raises(UnauthorizedError):
        decode_access_token(make_token(None))


def test_garbage_rejected() -> None:
    with pytest.raises(UnauthorizedError):
        decode_access_token("not.a.jwt")
