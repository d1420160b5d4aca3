import time

import jwt

from optiontrade.brokers.session import TokenSession
from optiontrade.settings import Settings


def _token(exp_offset: int) -> str:
    return jwt.encode({"sub": "u1", "exp": int(time.time()) + exp_offset}, "test-signing-key-0123456789abcdef", algorithm="HS256")


def test_opaque_token_is_authenticated():
    s = TokenSession(auth_token="opaque-token", account_number="5QR12345")
    assert s.is_authenticated()
    assert s.get_auth_token() == "opaque-token"
    assert s.get_account_number() == "5QR12345"


def test_jwt_expiry_is_checked():
    assert TokenSession(_token(3600), "5QR12345").is_authenticated()
    assert not TokenSession(_token(-3600), "5QR12345").is_authenticated()


def test_missing_credentials_not_authenticated():
    assert not TokenSession(None, "5QR12345").is_authenticated()
    assert not TokenSession("tok", None).is_authenticated()
    assert TokenSession(None, None).get_auth_token() == ""


def test_session_from_settings():
    s = Settings.model_validate({"api": {"token": "t", "account_number": "A1"}})
    sess = TokenSession.from_settings(s)
    assert sess.auth_token == "t"
    assert sess.account_number == "A1"
