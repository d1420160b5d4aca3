from __future__ import annotations
from dataclasses import dataclass
import logging
import jwt  # PyJWT

from optiontrade.settings import Settings

log = logging.getLogger("session")


@dataclass(frozen=True)
class TokenSession:
    """Bearer-token session. Login/refresh happens elsewhere; we only carry the token."""

    auth_token: str | None
    account_number: str | None

    @classmethod
    def from_settings(cls, s: Settings) -> "TokenSession":
        return cls(auth_token=s.api.token, account_number=s.api.account_number)

    def is_authenticated(self) -> bool:
        if not self.auth_token or not self.account_number:
            return False
        # Robinhood access tokens are JWTs; only `exp` is checked, the signature is the broker's business
        try:
            jwt.decode(
                self.auth_token,
                options={"verify_signature": False, "verify_exp": True},
            )
        except jwt.ExpiredSignatureError:
            log.debug("auth token expired")
            return False
        except jwt.DecodeError:
            # opaque (non-JWT) token
            return True
        return True

    def get_auth_token(self) -> str:
        return self.auth_token or ""

    def get_account_number(self) -> str:
        return self.account_number or ""
