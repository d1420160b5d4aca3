from typing import Protocol


class IAuthSession(Protocol):
    def is_authenticated(self) -> bool: ...
    def get_auth_token(self) -> str: ...
    def get_account_number(self) -> str: ...
