"""
Error classes for optiontrade.
"""
from __future__ import annotations
from typing import Any, Optional


class OrderError(Exception):
    """Base error for order operations."""
    pass


class ValidationError(OrderError):
    """Invalid order construction input. `field` names the offending parameter."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class AlreadySubmittedError(OrderError):
    """Submit called on an order that was already sent to the broker."""
    pass


class BrokerRequestError(OrderError):
    """A request to the broker failed (transport or provider-reported)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class TransportError(BrokerRequestError):
    """Raised by the HTTP client; wrapped by the order layer."""
    pass


class SubmissionError(BrokerRequestError):
    """Order submission rejected or not delivered."""
    pass


class FetchError(BrokerRequestError):
    """Order listing could not be fetched."""
    pass
