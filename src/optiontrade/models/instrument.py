from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class IOptionInstrument(Protocol):
    instrument_url: str


@dataclass(frozen=True)
class OptionInstrument:
    """Option contract as referenced by the broker (resolved by its instrument URL)."""

    url: str
    chain_symbol: Optional[str] = None
    type: Optional[str] = None  # "call" | "put"
    strike_price: Optional[float] = None
    expiration_date: Optional[str] = None

    @property
    def instrument_url(self) -> str:
        return self.url


def is_option_instrument(obj: Any) -> bool:
    """Capability check: exposes a non-empty instrument URL string."""
    if not isinstance(obj, IOptionInstrument):
        return False
    url = obj.instrument_url
    return isinstance(url, str) and bool(url.strip())
