# src/optiontrade/brokers/robinhood.py
from __future__ import annotations
from typing import Any, Dict, Optional
import logging
import requests

from optiontrade.errors import TransportError

log = logging.getLogger("robinhood")

BASE = "https://api.robinhood.com"
OPTION_ORDERS = "/options/orders/"


def _error_message(body: Any) -> Optional[str]:
    """Pull a readable message out of the broker's error payload shapes."""
    if isinstance(body, dict):
        for key in ("detail", "error", "message"):
            if isinstance(body.get(key), str):
                return body[key]
        nfe = body.get("non_field_errors")
        if isinstance(nfe, list) and nfe:
            return "; ".join(str(x) for x in nfe)
        # {"price": ["A valid number is required."]}
        field_errors = [
            f"{k}: {'; '.join(str(x) for x in v)}"
            for k, v in body.items()
            if isinstance(v, list) and v and all(isinstance(x, str) for x in v)
        ]
        if field_errors:
            return ", ".join(field_errors)
    return None


def handle_response(r: requests.Response) -> Any:
    """
    응답 정규화: 2xx + JSON 이면 본문 반환, 그 외는 TransportError.
    - 비-2xx: 브로커 에러 payload 에서 메시지 추출
    - 2xx 인데 에러 형태(detail 단독 등): 거절로 간주
    """
    try:
        body = r.json()
    except ValueError:
        body = None

    if not (200 <= r.status_code < 300):
        msg = _error_message(body) or f"HTTP {r.status_code}"
        raise TransportError(msg, status_code=r.status_code, payload=body if body is not None else r.text)

    if body is None:
        raise TransportError(
            "response body is not JSON", status_code=r.status_code, payload=r.text
        )
    if isinstance(body, dict) and set(body) <= {"detail", "error", "non_field_errors"} and body:
        raise TransportError(
            _error_message(body) or "broker reported an error",
            status_code=r.status_code,
            payload=body,
        )
    return body


class RobinhoodClient:
    """Robinhood 옵션 주문 REST 호출 (재시도 없음: 한 번 실패하면 그대로 보고)"""

    name = "robinhood"

    def __init__(
        self,
        base_url: str = BASE,
        timeout: int = 10,
        session: Optional[requests.Session] = None,
    ):
        self.base = base_url.rstrip("/")
        self.timeout = timeout
        self.s = session or requests.Session()

    @classmethod
    def from_settings(cls, s) -> "RobinhoodClient":
        return cls(base_url=s.broker.base_url, timeout=s.broker.timeout_s)

    def _headers(self, token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}", "Accept": "application/json"}

    def account_url(self, account_number: str) -> str:
        return f"{self.base}/accounts/{account_number}/"

    def _request(
        self, method: str, path: str, token: str, json: Optional[Dict[str, Any]] = None
    ) -> Any:
        url = f"{self.base}{path}"
        log.debug("%s %s", method, path)
        try:
            r = self.s.request(
                method,
                url,
                headers=self._headers(token),
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"{method} {path} failed: {e}") from e
        log.debug("%s %s -> %s", method, path, r.status_code)
        return handle_response(r)

    # --- Options orders ---
    def post_option_order(self, token: str, payload: Dict[str, Any]) -> Any:
        return self._request("POST", OPTION_ORDERS, token, json=payload)

    def get_option_orders(self, token: str) -> Any:
        return self._request("GET", OPTION_ORDERS, token)
