# src/optiontrade/models/vertical.py
# ------------------------------------------------------------
# 옵션 버티컬 스프레드 주문
# - Pending: 사용자 파라미터 → 검증 → 주문 payload (네트워크 X)
# - Executed: 서버 응답 → OrderRecord 파싱
# 상태 전이는 새 객체 생성으로만 일어남 (Pending.submit() → Executed)
# ------------------------------------------------------------
from __future__ import annotations
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple
import copy
import logging
import uuid

import pydantic
from pydantic import BaseModel, ConfigDict, field_validator

from optiontrade.brokers.base import IAuthSession
from optiontrade.brokers.robinhood import RobinhoodClient
from optiontrade.errors import (
    AlreadySubmittedError,
    FetchError,
    SubmissionError,
    TransportError,
    ValidationError,
)
from optiontrade.models.instrument import IOptionInstrument, is_option_instrument

log = logging.getLogger("robinhood")

SIDES = ("buy", "sell")
ORDER_TYPES = ("market", "limit")
TIME_IN_FORCE = ("gfd", "gtc", "ioc", "opg")


@dataclass(frozen=True)
class VerticalLeg:
    position_effect: str  # "open" | "close"
    side: str
    ratio_quantity: int
    option: str  # instrument URL


@dataclass(frozen=True)
class VerticalOrderForm:
    """Request body for POST /options/orders/."""

    account: str
    direction: str  # "debit" | "credit"
    legs: Tuple[VerticalLeg, VerticalLeg]
    price: float
    time_in_force: str
    type: str
    quantity: float
    ref_id: str
    trigger: str = "immediate"
    override_day_trade_checks: bool = False
    override_dtbp_checks: bool = False

    def to_payload(self) -> Dict[str, Any]:
        d = asdict(self)
        d["legs"] = [asdict(leg) for leg in self.legs]
        return d


class OrderRecord(BaseModel):
    """Option order as reported by the broker. Unknown fields are dropped."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: Optional[str] = None
    state: Optional[str] = None
    legs: Optional[List[Dict[str, Any]]] = None
    direction: Optional[str] = None
    type: Optional[str] = None
    trigger: Optional[str] = None
    time_in_force: Optional[str] = None
    ref_id: Optional[str] = None

    price: Optional[float] = None
    premium: Optional[float] = None
    processed_premium: Optional[float] = None
    quantity: Optional[float] = None
    pending_quantity: Optional[float] = None
    processed_quantity: Optional[float] = None
    canceled_quantity: Optional[float] = None

    chain_id: Optional[str] = None
    chain_symbol: Optional[str] = None
    opening_strategy: Optional[str] = None
    closing_strategy: Optional[str] = None
    response_category: Optional[str] = None
    cancel_url: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # 서버 값은 신뢰: 읽을 수 없는 숫자/시각("" 등)은 None 으로
    @field_validator(
        "price",
        "premium",
        "processed_premium",
        "quantity",
        "pending_quantity",
        "processed_quantity",
        "canceled_quantity",
        "created_at",
        "updated_at",
        mode="wrap",
    )
    @classmethod
    def unreadable_as_none(cls, v: Any, handler):
        try:
            return handler(v)
        except pydantic.ValidationError:
            return None

    # timezone 없는 시각은 UTC 로 간주 (정렬 시 aware/naive 혼합 방지)
    @field_validator("created_at", "updated_at")
    @classmethod
    def naive_as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


def is_order_record(obj: Any) -> bool:
    """서버에서 온 기존 주문인지 (state 또는 cancel_url 존재)"""
    return isinstance(obj, Mapping) and ("state" in obj or "cancel_url" in obj)


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float, Decimal)) and not isinstance(v, bool)


def _canonical(v: Any) -> float:
    return v if isinstance(v, (int, float)) else float(v)


def _validate(
    session: Any,
    side: Any,
    order_type: Any,
    price: Any,
    time_in_force: Any,
    long_leg: Any,
    short_leg: Any,
    quantity: Any,
) -> None:
    check = getattr(session, "is_authenticated", None)
    if not (callable(check) and check()):
        raise ValidationError("session", "must be an authenticated broker session")
    if not isinstance(side, str):
        raise ValidationError("side", "must be a string")
    if side not in SIDES:
        raise ValidationError("side", "must be either 'buy' or 'sell'")
    if not isinstance(order_type, str):
        raise ValidationError("order_type", "must be a string")
    if order_type not in ORDER_TYPES:
        raise ValidationError("order_type", "must be either 'market' or 'limit'")
    if side == "buy" and order_type == "market":
        raise ValidationError(
            "order_type", "buy orders are not allowed to be of type 'market'"
        )
    if not _is_number(price):
        raise ValidationError("price", "must be a number")
    if not isinstance(time_in_force, str):
        raise ValidationError("time_in_force", "must be a string")
    if time_in_force.lower() not in TIME_IN_FORCE:
        raise ValidationError(
            "time_in_force", "must be either GFD, GTC, IOC, or OPG"
        )
    if not is_option_instrument(long_leg):
        raise ValidationError("long_leg", "must be an option instrument reference")
    if not is_option_instrument(short_leg):
        raise ValidationError("short_leg", "must be an option instrument reference")
    if not _is_number(quantity):
        raise ValidationError("quantity", "must be a number")


def _created_key(o: "VerticalOptionOrder"):
    # 시간 없는 항목은 맨 뒤
    return (o.created_at is None, o.created_at or 0)


class VerticalOptionOrder:
    """
    버티컬 스프레드 주문 공통 접근자.
    실제 인스턴스는 PendingVerticalOrder / ExecutedVerticalOrder 중 하나.
    접근자는 상태를 검사하지 않음: 해당 상태에 없는 값은 None.
    """

    def __init__(
        self,
        session: Optional[IAuthSession] = None,
        client: Optional[RobinhoodClient] = None,
    ):
        self._session = session
        self._client = client

    # --- factories ---
    @classmethod
    def from_request_parameters(
        cls,
        session: IAuthSession,
        *,
        side: str,
        order_type: str,
        price: float,
        time_in_force: str,
        long_leg: IOptionInstrument,
        short_leg: IOptionInstrument,
        quantity: float,
        ref_id: Optional[str] = None,
        client: Optional[RobinhoodClient] = None,
    ) -> "PendingVerticalOrder":
        _validate(
            session, side, order_type, price, time_in_force, long_leg, short_leg, quantity
        )
        client = client or RobinhoodClient()
        effect = "close" if side == "buy" else "open"
        form = VerticalOrderForm(
            account=client.account_url(session.get_account_number()),
            direction="debit" if side == "buy" else "credit",
            legs=(
                VerticalLeg(effect, "buy", 1, long_leg.instrument_url),
                VerticalLeg(effect, "sell", 1, short_leg.instrument_url),
            ),
            price=_canonical(price),
            time_in_force=time_in_force.lower(),
            type=order_type,
            quantity=_canonical(quantity),
            ref_id=ref_id if ref_id is not None else str(uuid.uuid4()),
        )
        return PendingVerticalOrder(form, session=session, client=client)

    @classmethod
    def from_server_record(
        cls,
        record: Mapping[str, Any],
        session: Optional[IAuthSession] = None,
        client: Optional[RobinhoodClient] = None,
    ) -> "ExecutedVerticalOrder":
        if not isinstance(record, Mapping):
            raise ValidationError("record", "must be a mapping of order fields")
        try:
            parsed = OrderRecord.model_validate(dict(record))
        except pydantic.ValidationError as e:
            err = e.errors()[0]
            field = ".".join(str(x) for x in err["loc"]) or "record"
            raise ValidationError(field, err["msg"]) from e
        return ExecutedVerticalOrder(parsed, session=session, client=client)

    @classmethod
    def get_orders(
        cls, session: IAuthSession, client: Optional[RobinhoodClient] = None
    ) -> List["ExecutedVerticalOrder"]:
        """
        계정의 옵션 주문 목록 (created_at 오름차순).
        state 가 없는 항목은 주문으로 보지 않고 제외.
        """
        client = client or RobinhoodClient()
        try:
            body = client.get_option_orders(session.get_auth_token())
        except TransportError as e:
            raise FetchError(e.message, status_code=e.status_code, payload=e.payload) from e

        rows = body.get("results") if isinstance(body, dict) else body
        if not isinstance(rows, list):
            raise FetchError("unexpected order listing response", payload=body)

        out: List[ExecutedVerticalOrder] = []
        for row in rows:
            if not (isinstance(row, Mapping) and "state" in row):
                continue
            try:
                out.append(cls.from_server_record(row, session=session, client=client))
            except ValidationError as e:
                # 한 건 때문에 목록 전체를 버리지 않음
                log.debug("skipping unparseable order %s: %s", row.get("id"), e)
        out.sort(key=_created_key)
        return out

    def submit(self) -> "ExecutedVerticalOrder":
        raise AlreadySubmittedError("This order has already been executed")

    # --- field access (subclasses) ---
    def _field(self, name: str) -> Any:
        return None

    def _number(self, name: str) -> Optional[float]:
        v = self._field(name)
        return None if v is None else float(v)

    # --- accessors ---
    @property
    def executed(self) -> bool:
        return False

    @property
    def legs(self) -> List[Dict[str, Any]]:
        # 복사본: 호출자가 바꿔도 기록은 그대로
        return copy.deepcopy(list(self._field("legs") or []))

    @property
    def direction(self) -> Optional[str]:
        return self._field("direction")

    @property
    def premium(self) -> Optional[float]:
        return self._number("premium")

    @property
    def processed_premium(self) -> Optional[float]:
        return self._number("processed_premium")

    @property
    def time_in_force(self) -> Optional[str]:
        return self._field("time_in_force")

    @property
    def ref_id(self) -> Optional[str]:
        return self._field("ref_id")

    @property
    def price(self) -> Optional[float]:
        return self._number("price")

    @property
    def trigger(self) -> Optional[str]:
        return self._field("trigger")

    @property
    def order_type(self) -> Optional[str]:
        return self._field("type")

    @property
    def quantity(self) -> Optional[float]:
        return self._number("quantity")

    @property
    def pending_quantity(self) -> Optional[float]:
        return self._number("pending_quantity")

    @property
    def processed_quantity(self) -> Optional[float]:
        return self._number("processed_quantity")

    @property
    def canceled_quantity(self) -> Optional[float]:
        return self._number("canceled_quantity")

    @property
    def chain_id(self) -> Optional[str]:
        return self._field("chain_id")

    @property
    def symbol(self) -> Optional[str]:
        return self._field("chain_symbol")

    @property
    def created_at(self) -> Optional[datetime]:
        return self._field("created_at")

    @property
    def updated_at(self) -> Optional[datetime]:
        return self._field("updated_at")

    @property
    def id(self) -> Optional[str]:
        return self._field("id")

    @property
    def state(self) -> Optional[str]:
        return self._field("state")

    @property
    def cancel_url(self) -> Optional[str]:
        return self._field("cancel_url")

    @property
    def opening_strategy(self) -> Optional[str]:
        return self._field("opening_strategy")

    @property
    def closing_strategy(self) -> Optional[str]:
        return self._field("closing_strategy")

    @property
    def response_category(self) -> Optional[str]:
        return self._field("response_category")

    @property
    def is_credit(self) -> bool:
        return self.direction == "credit"

    @property
    def is_debit(self) -> bool:
        return self.direction == "debit"


class PendingVerticalOrder(VerticalOptionOrder):
    """아직 전송되지 않은 주문. submit() 성공 시 새 ExecutedVerticalOrder 반환."""

    def __init__(
        self,
        form: VerticalOrderForm,
        session: IAuthSession,
        client: RobinhoodClient,
    ):
        super().__init__(session=session, client=client)
        self._form = form
        self._submitted = False

    @property
    def form(self) -> VerticalOrderForm:
        return self._form

    def to_payload(self) -> Dict[str, Any]:
        return self._form.to_payload()

    def _field(self, name: str) -> Any:
        if name == "legs":
            return self.to_payload()["legs"]
        if name in ("direction", "time_in_force", "ref_id", "price", "trigger", "type", "quantity"):
            return getattr(self._form, name)
        return None

    def submit(self) -> "ExecutedVerticalOrder":
        # 같은 인스턴스 동시 호출은 막지 않음 (플래그는 잠금이 아님)
        if self._submitted:
            raise AlreadySubmittedError(
                f"Order {self._form.ref_id} has already been submitted"
            )
        assert self._session is not None and self._client is not None
        try:
            body = self._client.post_option_order(
                self._session.get_auth_token(), self.to_payload()
            )
        except TransportError as e:
            raise SubmissionError(e.message, status_code=e.status_code, payload=e.payload) from e
        try:
            executed = VerticalOptionOrder.from_server_record(
                body, session=self._session, client=self._client
            )
        except ValidationError as e:
            raise SubmissionError(f"unexpected order response: {e}", payload=body) from e
        self._submitted = True
        return executed

    def __repr__(self) -> str:
        f = self._form
        return (
            f"PendingVerticalOrder({f.direction} {f.quantity} @ {f.price} "
            f"{f.type}/{f.time_in_force}, ref_id={f.ref_id})"
        )


class ExecutedVerticalOrder(VerticalOptionOrder):
    """브로커가 보고한 주문. 재전송 불가."""

    def __init__(
        self,
        record: OrderRecord,
        session: Optional[IAuthSession] = None,
        client: Optional[RobinhoodClient] = None,
    ):
        super().__init__(session=session, client=client)
        self._record = record

    @property
    def record(self) -> OrderRecord:
        return self._record

    @property
    def executed(self) -> bool:
        return True

    def _field(self, name: str) -> Any:
        return getattr(self._record, name)

    def to_record(self) -> Dict[str, Any]:
        """from_server_record() 로 다시 읽을 수 있는 JSON 형태"""
        return self._record.model_dump(mode="json")

    def __repr__(self) -> str:
        return (
            f"ExecutedVerticalOrder(id={self.id}, state={self.state}, "
            f"{self.direction} {self.quantity} {self.symbol} @ {self.price})"
        )
