import json
import logging
from typing import Optional

import typer

from optiontrade.brokers.robinhood import RobinhoodClient
from optiontrade.brokers.session import TokenSession
from optiontrade.errors import BrokerRequestError, ValidationError
from optiontrade.logging_config import setup_from_settings
from optiontrade.models.instrument import OptionInstrument
from optiontrade.models.vertical import VerticalOptionOrder
from optiontrade.settings import Settings

log = logging.getLogger("cli")

app = typer.Typer(help="OptionTrade CLI")


def _load(config: str, log_dir: Optional[str]):
    s = Settings.load(config)
    setup_from_settings(s, log_dir=log_dir)
    return s, TokenSession.from_settings(s), RobinhoodClient.from_settings(s)


@app.command()
def vertical(
    side: str = typer.Option(..., help="buy(debit) / sell(credit)"),
    type: str = typer.Option("limit", "--type", help="market/limit (buy 는 limit 만 가능)"),
    price: float = typer.Option(..., help="스프레드 가격"),
    tif: str = typer.Option("gfd", help="gfd/gtc/ioc/opg"),
    long_leg: str = typer.Option(..., help="매수 레그 instrument URL"),
    short_leg: str = typer.Option(..., help="매도 레그 instrument URL"),
    quantity: int = typer.Option(1, help="계약 수"),
    ref_id: Optional[str] = typer.Option(None, help="중복 방지용 참조 ID (기본: 자동 생성)"),
    submit: bool = typer.Option(False, help="실제 전송 (config 의 live: true 필요)"),
    config: str = "configs/dev.yaml",
    log_dir: Optional[str] = None,
) -> None:
    """
    버티컬 스프레드 주문 생성. 기본은 payload 미리보기(DRY-RUN).
    """
    s, session, client = _load(config, log_dir)
    try:
        order = VerticalOptionOrder.from_request_parameters(
            session,
            side=side,
            order_type=type,
            price=price,
            time_in_force=tif,
            long_leg=OptionInstrument(url=long_leg),
            short_leg=OptionInstrument(url=short_leg),
            quantity=quantity,
            ref_id=ref_id,
            client=client,
        )
    except ValidationError as e:
        typer.echo(f"Invalid order: {e}", err=True)
        raise typer.Exit(code=2)

    typer.echo(json.dumps(order.to_payload(), indent=2))

    if not submit:
        return
    if not s.live:
        log.warning("live=false 이므로 주문을 전송하지 않습니다 (DRY-RUN).")
        return

    try:
        executed = order.submit()
    except BrokerRequestError as e:
        typer.echo(f"Submission failed: {e}", err=True)
        raise typer.Exit(code=1)
    log.info(f"Submitted vertical ref_id={order.ref_id} -> id={executed.id} state={executed.state}")
    typer.echo(f"{executed.id} {executed.state}")


@app.command()
def orders(config: str = "configs/dev.yaml", log_dir: Optional[str] = None) -> None:
    """계정의 옵션 주문 목록 (오래된 순)"""
    _, session, client = _load(config, log_dir)
    try:
        rows = VerticalOptionOrder.get_orders(session, client=client)
    except BrokerRequestError as e:
        typer.echo(f"Fetch failed: {e}", err=True)
        raise typer.Exit(code=1)
    for o in rows:
        created = o.created_at.isoformat() if o.created_at else "-"
        typer.echo(f"{created} {o.symbol} {o.direction} {o.price} x{o.quantity} {o.state}")


if __name__ == "__main__":
    app()
