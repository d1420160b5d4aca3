import pytest
import requests

from optiontrade.errors import AlreadySubmittedError, SubmissionError
from optiontrade.models.vertical import ExecutedVerticalOrder, VerticalOptionOrder

FILL = {
    "id": "f2d1c0de-0000-4000-8000-000000000001",
    "state": "queued",
    "price": "1.50",
    "quantity": "3",
    "direction": "credit",
    "time_in_force": "gtc",
    "ref_id": "abc",
    "chain_symbol": "SPY",
    "created_at": "2024-03-01T14:30:00.000000Z",
    "cancel_url": "https://api.robinhood.com/options/orders/f2d1c0de/cancel/",
}


def _pending(session, params, client):
    return VerticalOptionOrder.from_request_parameters(session, client=client, **params)


def test_submit_returns_new_executed_order(session, params, make_client):
    client, http = make_client(status=201, body=FILL)
    pending = _pending(session, params, client)

    executed = pending.submit()

    assert isinstance(executed, ExecutedVerticalOrder)
    assert executed is not pending
    assert executed.executed is True
    assert pending.executed is False
    assert executed.price == 1.50
    assert executed.quantity == 3
    assert executed.is_credit is True
    assert executed.time_in_force == "gtc"
    assert executed.ref_id == "abc"
    assert executed.symbol == "SPY"


def test_submit_sends_one_authenticated_post(session, params, make_client):
    client, http = make_client(status=201, body=FILL)
    pending = _pending(session, params, client)
    pending.submit()

    assert len(http.calls) == 1
    call = http.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://api.robinhood.com/options/orders/"
    assert call["headers"]["Authorization"] == "Bearer tok-123"
    assert call["json"] == pending.to_payload()
    assert call["timeout"] == 10


def test_submit_on_executed_order_makes_no_call(make_client):
    client, http = make_client(status=201, body=FILL)
    executed = VerticalOptionOrder.from_server_record(FILL, client=client)
    with pytest.raises(AlreadySubmittedError):
        executed.submit()
    assert http.calls == []


def test_pending_cannot_be_submitted_twice(session, params, make_client):
    client, http = make_client(status=201, body=FILL)
    pending = _pending(session, params, client)
    pending.submit()
    with pytest.raises(AlreadySubmittedError):
        pending.submit()
    assert len(http.calls) == 1


def test_rejected_order_raises_submission_error(session, params, make_client):
    body = {"detail": "Not enough buying power."}
    client, http = make_client(status=400, body=body)
    pending = _pending(session, params, client)

    with pytest.raises(SubmissionError) as ei:
        pending.submit()
    assert ei.value.status_code == 400
    assert ei.value.payload == body
    assert "buying power" in str(ei.value)

    # 실패 후에는 다시 보낼 수 있음 (아무 상태도 기록되지 않음)
    assert pending.executed is False
    http.status, http.body = 201, FILL
    executed = pending.submit()
    assert executed.executed is True
    assert executed.ref_id == "abc"
    assert len(http.calls) == 2
    assert http.calls[0]["json"] == http.calls[1]["json"]


def test_field_errors_are_reported(session, params, make_client):
    body = {"account": ["Invalid account."]}
    client, _ = make_client(status=400, body=body)
    with pytest.raises(SubmissionError) as ei:
        _pending(session, params, client).submit()
    assert "account: Invalid account." in str(ei.value)


def test_transport_failure_raises_submission_error(session, params, make_client):
    client, _ = make_client(exc=requests.ConnectionError("connection refused"))
    with pytest.raises(SubmissionError) as ei:
        _pending(session, params, client).submit()
    assert ei.value.status_code is None
    assert isinstance(ei.value.__cause__.__cause__, requests.ConnectionError)


def test_non_json_response_raises_submission_error(session, params, make_client):
    client, _ = make_client(status=502, raw=b"<html>Bad Gateway</html>")
    with pytest.raises(SubmissionError) as ei:
        _pending(session, params, client).submit()
    assert ei.value.status_code == 502


def test_unexpected_success_body_raises_submission_error(session, params, make_client):
    client, _ = make_client(status=201, body=["not", "an", "order"])
    with pytest.raises(SubmissionError):
        _pending(session, params, client).submit()
