from __future__ import annotations

import json

import httpx
import pytest

from duecal.data.client.payment import DryRunPaymentExecutor, HttpPaymentExecutor
from factories import make_obligation, utc

DUE_AT = utc(2024, 6, 20, 9, 0)


def make_executor(handler, retries=0):
    return HttpPaymentExecutor(
        base_url="https://pay.example.test/",
        token="secret",
        timeout=1,
        retries=retries,
        backoff_base=0,
        transport=httpx.MockTransport(handler),
    )


def test_successful_payment():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"status": "ok"})

    assert make_executor(handler).pay(make_obligation(), DUE_AT) is True

    [request] = seen
    assert request.method == "POST"
    assert str(request.url) == "https://pay.example.test/obligations/bill-1/pay"
    assert request.headers["Authorization"] == "Bearer secret"
    body = json.loads(request.content)
    assert body["idempotency_key"] == "bill-1:2024-06-20"
    assert body["amount"] == "1500.00"
    assert body["currency"] == "CNY"


def test_rejected_payment_returns_false():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(402, json={"error": "insufficient funds"})

    assert make_executor(handler, retries=2).pay(make_obligation(), DUE_AT) is False
    assert len(calls) == 1


def test_retry_then_success():
    responses = [httpx.Response(503), httpx.Response(429), httpx.Response(200)]

    def handler(request):
        return responses.pop(0)

    assert make_executor(handler, retries=2).pay(make_obligation(), DUE_AT) is True
    assert responses == []


def test_retries_exhausted_raises():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(502)

    with pytest.raises(httpx.HTTPStatusError):
        make_executor(handler, retries=1).pay(make_obligation(), DUE_AT)
    assert len(calls) == 2


def test_base_url_required(monkeypatch):
    monkeypatch.delenv("PAYMENT_API_BASE_URL", raising=False)
    with pytest.raises(RuntimeError):
        HttpPaymentExecutor()


def test_dry_run():
    assert DryRunPaymentExecutor().pay(make_obligation(), DUE_AT) is True
