from __future__ import annotations
import json
import httpx
import pytest
from showdown.config import settings
from showdown.services import notifications
from showdown.models.submission import Submission
from showdown.services.notifications import send_email, notify_submission_received


@pytest.fixture
def resend(monkeypatch):
    """Route the email client through a MockTransport; returns the captured requests."""
    sent: list[httpx.Request] = []
    state = {"handler": lambda request: httpx.Response(200, json={"id": "email_1"})}
    real_client = httpx.AsyncClient

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        return state["handler"](request)

    monkeypatch.setattr(settings, "resend_api_key", "re_test")
    monkeypatch.setattr(notifications.httpx, "AsyncClient", lambda **kw: real_client(transport=httpx.MockTransport(handler), **kw))
    return sent, state


@pytest.mark.asyncio
async def test_skipped_without_api_key(monkeypatch):
    monkeypatch.setattr(settings, "resend_api_key", "")
    assert await send_email("a@example.com", "hi", "<p>hi</p>") is False


@pytest.mark.asyncio
async def test_delivered(resend):
    sent, _ = resend
    assert await send_email("a@example.com", "hi", "<p>hi</p>") is True
    assert len(sent) == 1
    assert sent[0].headers["Authorization"] == "Bearer re_test"
    assert json.loads(sent[0].content)["to"] == ["a@example.com"]


@pytest.mark.asyncio
async def test_failures_are_swallowed(resend):
    _, state = resend
    state["handler"] = lambda request: httpx.Response(500)
    assert await send_email("a@example.com", "hi", "<p>hi</p>") is False

    def boom(request):
        raise httpx.ConnectError("down", request=request)
    state["handler"] = boom
    assert await send_email("a@example.com", "hi", "<p>hi</p>") is False


@pytest.mark.asyncio
async def test_form_text_is_escaped_in_email_html(resend):
    sent, _ = resend
    s = Submission(
        user_name="<b>Al & Co</b>", email="al@example.com", part_name="<script>alert(1)</script>",
        part_type="wing", car_model="S2000 \"AP1\"", week_number=3, anonymous_id="ENTRY_ABC123", status="PENDING",
    )
    assert await notify_submission_received(s) is True
    html = json.loads(sent[0].content)["html"]
    assert "<script>" not in html and "<b>Al" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "&lt;b&gt;Al &amp; Co&lt;/b&gt;" in html
