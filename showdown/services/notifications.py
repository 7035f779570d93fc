from __future__ import annotations
from html import escape
import httpx
import structlog
from showdown.config import settings
from showdown.models.submission import Submission

log = structlog.get_logger()

RESEND_URL = "https://api.resend.com/emails"


async def send_email(to: str, subject: str, html: str) -> bool:
    """
    Best-effort delivery through the Resend HTTP API. Never raises: a failed
    email must not fail the request that triggered it.
    """
    if not settings.resend_api_key:
        log.info("email_skipped", to=to, subject=subject, reason="no_api_key")
        return False
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            r = await client.post(
                RESEND_URL,
                headers={"Authorization": f"Bearer {settings.resend_api_key}"},
                json={"from": settings.email_from, "to": [to], "subject": subject, "html": html},
            )
            r.raise_for_status()
    except httpx.HTTPError as e:
        log.warning("notification_failed", to=to, subject=subject, error=str(e))
        return False
    log.info("email_sent", to=to, subject=subject)
    return True


async def notify_submission_received(s: Submission) -> bool:
    html = f"""
    <h1>Submission received!</h1>
    <p>Hi <strong>{escape(s.user_name)}</strong>, your part <strong>{escape(s.part_name)}</strong>
    ({escape(s.part_type)}, {escape(s.car_model)}) is entered for week {s.week_number} as <strong>{s.anonymous_id}</strong>.</p>
    <p>It is currently <strong>{s.status}</strong>. Vote on {settings.votes_required} other entries to qualify.</p>
    <p><a href="{settings.frontend_url}/vote">Start voting</a></p>
    """
    return await send_email(s.email, "Submission received - vote to qualify!", html)


async def notify_qualified(s: Submission) -> bool:
    html = f"""
    <h1>Your entry is qualified!</h1>
    <p>Hi <strong>{escape(s.user_name)}</strong>, <strong>{escape(s.part_name)}</strong> ({s.anonymous_id}) is now
    eligible to win week {s.week_number}.</p>
    """
    return await send_email(s.email, "Your entry is now qualified to win", html)


async def notify_winner(s: Submission) -> bool:
    html = f"""
    <h1>Congratulations!</h1>
    <p><strong>{escape(s.user_name)}</strong>, you are the <strong>Week {s.week_number} Winner</strong>
    with <strong>{escape(s.part_name)}</strong> ({escape(s.part_type)}, {escape(s.car_model)}).</p>
    """
    return await send_email(s.email, f"You won! CarMod Week {s.week_number} Winner", html)
