from __future__ import annotations
import uuid
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID
from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from showdown.errors import InvalidInput, UploadWindowClosed
from showdown.models.submission import Submission, PENDING, QUALIFIED
from showdown.models.user import User
from showdown.services.anon_id import generate_anonymous_id
from showdown.services.artifacts import analyze_artifact
from showdown.services.clock import current_week, ensure_upload_open
from showdown.services.qualification import refresh_qualification
from showdown.services.storage import put_bytes, delete_object

log = structlog.get_logger()

REQUIRED_FIELDS = ("part_name", "part_type", "car_model")


@dataclass
class PartForm:
    part_name: str | None
    part_type: str | None
    car_model: str | None
    description: str | None = None
    user_name: str | None = None
    email: str | None = None


async def create_submission(
    session: AsyncSession,
    user: User,
    form: PartForm,
    filename: str,
    data: bytes,
    now: datetime | None = None,
) -> Submission:
    """
    Upload path: validate, gate on the competition week, store the artifact,
    insert a PENDING submission with zeroed counters.
    Nothing reaches storage when validation or the week gate fails.
    """
    missing = [f for f in REQUIRED_FIELDS if not (getattr(form, f) or "").strip()]
    if missing:
        raise InvalidInput(f"Missing required fields: {', '.join(missing)}")

    week = current_week(now)
    try:
        ensure_upload_open(week)
    except UploadWindowClosed as e:
        log.info("upload_rejected", user_id=str(user.id), week=week, reason=e.detail, bytes=len(data or b""))
        raise

    ext, mime = analyze_artifact(filename, data)
    key = f"week{week}/{uuid.uuid4().hex}{ext}"
    url = await run_in_threadpool(put_bytes, key, data, mime)

    fields = dict(
        user_id=user.id,
        user_name=(form.user_name or user.username).strip(),
        email=(form.email or user.email).strip(),
        part_name=form.part_name.strip(),
        part_type=form.part_type.strip(),
        car_model=form.car_model.strip(),
        description=(form.description or "").strip(),
    )
    # anonymous ids are short; retry on the rare unique collision
    for _ in range(5):
        s = Submission(
            **fields,
            file_path=url,
            file_size=len(data),
            mime_type=mime,
            week_number=week,
            status=PENDING,
            anonymous_id=generate_anonymous_id(),
            times_shown=0,
            thumbs_up=0,
            thumbs_down=0,
            total_votes=0,
            votes_completed=0,
            is_winner=False,
        )
        session.add(s)
        try:
            await session.flush()
        except IntegrityError:
            await session.rollback()
            continue
        log.info("upload_accepted", user_id=str(fields["user_id"]), submission_id=str(s.id), week=week, bytes=len(data))
        # votes cast before the upload count toward the new entry too
        await refresh_qualification(session, fields["user_id"])
        return s

    await run_in_threadpool(delete_object, key)
    raise RuntimeError("Failed to generate unique anonymous id")


async def submissions_of(session: AsyncSession, user_id: UUID) -> list[Submission]:
    q = select(Submission).where(Submission.user_id == user_id).order_by(Submission.created_at.desc())
    return list((await session.execute(q)).scalars().all())


async def latest_submission(session: AsyncSession, user_id: UUID) -> Submission | None:
    return await session.scalar(
        select(Submission).where(Submission.user_id == user_id).order_by(Submission.created_at.desc()).limit(1)
    )


async def gallery(session: AsyncSession) -> list[Submission]:
    return list((await session.execute(select(Submission).order_by(Submission.created_at.desc()))).scalars().all())


async def admin_listing(session: AsyncSession) -> list[tuple[Submission, str]]:
    q = (
        select(Submission, User.username)
        .join(User, User.id == Submission.user_id)
        .order_by(Submission.created_at.desc())
    )
    return [(s, uname) for (s, uname) in (await session.execute(q)).all()]


async def competition_counts(session: AsyncSession, week: int) -> dict[str, int]:
    async def _count(*criteria) -> int:
        return int(await session.scalar(select(func.count()).select_from(Submission).where(*criteria)) or 0)

    return {
        "total_submissions": await _count(),
        "weekly_submissions": await _count(Submission.week_number == week),
        "total_winners": await _count(Submission.is_winner.is_(True)),
        "qualified_entries": await _count(Submission.status == QUALIFIED),
    }
