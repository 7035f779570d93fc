from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone as dt_tz
from uuid import UUID
from sqlalchemy import select, update, func, exists
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from showdown.config import settings
from showdown.models.submission import Submission, PENDING, QUALIFIED
from showdown.models.vote import Vote

log = structlog.get_logger()


@dataclass
class QualificationResult:
    votes_completed: int
    votes_required: int
    qualified: bool  # True only on the call that performed PENDING -> QUALIFIED
    flipped: list[UUID] = field(default_factory=list)


async def votes_cast_by(session: AsyncSession, voter_id: UUID) -> int:
    return int(await session.scalar(
        select(func.count()).select_from(Vote).where(Vote.voter_id == voter_id)
    ) or 0)


async def refresh_qualification(session: AsyncSession, voter_id: UUID, quota: int | None = None) -> QualificationResult:
    """
    Recount the voter's distinct cast votes and push the count onto their own
    submission(s), qualifying them once the quota is reached.

    Both writes are conditional updates: `votes_completed` only ever moves
    up, and the status flip only matches rows still PENDING, so two racing
    votes that both cross the quota qualify the entry once.
    """
    quota = quota or settings.votes_required
    count = await votes_cast_by(session, voter_id)

    has_submission = await session.scalar(select(exists().where(Submission.user_id == voter_id)))
    if not has_submission:
        return QualificationResult(votes_completed=count, votes_required=quota, qualified=False)

    await session.execute(
        update(Submission)
        .where(Submission.user_id == voter_id, Submission.votes_completed < count)
        .values(votes_completed=count)
    )

    flipped: list[UUID] = []
    if count >= quota:
        flipped = (await session.execute(
            update(Submission)
            .where(Submission.user_id == voter_id, Submission.status == PENDING)
            .values(status=QUALIFIED, qualified_at=datetime.now(dt_tz.utc))
            .returning(Submission.id)
        )).scalars().all()
        if flipped:
            log.info("submission_qualified", voter_id=str(voter_id), submissions=[str(i) for i in flipped], votes=count)

    return QualificationResult(votes_completed=count, votes_required=quota, qualified=bool(flipped), flipped=list(flipped))
