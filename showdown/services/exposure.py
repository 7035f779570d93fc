from __future__ import annotations
from uuid import UUID
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from showdown.config import settings
from showdown.models.submission import Submission, QUALIFIED
from showdown.models.vote import Vote

log = structlog.get_logger()


def _candidates(voter_id: UUID, limit: int, qualified_only: bool):
    """Entries the voter may still see: never their own, never already voted on."""
    voted_ids = select(Vote.submission_id).where(Vote.voter_id == voter_id)
    q = (
        select(Submission)
        .where(Submission.user_id != voter_id)
        .where(Submission.id.not_in(voted_ids))
    )
    if qualified_only:
        q = q.where(Submission.status == QUALIFIED)
    # least exposed first, random among equals
    return q.order_by(Submission.times_shown.asc(), func.random()).limit(limit)


async def voting_batch(session: AsyncSession, voter_id: UUID, limit: int | None = None) -> list[Submission]:
    """
    Pick up to `limit` (default: the vote quota) entries for `voter_id` and mark
    each of them as shown once.

    QUALIFIED entries are preferred. When fewer than `limit` of them are left
    the whole unvoted pool is used instead, so early voters still get a batch
    before anyone has qualified. An empty list is a normal outcome.
    """
    limit = limit or settings.votes_required
    entries = (await session.execute(_candidates(voter_id, limit, qualified_only=True))).scalars().all()
    fallback = len(entries) < limit
    if fallback:
        entries = (await session.execute(_candidates(voter_id, limit, qualified_only=False))).scalars().all()

    if entries:
        # single atomic increment for the whole batch
        await session.execute(
            update(Submission)
            .where(Submission.id.in_([s.id for s in entries]))
            .values(times_shown=Submission.times_shown + 1)
        )

    log.info("batch_served", voter_id=str(voter_id), count=len(entries), fallback=fallback)
    return list(entries)
