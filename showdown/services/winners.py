from __future__ import annotations
from dataclasses import dataclass
from uuid import UUID
from sqlalchemy import select, update, func, case, cast, Float
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from showdown.config import settings
from showdown.errors import SubmissionNotFound
from showdown.models.submission import Submission, QUALIFIED, WINNER
from showdown.models.vote import Vote

log = structlog.get_logger()

approval_expr = case(
    (Submission.total_votes > 0, cast(Submission.thumbs_up, Float) / Submission.total_votes * 100),
    else_=0.0,
)


@dataclass
class WinnerBoard:
    week_number: int
    minimum_votes: int
    total_voters: int
    winners: list[Submission]


def minimum_votes(total_voters: int, quorum_pct: int | None = None) -> int:
    """max(ceil(pct% of voters), 1), in integer arithmetic."""
    pct = settings.winner_quorum_pct if quorum_pct is None else quorum_pct
    return max(-(-total_voters * pct // 100), 1)


async def distinct_voter_count(session: AsyncSession) -> int:
    # competition-wide, not per week
    return int(await session.scalar(select(func.count(func.distinct(Vote.voter_id)))) or 0)


async def rank_winners(session: AsyncSession, week_number: int, limit: int | None = None) -> WinnerBoard:
    """Read-only: QUALIFIED entries of the week with quorum, by approval then volume."""
    limit = limit or settings.winners_limit
    total_voters = await distinct_voter_count(session)
    floor = minimum_votes(total_voters)
    q = (
        select(Submission)
        .where(
            Submission.week_number == week_number,
            Submission.status == QUALIFIED,
            Submission.total_votes >= floor,
        )
        .order_by(approval_expr.desc(), Submission.total_votes.desc())
        .limit(limit)
    )
    rows = (await session.execute(q)).scalars().all()
    return WinnerBoard(week_number=week_number, minimum_votes=floor, total_voters=total_voters, winners=list(rows))


async def select_winner(session: AsyncSession, submission_id: UUID) -> tuple[Submission, bool]:
    """
    Manual promotion to WINNER. Terminal: a second call is a no-op.
    Returns (submission, newly_selected).
    """
    s = await session.get(Submission, submission_id)
    if not s:
        raise SubmissionNotFound()
    if s.status == WINNER:
        return s, False
    # only the call whose guarded update matched owns the transition
    promoted = (await session.execute(
        update(Submission)
        .where(Submission.id == submission_id, Submission.status != WINNER)
        .values(status=WINNER, is_winner=True)
        .returning(Submission.id)
    )).scalars().all()
    if not promoted:
        await session.refresh(s)
        return s, False
    log.info("winner_selected", submission_id=str(submission_id), week=s.week_number)
    return s, True


async def all_winners(session: AsyncSession) -> list[Submission]:
    q = select(Submission).where(Submission.is_winner.is_(True)).order_by(Submission.week_number.desc())
    return list((await session.execute(q)).scalars().all())
