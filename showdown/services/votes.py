from __future__ import annotations
from uuid import UUID
from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from showdown.errors import SelfVoteRejected, SubmissionNotFound, InvalidInput
from showdown.models.submission import Submission
from showdown.models.vote import Vote, UP, DOWN
from showdown.services.qualification import QualificationResult, refresh_qualification, votes_cast_by
from showdown.config import settings

log = structlog.get_logger()

_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


async def insert_vote_if_absent(session: AsyncSession, voter_id: UUID, submission_id: UUID, value: str) -> bool:
    """INSERT ... ON CONFLICT DO NOTHING on (voter_id, submission_id). True if a row was written."""
    dialect = session.get_bind().dialect.name
    try:
        insert = _INSERTS[dialect]
    except KeyError:
        raise RuntimeError(f"insert-if-absent not supported on {dialect}")
    stmt = (
        insert(Vote)
        .values(voter_id=voter_id, submission_id=submission_id, value=value)
        .on_conflict_do_nothing(index_elements=[Vote.voter_id, Vote.submission_id])
        .returning(Vote.voter_id)
    )
    return (await session.execute(stmt)).first() is not None


async def record_vote(session: AsyncSession, voter_id: UUID, submission_id: UUID, value: str) -> bool:
    """
    Ledger write path. Returns True when the vote is new, False for a
    duplicate (which is still a success for the caller). Only this function
    touches thumbs_up / thumbs_down / total_votes.
    """
    if value not in (UP, DOWN):
        raise InvalidInput("vote value must be 'up' or 'down'")
    owner_id = await session.scalar(select(Submission.user_id).where(Submission.id == submission_id))
    if owner_id is None:
        raise SubmissionNotFound()
    if owner_id == voter_id:
        log.info("self_vote_rejected", voter_id=str(voter_id), submission_id=str(submission_id))
        raise SelfVoteRejected()

    if not await insert_vote_if_absent(session, voter_id, submission_id, value):
        log.info("vote_duplicate", voter_id=str(voter_id), submission_id=str(submission_id))
        return False

    tally = Submission.thumbs_up if value == UP else Submission.thumbs_down
    await session.execute(
        update(Submission)
        .where(Submission.id == submission_id)
        .values({tally: tally + 1, Submission.total_votes: Submission.total_votes + 1})
    )
    log.info("vote_recorded", voter_id=str(voter_id), submission_id=str(submission_id), value=value)
    return True


async def cast_vote(
    session: AsyncSession, voter_id: UUID, submission_id: UUID, value: str
) -> tuple[bool, QualificationResult]:
    """
    Ledger then qualification; the tracker only runs for a newly recorded vote.
    Returns (recorded, progress).
    """
    if await record_vote(session, voter_id, submission_id, value):
        return True, await refresh_qualification(session, voter_id)
    count = await votes_cast_by(session, voter_id)
    return False, QualificationResult(votes_completed=count, votes_required=settings.votes_required, qualified=False)
