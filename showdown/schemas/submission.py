from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Literal
from uuid import UUID
from datetime import datetime
from showdown.config import settings

SubmissionStatus = Literal["PENDING", "QUALIFIED", "WINNER"]


class SubmissionPublic(BaseModel):
    """Voter-facing view: anonymous, no owner identity."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    anonymous_id: str
    part_name: str
    part_type: str
    car_model: str
    description: str
    file_path: str
    file_size: int
    week_number: int
    status: SubmissionStatus
    is_winner: bool
    times_shown: int
    thumbs_up: int
    thumbs_down: int
    total_votes: int
    approval_rating: float
    created_at: datetime


class SubmissionOwnerView(SubmissionPublic):
    votes_completed: int
    votes_required: int = Field(default_factory=lambda: settings.votes_required)
    qualified_at: datetime | None = None


class SubmissionAdminView(SubmissionOwnerView):
    user_id: UUID
    user_name: str
    email: str
    username: str | None = None


class WinnerPublic(SubmissionPublic):
    user_name: str


class SubmissionStatusResponse(BaseModel):
    submission: SubmissionOwnerView | None = None
    votes_completed: int
    votes_required: int


class VotingBatch(BaseModel):
    entries: list[SubmissionPublic]


class WinnersResponse(BaseModel):
    week_number: int
    minimum_votes: int
    total_voters: int
    winners: list[SubmissionPublic]
