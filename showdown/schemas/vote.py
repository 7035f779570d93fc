from __future__ import annotations
from pydantic import BaseModel
from typing import Literal
from uuid import UUID

class VoteCreate(BaseModel):
    voter_id: UUID
    submission_id: UUID
    value: Literal["up", "down"]

class VoteResult(BaseModel):
    recorded: bool = True
    message: str
    votes_completed: int
    votes_required: int
    qualified: bool
