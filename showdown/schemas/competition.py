from __future__ import annotations
from pydantic import BaseModel
from typing import Literal
from datetime import date

class CurrentWeek(BaseModel):
    week: int
    start_date: date
    total_weeks: int
    status: Literal["Not Started", "Active", "Ended"]

class CompetitionStats(BaseModel):
    current_week: int
    total_submissions: int
    weekly_submissions: int
    total_winners: int
    qualified_entries: int
    competition_status: Literal["Not Started", "Active", "Ended"]
