from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    String, Text, Integer, BigInteger, Boolean, DateTime, ForeignKey, CheckConstraint, UniqueConstraint, Index,
    Uuid, func,
)
from showdown.db import Base

PENDING = "PENDING"
QUALIFIED = "QUALIFIED"
WINNER = "WINNER"


class Submission(Base):
    __tablename__ = "submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)

    part_name: Mapped[str] = mapped_column(String(120), nullable=False)
    part_type: Mapped[str] = mapped_column(String(64), nullable=False)
    car_model: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str] = mapped_column(Text(), nullable=False, default="")

    # opaque handle owned by the object store
    file_path: Mapped[str] = mapped_column(Text(), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    mime_type: Mapped[str | None] = mapped_column(String(64), nullable=True)

    week_number: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=PENDING)  # PENDING|QUALIFIED|WINNER
    anonymous_id: Mapped[str] = mapped_column(String(16), nullable=False)

    times_shown: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    thumbs_up: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    thumbs_down: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    votes_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # cast by the owner

    qualified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_winner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("anonymous_id", name="uq_submissions_anonymous_id"),
        CheckConstraint("total_votes = thumbs_up + thumbs_down", name="ck_submissions_total_votes"),
        CheckConstraint("status IN ('PENDING','QUALIFIED','WINNER')", name="ck_submissions_status"),
        Index("ix_submissions_status_times_shown", "status", "times_shown"),
    )
    # load created_at on insert; async sessions cannot lazy-load it later
    __mapper_args__ = {"eager_defaults": True}

    @property
    def approval_rating(self) -> float:
        if not self.total_votes:
            return 0.0
        return self.thumbs_up / self.total_votes * 100
