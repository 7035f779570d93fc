from __future__ import annotations
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = "20251007_0001"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("username", sa.String(length=32), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "user_roles",
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, nullable=False),
        sa.Column("role", sa.String(length=32), primary_key=True, nullable=False),
        sa.Column("granted_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "submissions",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("part_name", sa.String(length=120), nullable=False),
        sa.Column("part_type", sa.String(length=64), nullable=False),
        sa.Column("car_model", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column("file_path", sa.Text(), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("mime_type", sa.String(length=64), nullable=True),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=16), server_default="PENDING", nullable=False),
        sa.Column("anonymous_id", sa.String(length=16), nullable=False),
        sa.Column("times_shown", sa.Integer(), server_default="0", nullable=False),
        sa.Column("thumbs_up", sa.Integer(), server_default="0", nullable=False),
        sa.Column("thumbs_down", sa.Integer(), server_default="0", nullable=False),
        sa.Column("total_votes", sa.Integer(), server_default="0", nullable=False),
        sa.Column("votes_completed", sa.Integer(), server_default="0", nullable=False),
        sa.Column("qualified_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("is_winner", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("anonymous_id", name="uq_submissions_anonymous_id"),
        sa.CheckConstraint("total_votes = thumbs_up + thumbs_down", name="ck_submissions_total_votes"),
        sa.CheckConstraint("status IN ('PENDING','QUALIFIED','WINNER')", name="ck_submissions_status"),
    )
    op.create_index("ix_submissions_user_id", "submissions", ["user_id"])
    op.create_index("ix_submissions_week_number", "submissions", ["week_number"])
    # batch selection scans by status ordered by exposure
    op.create_index("ix_submissions_status_times_shown", "submissions", ["status", "times_shown"])

    op.create_table(
        "votes",
        sa.Column("voter_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, nullable=False),
        sa.Column("submission_id", sa.Uuid(), sa.ForeignKey("submissions.id", ondelete="CASCADE"), primary_key=True, nullable=False),
        sa.Column("value", sa.String(length=4), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("value IN ('up','down')", name="ck_votes_value"),
    )
    op.create_index("ix_votes_submission_id", "votes", ["submission_id"])

def downgrade() -> None:
    op.drop_index("ix_votes_submission_id", table_name="votes")
    op.drop_table("votes")
    op.drop_index("ix_submissions_status_times_shown", table_name="submissions")
    op.drop_index("ix_submissions_week_number", table_name="submissions")
    op.drop_index("ix_submissions_user_id", table_name="submissions")
    op.drop_table("submissions")
    op.drop_table("user_roles")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
