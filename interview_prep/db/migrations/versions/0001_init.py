"""interview preps and user responses"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "interview_preps",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("job_title", sa.Text(), nullable=False),
        sa.Column("company", sa.Text(), nullable=False),
        sa.Column("job_url", sa.Text(), nullable=True),
        sa.Column("linkedin_url", sa.Text(), nullable=True),
        sa.Column("resume_text", sa.Text(), nullable=True),
        sa.Column("data", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_interview_preps_expires_at", "interview_preps", ["expires_at"])
    op.create_index("ix_interview_preps_user_id", "interview_preps", ["user_id"])

    op.create_table(
        "user_responses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=True),
        sa.Column("interview_prep_id", sa.String(length=64), nullable=False),
        sa.Column("question_id", sa.String(length=64), nullable=False),
        sa.Column("round_id", sa.String(length=64), nullable=False),
        sa.Column("situation", sa.Text(), nullable=False, server_default=""),
        sa.Column("action", sa.Text(), nullable=False, server_default=""),
        sa.Column("result", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["interview_prep_id"], ["interview_preps.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "interview_prep_id",
            "question_id",
            "round_id",
            name="uq_user_responses_prep_question_round",
        ),
    )
    op.create_index("ix_user_responses_interview_prep_id", "user_responses", ["interview_prep_id"])
    op.create_index("ix_user_responses_question_id", "user_responses", ["question_id"])


def downgrade() -> None:
    op.drop_index("ix_user_responses_question_id", table_name="user_responses")
    op.drop_index("ix_user_responses_interview_prep_id", table_name="user_responses")
    op.drop_table("user_responses")
    op.drop_index("ix_interview_preps_user_id", table_name="interview_preps")
    op.drop_index("ix_interview_preps_expires_at", table_name="interview_preps")
    op.drop_table("interview_preps")
