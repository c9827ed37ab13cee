"""initial review schema: applicants, reviewers, reviews, final selections, assignments

Revision ID: 3c1e9a7d2b40
Revises:
Create Date: 2026-10-17 10:12:44.318205

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1e9a7d2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCORE_FIELDS = ("preference", "pressure", "underserved", "leadership", "academic", "research", "personal")


def _timestamps(with_updated=True):
    cols = [sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)]
    if with_updated:
        cols.append(
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)
        )
    return cols


def upgrade():
    op.create_table(
        "applicants",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("external_id", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("site_name", sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_applicants"),
        sa.UniqueConstraint("external_id", "site_name", name="uq_applicants_external_id_site"),
    )
    op.create_index("ix_applicants_id", "applicants", ["id"])
    op.create_index("ix_applicants_external_id", "applicants", ["external_id"])
    op.create_index("ix_applicants_category", "applicants", ["category"])
    op.create_index("ix_applicants_site_name", "applicants", ["site_name"])

    op.create_table(
        "reviewers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False),
        sa.Column("site_name", sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_reviewers"),
        sa.UniqueConstraint("name", "site_name", name="uq_reviewers_name_site"),
    )
    op.create_index("ix_reviewers_id", "reviewers", ["id"])
    op.create_index("ix_reviewers_name", "reviewers", ["name"])
    op.create_index("ix_reviewers_site_name", "reviewers", ["site_name"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("applicant_id", sa.Integer(), nullable=False),
        sa.Column("reviewer_name", sa.String(length=255), nullable=False),
        *[sa.Column(field, sa.Integer(), nullable=True) for field in SCORE_FIELDS],
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("decision", sa.String(length=50), nullable=True),
        sa.Column("total_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("site_name", sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_reviews"),
        sa.ForeignKeyConstraint(
            ["applicant_id"], ["applicants.id"],
            name="fk_reviews_applicant_id_applicants", ondelete="CASCADE",
        ),
        sa.UniqueConstraint(
            "applicant_id", "reviewer_name", "site_name", name="uq_reviews_applicant_reviewer_site"
        ),
        *[
            sa.CheckConstraint(
                f"{field} IS NULL OR ({field} >= 1 AND {field} <= 5)",
                name=f"ck_reviews_{field}_range",
            )
            for field in SCORE_FIELDS
        ],
    )
    op.create_index("ix_reviews_id", "reviews", ["id"])
    op.create_index("ix_reviews_applicant_id", "reviews", ["applicant_id"])
    op.create_index("ix_reviews_reviewer_name", "reviews", ["reviewer_name"])
    op.create_index("ix_reviews_site_name", "reviews", ["site_name"])
    op.create_index("ix_reviews_decision", "reviews", ["decision"])
    op.create_index("ix_reviews_total_score", "reviews", ["total_score"])

    op.create_table(
        "final_selections",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("applicant_id", sa.Integer(), nullable=False),
        sa.Column("admin_decision", sa.String(length=50), nullable=False, server_default="Pending"),
        sa.Column("selection_reason", sa.Text(), nullable=True),
        sa.Column("average_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("reviewer_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("site_name", sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_final_selections"),
        sa.ForeignKeyConstraint(
            ["applicant_id"], ["applicants.id"],
            name="fk_final_selections_applicant_id_applicants", ondelete="CASCADE",
        ),
        sa.UniqueConstraint("applicant_id", "site_name", name="uq_final_selections_applicant_site"),
    )
    op.create_index("ix_final_selections_id", "final_selections", ["id"])
    op.create_index("ix_final_selections_site_name", "final_selections", ["site_name"])
    op.create_index("ix_final_selections_admin_decision", "final_selections", ["admin_decision"])

    op.create_table(
        "review_assignments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("applicant_id", sa.Integer(), nullable=False),
        sa.Column("reviewer_name", sa.String(length=255), nullable=False),
        sa.Column("site_name", sa.String(length=100), nullable=False),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id", name="pk_review_assignments"),
        sa.ForeignKeyConstraint(
            ["applicant_id"], ["applicants.id"],
            name="fk_review_assignments_applicant_id_applicants", ondelete="CASCADE",
        ),
        sa.UniqueConstraint("applicant_id", "site_name", name="uq_review_assignments_applicant_site"),
    )
    op.create_index("ix_review_assignments_applicant_id", "review_assignments", ["applicant_id"])
    op.create_index("ix_review_assignments_reviewer_name", "review_assignments", ["reviewer_name"])
    op.create_index("ix_review_assignments_site_name", "review_assignments", ["site_name"])


def downgrade():
    op.drop_table("review_assignments")
    op.drop_table("final_selections")
    op.drop_table("reviews")
    op.drop_table("reviewers")
    op.drop_table("applicants")
