# backend/app/models/review.py
"""
One reviewer's evaluation of one applicant.

Seven sub-scores (1-5, each optional), free-text notes and an interview
recommendation. `total_score` is derived from the sub-scores and rewritten on
every save; a review counts as complete once `decision` is set.
"""

import enum
from typing import Mapping, Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from ..config import settings
from ..database import Base

SCORE_FIELDS = (
    "preference",
    "pressure",
    "underserved",
    "leadership",
    "academic",
    "research",
    "personal",
)
SCORE_MIN = 1
SCORE_MAX = 5


class ReviewDecision(str, enum.Enum):
    DEFINITELY_INTERVIEW = "Definitely Interview"
    MAYBE = "Maybe"
    DO_NOT_INTERVIEW = "Do Not Interview"


def compute_total_score(scores: Mapping[str, Optional[int]]) -> int:
    """Sum of the seven sub-scores; missing or null scores count as 0."""
    return sum(scores.get(field) or 0 for field in SCORE_FIELDS)


def _score_range(field: str) -> CheckConstraint:
    return CheckConstraint(
        f"{field} IS NULL OR ({field} >= {SCORE_MIN} AND {field} <= {SCORE_MAX})",
        name=f"{field}_range",
    )


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("applicant_id", "reviewer_name", "site_name", name="uq_reviews_applicant_reviewer_site"),
        Index("ix_reviews_decision", "decision"),
        Index("ix_reviews_total_score", "total_score"),
        *(_score_range(field) for field in SCORE_FIELDS),
    )

    id = Column(Integer, primary_key=True, index=True)
    applicant_id = Column(
        Integer,
        ForeignKey("applicants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reviewer_name = Column(String(255), nullable=False, index=True)

    preference = Column(Integer, nullable=True)
    pressure = Column(Integer, nullable=True)
    underserved = Column(Integer, nullable=True)
    leadership = Column(Integer, nullable=True)
    academic = Column(Integer, nullable=True)
    research = Column(Integer, nullable=True)
    personal = Column(Integer, nullable=True)

    notes = Column(Text, nullable=True)
    decision = Column(String(50), nullable=True)
    total_score = Column(Integer, nullable=False, default=0)

    site_name = Column(String(100), nullable=False, default=lambda: settings.SITE_NAME, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    applicant = relationship("Applicant", back_populates="reviews")

    def scores(self) -> dict:
        return {field: getattr(self, field) for field in SCORE_FIELDS}

    def recompute_total(self) -> int:
        self.total_score = compute_total_score(self.scores())
        return self.total_score

    @property
    def is_complete(self) -> bool:
        return self.decision is not None

    def __repr__(self) -> str:
        return f"<Review applicant={self.applicant_id} reviewer={self.reviewer_name!r} total={self.total_score}>"
