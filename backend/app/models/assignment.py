# backend/app/models/assignment.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import relationship

from ..config import settings
from ..database import Base


class ReviewAssignment(Base):
    """Persisted applicant -> reviewer pairing, written only by an explicit redistribution."""

    __tablename__ = "review_assignments"
    __table_args__ = (
        UniqueConstraint("applicant_id", "site_name", name="uq_review_assignments_applicant_site"),
    )

    id = Column(Integer, primary_key=True)
    applicant_id = Column(
        Integer,
        ForeignKey("applicants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    reviewer_name = Column(String(255), nullable=False, index=True)

    site_name = Column(String(100), nullable=False, default=lambda: settings.SITE_NAME, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    applicant = relationship("Applicant", back_populates="assignment")
