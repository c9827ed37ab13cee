# backend/app/models/final_selection.py
import enum

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship

from ..config import settings
from ..database import Base


class AdminDecision(str, enum.Enum):
    SELECTED = "Selected"
    NOT_SELECTED = "Not Selected"
    PENDING = "Pending"


class FinalSelection(Base):
    """Admin outcome for an applicant plus the aggregate of its reviews."""

    __tablename__ = "final_selections"
    __table_args__ = (
        UniqueConstraint("applicant_id", "site_name", name="uq_final_selections_applicant_site"),
        Index("ix_final_selections_admin_decision", "admin_decision"),
    )

    id = Column(Integer, primary_key=True, index=True)
    applicant_id = Column(
        Integer,
        ForeignKey("applicants.id", ondelete="CASCADE"),
        nullable=False,
    )
    admin_decision = Column(String(50), nullable=False, default=AdminDecision.PENDING.value)
    selection_reason = Column(Text, nullable=True)

    # derived from the applicant's reviews on every review write
    average_score = Column(Float, nullable=False, default=0.0)
    reviewer_count = Column(Integer, nullable=False, default=0)

    decided_at = Column(DateTime(timezone=True), nullable=True)
    site_name = Column(String(100), nullable=False, default=lambda: settings.SITE_NAME, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    applicant = relationship("Applicant", back_populates="final_selection")
