# backend/app/models/applicant.py
"""
Applicant to the residency program.

Applicants are imported in bulk or entered by hand. `category` decides whether
the applicant takes part in the automatic round-robin distribution (regular)
or is reviewed through the separate i-sub pool.
"""

import enum

from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship

from ..config import settings
from ..database import Base


class ApplicantCategory(str, enum.Enum):
    REGULAR = "regular"
    I_SUB = "i-sub"


class Applicant(Base):
    __tablename__ = "applicants"
    __table_args__ = (
        UniqueConstraint("external_id", "site_name", name="uq_applicants_external_id_site"),
    )

    id = Column(Integer, primary_key=True, index=True)
    external_id = Column(String(100), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(50), nullable=False, default=ApplicantCategory.REGULAR.value, index=True)
    details = Column(Text, nullable=True)

    site_name = Column(String(100), nullable=False, default=lambda: settings.SITE_NAME, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # the ORM cascades mirror ON DELETE CASCADE for backends that ignore it
    reviews = relationship(
        "Review", back_populates="applicant", cascade="all, delete-orphan"
    )
    final_selection = relationship(
        "FinalSelection", back_populates="applicant", uselist=False,
        cascade="all, delete-orphan",
    )
    assignment = relationship(
        "ReviewAssignment", back_populates="applicant", uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def is_regular(self) -> bool:
        return self.category == ApplicantCategory.REGULAR.value

    def __repr__(self) -> str:
        return f"<Applicant {self.external_id} {self.name!r} ({self.category})>"
