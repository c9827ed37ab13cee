# backend/app/models/reviewer.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint, func

from ..config import settings
from ..database import Base


class Reviewer(Base):
    __tablename__ = "reviewers"
    __table_args__ = (
        UniqueConstraint("name", "site_name", name="uq_reviewers_name_site"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)

    site_name = Column(String(100), nullable=False, default=lambda: settings.SITE_NAME, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<Reviewer {self.name!r}{' (admin)' if self.is_admin else ''}>"
