from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.app.config import settings
from backend.app.errors import ConflictError, NotFoundError, ValidationError
from backend.app.models import ReviewAssignment, Reviewer
from backend.app.schemas.reviewer import ReviewerCreate, ReviewerUpdate

logger = logging.getLogger(__name__)


def _query(db: Session):
    return db.query(Reviewer).filter(Reviewer.site_name == settings.SITE_NAME)


def _assignments_of(db: Session, reviewer_name: str):
    return db.query(ReviewAssignment).filter(
        ReviewAssignment.site_name == settings.SITE_NAME,
        ReviewAssignment.reviewer_name == reviewer_name,
    )


def list_reviewers(db: Session, admins_only: bool = False) -> List[Reviewer]:
    """Reviewers in creation order; that order drives the round-robin distribution."""
    query = _query(db)
    if admins_only:
        query = query.filter(Reviewer.is_admin.is_(True))
    return query.order_by(Reviewer.id).all()


def get_reviewer(db: Session, reviewer_id: int) -> Optional[Reviewer]:
    return _query(db).filter(Reviewer.id == reviewer_id).first()


def get_reviewer_by_name(db: Session, name: str) -> Optional[Reviewer]:
    return _query(db).filter(Reviewer.name == name).first()


def require_reviewer(db: Session, reviewer_id: int) -> Reviewer:
    reviewer = get_reviewer(db, reviewer_id)
    if reviewer is None:
        raise NotFoundError("Reviewer", f"No reviewer found with ID: {reviewer_id}")
    return reviewer


def create_reviewer(db: Session, payload: ReviewerCreate) -> Reviewer:
    name = payload.name.strip()
    if not name:
        raise ValidationError("name is required", field="name")
    if get_reviewer_by_name(db, name) is not None:
        raise ConflictError(f"Reviewer with name {name} already exists")

    reviewer = Reviewer(name=name, email=payload.email, is_admin=payload.is_admin, site_name=settings.SITE_NAME)
    db.add(reviewer)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(f"Reviewer with name {name} already exists") from exc
    logger.info("Created reviewer %s", name)
    return reviewer


def update_reviewer(db: Session, reviewer_id: int, payload: ReviewerUpdate) -> Reviewer:
    reviewer = require_reviewer(db, reviewer_id)
    changes = payload.model_dump(exclude_unset=True)

    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("name must not be empty", field="name")
        other = get_reviewer_by_name(db, name)
        if other is not None and other.id != reviewer.id:
            raise ConflictError(f"Reviewer with name {name} already exists")
        if name != reviewer.name:
            _assignments_of(db, reviewer.name).update(
                {ReviewAssignment.reviewer_name: name}, synchronize_session=False
            )
        reviewer.name = name
    if "email" in changes:
        reviewer.email = changes["email"]
    if changes.get("is_admin") is not None:
        reviewer.is_admin = changes["is_admin"]

    db.commit()
    return reviewer


def delete_reviewer(db: Session, reviewer_id: int) -> None:
    reviewer = require_reviewer(db, reviewer_id)
    # reviews keep the name; assignments do not outlive the reviewer
    _assignments_of(db, reviewer.name).delete(synchronize_session=False)
    db.delete(reviewer)
    db.commit()
    logger.info("Deleted reviewer %s", reviewer.name)
