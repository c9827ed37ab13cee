from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from backend.app.config import settings
from backend.app.errors import ConflictError, InvalidScoreError, NotFoundError, ValidationError
from backend.app.models import (
    SCORE_FIELDS,
    AdminDecision,
    FinalSelection,
    Review,
    ReviewDecision,
    compute_total_score,
)
from backend.app.models.review import SCORE_MAX, SCORE_MIN
from backend.app.services.applicant_service import require_applicant

logger = logging.getLogger(__name__)

_DECISIONS = {d.value for d in ReviewDecision}
_ADMIN_DECISIONS = {d.value for d in AdminDecision}


@dataclass(frozen=True)
class RecomputeResult:
    """Outcome of refreshing an applicant's FinalSelection aggregate."""

    ok: bool
    average_score: Optional[float] = None
    reviewer_count: Optional[int] = None
    error: Optional[str] = None


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def validate_scores(update: Mapping[str, Any]) -> Dict[str, Any]:
    """Check a partial review update and return it with plain values.

    Sub-scores must be integers in 1..5 or null; decision must be one of the
    three recommendations or null. Unknown keys are dropped.
    """
    cleaned: Dict[str, Any] = {}
    for field in SCORE_FIELDS:
        if field not in update:
            continue
        value = update[field]
        if value is not None:
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidScoreError(field, value)
            if not SCORE_MIN <= value <= SCORE_MAX:
                raise InvalidScoreError(field, value)
        cleaned[field] = value

    if "decision" in update:
        decision = _enum_value(update["decision"])
        if decision is not None and decision not in _DECISIONS:
            raise ValidationError(
                f"decision must be one of: {', '.join(d.value for d in ReviewDecision)}",
                field="decision",
            )
        cleaned["decision"] = decision

    if "notes" in update:
        cleaned["notes"] = update["notes"]
    return cleaned


def _query(db: Session):
    return db.query(Review).filter(Review.site_name == settings.SITE_NAME)


def get_review(db: Session, applicant_id: int, reviewer_name: str) -> Optional[Review]:
    return (
        _query(db)
        .filter(Review.applicant_id == applicant_id, Review.reviewer_name == reviewer_name)
        .first()
    )


def require_review(db: Session, applicant_id: int, reviewer_name: str) -> Review:
    review = get_review(db, applicant_id, reviewer_name)
    if review is None:
        raise NotFoundError(
            "Review",
            f"No review found for applicant {applicant_id} by reviewer {reviewer_name}",
        )
    return review


def list_reviews_for_applicant(db: Session, applicant_id: int) -> List[Review]:
    return _query(db).filter(Review.applicant_id == applicant_id).order_by(Review.created_at, Review.id).all()


def list_reviews_by_reviewer(db: Session, reviewer_name: str) -> List[Review]:
    return _query(db).filter(Review.reviewer_name == reviewer_name).order_by(Review.created_at, Review.id).all()


def list_reviews(db: Session) -> List[Review]:
    """All reviews of the site with their applicant loaded."""
    return _query(db).options(joinedload(Review.applicant)).order_by(Review.created_at, Review.id).all()


def _apply(review: Review, changes: Mapping[str, Any]) -> None:
    for field, value in changes.items():
        setattr(review, field, value)
    review.recompute_total()


def _require_identity(applicant_id: Optional[int], reviewer_name: Optional[str]) -> str:
    name = (reviewer_name or "").strip()
    if applicant_id is None or not name:
        raise ValidationError("applicant_id and reviewer_name are required")
    return name


def _after_write(db: Session, applicant_id: int) -> RecomputeResult:
    result = refresh_final_selection_stats(db, applicant_id)
    if not result.ok:
        logger.warning(
            "Review for applicant %s saved but final selection stats are stale: %s",
            applicant_id, result.error,
        )
    return result


def create_review(db: Session, applicant_id: Optional[int], reviewer_name: Optional[str],
                  update: Mapping[str, Any]) -> Review:
    name = _require_identity(applicant_id, reviewer_name)
    changes = validate_scores(update)
    require_applicant(db, applicant_id)
    if get_review(db, applicant_id, name) is not None:
        raise ConflictError(f"Review already exists for applicant {applicant_id} by reviewer {name}")

    review = Review(applicant_id=applicant_id, reviewer_name=name, site_name=settings.SITE_NAME)
    _apply(review, changes)
    db.add(review)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(f"Review already exists for applicant {applicant_id} by reviewer {name}") from exc

    _after_write(db, applicant_id)
    return review


def update_review(db: Session, applicant_id: int, reviewer_name: str, update: Mapping[str, Any]) -> Review:
    changes = validate_scores(update)
    review = require_review(db, applicant_id, reviewer_name)
    _apply(review, changes)
    db.commit()

    _after_write(db, applicant_id)
    return review


def upsert_review(db: Session, applicant_id: int, reviewer_name: str, update: Mapping[str, Any]) -> Review:
    """Find the reviewer's review of the applicant, creating it if needed, then patch it.

    Only the keys present in `update` are touched, so resending the same update
    leaves the row unchanged.
    """
    name = _require_identity(applicant_id, reviewer_name)
    changes = validate_scores(update)
    require_applicant(db, applicant_id)

    review = get_review(db, applicant_id, name)
    if review is None:
        if not changes:
            raise ValidationError("At least one score, note or decision is required to start a review")
        review = Review(applicant_id=applicant_id, reviewer_name=name, site_name=settings.SITE_NAME)
        db.add(review)
        logger.info("Starting review of applicant %s by %s", applicant_id, name)
    elif not changes:
        return review
    _apply(review, changes)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent first save inserted the row; patch that one instead
        db.rollback()
        review = require_review(db, applicant_id, name)
        _apply(review, changes)
        db.commit()

    _after_write(db, applicant_id)
    return review


def delete_review(db: Session, applicant_id: int, reviewer_name: str) -> None:
    review = require_review(db, applicant_id, reviewer_name)
    db.delete(review)
    db.commit()

    _after_write(db, applicant_id)


def _review_stats(db: Session, applicant_id: int) -> tuple[float, int]:
    totals = [
        row[0]
        for row in _query(db).filter(Review.applicant_id == applicant_id).with_entities(Review.total_score)
    ]
    scored = [t for t in totals if t is not None]
    average = round(sum(scored) / len(scored), 2) if scored else 0.0
    return average, len(totals)


def _get_or_create_selection(db: Session, applicant_id: int) -> FinalSelection:
    selection = get_final_selection(db, applicant_id)
    if selection is None:
        selection = FinalSelection(
            applicant_id=applicant_id,
            admin_decision=AdminDecision.PENDING.value,
            site_name=settings.SITE_NAME,
        )
        db.add(selection)
    return selection


def refresh_final_selection_stats(db: Session, applicant_id: int) -> RecomputeResult:
    """Recompute average_score and reviewer_count of the applicant's FinalSelection.

    Runs after the review write has been committed. A database failure here is
    rolled back and reported in the result instead of raised.
    """
    try:
        average, count = _review_stats(db, applicant_id)
        selection = _get_or_create_selection(db, applicant_id)
        selection.average_score = average
        selection.reviewer_count = count
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        return RecomputeResult(ok=False, error=str(exc))
    return RecomputeResult(ok=True, average_score=average, reviewer_count=count)


def get_final_selection(db: Session, applicant_id: int) -> Optional[FinalSelection]:
    return (
        db.query(FinalSelection)
        .filter(FinalSelection.site_name == settings.SITE_NAME, FinalSelection.applicant_id == applicant_id)
        .first()
    )


def require_final_selection(db: Session, applicant_id: int) -> FinalSelection:
    selection = get_final_selection(db, applicant_id)
    if selection is None:
        raise NotFoundError("Final selection", f"No final selection found for applicant {applicant_id}")
    return selection


def list_final_selections(db: Session) -> List[FinalSelection]:
    return (
        db.query(FinalSelection)
        .filter(FinalSelection.site_name == settings.SITE_NAME)
        .order_by(FinalSelection.average_score.desc(), FinalSelection.applicant_id)
        .all()
    )


def upsert_final_selection(db: Session, applicant_id: Optional[int], admin_decision: Any,
                           selection_reason: Optional[str] = None) -> FinalSelection:
    """Record the admin outcome for an applicant, refreshing its review aggregate."""
    decision = _enum_value(admin_decision)
    if applicant_id is None or not decision:
        raise ValidationError("applicant_id and admin_decision are required")
    if decision not in _ADMIN_DECISIONS:
        raise ValidationError(
            "admin_decision must be one of: Selected, Not Selected, Pending", field="admin_decision"
        )
    require_applicant(db, applicant_id)

    average, count = _review_stats(db, applicant_id)
    selection = _get_or_create_selection(db, applicant_id)
    previous = selection.admin_decision

    selection.admin_decision = decision
    selection.selection_reason = selection_reason
    selection.average_score = average
    selection.reviewer_count = count
    if decision == AdminDecision.PENDING.value:
        selection.decided_at = None
    elif previous != decision or selection.decided_at is None:
        selection.decided_at = datetime.now(timezone.utc)

    db.commit()
    logger.info("Applicant %s marked %s", applicant_id, decision)
    return selection


__all__ = [
    "RecomputeResult",
    "compute_total_score",
    "validate_scores",
    "get_review",
    "list_reviews",
    "list_reviews_for_applicant",
    "list_reviews_by_reviewer",
    "create_review",
    "update_review",
    "upsert_review",
    "delete_review",
    "refresh_final_selection_stats",
    "get_final_selection",
    "require_final_selection",
    "list_final_selections",
    "upsert_final_selection",
]
