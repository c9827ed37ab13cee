from __future__ import annotations

import logging
from typing import Dict, List, Sequence, TypeVar

from sqlalchemy.orm import Session

from backend.app.config import settings
from backend.app.models import Applicant, ApplicantCategory, ReviewAssignment
from backend.app.services.applicant_service import list_applicants
from backend.app.services.reviewer_service import list_reviewers

logger = logging.getLogger(__name__)

A = TypeVar("A")


def _category_of(applicant) -> str:
    category = getattr(applicant, "category", None)
    if category is None and isinstance(applicant, dict):
        category = applicant.get("category")
    return getattr(category, "value", category)


def _name_of(reviewer) -> str:
    if isinstance(reviewer, str):
        return reviewer
    if isinstance(reviewer, dict):
        return reviewer["name"]
    return reviewer.name


def compute_distribution(applicants: Sequence[A], reviewers: Sequence) -> Dict[str, List[A]]:
    """Round-robin the regular applicants over the reviewers, in list order.

    The applicant at position i of the regular subset goes to reviewer
    i % len(reviewers). Every reviewer gets a key, possibly with an empty list;
    i-sub applicants are left out. Without reviewers the map is empty.
    """
    if not reviewers:
        return {}

    names = [_name_of(r) for r in reviewers]
    distribution: Dict[str, List[A]] = {name: [] for name in names}
    regular = [a for a in applicants if _category_of(a) == ApplicantCategory.REGULAR.value]
    for index, applicant in enumerate(regular):
        distribution[names[index % len(names)]].append(applicant)
    return distribution


def get_distribution(db: Session) -> Dict[str, List[Applicant]]:
    """Distribution derived from the current applicant and reviewer lists."""
    return compute_distribution(list_applicants(db), list_reviewers(db))


def assign_applicants(db: Session) -> Dict[str, List[Applicant]]:
    """Persist the current distribution, replacing any earlier assignments.

    Running it twice against unchanged data leaves the same rows in place.
    """
    distribution = get_distribution(db)

    existing = {
        row.applicant_id: row
        for row in db.query(ReviewAssignment).filter(ReviewAssignment.site_name == settings.SITE_NAME)
    }
    wanted: Dict[int, str] = {
        applicant.id: reviewer_name
        for reviewer_name, applicants in distribution.items()
        for applicant in applicants
    }

    for applicant_id, row in existing.items():
        if applicant_id not in wanted:
            db.delete(row)
    created = updated = 0
    for applicant_id, reviewer_name in wanted.items():
        row = existing.get(applicant_id)
        if row is None:
            db.add(ReviewAssignment(
                applicant_id=applicant_id, reviewer_name=reviewer_name, site_name=settings.SITE_NAME
            ))
            created += 1
        elif row.reviewer_name != reviewer_name:
            row.reviewer_name = reviewer_name
            updated += 1

    db.commit()
    logger.info(
        "Assigned %d applicants to %d reviewers (%d new, %d moved)",
        len(wanted), len(distribution), created, updated,
    )
    return get_assignments(db)


def _live_assignments(db: Session):
    # rows of applicants that are still regular; later category changes drop them
    return (
        db.query(ReviewAssignment, Applicant)
        .join(Applicant, Applicant.id == ReviewAssignment.applicant_id)
        .filter(
            ReviewAssignment.site_name == settings.SITE_NAME,
            Applicant.category == ApplicantCategory.REGULAR.value,
        )
    )


def get_assignments(db: Session) -> Dict[str, List[Applicant]]:
    """Persisted assignments keyed by reviewer name; exactly the current reviewers are keys."""
    result: Dict[str, List[Applicant]] = {r.name: [] for r in list_reviewers(db)}
    for assignment, applicant in _live_assignments(db).order_by(Applicant.name, Applicant.id):
        if assignment.reviewer_name in result:
            result[assignment.reviewer_name].append(applicant)
    return result


def assignment_counts(db: Session) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for assignment, _ in _live_assignments(db):
        counts[assignment.reviewer_name] = counts.get(assignment.reviewer_name, 0) + 1
    return counts


__all__ = [
    "compute_distribution",
    "get_distribution",
    "assign_applicants",
    "get_assignments",
    "assignment_counts",
]
