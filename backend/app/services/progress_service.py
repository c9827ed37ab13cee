"""
Review progress and dashboard statistics.

Everything here is computed fresh from the tenant's rows on each call; nothing
is cached. Percentages round half up (0.5 -> 1) to whole numbers.
"""
from __future__ import annotations

import csv
import io
import logging
import math
from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.app.config import settings
from backend.app.errors import NotFoundError
from backend.app.models import AdminDecision, Applicant, FinalSelection, Review
from backend.app.schemas.applicant import ApplicantNeedingReview
from backend.app.schemas.progress import (
    CompleteProgress,
    DashboardSummary,
    DetailedStats,
    ProgressInfo,
    ReviewerStats,
)
from backend.app.services.distribution_service import assignment_counts
from backend.app.services.reviewer_service import get_reviewer_by_name, list_reviewers

logger = logging.getLogger(__name__)

CSV_HEADER = ["Reviewer Name", "Assigned", "Completed", "Percentage"]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def percentage(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def _count_applicants(db: Session) -> int:
    return db.query(func.count(Applicant.id)).filter(Applicant.site_name == settings.SITE_NAME).scalar() or 0


def _completed_reviews(db: Session):
    return db.query(Review).filter(Review.site_name == settings.SITE_NAME, Review.decision.isnot(None))


def _completed_by_reviewer(db: Session) -> Dict[str, int]:
    rows = (
        db.query(Review.reviewer_name, func.count(Review.id))
        .filter(Review.site_name == settings.SITE_NAME, Review.decision.isnot(None))
        .group_by(Review.reviewer_name)
        .all()
    )
    return {name: count for name, count in rows}


def get_overall_progress(db: Session) -> ProgressInfo:
    total = _count_applicants(db) * len(list_reviewers(db))
    completed = _completed_reviews(db).count()
    return ProgressInfo(completed=completed, total=total)


def _reviewer_stats(name: str, assigned: int, completed: int) -> ReviewerStats:
    return ReviewerStats(
        name=name,
        assigned=assigned,
        completed=completed,
        percentage=percentage(completed, assigned),
    )


def _assigned_lookup(db: Session):
    if settings.ASSIGNED_FROM_DISTRIBUTION:
        counts = assignment_counts(db)
        return lambda name: counts.get(name, 0)
    total = _count_applicants(db)
    return lambda name: total


def get_progress_by_reviewer(db: Session) -> List[ReviewerStats]:
    """Completion per reviewer, highest percentage first.

    `assigned` is the number of applicants in the tenant, or the reviewer's
    persisted assignment count when ASSIGNED_FROM_DISTRIBUTION is on.
    """
    assigned_for = _assigned_lookup(db)
    completed = _completed_by_reviewer(db)
    stats = [
        _reviewer_stats(r.name, assigned_for(r.name), completed.get(r.name, 0))
        for r in list_reviewers(db)
    ]
    # sorted() is stable, reviewers keep their id order within equal percentages
    return sorted(stats, key=lambda s: s.percentage, reverse=True)


def get_reviewer_progress(db: Session, name: str) -> ReviewerStats:
    reviewer = get_reviewer_by_name(db, name)
    if reviewer is None:
        raise NotFoundError("Reviewer", f"No reviewer found with name: {name}")
    completed = _completed_reviews(db).filter(Review.reviewer_name == reviewer.name).count()
    return _reviewer_stats(reviewer.name, _assigned_lookup(db)(reviewer.name), completed)


def get_complete_progress(db: Session) -> CompleteProgress:
    return CompleteProgress(overall=get_overall_progress(db), by_reviewer=get_progress_by_reviewer(db))


def get_dashboard_summary(db: Session) -> DashboardSummary:
    total_applicants = _count_applicants(db)
    total_reviewers = len(list_reviewers(db))
    completed = _completed_reviews(db).count()

    finalized = (
        db.query(func.count(FinalSelection.id))
        .filter(
            FinalSelection.site_name == settings.SITE_NAME,
            FinalSelection.admin_decision != AdminDecision.PENDING.value,
        )
        .scalar()
        or 0
    )
    average = (
        db.query(func.avg(Review.total_score))
        .filter(Review.site_name == settings.SITE_NAME, Review.total_score.isnot(None))
        .scalar()
    )

    return DashboardSummary(
        total_applicants=total_applicants,
        total_reviewers=total_reviewers,
        completed_reviews=completed,
        pending_reviews=max(0, total_applicants * total_reviewers - completed),
        finalized_decisions=finalized,
        average_score=round(float(average), 2) if average is not None else 0.0,
    )


def get_applicants_needing_reviews(db: Session) -> List[ApplicantNeedingReview]:
    """Applicants without a final decision yet (no FinalSelection, or Pending)."""
    review_counts = dict(
        db.query(Review.applicant_id, func.count(Review.id))
        .filter(Review.site_name == settings.SITE_NAME)
        .group_by(Review.applicant_id)
        .all()
    )
    rows = (
        db.query(Applicant, FinalSelection.admin_decision)
        .outerjoin(
            FinalSelection,
            (FinalSelection.applicant_id == Applicant.id) & (FinalSelection.site_name == settings.SITE_NAME),
        )
        .filter(Applicant.site_name == settings.SITE_NAME)
        .order_by(Applicant.name, Applicant.id)
        .all()
    )

    result = []
    for applicant, decision in rows:
        if decision is not None and decision != AdminDecision.PENDING.value:
            continue
        item = ApplicantNeedingReview.model_validate(applicant)
        item.review_count = review_counts.get(applicant.id, 0)
        item.admin_decision = decision
        result.append(item)
    return result


def get_detailed_stats(db: Session) -> DetailedStats:
    progress = get_complete_progress(db)
    dashboard = get_dashboard_summary(db)
    needing = get_applicants_needing_reviews(db)

    pairs = dashboard.total_applicants * dashboard.total_reviewers
    return DetailedStats(
        progress=progress,
        dashboard=dashboard,
        applicants_needing_reviews=len(needing),
        completion_rate=percentage(dashboard.completed_reviews, pairs),
        decision_rate=percentage(dashboard.finalized_decisions, dashboard.total_applicants),
    )


def export_progress_csv(db: Session) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for stats in get_progress_by_reviewer(db):
        writer.writerow([stats.name, stats.assigned, stats.completed, f"{stats.percentage}%"])
    logger.info("Exported progress CSV")
    return buf.getvalue()


__all__ = [
    "round_half_up",
    "percentage",
    "get_overall_progress",
    "get_progress_by_reviewer",
    "get_reviewer_progress",
    "get_complete_progress",
    "get_dashboard_summary",
    "get_applicants_needing_reviews",
    "get_detailed_stats",
    "export_progress_csv",
]
