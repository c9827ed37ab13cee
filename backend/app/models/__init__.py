# backend/app/models/__init__.py
from .applicant import Applicant, ApplicantCategory
from .reviewer import Reviewer
from .review import Review, ReviewDecision, SCORE_FIELDS, compute_total_score
from .final_selection import AdminDecision, FinalSelection
from .assignment import ReviewAssignment

__all__ = [
    "Applicant", "ApplicantCategory", "Reviewer",
    "Review", "ReviewDecision", "SCORE_FIELDS", "compute_total_score",
    "FinalSelection", "AdminDecision", "ReviewAssignment",
]
