# backend/app/schemas/__init__.py
from .applicant import (
    ApplicantBatchCreate,
    ApplicantCreate,
    ApplicantNeedingReview,
    ApplicantResponse,
    ApplicantUpdate,
)
from .reviewer import ReviewerCreate, ReviewerResponse, ReviewerUpdate
from .review import (
    FinalSelectionCreate,
    FinalSelectionResponse,
    ReviewCreate,
    ReviewResponse,
    ReviewUpdate,
    ReviewWithApplicant,
)
from .progress import CompleteProgress, DashboardSummary, DetailedStats, ProgressInfo, ReviewerStats
from .common import success

__all__ = [
    "ApplicantBatchCreate",
    "ApplicantCreate",
    "ApplicantNeedingReview",
    "ApplicantResponse",
    "ApplicantUpdate",
    "ReviewerCreate",
    "ReviewerResponse",
    "ReviewerUpdate",
    "FinalSelectionCreate",
    "FinalSelectionResponse",
    "ReviewCreate",
    "ReviewResponse",
    "ReviewUpdate",
    "ReviewWithApplicant",
    "CompleteProgress",
    "DashboardSummary",
    "DetailedStats",
    "ProgressInfo",
    "ReviewerStats",
    "success",
]
