# backend/app/schemas/progress.py
"""Read models of the progress endpoints, serialized with camelCase keys."""

from typing import List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProgressInfo(_CamelModel):
    completed: int
    total: int


class ReviewerStats(_CamelModel):
    name: str
    assigned: int
    completed: int
    percentage: int


class CompleteProgress(_CamelModel):
    overall: ProgressInfo
    by_reviewer: List[ReviewerStats]


class DashboardSummary(_CamelModel):
    total_applicants: int
    total_reviewers: int
    completed_reviews: int
    pending_reviews: int
    finalized_decisions: int
    average_score: float


class DetailedStats(_CamelModel):
    progress: CompleteProgress
    dashboard: DashboardSummary
    applicants_needing_reviews: int
    completion_rate: int
    decision_rate: int
