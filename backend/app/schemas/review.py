# backend/app/schemas/review.py
"""Pydantic v2 schemas for reviews and final selections

Sub-scores are strict optional integers here (no string or boolean coercion);
the 1-5 range is enforced by the review service so that out-of-range values surface as InvalidScoreError.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from .applicant import ApplicantResponse


class ReviewDecision(str, Enum):
    DEFINITELY_INTERVIEW = "Definitely Interview"
    MAYBE = "Maybe"
    DO_NOT_INTERVIEW = "Do Not Interview"


class AdminDecision(str, Enum):
    SELECTED = "Selected"
    NOT_SELECTED = "Not Selected"
    PENDING = "Pending"


class ReviewUpdate(BaseModel):
    """Partial update: only the fields sent are applied, explicit nulls clear."""

    preference: Optional[StrictInt] = None
    pressure: Optional[StrictInt] = None
    underserved: Optional[StrictInt] = None
    leadership: Optional[StrictInt] = None
    academic: Optional[StrictInt] = None
    research: Optional[StrictInt] = None
    personal: Optional[StrictInt] = None
    notes: Optional[str] = None
    decision: Optional[ReviewDecision] = None


class ReviewCreate(ReviewUpdate):
    applicant_id: Optional[int] = None
    reviewer_name: Optional[str] = Field(None, max_length=255)


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    applicant_id: int
    reviewer_name: str

    preference: Optional[int] = None
    pressure: Optional[int] = None
    underserved: Optional[int] = None
    leadership: Optional[int] = None
    academic: Optional[int] = None
    research: Optional[int] = None
    personal: Optional[int] = None

    notes: Optional[str] = None
    decision: Optional[ReviewDecision] = None
    total_score: int = 0

    site_name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReviewWithApplicant(ReviewResponse):
    applicant: Optional[ApplicantResponse] = None


class FinalSelectionCreate(BaseModel):
    applicant_id: Optional[int] = None
    admin_decision: Optional[AdminDecision] = None
    selection_reason: Optional[str] = None


class FinalSelectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    applicant_id: int
    admin_decision: AdminDecision
    selection_reason: Optional[str] = None
    average_score: float = 0.0
    reviewer_count: int = 0
    decided_at: Optional[datetime] = None
    site_name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
