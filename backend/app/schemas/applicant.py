# backend/app/schemas/applicant.py
"""Pydantic v2 schemas for applicants and the distribution map"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApplicantCategory(str, Enum):
    REGULAR = "regular"
    I_SUB = "i-sub"


class ApplicantCreate(BaseModel):
    external_id: str = Field(..., max_length=100)
    name: str = Field(..., max_length=255)
    category: ApplicantCategory = ApplicantCategory.REGULAR
    details: Optional[str] = None


class ApplicantUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    category: Optional[ApplicantCategory] = None
    details: Optional[str] = None


class ApplicantBatchCreate(BaseModel):
    applicants: List[ApplicantCreate]


class ApplicantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    external_id: str
    name: str
    category: ApplicantCategory
    details: Optional[str] = None
    site_name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ApplicantNeedingReview(ApplicantResponse):
    review_count: int = 0
    admin_decision: Optional[str] = None


# reviewer name -> applicants assigned to that reviewer
Distribution = Dict[str, List[ApplicantResponse]]
