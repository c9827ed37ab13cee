# backend/app/schemas/reviewer.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReviewerCreate(BaseModel):
    name: str = Field(..., max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    is_admin: bool = False


class ReviewerUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    is_admin: Optional[bool] = None


class ReviewerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: Optional[str] = None
    is_admin: bool = False
    site_name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
