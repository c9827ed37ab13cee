# backend/app/api/reviews.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.database import get_db
from backend.app.schemas import (
    FinalSelectionCreate,
    FinalSelectionResponse,
    ReviewCreate,
    ReviewResponse,
    ReviewUpdate,
    ReviewWithApplicant,
    success,
)
from backend.app.services import review_service

router = APIRouter()

_IDENTITY_FIELDS = {"applicant_id", "reviewer_name"}


def _dump(review, schema=ReviewResponse) -> dict:
    return schema.model_validate(review).model_dump(mode="json")


def _dump_selection(selection) -> dict:
    return FinalSelectionResponse.model_validate(selection).model_dump(mode="json")


def _changes(payload: ReviewUpdate) -> dict:
    # only what the client actually sent; an explicit null clears the field
    return payload.model_dump(exclude_unset=True, exclude=_IDENTITY_FIELDS)


@router.get("")
def list_reviews(
    applicant_id: Optional[int] = None,
    reviewer_name: Optional[str] = None,
    db: Session = Depends(get_db),
):
    if applicant_id is not None and reviewer_name:
        return success(_dump(review_service.require_review(db, applicant_id, reviewer_name)))
    if applicant_id is not None:
        return success([_dump(r) for r in review_service.list_reviews_for_applicant(db, applicant_id)])
    if reviewer_name:
        return success([_dump(r) for r in review_service.list_reviews_by_reviewer(db, reviewer_name)])
    return success([_dump(r, ReviewWithApplicant) for r in review_service.list_reviews(db)])


# --- final selections (declared before the /{applicant_id}/{reviewer_name} routes) ---

@router.get("/final-selections")
def list_final_selections(db: Session = Depends(get_db)):
    return success([_dump_selection(s) for s in review_service.list_final_selections(db)])


@router.get("/final-selections/{applicant_id}")
def get_final_selection(applicant_id: int, db: Session = Depends(get_db)):
    return success(_dump_selection(review_service.require_final_selection(db, applicant_id)))


@router.post("/final-selections", status_code=status.HTTP_201_CREATED)
def upsert_final_selection(payload: FinalSelectionCreate, db: Session = Depends(get_db)):
    selection = review_service.upsert_final_selection(
        db, payload.applicant_id, payload.admin_decision, payload.selection_reason
    )
    return success(_dump_selection(selection))


# --- reviews ---

@router.get("/applicant/{applicant_id}")
def list_reviews_for_applicant(applicant_id: int, db: Session = Depends(get_db)):
    return success([_dump(r) for r in review_service.list_reviews_for_applicant(db, applicant_id)])


@router.get("/reviewer/{reviewer_name}")
def list_reviews_by_reviewer(reviewer_name: str, db: Session = Depends(get_db)):
    return success([_dump(r) for r in review_service.list_reviews_by_reviewer(db, reviewer_name)])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_review(payload: ReviewCreate, db: Session = Depends(get_db)):
    review = review_service.create_review(db, payload.applicant_id, payload.reviewer_name, _changes(payload))
    return success(_dump(review))


@router.put("/{applicant_id}/{reviewer_name}")
def update_review(applicant_id: int, reviewer_name: str, payload: ReviewUpdate, db: Session = Depends(get_db)):
    review = review_service.update_review(db, applicant_id, reviewer_name, _changes(payload))
    return success(_dump(review))


@router.patch("/{applicant_id}/{reviewer_name}")
def upsert_review(applicant_id: int, reviewer_name: str, payload: ReviewUpdate, db: Session = Depends(get_db)):
    """Create the review on first save, patch it afterwards."""
    review = review_service.upsert_review(db, applicant_id, reviewer_name, _changes(payload))
    return success(_dump(review))


@router.delete("/{applicant_id}/{reviewer_name}")
def delete_review(applicant_id: int, reviewer_name: str, db: Session = Depends(get_db)):
    review_service.delete_review(db, applicant_id, reviewer_name)
    return success(message=f"Review of applicant {applicant_id} by {reviewer_name} deleted")
