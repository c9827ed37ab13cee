# backend/app/api/reviewers.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.database import get_db
from backend.app.schemas import ReviewerCreate, ReviewerResponse, ReviewerUpdate, success
from backend.app.services import reviewer_service

router = APIRouter()


def _dump(reviewer) -> dict:
    return ReviewerResponse.model_validate(reviewer).model_dump(mode="json")


@router.get("")
def list_reviewers(db: Session = Depends(get_db)):
    return success([_dump(r) for r in reviewer_service.list_reviewers(db)])


@router.get("/admins")
def list_admin_reviewers(db: Session = Depends(get_db)):
    return success([_dump(r) for r in reviewer_service.list_reviewers(db, admins_only=True)])


@router.get("/{reviewer_id}")
def get_reviewer(reviewer_id: int, db: Session = Depends(get_db)):
    return success(_dump(reviewer_service.require_reviewer(db, reviewer_id)))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_reviewer(payload: ReviewerCreate, db: Session = Depends(get_db)):
    return success(_dump(reviewer_service.create_reviewer(db, payload)))


@router.put("/{reviewer_id}")
def update_reviewer(reviewer_id: int, payload: ReviewerUpdate, db: Session = Depends(get_db)):
    return success(_dump(reviewer_service.update_reviewer(db, reviewer_id, payload)))


@router.delete("/{reviewer_id}")
def delete_reviewer(reviewer_id: int, db: Session = Depends(get_db)):
    reviewer_service.delete_reviewer(db, reviewer_id)
    return success(message=f"Reviewer {reviewer_id} deleted")
