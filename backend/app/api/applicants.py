# backend/app/api/applicants.py
from __future__ import annotations

from typing import Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.database import get_db
from backend.app.errors import NotFoundError
from backend.app.models import Applicant, ApplicantCategory
from backend.app.schemas import (
    ApplicantBatchCreate,
    ApplicantCreate,
    ApplicantResponse,
    ApplicantUpdate,
    success,
)
from backend.app.services import applicant_service, distribution_service

router = APIRouter()


def _dump(applicant: Applicant) -> dict:
    return ApplicantResponse.model_validate(applicant).model_dump(mode="json")


def _dump_many(applicants: List[Applicant]) -> List[dict]:
    return [_dump(a) for a in applicants]


def _dump_distribution(distribution: Dict[str, List[Applicant]]) -> Dict[str, List[dict]]:
    return {name: _dump_many(items) for name, items in distribution.items()}


@router.get("")
def list_applicants(db: Session = Depends(get_db)):
    return success(_dump_many(applicant_service.list_applicants(db)))


@router.get("/regular")
def list_regular_applicants(db: Session = Depends(get_db)):
    return success(_dump_many(applicant_service.list_applicants(db, ApplicantCategory.REGULAR)))


@router.get("/i-sub")
def list_isub_applicants(db: Session = Depends(get_db)):
    return success(_dump_many(applicant_service.list_applicants(db, ApplicantCategory.I_SUB)))


@router.get("/distribution")
def get_distribution(db: Session = Depends(get_db)):
    """Regular applicants spread round-robin over the reviewers (computed, not stored)."""
    return success(_dump_distribution(distribution_service.get_distribution(db)))


@router.post("/distribution")
def assign_applicants(db: Session = Depends(get_db)):
    return success(_dump_distribution(distribution_service.assign_applicants(db)))


@router.get("/assignments")
def get_assignments(db: Session = Depends(get_db)):
    return success(_dump_distribution(distribution_service.get_assignments(db)))


@router.get("/external/{external_id}")
def get_applicant_by_external_id(external_id: str, db: Session = Depends(get_db)):
    applicant = applicant_service.get_applicant_by_external_id(db, external_id)
    if applicant is None:
        raise NotFoundError("Applicant", f"No applicant found with external ID: {external_id}")
    return success(_dump(applicant))


@router.get("/{applicant_id}")
def get_applicant(applicant_id: int, db: Session = Depends(get_db)):
    return success(_dump(applicant_service.require_applicant(db, applicant_id)))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_applicant(payload: ApplicantCreate, db: Session = Depends(get_db)):
    return success(_dump(applicant_service.create_applicant(db, payload)))


@router.post("/batch", status_code=status.HTTP_201_CREATED)
def batch_create_applicants(payload: ApplicantBatchCreate, db: Session = Depends(get_db)):
    created = applicant_service.batch_create_applicants(db, payload.applicants)
    return success(_dump_many(created), count=len(created))


@router.put("/{applicant_id}")
def update_applicant(applicant_id: int, payload: ApplicantUpdate, db: Session = Depends(get_db)):
    return success(_dump(applicant_service.update_applicant(db, applicant_id, payload)))


@router.delete("/{applicant_id}")
def delete_applicant(applicant_id: int, db: Session = Depends(get_db)):
    applicant_service.delete_applicant(db, applicant_id)
    return success(message=f"Applicant {applicant_id} deleted")
