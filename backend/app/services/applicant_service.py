from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.app.config import settings
from backend.app.errors import ConflictError, NotFoundError, ValidationError
from backend.app.models import Applicant, ApplicantCategory
from backend.app.schemas.applicant import ApplicantCreate, ApplicantUpdate

logger = logging.getLogger(__name__)


def _query(db: Session):
    return db.query(Applicant).filter(Applicant.site_name == settings.SITE_NAME)


def list_applicants(db: Session, category: Optional[ApplicantCategory | str] = None) -> List[Applicant]:
    query = _query(db)
    if category is not None:
        value = category.value if isinstance(category, ApplicantCategory) else str(category)
        query = query.filter(Applicant.category == value)
    return query.order_by(Applicant.name, Applicant.id).all()


def get_applicant(db: Session, applicant_id: int) -> Optional[Applicant]:
    return _query(db).filter(Applicant.id == applicant_id).first()


def get_applicant_by_external_id(db: Session, external_id: str) -> Optional[Applicant]:
    return _query(db).filter(Applicant.external_id == external_id).first()


def require_applicant(db: Session, applicant_id: int) -> Applicant:
    applicant = get_applicant(db, applicant_id)
    if applicant is None:
        raise NotFoundError("Applicant", f"No applicant found with ID: {applicant_id}")
    return applicant


def _validate_new(payload: ApplicantCreate) -> None:
    if not payload.external_id.strip() or not payload.name.strip():
        raise ValidationError("external_id and name are required")


def _build(payload: ApplicantCreate) -> Applicant:
    return Applicant(
        external_id=payload.external_id.strip(),
        name=payload.name.strip(),
        category=ApplicantCategory(payload.category.value).value,
        details=payload.details,
        site_name=settings.SITE_NAME,
    )


def create_applicant(db: Session, payload: ApplicantCreate) -> Applicant:
    _validate_new(payload)
    if get_applicant_by_external_id(db, payload.external_id.strip()) is not None:
        raise ConflictError(f"Applicant with external ID {payload.external_id} already exists")

    applicant = _build(payload)
    db.add(applicant)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(f"Applicant with external ID {payload.external_id} already exists") from exc
    logger.info("Created applicant %s (%s)", applicant.external_id, applicant.category)
    return applicant


def batch_create_applicants(db: Session, payloads: Iterable[ApplicantCreate]) -> List[Applicant]:
    items = list(payloads)
    if not items:
        raise ValidationError("applicants array is required and must not be empty")
    for payload in items:
        if not payload.external_id.strip() or not payload.name.strip():
            raise ValidationError("Each applicant must have external_id and name")

    external_ids = [p.external_id.strip() for p in items]
    duplicated = sorted({x for x in external_ids if external_ids.count(x) > 1})
    if duplicated:
        raise ValidationError(f"Duplicate external IDs in batch: {', '.join(duplicated)}")

    existing = (
        _query(db).filter(Applicant.external_id.in_(external_ids)).with_entities(Applicant.external_id).all()
    )
    if existing:
        taken = ", ".join(sorted(row[0] for row in existing))
        raise ConflictError(f"Applicants already exist with external IDs: {taken}")

    applicants = [_build(p) for p in items]
    db.add_all(applicants)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("One or more applicants already exist") from exc
    logger.info("Batch created %d applicants", len(applicants))
    return applicants


def update_applicant(db: Session, applicant_id: int, payload: ApplicantUpdate) -> Applicant:
    applicant = require_applicant(db, applicant_id)
    changes = payload.model_dump(exclude_unset=True)

    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("name must not be empty", field="name")
        applicant.name = name
    if "category" in changes:
        if changes["category"] is None:
            raise ValidationError("category must be 'regular' or 'i-sub'", field="category")
        applicant.category = ApplicantCategory(changes["category"]).value
    if "details" in changes:
        applicant.details = changes["details"]

    db.commit()
    return applicant


def delete_applicant(db: Session, applicant_id: int) -> None:
    applicant = require_applicant(db, applicant_id)
    db.delete(applicant)
    db.commit()
    logger.info("Deleted applicant %s with its reviews and final selection", applicant_id)
