# backend/app/api/progress.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from backend.app.database import get_db
from backend.app.schemas import success
from backend.app.services import progress_service

router = APIRouter()


def _camel(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)


@router.get("")
def get_complete_progress(db: Session = Depends(get_db)):
    return success(_camel(progress_service.get_complete_progress(db)))


@router.get("/overall")
def get_overall_progress(db: Session = Depends(get_db)):
    return success(_camel(progress_service.get_overall_progress(db)))


@router.get("/by-reviewer")
def get_progress_by_reviewer(db: Session = Depends(get_db)):
    return success([_camel(s) for s in progress_service.get_progress_by_reviewer(db)])


@router.get("/reviewer/{name}")
def get_reviewer_progress(name: str, db: Session = Depends(get_db)):
    return success(_camel(progress_service.get_reviewer_progress(db, name)))


@router.get("/dashboard")
def get_dashboard_summary(db: Session = Depends(get_db)):
    return success(_camel(progress_service.get_dashboard_summary(db)))


@router.get("/export/csv")
def export_progress_csv(db: Session = Depends(get_db)):
    filename = f"review-progress-{datetime.now(timezone.utc):%Y-%m-%d}.csv"
    return Response(
        content=progress_service.export_progress_csv(db),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/applicants-needing-reviews")
def get_applicants_needing_reviews(db: Session = Depends(get_db)):
    applicants = progress_service.get_applicants_needing_reviews(db)
    return success([a.model_dump(mode="json") for a in applicants], count=len(applicants))


@router.get("/stats")
def get_detailed_stats(db: Session = Depends(get_db)):
    return success(_camel(progress_service.get_detailed_stats(db)))
