# tools/seed_demo.py
"""Seed the configured site with sample reviewers and applicants.

Safe to run repeatedly: rows that already exist (by reviewer name or applicant
external ID) are left alone.

    python -m backend.tools.seed_demo
"""
import logging

from sqlalchemy.orm import Session

from backend.app.config import settings
from backend.app.database import get_db_session
from backend.app.models import Applicant, ApplicantCategory, Reviewer

logger = logging.getLogger(__name__)

SAMPLE_REVIEWERS = [
    ("Michael Lipsky", "mlipsky@hospital.edu", False),
    ("Miriam Harel", "mharel@hospital.edu", False),
    ("Jillian Donnelly", "jdonnelly@hospital.edu", False),
    ("Stephen Reese", "sreese@hospital.edu", False),
    ("Dima Raskolnikov", "draskolnikov@hospital.edu", False),
    ("Matt Danzig", "mdanzig@hospital.edu", False),
    ("Frank Lowe", "flowe@hospital.edu", True),
    ("Nitya Abraham", "nabraham@hospital.edu", False),
    ("Amanda North", "anorth@hospital.edu", False),
]

SAMPLE_APPLICANTS = [
    ("15469503", "Tyler Bergeron", ApplicantCategory.I_SUB),
    ("15467447", "David Hanelin", ApplicantCategory.I_SUB),
    ("15254686", "Grace Khaner", ApplicantCategory.I_SUB),
    ("14384852", "Shawn Alex", ApplicantCategory.REGULAR),
    ("15474804", "Diego Alvarez Vega", ApplicantCategory.REGULAR),
    ("15355716", "Nkiru Anigbogu", ApplicantCategory.REGULAR),
    ("15189920", "Ryan Antar", ApplicantCategory.REGULAR),
    ("14277647", "Matthew Antonellis", ApplicantCategory.REGULAR),
    ("15839653", "Mariya Antonyuk", ApplicantCategory.REGULAR),
    ("15321399", "Juan Arroyave Villada", ApplicantCategory.REGULAR),
    ("15363098", "Jared Benjamin", ApplicantCategory.REGULAR),
    ("14803322", "Richard Berman", ApplicantCategory.REGULAR),
    ("15115380", "Rachel Bernardo", ApplicantCategory.REGULAR),
    ("15276217", "Parker Blasdel", ApplicantCategory.REGULAR),
]


def seed_sample_data(db: Session) -> dict:
    """Insert the missing sample rows; returns how many of each were created."""
    site = settings.SITE_NAME

    known_reviewers = {
        name for (name,) in db.query(Reviewer.name).filter(Reviewer.site_name == site)
    }
    new_reviewers = [
        Reviewer(name=name, email=email, is_admin=is_admin, site_name=site)
        for name, email, is_admin in SAMPLE_REVIEWERS
        if name not in known_reviewers
    ]

    known_applicants = {
        ext for (ext,) in db.query(Applicant.external_id).filter(Applicant.site_name == site)
    }
    new_applicants = [
        Applicant(external_id=ext, name=name, category=category.value, site_name=site)
        for ext, name, category in SAMPLE_APPLICANTS
        if ext not in known_applicants
    ]

    db.add_all(new_reviewers + new_applicants)
    db.commit()
    logger.info(
        "Seeded site %s: %d reviewers, %d applicants",
        site, len(new_reviewers), len(new_applicants),
    )
    return {"reviewers": len(new_reviewers), "applicants": len(new_applicants)}


def main():
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    with get_db_session() as s:
        created = seed_sample_data(s)
    print("Seed OK:", created)


if __name__ == "__main__":
    main()
