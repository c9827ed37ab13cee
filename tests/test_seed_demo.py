from backend.app.models import Applicant, Reviewer
from backend.tools.seed_demo import SAMPLE_APPLICANTS, SAMPLE_REVIEWERS, seed_sample_data


def test_seed_is_idempotent(db_session):
    first = seed_sample_data(db_session)
    second = seed_sample_data(db_session)

    assert first == {"reviewers": len(SAMPLE_REVIEWERS), "applicants": len(SAMPLE_APPLICANTS)}
    assert second == {"reviewers": 0, "applicants": 0}
    assert db_session.query(Reviewer).count() == len(SAMPLE_REVIEWERS)
    assert db_session.query(Applicant).filter_by(category="i-sub").count() == 3


def test_seed_keeps_existing_rows(db_session, add_reviewer):
    add_reviewer("Frank Lowe", email="frank@example.org", is_admin=False)

    created = seed_sample_data(db_session)

    assert created["reviewers"] == len(SAMPLE_REVIEWERS) - 1
    frank = db_session.query(Reviewer).filter_by(name="Frank Lowe").one()
    assert frank.email == "frank@example.org"
