import pytest
from sqlalchemy.exc import OperationalError

from backend.app.errors import ConflictError, InvalidScoreError, NotFoundError, ValidationError
from backend.app.models import FinalSelection, Review, compute_total_score
from backend.app.services import review_service

FULL_SCORES = {
    "preference": 4,
    "pressure": 3,
    "underserved": 5,
    "leadership": 4,
    "academic": 5,
    "research": 3,
    "personal": 4,
}
LOW_SCORES = {field: 3 for field in FULL_SCORES}
LOW_SCORES["preference"] = 2  # total 20


def _selection(db, applicant_id):
    db.expire_all()
    return db.query(FinalSelection).filter_by(applicant_id=applicant_id).one()


def test_total_score_sums_subscores():
    assert compute_total_score(FULL_SCORES) == 28


def test_total_score_treats_missing_as_zero():
    assert compute_total_score({"preference": 5, "pressure": None}) == 5
    assert compute_total_score({}) == 0


def test_upsert_creates_then_patches(db_session, add_applicant):
    applicant = add_applicant("Shawn Alex")

    review = review_service.upsert_review(db_session, applicant.id, "Frank Lowe", {"preference": 4})
    assert review.total_score == 4
    assert review.decision is None

    review = review_service.upsert_review(
        db_session, applicant.id, "Frank Lowe", {**FULL_SCORES, "decision": "Definitely Interview"}
    )
    assert review.total_score == 28
    assert review.is_complete
    assert db_session.query(Review).count() == 1


def test_upsert_only_touches_sent_fields(db_session, add_applicant):
    applicant = add_applicant("Ryan Antar")
    review_service.upsert_review(db_session, applicant.id, "Amanda North", {**FULL_SCORES, "notes": "strong"})

    review = review_service.upsert_review(db_session, applicant.id, "Amanda North", {"research": None})

    assert review.notes == "strong"
    assert review.preference == 4
    assert review.research is None
    assert review.total_score == 25


def test_upsert_twice_with_same_update_is_stable(db_session, add_applicant):
    applicant = add_applicant("Grace Khaner")
    update = {**FULL_SCORES, "decision": "Maybe"}

    first = review_service.upsert_review(db_session, applicant.id, "Matt Danzig", update)
    snapshot = first.scores(), first.total_score, first.decision
    second = review_service.upsert_review(db_session, applicant.id, "Matt Danzig", update)

    assert (second.scores(), second.total_score, second.decision) == snapshot
    assert db_session.query(Review).count() == 1


@pytest.mark.parametrize("value", [0, 6, 2.5, "4", True])
def test_invalid_scores_are_rejected(value):
    with pytest.raises(InvalidScoreError) as exc_info:
        review_service.validate_scores({"pressure": value})
    assert exc_info.value.field == "pressure"


def test_invalid_score_leaves_no_row(db_session, add_applicant):
    applicant = add_applicant("Nkiru Anigbogu")

    with pytest.raises(InvalidScoreError):
        review_service.upsert_review(db_session, applicant.id, "Stephen Reese", {**FULL_SCORES, "pressure": 6})

    assert db_session.query(Review).count() == 0


def test_invalid_score_does_not_modify_existing_review(db_session, add_applicant):
    applicant = add_applicant("Nkiru Anigbogu")
    review_service.upsert_review(db_session, applicant.id, "Stephen Reese", FULL_SCORES)

    with pytest.raises(InvalidScoreError):
        review_service.upsert_review(db_session, applicant.id, "Stephen Reese", {"preference": 1, "pressure": 6})

    db_session.expire_all()
    review = review_service.get_review(db_session, applicant.id, "Stephen Reese")
    assert review.preference == 4
    assert review.total_score == 28


def test_unknown_decision_is_rejected():
    with pytest.raises(ValidationError):
        review_service.validate_scores({"decision": "Absolutely"})


def test_average_over_two_reviews(db_session, add_applicant):
    applicant = add_applicant("Jared Benjamin")
    review_service.upsert_review(db_session, applicant.id, "Michael Lipsky", FULL_SCORES)
    review_service.upsert_review(db_session, applicant.id, "Miriam Harel", LOW_SCORES)

    selection = _selection(db_session, applicant.id)
    assert selection.average_score == pytest.approx(24.0)
    assert selection.reviewer_count == 2
    assert selection.admin_decision == "Pending"


def test_delete_review_recomputes_average(db_session, add_applicant):
    applicant = add_applicant("Jared Benjamin")
    review_service.upsert_review(db_session, applicant.id, "Michael Lipsky", FULL_SCORES)
    review_service.upsert_review(db_session, applicant.id, "Miriam Harel", LOW_SCORES)

    review_service.delete_review(db_session, applicant.id, "Michael Lipsky")

    selection = _selection(db_session, applicant.id)
    assert selection.average_score == pytest.approx(20.0)
    assert selection.reviewer_count == 1


def test_deleting_last_review_keeps_zeroed_selection(db_session, add_applicant):
    applicant = add_applicant("Rachel Bernardo")
    review_service.upsert_review(db_session, applicant.id, "Michael Lipsky", FULL_SCORES)
    review_service.delete_review(db_session, applicant.id, "Michael Lipsky")

    selection = _selection(db_session, applicant.id)
    assert selection.average_score == 0
    assert selection.reviewer_count == 0


def test_average_is_rounded_to_two_decimals(db_session, add_applicant):
    applicant = add_applicant("Parker Blasdel")
    review_service.upsert_review(db_session, applicant.id, "A", {"preference": 5})
    review_service.upsert_review(db_session, applicant.id, "B", {"preference": 5})
    review_service.upsert_review(db_session, applicant.id, "C", {"preference": 4})

    assert _selection(db_session, applicant.id).average_score == pytest.approx(4.67)


def test_recompute_failure_does_not_fail_review_write(db_session, add_applicant, monkeypatch, caplog):
    applicant = add_applicant("Diego Alvarez Vega")

    def broken_stats(db, applicant_id):
        raise OperationalError("SELECT total_score", {}, Exception("connection lost"))

    monkeypatch.setattr(review_service, "_review_stats", broken_stats)

    review = review_service.upsert_review(db_session, applicant.id, "Nitya Abraham", FULL_SCORES)

    assert review.total_score == 28
    assert db_session.query(Review).count() == 1
    assert db_session.query(FinalSelection).count() == 0
    assert "final selection stats are stale" in caplog.text


def test_refresh_reports_failure(db_session, add_applicant, monkeypatch):
    applicant = add_applicant("Mariya Antonyuk")

    def broken_stats(db, applicant_id):
        raise OperationalError("SELECT total_score", {}, Exception("timeout"))

    monkeypatch.setattr(review_service, "_review_stats", broken_stats)

    result = review_service.refresh_final_selection_stats(db_session, applicant.id)
    assert not result.ok
    assert "timeout" in result.error


def test_create_review_conflict(db_session, add_applicant):
    applicant = add_applicant("Richard Berman")
    review_service.create_review(db_session, applicant.id, "Frank Lowe", {"preference": 3})

    with pytest.raises(ConflictError):
        review_service.create_review(db_session, applicant.id, "Frank Lowe", {"preference": 5})


def test_create_review_requires_identity(db_session):
    with pytest.raises(ValidationError):
        review_service.create_review(db_session, None, "Frank Lowe", {})
    with pytest.raises(ValidationError):
        review_service.create_review(db_session, 1, "  ", {})


def test_create_review_for_missing_applicant(db_session):
    with pytest.raises(NotFoundError):
        review_service.create_review(db_session, 12345, "Frank Lowe", {})


def test_update_and_delete_missing_review(db_session, add_applicant):
    applicant = add_applicant("Fernando Bomfim")
    with pytest.raises(NotFoundError):
        review_service.update_review(db_session, applicant.id, "Nobody", {"preference": 3})
    with pytest.raises(NotFoundError):
        review_service.delete_review(db_session, applicant.id, "Nobody")


def test_final_selection_decided_at(db_session, add_applicant):
    applicant = add_applicant("Juan Arroyave Villada")
    review_service.upsert_review(db_session, applicant.id, "Frank Lowe", FULL_SCORES)

    selection = review_service.upsert_final_selection(db_session, applicant.id, "Selected", "top of list")
    assert selection.admin_decision == "Selected"
    assert selection.decided_at is not None
    assert selection.average_score == pytest.approx(28.0)

    selection = review_service.upsert_final_selection(db_session, applicant.id, "Pending")
    assert selection.decided_at is None


def test_final_selection_validation(db_session, add_applicant):
    applicant = add_applicant("Matthew Antonellis")
    with pytest.raises(ValidationError):
        review_service.upsert_final_selection(db_session, applicant.id, None)
    with pytest.raises(ValidationError):
        review_service.upsert_final_selection(db_session, applicant.id, "Waitlisted")
    with pytest.raises(NotFoundError):
        review_service.upsert_final_selection(db_session, 999, "Selected")


def test_final_selections_ordered_by_average(db_session, add_applicant):
    low = add_applicant("Low")
    high = add_applicant("High")
    review_service.upsert_review(db_session, low.id, "Frank Lowe", LOW_SCORES)
    review_service.upsert_review(db_session, high.id, "Frank Lowe", FULL_SCORES)

    ordered = review_service.list_final_selections(db_session)
    assert [s.applicant_id for s in ordered] == [high.id, low.id]


def test_applicant_delete_cascades(db_session, add_applicant):
    from backend.app.services.applicant_service import delete_applicant

    applicant = add_applicant("Tyler Bergeron", category="i-sub")
    review_service.upsert_review(db_session, applicant.id, "Frank Lowe", FULL_SCORES)

    delete_applicant(db_session, applicant.id)

    assert db_session.query(Review).count() == 0
    assert db_session.query(FinalSelection).count() == 0


def test_upsert_patches_row_inserted_by_concurrent_first_save(db_session, session_factory, add_applicant,
                                                             monkeypatch):
    applicant = add_applicant("Jared Benjamin")
    other = session_factory()
    review_service.upsert_review(other, applicant.id, "Nitya Abraham", FULL_SCORES)
    other.close()

    real_get_review = review_service.get_review
    calls = []

    def stale_first_lookup(db, applicant_id, reviewer_name):
        calls.append(reviewer_name)
        if len(calls) == 1:
            return None
        return real_get_review(db, applicant_id, reviewer_name)

    monkeypatch.setattr(review_service, "get_review", stale_first_lookup)
    review = review_service.upsert_review(db_session, applicant.id, "Nitya Abraham", {"research": 5})

    assert review.research == 5
    assert review.total_score == 30
    assert db_session.query(Review).count() == 1
    assert _selection(db_session, applicant.id).average_score == 30


def test_empty_first_save_is_rejected(db_session, add_applicant):
    applicant = add_applicant("Parker Blasdel")

    with pytest.raises(ValidationError):
        review_service.upsert_review(db_session, applicant.id, "Miriam Harel", {})

    assert db_session.query(Review).count() == 0
    assert db_session.query(FinalSelection).count() == 0


def test_empty_update_returns_existing_review(db_session, add_applicant):
    applicant = add_applicant("Parker Blasdel")
    saved = review_service.upsert_review(db_session, applicant.id, "Miriam Harel", {**FULL_SCORES, "notes": "ok"})

    review = review_service.upsert_review(db_session, applicant.id, "Miriam Harel", {})

    assert review.id == saved.id
    assert review.total_score == 28
    assert review.notes == "ok"
    assert db_session.query(Review).count() == 1
