from backend.app.services.distribution_service import (
    assign_applicants,
    assignment_counts,
    compute_distribution,
    get_assignments,
    get_distribution,
)


def _regular(n):
    return [{"id": i, "name": f"applicant-{i}", "category": "regular"} for i in range(n)]


def test_round_robin_by_index():
    applicants = _regular(7)
    result = compute_distribution(applicants, ["A", "B", "C"])

    assert [a["id"] for a in result["A"]] == [0, 3, 6]
    assert [a["id"] for a in result["B"]] == [1, 4]
    assert [a["id"] for a in result["C"]] == [2, 5]


def test_isub_applicants_are_never_distributed():
    applicants = _regular(3) + [{"id": 99, "name": "isub", "category": "i-sub"}]
    result = compute_distribution(applicants, ["A", "B"])

    assigned = [a["id"] for items in result.values() for a in items]
    assert 99 not in assigned
    assert sorted(assigned) == [0, 1, 2]


def test_no_reviewers_gives_empty_map():
    assert compute_distribution(_regular(4), []) == {}


def test_every_reviewer_gets_a_key():
    result = compute_distribution(_regular(1), ["A", "B", "C"])
    assert list(result) == ["A", "B", "C"]
    assert result["B"] == [] and result["C"] == []


def test_distribution_is_deterministic():
    applicants = _regular(11)
    reviewers = [{"name": "A"}, {"name": "B"}, {"name": "C"}, {"name": "D"}]
    assert compute_distribution(applicants, reviewers) == compute_distribution(applicants, reviewers)


def test_get_distribution_orders_applicants_by_name(db_session, add_applicant, add_reviewer):
    add_reviewer("First")
    add_reviewer("Second")
    add_applicant("Charlie")
    add_applicant("Alice")
    add_applicant("Bob")
    add_applicant("Zed", category="i-sub")

    result = get_distribution(db_session)

    assert [a.name for a in result["First"]] == ["Alice", "Charlie"]
    assert [a.name for a in result["Second"]] == ["Bob"]


def test_assign_applicants_is_idempotent(db_session, add_applicant, add_reviewer):
    add_reviewer("First")
    add_reviewer("Second")
    for name in ("Ann", "Ben", "Cat", "Dan", "Eve"):
        add_applicant(name)

    first = assign_applicants(db_session)
    second = assign_applicants(db_session)

    def ids(mapping):
        return {k: [a.id for a in v] for k, v in mapping.items()}

    assert ids(first) == ids(second)
    assert assignment_counts(db_session) == {"First": 3, "Second": 2}


def test_new_applicant_does_not_move_persisted_assignments(db_session, add_applicant, add_reviewer):
    add_reviewer("First")
    add_reviewer("Second")
    add_applicant("Ben")
    add_applicant("Dan")
    assign_applicants(db_session)

    # "Amy" sorts first and would shift the computed round-robin
    add_applicant("Amy")
    persisted = get_assignments(db_session)

    assert [a.name for a in persisted["First"]] == ["Ben"]
    assert [a.name for a in persisted["Second"]] == ["Dan"]
    assert [a.name for a in get_distribution(db_session)["First"]] == ["Amy", "Dan"]


def test_applicant_moved_to_isub_leaves_persisted_assignments(db_session, add_applicant, add_reviewer):
    from backend.app.schemas.applicant import ApplicantUpdate
    from backend.app.services import applicant_service

    add_reviewer("First")
    add_reviewer("Second")
    ann = add_applicant("Ann")
    add_applicant("Ben")
    add_applicant("Cat")
    assign_applicants(db_session)

    applicant_service.update_applicant(db_session, ann.id, ApplicantUpdate(category="i-sub"))
    persisted = get_assignments(db_session)

    assert [a.name for a in persisted["First"]] == ["Cat"]
    assert [a.name for a in persisted["Second"]] == ["Ben"]
    assert assignment_counts(db_session) == {"First": 1, "Second": 1}


def test_deleted_reviewer_drops_out_of_assignments(db_session, add_applicant, add_reviewer):
    from backend.app.models import ReviewAssignment
    from backend.app.services import reviewer_service

    first = add_reviewer("First")
    add_reviewer("Second")
    for name in ("Ann", "Ben", "Cat"):
        add_applicant(name)
    assign_applicants(db_session)

    reviewer_service.delete_reviewer(db_session, first.id)

    assert list(get_assignments(db_session)) == ["Second"]
    assert assignment_counts(db_session) == {"Second": 1}
    assert db_session.query(ReviewAssignment).filter_by(reviewer_name="First").count() == 0


def test_renamed_reviewer_keeps_assignments(db_session, add_applicant, add_reviewer):
    from backend.app.schemas.reviewer import ReviewerUpdate
    from backend.app.services import reviewer_service

    first = add_reviewer("First")
    add_reviewer("Second")
    add_applicant("Ann")
    add_applicant("Ben")
    assign_applicants(db_session)

    reviewer_service.update_reviewer(db_session, first.id, ReviewerUpdate(name="Primary"))
    persisted = get_assignments(db_session)

    assert list(persisted) == ["Primary", "Second"]
    assert [a.name for a in persisted["Primary"]] == ["Ann"]
