from datetime import datetime, timezone

import pytest

from taskpulse.exceptions import ValidationError
from taskpulse.models import Role
from taskpulse.repositories import EntityStore
from taskpulse.services.validation import ReferenceValidator


@pytest.fixture
def validator(db):
    return ReferenceValidator(EntityStore(db))


def test_missing_reference_names_the_field(validator):
    with pytest.raises(ValidationError) as exc:
        validator.require_user("nope", "manager_id")
    assert exc.value.field == "manager_id"

    with pytest.raises(ValidationError) as exc:
        validator.require_department("nope", "department_id")
    assert exc.value.field == "department_id"

    with pytest.raises(ValidationError) as exc:
        validator.require_project("nope", "project_id")
    assert exc.value.field == "project_id"


def test_existing_references_resolve(validator, make_user, make_department):
    manager = make_user(Role.MANAGER)
    department = make_department(manager)
    assert validator.require_user(manager.id, "manager_id").id == manager.id
    assert validator.require_department(department.id).id == department.id


def test_user_lists_must_be_distinct_and_resolvable(validator, make_user):
    a, b = make_user(), make_user()
    assert {u.id for u in validator.require_users([a.id, b.id], "team")} == {a.id, b.id}

    with pytest.raises(ValidationError, match="duplicate"):
        validator.require_users([a.id, a.id], "team")
    with pytest.raises(ValidationError, match="ghost"):
        validator.require_users([a.id, "ghost"], "team")


def test_date_range():
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    validator = ReferenceValidator(store=None)
    validator.check_date_range(start, datetime(2026, 1, 2, tzinfo=timezone.utc))
    with pytest.raises(ValidationError):
        validator.check_date_range(start, start)
    # naive values (as SQLite returns them) compare as UTC
    with pytest.raises(ValidationError):
        validator.check_date_range(datetime(2026, 1, 5), datetime(2026, 1, 1, tzinfo=timezone.utc))


def test_dependency_cycles_are_rejected(validator, make_user, make_task):
    manager, employee = make_user(Role.MANAGER), make_user()
    first = make_task(manager, employee, title="first")
    second = make_task(manager, employee, title="second", dependencies=[first])
    third = make_task(manager, employee, title="third", dependencies=[second])

    with pytest.raises(ValidationError, match="itself"):
        validator.check_no_cycle(first.id, [first.id])
    with pytest.raises(ValidationError, match="cycle"):
        validator.check_no_cycle(first.id, [third.id])
    validator.check_no_cycle(third.id, [first.id])


def test_membership_results():
    ReferenceValidator.require_added(True, "user_id", "u1")
    ReferenceValidator.require_removed(True, "user_id", "u1")
    with pytest.raises(ValidationError, match="already a member"):
        ReferenceValidator.require_added(False, "user_id", "u1")
    with pytest.raises(ValidationError, match="not a member"):
        ReferenceValidator.require_removed(False, "user_id", "u1")
