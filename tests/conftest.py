"""Shared fixtures for the timetable builder tests."""

import pytest

from equivalence import EquivalenceResolver, get_rule
from store import SnapshotFile, TimetableStore


def make_store(rule_name: str = "prefix", storage=None) -> TimetableStore:
    return TimetableStore(resolver=EquivalenceResolver(get_rule(rule_name)), storage=storage)


def assert_store_invariants(store: TimetableStore) -> None:
    """Every course owns exactly the assignment keys carrying its code, and none is empty."""
    assignments = store.assignments
    for course in store.courses:
        owned = {code for code, a in assignments.items() if a.course_code == course.code}
        assert course.slots, f"empty course {course.code} left behind"
        assert set(course.slots) == owned
        for code in course.slots:
            a = assignments[code]
            assert (a.course_name, a.professor_name, a.color_tag) == (
                course.name, course.professor, course.color,
            )
    course_codes = {c.code for c in store.courses}
    assert {a.course_code for a in assignments.values()} <= course_codes


@pytest.fixture
def prefix_store() -> TimetableStore:
    return make_store("prefix")


@pytest.fixture
def independent_store() -> TimetableStore:
    return make_store("independent")


@pytest.fixture
def combination_store() -> TimetableStore:
    return make_store("combination")


@pytest.fixture
def snapshot_file(tmp_path) -> SnapshotFile:
    return SnapshotFile(str(tmp_path / "timetable.json"))
