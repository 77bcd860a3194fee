from types import SimpleNamespace

import pytest

from services.aggregates import (
    apply_aggregates, compute_aggregates, describe_entries, normalize_absent, subject_outcome,
    validate_entries,
)
from services.evaluation import ResultStatus
from services.exceptions import MarksValidationError


def test_aggregate_totals(make_entry):
    entries = [
        make_entry("ENG", 50, 20, 40),
        make_entry("ENG", 50, 20, 32.5),
        make_entry("MATH", 100, 33, 72.5),
    ]
    aggregate = compute_aggregates(entries)

    assert aggregate.total_marks == 200
    assert aggregate.total_obtained_marks == 145
    assert aggregate.percentage == 72.5
    assert aggregate.grade == "B"
    assert aggregate.result == ResultStatus.PASS


def test_percentage_rounded_to_two_places(make_entry):
    aggregate = compute_aggregates([make_entry("MATH", 300, 99, 200)])
    assert aggregate.percentage == 66.67


def test_unset_marks_count_zero_and_result_pending(make_entry):
    aggregate = compute_aggregates([make_entry("MATH", 100, 33, 80), make_entry("SCI", 100, 33)])

    assert aggregate.total_obtained_marks == 80
    assert aggregate.percentage == 40.0
    assert aggregate.result == ResultStatus.PENDING


def test_grouped_failure_in_aggregate(make_entry):
    aggregate = compute_aggregates([make_entry("ENG", 50, 20, 25), make_entry("ENG", 50, 20, 10)])

    assert aggregate.result == ResultStatus.FAIL
    # member rows still report their own pass mark
    assert [s.remarks for s in aggregate.subjects] == ["Pass", "Fail"]


def test_empty_subject_list(make_entry):
    aggregate = compute_aggregates([])

    assert aggregate.total_marks == 0
    assert aggregate.percentage == 0.0
    assert aggregate.result == ResultStatus.PENDING


def test_out_of_range_marks_are_rejected_not_clamped(make_entry):
    entries = [make_entry("MATH", 100, 33, 120), make_entry("SCI", 100, 33, -1)]

    with pytest.raises(MarksValidationError) as exc:
        compute_aggregates(entries)

    errors = exc.value.as_list()
    assert [e["index"] for e in errors] == [0, 1]
    assert all(e["field"] == "obtained_marks" for e in errors)
    assert entries[0].obtained_marks == 120


def test_validation_reports_every_bad_entry(make_entry):
    entries = [
        make_entry("A", 0, 0, 0),
        make_entry("B", 50, 60, 10),
        make_entry("C", 50, -1, 10),
        make_entry("D", 50, 20, 10),
    ]
    errors = validate_entries(entries)

    assert [(e.index, e.field) for e in errors] == [
        (0, "total_marks"),
        (1, "passing_marks"),
        (2, "passing_marks"),
    ]


def test_subject_outcome_grades():
    row = SimpleNamespace(total_marks=50, passing_marks=20, obtained_marks=45, remarks="")
    assert subject_outcome(row).grade == "A+"
    assert subject_outcome(row).remarks == "Pass"

    row.obtained_marks = 0
    outcome = subject_outcome(row)
    assert outcome.grade == ""
    assert outcome.remarks == "Fail"
    assert outcome.is_passed is False


def test_subject_outcome_pending_and_absent():
    row = SimpleNamespace(total_marks=50, passing_marks=20, obtained_marks=None, remarks="")
    assert subject_outcome(row).remarks == "Pending"

    row.obtained_marks = 0
    row.remarks = "Absent"
    outcome = subject_outcome(row)
    assert outcome.remarks == "Absent"
    assert outcome.is_passed is False


def test_absent_without_marks_is_normalised_to_zero():
    assert normalize_absent(None, "Absent") == (0.0, "Absent")
    assert normalize_absent(12, "Absent") == (12, "Absent")
    assert normalize_absent(None, None) == (None, "")
    assert normalize_absent(None, "Pass") == (None, "Pass")


def test_apply_aggregates_writes_fields(make_entry):
    result = SimpleNamespace(
        id=1, position=4,
        subjects=[make_entry("ENG", 50, 20, 25), make_entry("ENG", 50, 20, 10), make_entry("MATH", 100, 33, 90)],
    )
    apply_aggregates(result)

    assert result.total_marks == 200
    assert result.total_obtained_marks == 125
    assert result.percentage == 62.5
    assert result.grade == "C"
    assert result.result == "Fail"
    assert [s.grade for s in result.subjects] == ["D", "F", "A+"]
    # ranking is a separate batch step
    assert result.position == 4


def test_recompute_is_idempotent(make_entry):
    result = SimpleNamespace(
        id=1, subjects=[make_entry("ENG", 50, 20, 41), make_entry("ENG", 50, 20), make_entry("MATH", 100, 33, 77)],
    )
    apply_aggregates(result)
    first = (result.total_marks, result.total_obtained_marks, result.percentage, result.grade, result.result)
    first_rows = [(s.grade, s.remarks, s.is_passed) for s in result.subjects]

    apply_aggregates(result)

    assert (result.total_marks, result.total_obtained_marks, result.percentage, result.grade, result.result) == first
    assert [(s.grade, s.remarks, s.is_passed) for s in result.subjects] == first_rows


def test_describe_entries(make_entry):
    data = describe_entries([make_entry("ENG", 50, 20, 5), make_entry("ENG", 50, 20), make_entry("MATH", 100, 33, 10)])

    assert data["partial_result"] == "Fail"
    assert data["strict_result"] == "Pending"
    assert [g["code"] for g in data["groups"]] == ["ENG", "MATH"]
    assert data["groups"][0]["missing_count"] == 1
