import pytest

from services.evaluation import ResultStatus, evaluate_overall, evaluate_partial


def test_any_unset_mark_is_pending(make_entry):
    entries = [make_entry("MATH", 100, 33, 90), make_entry("SCI", 100, 33)]
    assert evaluate_overall(entries) == ResultStatus.PENDING


def test_empty_subject_list_is_pending():
    assert evaluate_overall([]) == ResultStatus.PENDING
    assert evaluate_partial([]) == ResultStatus.PENDING


def test_group_sum_governs(make_entry):
    # 25 + 10 = 35 against a combined passing mark of 40
    entries = [make_entry("ENG", 50, 20, 25), make_entry("ENG", 50, 20, 10)]
    assert evaluate_overall(entries) == ResultStatus.FAIL


def test_weak_member_is_carried_by_the_group(make_entry):
    entries = [make_entry("ENG", 50, 20, 45), make_entry("ENG", 50, 20, 5)]
    assert evaluate_overall(entries) == ResultStatus.PASS


def test_single_subject_judged_on_its_own(make_entry):
    entries = [make_entry("ENG", 50, 20, 45), make_entry("ENG", 50, 20, 5), make_entry("MATH", 100, 33, 32)]
    assert evaluate_overall(entries) == ResultStatus.FAIL


def test_absent_member_counts_zero_in_group(make_entry):
    entries = [make_entry("ENG", 50, 20, 45), make_entry("ENG", 50, 20, 0, remarks="Absent")]
    assert evaluate_overall(entries) == ResultStatus.PASS

    entries[0].obtained_marks = 30
    assert evaluate_overall(entries) == ResultStatus.FAIL


def test_zero_marks_are_entered(make_entry):
    entries = [make_entry("MATH", 100, 0, 0)]
    assert evaluate_overall(entries) == ResultStatus.PASS


def test_partial_nothing_entered_is_pending(make_entry):
    entries = [make_entry("MATH", 100, 33), make_entry("ENG", 50, 20)]
    assert evaluate_partial(entries) == ResultStatus.PENDING


def test_partial_fails_single_subject_immediately(make_entry):
    entries = [make_entry("MATH", 100, 33, 10), make_entry("SCI", 100, 33)]
    assert evaluate_partial(entries) == ResultStatus.FAIL
    assert evaluate_overall(entries) == ResultStatus.PENDING


def test_partial_skips_incomplete_group(make_entry):
    # 5 out of 50 would fail on its own, but the group is not complete yet
    entries = [make_entry("ENG", 50, 20, 5), make_entry("ENG", 50, 20), make_entry("MATH", 100, 33, 80)]
    assert evaluate_partial(entries) == ResultStatus.PENDING


def test_partial_judges_complete_group(make_entry):
    entries = [make_entry("ENG", 50, 20, 5), make_entry("ENG", 50, 20, 10), make_entry("MATH", 100, 33)]
    assert evaluate_partial(entries) == ResultStatus.FAIL


@pytest.mark.parametrize("marks", [
    (45, 5, 80),
    (25, 10, 80),
    (45, 5, 20),
    (0, 0, 0),
    (50, 50, 100),
])
def test_partial_matches_strict_when_complete(make_entry, marks):
    eng_oral, eng_written, math = marks
    entries = [
        make_entry("ENG", 50, 20, eng_oral),
        make_entry("ENG", 50, 20, eng_written),
        make_entry("MATH", 100, 33, math),
    ]
    assert evaluate_partial(entries) == evaluate_overall(entries)


def test_status_values_are_strings():
    assert ResultStatus.PASS == "Pass"
    assert ResultStatus.PENDING.value == "Pending"
