from enum import Enum
from typing import Any, Sequence

from services.grouping import SubjectGroup, group_subjects, is_marks_entered


class ResultStatus(str, Enum):
    PASS = "Pass"
    FAIL = "Fail"
    PENDING = "Pending"


class SubjectRemark(str, Enum):
    PASS = "Pass"
    FAIL = "Fail"
    ABSENT = "Absent"
    PENDING = "Pending"
    NONE = ""


def group_fails(group: SubjectGroup) -> bool:
    """
    Pass/fail check for one group whose marks are all entered.

    Grouped subjects are judged on the combined total only, so an absent
    member never fails the group by itself (its marks still count in the sum).
    A single subject is judged against its own passing mark.
    """
    if group.is_grouped:
        return group.total_obtained_marks < group.total_passing_marks
    subject = group.subjects[0]
    return subject.obtained_marks < subject.passing_marks


def evaluate_overall(entries: Sequence[Any]) -> ResultStatus:
    """Strict evaluation: Pending unless every subject has marks."""
    if not entries:
        return ResultStatus.PENDING
    if not all(is_marks_entered(s.obtained_marks) for s in entries):
        return ResultStatus.PENDING

    for group in group_subjects(entries):
        if group_fails(group):
            return ResultStatus.FAIL
    return ResultStatus.PASS


def evaluate_partial(entries: Sequence[Any]) -> ResultStatus:
    """
    Live evaluation while marks are still being typed in.

    Single subjects are judged as soon as they have marks; a grouped subject
    is judged only once all of its members have marks.
    """
    if not entries:
        return ResultStatus.PENDING
    if not any(is_marks_entered(s.obtained_marks) for s in entries):
        return ResultStatus.PENDING

    for group in group_subjects(entries):
        if not group.entered_subjects:
            continue
        if group.is_grouped and not group.all_entered:
            continue
        if group_fails(group):
            return ResultStatus.FAIL

    if all(is_marks_entered(s.obtained_marks) for s in entries):
        return evaluate_overall(entries)
    return ResultStatus.PENDING
