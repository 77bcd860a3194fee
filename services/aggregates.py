"""
Result aggregate calculator.

compute_aggregates() is pure; apply_aggregates() writes the computed values
onto a result and its subject rows, and is called explicitly by whoever is
about to persist a result whose marks changed. Positions are never touched
here: ranking is a separate batch step.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from services.evaluation import ResultStatus, SubjectRemark, evaluate_overall, evaluate_partial
from services.exceptions import MarksValidationError
from services.grading import FINAL_RECORD_BANDS, calculate_grade, calculate_percentage, round_two
from services.grouping import group_subjects, is_marks_entered

logger = logging.getLogger(__name__)


@dataclass
class EntryError:
    index: int
    subject_id: Any
    field: str
    message: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "subject_id": self.subject_id,
            "field": self.field,
            "message": self.message,
        }


@dataclass
class SubjectOutcome:
    """Display-only fields of one subject row"""
    grade: str
    remarks: str
    is_passed: bool


@dataclass
class ResultAggregate:
    total_marks: float
    total_obtained_marks: float
    percentage: float
    grade: str
    result: ResultStatus
    subjects: List[SubjectOutcome] = field(default_factory=list)


def validate_entries(entries: Sequence[Any]) -> List[EntryError]:
    """Check every entry and report all problems, one per field. Nothing is clamped."""
    errors = []
    for index, entry in enumerate(entries or []):
        subject_id = getattr(entry, "subject_id", None)
        total = entry.total_marks
        passing = entry.passing_marks
        obtained = entry.obtained_marks

        if total is None or total <= 0:
            errors.append(EntryError(index, subject_id, "total_marks", "Total marks must be greater than 0"))
            continue
        if passing is None or passing < 0:
            errors.append(EntryError(index, subject_id, "passing_marks", "Passing marks cannot be negative"))
        elif passing > total:
            errors.append(EntryError(
                index, subject_id, "passing_marks",
                f"Passing marks ({passing}) cannot exceed total marks ({total})",
            ))
        if is_marks_entered(obtained) and not (0 <= obtained <= total):
            errors.append(EntryError(
                index, subject_id, "obtained_marks",
                f"Obtained marks ({obtained}) must be between 0 and {total}",
            ))
    return errors


def normalize_absent(obtained, remarks):
    """An absent subject without marks is stored as 0, so it counts as entered."""
    remarks = remarks or ""
    if remarks == SubjectRemark.ABSENT.value and obtained is None:
        return 0.0, remarks
    return obtained, remarks


def subject_outcome(entry) -> SubjectOutcome:
    """Per-subject grade and remark. Cosmetic: never used for the overall result."""
    obtained = entry.obtained_marks
    remark = entry.remarks or ""

    if not is_marks_entered(obtained):
        if remark == SubjectRemark.ABSENT.value:
            return SubjectOutcome(grade="", remarks=remark, is_passed=False)
        return SubjectOutcome(grade="", remarks=SubjectRemark.PENDING.value, is_passed=False)

    grade = ""
    if obtained > 0:
        grade = calculate_grade(calculate_percentage(obtained, entry.total_marks), FINAL_RECORD_BANDS)

    passed = obtained >= entry.passing_marks
    if remark == SubjectRemark.ABSENT.value:
        return SubjectOutcome(grade=grade, remarks=remark, is_passed=False)
    return SubjectOutcome(
        grade=grade,
        remarks=SubjectRemark.PASS.value if passed else SubjectRemark.FAIL.value,
        is_passed=passed,
    )


def compute_aggregates(entries: Sequence[Any]) -> ResultAggregate:
    entries = list(entries or [])
    errors = validate_entries(entries)
    if errors:
        raise MarksValidationError(entry_errors=errors, details=[e.as_dict() for e in errors])

    total_marks = sum(s.total_marks for s in entries)
    total_obtained = sum(s.obtained_marks for s in entries if is_marks_entered(s.obtained_marks))
    percentage = round_two(calculate_percentage(total_obtained, total_marks))

    return ResultAggregate(
        total_marks=round_two(total_marks),
        total_obtained_marks=round_two(total_obtained),
        percentage=percentage,
        grade=calculate_grade(percentage, FINAL_RECORD_BANDS),
        # grouped evaluation, never a naive per-subject check
        result=evaluate_overall(entries),
        subjects=[subject_outcome(s) for s in entries],
    )


def apply_aggregates(result) -> ResultAggregate:
    """Recompute and write aggregates onto `result` (anything with a .subjects list)."""
    aggregate = compute_aggregates(result.subjects)

    result.total_marks = aggregate.total_marks
    result.total_obtained_marks = aggregate.total_obtained_marks
    result.percentage = aggregate.percentage
    result.grade = aggregate.grade
    result.result = aggregate.result.value

    for entry, outcome in zip(result.subjects, aggregate.subjects):
        entry.grade = outcome.grade
        entry.remarks = outcome.remarks
        entry.is_passed = outcome.is_passed

    logger.debug(
        "Recomputed result %s: total=%s obtained=%s percentage=%s result=%s",
        getattr(result, "id", None), aggregate.total_marks,
        aggregate.total_obtained_marks, aggregate.percentage, aggregate.result.value,
    )
    return aggregate


def describe_entries(entries: Sequence[Any]) -> Dict[str, Any]:
    """Group rows plus live and strict verdicts, as shown on the mark entry screen."""
    entries = list(entries or [])
    return {
        "groups": [g.as_dict() for g in group_subjects(entries)],
        "partial_result": evaluate_partial(entries).value,
        "strict_result": evaluate_overall(entries).value,
    }
