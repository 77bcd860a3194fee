"""
Subject grouping.

Subjects sharing a subject code (e.g. "English Oral" + "English Written" under
ENG) are summed and judged together. Membership is decided by the code alone.
Entries are any objects exposing subject_id, subject_code, total_marks,
passing_marks, obtained_marks and remarks (ORM rows and schemas alike).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterable, List, Mapping

from services.grading import LIVE_ENTRY_BANDS, calculate_grade, calculate_percentage


def is_marks_entered(obtained_marks) -> bool:
    """0 is an entered mark; only None means 'not entered yet'."""
    return obtained_marks is not None


def group_key(entry) -> str:
    return (entry.subject_code or "").strip()


@dataclass
class SubjectGroup:
    code: str
    subjects: List[Any] = field(default_factory=list)
    total_max_marks: float = 0.0
    total_passing_marks: float = 0.0
    total_obtained_marks: float = 0.0
    missing_count: int = 0

    def add(self, entry):
        self.subjects.append(entry)
        self.total_max_marks += entry.total_marks
        self.total_passing_marks += entry.passing_marks
        if is_marks_entered(entry.obtained_marks):
            self.total_obtained_marks += entry.obtained_marks
        else:
            self.missing_count += 1

    @property
    def is_grouped(self) -> bool:
        return len(self.subjects) > 1

    @property
    def all_entered(self) -> bool:
        return self.missing_count == 0

    @property
    def entered_subjects(self) -> List[Any]:
        return [s for s in self.subjects if is_marks_entered(s.obtained_marks)]

    @property
    def percentage(self) -> float:
        return calculate_percentage(self.total_obtained_marks, self.total_max_marks)

    @property
    def grade(self) -> str:
        return calculate_grade(self.percentage, LIVE_ENTRY_BANDS)

    @property
    def is_passed(self) -> bool:
        return self.total_obtained_marks >= self.total_passing_marks

    def as_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "subject_ids": [s.subject_id for s in self.subjects],
            "subject_count": len(self.subjects),
            "is_grouped": self.is_grouped,
            "total_max_marks": round(self.total_max_marks, 2),
            "total_passing_marks": round(self.total_passing_marks, 2),
            "total_obtained_marks": round(self.total_obtained_marks, 2),
            "missing_count": self.missing_count,
            "percentage": round(self.percentage, 2),
            "grade": self.grade,
            "is_passed": self.is_passed,
        }


def group_subjects(entries: Iterable[Any]) -> List[SubjectGroup]:
    """Partition entries by subject code, keeping first-seen order."""
    groups: Dict[str, SubjectGroup] = {}
    for entry in entries or []:
        key = group_key(entry)
        if key not in groups:
            groups[key] = SubjectGroup(code=key)
        groups[key].add(entry)
    return list(groups.values())


def find_grouping_conflicts(entries: Iterable[Any], associations: Mapping[Any, Hashable]) -> Dict[str, List[Any]]:
    """
    Return {code: [subject_id, ...]} for every grouped code whose members are
    not all associated with the same class/exam setup.

    `associations` maps subject_id -> whatever identifies its setup, e.g.
    (class_id, exam_id) when the subject is scheduled, None when it is not.
    """
    conflicts = {}
    for group in group_subjects(entries):
        if not group.is_grouped:
            continue
        seen = {associations.get(s.subject_id) for s in group.subjects}
        if len(seen) > 1:
            conflicts[group.code] = [s.subject_id for s in group.subjects]
    return conflicts
