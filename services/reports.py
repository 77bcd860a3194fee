"""
Cohort reports over already computed results: class performance,
subject-wise performance and top performers.
"""

from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from services.evaluation import ResultStatus, SubjectRemark


def _num(value, digits=2) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return round(float(value), digits)


def _key(value) -> Optional[int]:
    if value is None or pd.isna(value):
        return None
    return int(value)


def _percent(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def class_performance(results: Sequence[Any]) -> List[Dict[str, Any]]:
    """Pass/fail/pending counts and percentage spread per class and section."""
    if not results:
        return []

    df = pd.DataFrame([
        {
            "class_id": r.class_id,
            "section_id": r.section_id,
            "result": r.result,
            "percentage": r.percentage or 0.0,
            "total_marks": r.total_marks or 0.0,
            "total_obtained_marks": r.total_obtained_marks or 0.0,
        }
        for r in results
    ])

    report = []
    for (class_id, section_id), frame in df.groupby(["class_id", "section_id"], dropna=False, sort=True):
        total = len(frame)
        passed = int((frame["result"] == ResultStatus.PASS.value).sum())
        report.append({
            "class_id": _key(class_id),
            "section_id": _key(section_id),
            "total_students": total,
            "passed_students": passed,
            "failed_students": int((frame["result"] == ResultStatus.FAIL.value).sum()),
            "pending_students": int((frame["result"] == ResultStatus.PENDING.value).sum()),
            "pass_percentage": _percent(passed, total),
            "average_percentage": _num(frame["percentage"].mean()),
            "highest_percentage": _num(frame["percentage"].max()),
            "lowest_percentage": _num(frame["percentage"].min()),
            "total_marks": _num(frame["total_marks"].iloc[0]),
            "average_obtained": _num(frame["total_obtained_marks"].mean()),
        })
    return report


def subject_performance(results: Sequence[Any]) -> List[Dict[str, Any]]:
    """Per-subject averages over entered marks, with pass/fail/absent counts."""
    rows = []
    for r in results:
        for s in r.subjects:
            subject = getattr(s, "subject_val", None)
            rows.append({
                "subject_id": s.subject_id,
                "subject_name": subject.subject_name if subject is not None else str(s.subject_id),
                "subject_code": s.subject_code or "",
                "total_marks": s.total_marks,
                "passing_marks": s.passing_marks,
                "obtained_marks": s.obtained_marks,
                "remarks": s.remarks or "",
            })
    if not rows:
        return []

    df = pd.DataFrame(rows)
    df["obtained_marks"] = pd.to_numeric(df["obtained_marks"], errors="coerce")
    df["entered"] = df["obtained_marks"].notna()
    df["absent"] = df["remarks"] == SubjectRemark.ABSENT.value
    df["passed"] = df["entered"] & ~df["absent"] & (df["obtained_marks"] >= df["passing_marks"])
    df["failed"] = df["entered"] & ~df["absent"] & (df["obtained_marks"] < df["passing_marks"])

    report = []
    for subject_id, frame in df.groupby("subject_id", sort=False):
        total_students = len(frame)
        total_marks = float(frame["total_marks"].iloc[0])
        average = frame["obtained_marks"].mean()
        passed = int(frame["passed"].sum())
        report.append({
            "subject_id": _key(subject_id),
            "subject_name": frame["subject_name"].iloc[0],
            "subject_code": frame["subject_code"].iloc[0],
            "total_marks": _num(total_marks),
            "passing_marks": _num(frame["passing_marks"].iloc[0]),
            "average_marks": _num(average),
            "average_percentage": _num(average / total_marks * 100) if total_marks else None,
            "highest_marks": _num(frame["obtained_marks"].max()),
            "lowest_marks": _num(frame["obtained_marks"].min()),
            "total_students": total_students,
            "entered_count": int(frame["entered"].sum()),
            "passed_count": passed,
            "failed_count": int(frame["failed"].sum()),
            "absent_count": int(frame["absent"].sum()),
            "pass_percentage": _percent(passed, total_students),
        })
    report.sort(key=lambda row: row["subject_name"])
    return report


def top_performers(results: Sequence[Any], limit: int = 10) -> List[Any]:
    """Passed results, best percentage first, total obtained marks breaking ties."""
    passed = [r for r in results if r.result == ResultStatus.PASS.value]
    passed.sort(key=lambda r: (-(r.percentage or 0), -(r.total_obtained_marks or 0), r.student_id))
    return passed[:max(limit, 0)]
