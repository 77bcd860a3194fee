from types import SimpleNamespace

from services.reports import class_performance, subject_performance, top_performers


def subject_row(subject_id, name, obtained, total=100, passing=33, code=None, remarks=""):
    code = code or f"S{subject_id}"
    return SimpleNamespace(
        subject_id=subject_id, subject_code=code, total_marks=total, passing_marks=passing,
        obtained_marks=obtained, remarks=remarks, subject_val=SimpleNamespace(subject_name=name),
    )


def result_row(student_id, percentage, result, section_id=1, obtained=0.0, subjects=()):
    return SimpleNamespace(
        student_id=student_id, class_id=10, section_id=section_id, result=result,
        percentage=percentage, total_marks=200.0, total_obtained_marks=obtained, subjects=list(subjects),
    )


def test_class_performance_per_section():
    results = [
        result_row(1, 80, "Pass", section_id=1),
        result_row(2, 20, "Fail", section_id=1),
        result_row(3, 0, "Pending", section_id=1),
        result_row(4, 60, "Pass", section_id=None),
    ]
    report = class_performance(results)

    assert len(report) == 2
    section_a = next(r for r in report if r["section_id"] == 1)
    assert section_a["total_students"] == 3
    assert section_a["passed_students"] == 1
    assert section_a["failed_students"] == 1
    assert section_a["pending_students"] == 1
    assert section_a["pass_percentage"] == 33.33
    assert section_a["highest_percentage"] == 80.0
    no_section = next(r for r in report if r["section_id"] is None)
    assert no_section["total_students"] == 1


def test_class_performance_empty():
    assert class_performance([]) == []
    assert subject_performance([]) == []


def test_subject_performance_counts():
    results = [
        result_row(1, 0, "Pass", subjects=[subject_row(1, "Mathematics", 80), subject_row(2, "Science", None)]),
        result_row(2, 0, "Fail", subjects=[subject_row(1, "Mathematics", 20), subject_row(2, "Science", 0, remarks="Absent")]),
    ]
    report = subject_performance(results)

    assert [r["subject_name"] for r in report] == ["Mathematics", "Science"]
    maths, science = report
    assert maths["average_marks"] == 50.0
    assert maths["highest_marks"] == 80.0
    assert maths["lowest_marks"] == 20.0
    assert maths["passed_count"] == 1
    assert maths["failed_count"] == 1
    assert science["entered_count"] == 1
    assert science["absent_count"] == 1
    assert science["passed_count"] == 0


def test_top_performers_only_passed():
    results = [
        result_row(1, 90, "Pass", obtained=180),
        result_row(2, 95, "Fail", obtained=190),
        result_row(3, 90, "Pass", obtained=181),
        result_row(4, 70, "Pass", obtained=140),
        result_row(5, 99, "Pending"),
    ]
    top = top_performers(results, limit=2)

    assert [r.student_id for r in top] == [3, 1]
    assert top_performers(results, limit=0) == []
