import os
from types import SimpleNamespace

# in-memory database for every test run; must be set before config is imported
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

import main
from database import Base, SessionLocal, engine
from models.exams import ExamSchedule, ExamType, Subject
from models.masters import ClassMaster, SectionMaster
from models.students import Student


@pytest.fixture
def make_entry():
    counter = {"next_id": 1}

    def _make(code, total, passing, obtained=None, remarks="", subject_id=None):
        if subject_id is None:
            subject_id = counter["next_id"]
            counter["next_id"] += 1
        return SimpleNamespace(
            subject_id=subject_id,
            subject_code=code,
            total_marks=total,
            passing_marks=passing,
            obtained_marks=obtained,
            remarks=remarks,
            grade="",
            is_passed=False,
        )

    return _make


@pytest.fixture
def make_result():
    def _make(result_id, percentage, result="Pass", student_id=None, **extra):
        data = dict(
            id=result_id,
            student_id=student_id if student_id is not None else result_id,
            percentage=percentage,
            result=result,
            position=None,
            is_published=False,
            published_date=None,
        )
        data.update(extra)
        return SimpleNamespace(**data)

    return _make


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client(db):
    return TestClient(main.app)


@pytest.fixture
def school(db):
    """Class 10 (sections A/B), ENG oral+written grouped, MATH single, one exam, three students."""
    cls = ClassMaster(class_name="Class 10")
    db.add(cls)
    db.commit()
    sec_a = SectionMaster(class_id=cls.id, section_name="A")
    sec_b = SectionMaster(class_id=cls.id, section_name="B")
    exam = ExamType(exam_name="Half Yearly 2025", session="2025-2026")
    eng_oral = Subject(subject_name="English Oral", subject_code="ENG")
    eng_written = Subject(subject_name="English Written", subject_code="ENG")
    math = Subject(subject_name="Mathematics", subject_code="MATH")
    db.add_all([sec_a, sec_b, exam, eng_oral, eng_written, math])
    db.commit()

    db.add_all([
        ExamSchedule(exam_id=exam.id, class_id=cls.id, subject_id=eng_oral.id, max_marks=50, pass_marks=20),
        ExamSchedule(exam_id=exam.id, class_id=cls.id, subject_id=eng_written.id, max_marks=50, pass_marks=20),
        ExamSchedule(exam_id=exam.id, class_id=cls.id, subject_id=math.id, max_marks=100, pass_marks=33),
    ])
    students = [
        Student(admission_no="ADM-1", student_name="Ayesha", class_id=cls.id, section_id=sec_a.id, roll_no=1),
        Student(admission_no="ADM-2", student_name="Bilal", class_id=cls.id, section_id=sec_a.id, roll_no=2),
        Student(admission_no="ADM-3", student_name="Sara", class_id=cls.id, section_id=sec_b.id, roll_no=1),
    ]
    db.add_all(students)
    db.commit()

    ids = SimpleNamespace(
        class_id=cls.id,
        section_a=sec_a.id,
        section_b=sec_b.id,
        exam_id=exam.id,
        eng_oral=eng_oral.id,
        eng_written=eng_written.id,
        math=math.id,
        student_ids=[s.id for s in students],
    )
    # release the shared in-memory connection before requests use it
    db.commit()
    return ids
