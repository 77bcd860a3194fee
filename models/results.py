from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Float, Boolean, DateTime, ForeignKey, Index, UniqueConstraint
)
from sqlalchemy.orm import relationship
from database import Base


def utc_now():
    # naive UTC, matching the DateTime columns
    return datetime.now(timezone.utc).replace(tzinfo=None)


# --- ONE SUBJECT'S MARKS INSIDE A RESULT ---
class ResultSubject(Base):
    __tablename__ = "result_subjects"

    id = Column(Integer, primary_key=True, index=True)
    result_id = Column(Integer, ForeignKey("results.id"), index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id"))

    # Copied from the Subject at entry time; grouping key
    subject_code = Column(String(20), default="")
    total_marks = Column(Float, nullable=False)
    passing_marks = Column(Float, nullable=False)
    # NULL = not entered yet. 0 is a real (entered) mark.
    obtained_marks = Column(Float, nullable=True)

    grade = Column(String(5), default="")
    remarks = Column(String(10), default="Pending")  # Pass/Fail/Absent/Pending/""
    is_passed = Column(Boolean, default=False)

    subject_val = relationship("models.exams.Subject")


# --- ONE STUDENT'S RESULT FOR ONE EXAM ---
class Result(Base):
    __tablename__ = "results"
    __table_args__ = (
        UniqueConstraint("student_id", "exam_id", name="uq_result_student_exam"),
        Index("ix_results_cohort", "exam_id", "class_id", "section_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    exam_id = Column(Integer, ForeignKey("exam_types.id"), nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False)
    section_id = Column(Integer, ForeignKey("sections.id"), nullable=True)

    # --- AGGREGATES (recomputed on every mark change) ---
    total_marks = Column(Float, default=0.0)
    total_obtained_marks = Column(Float, default=0.0)
    percentage = Column(Float, default=0.0)
    grade = Column(String(5), default="")
    result = Column(String(10), default="Pending")  # Pass/Fail/Pending

    # --- BATCH FIELDS ---
    position = Column(Integer, nullable=True)
    is_published = Column(Boolean, default=False)
    published_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    subjects = relationship(
        "ResultSubject",
        order_by="ResultSubject.id",
        cascade="all, delete-orphan",
    )
    student_val = relationship("models.students.Student")
    exam_val = relationship("models.exams.ExamType")
    class_val = relationship("models.masters.ClassMaster")
    section_val = relationship("models.masters.SectionMaster")
