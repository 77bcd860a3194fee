from sqlalchemy import Column, Integer, String, Float, ForeignKey, Date, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base

# 1. SUBJECT MASTER (English Oral, English Written, Math...)
class Subject(Base):
    __tablename__ = "subjects"
    id = Column(Integer, primary_key=True, index=True)
    subject_name = Column(String(100), unique=True)
    # Subjects sharing a code are judged together (e.g. ENG = Oral + Written)
    subject_code = Column(String(20), nullable=False, index=True)
    subject_type = Column(String(20), default="Theory") # Theory/Practical

# 2. EXAM TYPE (Term 1, Annual, Unit Test)
class ExamType(Base):
    __tablename__ = "exam_types"
    id = Column(Integer, primary_key=True, index=True)
    exam_name = Column(String(100), unique=True) # e.g., "Half Yearly 2025"
    session = Column(String(20))

# 3. EXAM SCHEDULE (max/pass marks of a subject for one class in one exam)
class ExamSchedule(Base):
    __tablename__ = "exam_schedule"
    __table_args__ = (UniqueConstraint("exam_id", "class_id", "subject_id", name="uq_schedule_subject"),)

    id = Column(Integer, primary_key=True, index=True)
    exam_id = Column(Integer, ForeignKey("exam_types.id"))
    class_id = Column(Integer, ForeignKey("classes.id"))
    subject_id = Column(Integer, ForeignKey("subjects.id"))

    exam_date = Column(Date, nullable=True)
    max_marks = Column(Float, default=100)
    pass_marks = Column(Float, default=33)

    exam_val = relationship("ExamType")
    class_val = relationship("models.masters.ClassMaster")
    subject_val = relationship("Subject")
