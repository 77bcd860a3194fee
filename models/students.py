from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from database import Base

class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True)
    admission_no = Column(String(50), unique=True, index=True)
    student_name = Column(String(100))
    father_name = Column(String(100), nullable=True)

    # --- ACADEMIC INFO ---
    class_id = Column(Integer, ForeignKey("classes.id"))
    section_id = Column(Integer, ForeignKey("sections.id"), nullable=True)
    roll_no = Column(Integer, nullable=True)
    academic_session = Column(String(20), default="2025-2026")

    status = Column(Boolean, default=True)

    # --- RELATIONSHIPS ---
    class_val = relationship("models.masters.ClassMaster")
    section_val = relationship("models.masters.SectionMaster")
