from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base

# 1. CLASS TABLE
class ClassMaster(Base):
    __tablename__ = "classes"
    id = Column(Integer, primary_key=True, index=True)
    class_name = Column(String(50), unique=True, index=True)
    status = Column(Boolean, default=True)

# 2. SECTION TABLE (a class/section pair is one ranking cohort)
class SectionMaster(Base):
    __tablename__ = "sections"
    __table_args__ = (UniqueConstraint("class_id", "section_name", name="uq_class_section"),)

    id = Column(Integer, primary_key=True, index=True)
    section_name = Column(String(10))
    class_id = Column(Integer, ForeignKey("classes.id"))
    class_val = relationship("ClassMaster")
