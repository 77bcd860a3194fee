from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload
from database import get_db
from models.students import Student
from models.masters import ClassMaster
from pydantic import BaseModel
from typing import Optional

router = APIRouter(prefix="/api/v1/students", tags=["Students"])

class StudentCreate(BaseModel):
    admission_no: str
    student_name: str
    father_name: Optional[str] = None
    class_id: int
    section_id: Optional[int] = None
    roll_no: Optional[int] = None
    academic_session: str = "2025-2026"

# --- Roster of a class (used for result creation and mark sheets) ---
@router.get("")
def list_students(class_id: Optional[int] = None, section_id: Optional[int] = None,
                  db: Session = Depends(get_db)):
    query = db.query(Student).filter(Student.status == True).options(
        joinedload(Student.class_val),
        joinedload(Student.section_val)
    )
    if class_id:
        query = query.filter(Student.class_id == class_id)
    if section_id:
        query = query.filter(Student.section_id == section_id)

    students = query.order_by(Student.class_id, Student.roll_no).all()
    return [{
        "id": s.id,
        "admission_no": s.admission_no,
        "student_name": s.student_name,
        "father_name": s.father_name,
        "roll_no": s.roll_no,
        "class_id": s.class_id,
        "section_id": s.section_id,
        "class_name": s.class_val.class_name if s.class_val else "N/A",
        "section_name": s.section_val.section_name if s.section_val else ""
    } for s in students]

@router.post("")
def add_student(payload: StudentCreate, db: Session = Depends(get_db)):
    if not db.query(ClassMaster).filter(ClassMaster.id == payload.class_id).first():
        raise HTTPException(status_code=404, detail="Class not found")
    if db.query(Student).filter(Student.admission_no == payload.admission_no).first():
        raise HTTPException(status_code=400, detail="Admission number already exists")

    student = Student(**payload.model_dump(), status=True)
    db.add(student)
    db.commit()
    db.refresh(student)
    return {"message": "Student Added", "id": student.id}

# --- Deactivate (student leaves; results are kept) ---
@router.put("/{student_id}/toggle-status")
def toggle_student_status(student_id: int, db: Session = Depends(get_db)):
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    student.status = not student.status
    db.commit()
    return {"success": True, "new_status": student.status}
