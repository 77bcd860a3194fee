import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session, joinedload

from database import get_db
from models.exams import ExamSchedule, ExamType, Subject

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/exams", tags=["Exams"])

# --- SCHEMAS ---
class SubjectSchema(BaseModel):
    subject_name: str
    subject_code: str
    subject_type: str = "Theory"

class SubjectCodeSchema(BaseModel):
    subject_code: str

class ExamTypeSchema(BaseModel):
    exam_name: str
    session: str

class ScheduleItem(BaseModel):
    subject_id: int
    exam_date: Optional[date] = None
    max_marks: float = 100
    pass_marks: float = 33

class ScheduleCreateSchema(BaseModel):
    class_id: int
    exam_id: int
    schedules: List[ScheduleItem]


def normalize_code(code: str) -> str:
    # codes are compared exactly when grouping; every subject needs one
    code = code.strip().upper()
    if not code:
        raise HTTPException(status_code=400, detail="Subject code is required")
    return code


# ===========================
#        1. SUBJECTS
# ===========================

@router.get("/subjects")
def list_subjects(db: Session = Depends(get_db)):
    return db.query(Subject).order_by(Subject.subject_code, Subject.id).all()

@router.post("/subjects")
def add_subject(payload: SubjectSchema, db: Session = Depends(get_db)):
    if db.query(Subject).filter(Subject.subject_name == payload.subject_name).first():
        raise HTTPException(status_code=400, detail="Subject already exists")

    subject = Subject(
        subject_name=payload.subject_name,
        subject_code=normalize_code(payload.subject_code),
        subject_type=payload.subject_type,
    )
    db.add(subject)
    db.commit()
    db.refresh(subject)
    return subject

@router.put("/subjects/{subject_id}/code")
def change_subject_code(subject_id: int, payload: SubjectCodeSchema, db: Session = Depends(get_db)):
    """Existing results keep the code they were created with."""
    subject = db.query(Subject).filter(Subject.id == subject_id).first()
    if not subject:
        raise HTTPException(status_code=404, detail="Subject not found")
    subject.subject_code = normalize_code(payload.subject_code)
    db.commit()
    return {"success": True, "subject_code": subject.subject_code}

@router.get("/subject-groups")
def list_subject_groups(db: Session = Depends(get_db)):
    """Codes shared by more than one subject, i.e. subjects judged on a combined total."""
    subjects = db.query(Subject).order_by(Subject.id).all()
    groups = []
    for code, members in _by_code(subjects).items():
        if len(members) > 1:
            groups.append({
                "subject_code": code,
                "subjects": [{"id": s.id, "subject_name": s.subject_name} for s in members],
            })
    return groups


def _by_code(subjects):
    grouped = {}
    for subject in subjects:
        grouped.setdefault(subject.subject_code, []).append(subject)
    return grouped

# ===========================
#        2. EXAM TYPES
# ===========================

@router.get("/types")
def get_exam_types(db: Session = Depends(get_db)):
    return db.query(ExamType).order_by(ExamType.id).all()

@router.post("/types")
def add_exam_type(payload: ExamTypeSchema, db: Session = Depends(get_db)):
    existing = db.query(ExamType).filter(ExamType.exam_name == payload.exam_name).first()
    if existing:
        return existing
    exam = ExamType(exam_name=payload.exam_name, session=payload.session)
    db.add(exam)
    db.commit()
    db.refresh(exam)
    return exam

# ===========================
#   3. EXAM SCHEDULE (max / pass marks per class)
# ===========================

@router.post("/save-schedule")
def save_exam_schedule(payload: ScheduleCreateSchema, db: Session = Depends(get_db)):
    """Replace the schedule of one class for one exam."""
    if not db.query(ExamType).filter(ExamType.id == payload.exam_id).first():
        raise HTTPException(status_code=404, detail="Exam not found")

    for item in payload.schedules:
        if item.max_marks <= 0 or item.pass_marks < 0 or item.pass_marks > item.max_marks:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid max/pass marks for Subject ID {item.subject_id}"
            )

    subject_ids = {item.subject_id for item in payload.schedules}
    subjects = db.query(Subject).filter(Subject.id.in_(subject_ids)).all()
    if len(subjects) != len(subject_ids):
        found = {s.id for s in subjects}
        raise HTTPException(status_code=404, detail=f"Subjects not found: {sorted(subject_ids - found)}")

    db.query(ExamSchedule).filter(
        ExamSchedule.class_id == payload.class_id,
        ExamSchedule.exam_id == payload.exam_id
    ).delete()
    for item in payload.schedules:
        db.add(ExamSchedule(
            exam_id=payload.exam_id,
            class_id=payload.class_id,
            subject_id=item.subject_id,
            exam_date=item.exam_date,
            max_marks=item.max_marks,
            pass_marks=item.pass_marks
        ))

    try:
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Saving schedule for exam {payload.exam_id}, class {payload.class_id} failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return {"message": "Schedule Saved Successfully", "count": len(payload.schedules)}

@router.get("/get-schedule")
def get_exam_schedule(class_id: int, exam_id: int, db: Session = Depends(get_db)):
    rows = db.query(ExamSchedule).filter(
        ExamSchedule.class_id == class_id,
        ExamSchedule.exam_id == exam_id
    ).options(joinedload(ExamSchedule.subject_val)).order_by(ExamSchedule.id).all()
    shared = _by_code([row.subject_val for row in rows])
    codes = {code for code, members in shared.items() if len(members) > 1}
    return [{
        "subject_id": row.subject_id,
        "subject_name": row.subject_val.subject_name,
        "subject_code": row.subject_val.subject_code,
        "is_grouped": row.subject_val.subject_code in codes,
        "exam_date": row.exam_date,
        "max_marks": row.max_marks,
        "pass_marks": row.pass_marks,
    } for row in rows]
