from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from database import get_db
from models.masters import ClassMaster, SectionMaster

router = APIRouter(prefix="/api/v1/masters", tags=["Master Records"])

class ClassCreate(BaseModel):
    class_name: str
    sections: List[str] = []

class SectionCreate(BaseModel):
    class_id: int
    section_name: str


# --- Classes with their sections (the cohorts results are ranked in) ---
@router.get("/classes")
def list_classes(db: Session = Depends(get_db)):
    classes = db.query(ClassMaster).filter(ClassMaster.status == True).order_by(ClassMaster.id).all()
    sections = db.query(SectionMaster).filter(
        SectionMaster.class_id.in_([c.id for c in classes])
    ).order_by(SectionMaster.section_name).all()

    by_class = {}
    for section in sections:
        by_class.setdefault(section.class_id, []).append({"id": section.id, "section_name": section.section_name})
    return [{
        "id": c.id,
        "class_name": c.class_name,
        "sections": by_class.get(c.id, []),
    } for c in classes]

@router.post("/classes", status_code=201)
def create_class(item: ClassCreate, db: Session = Depends(get_db)):
    if db.query(ClassMaster).filter(ClassMaster.class_name == item.class_name).first():
        raise HTTPException(status_code=400, detail="Class already exists")

    new_class = ClassMaster(class_name=item.class_name)
    db.add(new_class)
    db.flush()
    for name in dict.fromkeys(s.strip() for s in item.sections if s.strip()):
        db.add(SectionMaster(class_id=new_class.id, section_name=name))
    db.commit()
    return {"message": "Class Created", "id": new_class.id}

@router.post("/sections", status_code=201)
def create_section(item: SectionCreate, db: Session = Depends(get_db)):
    if not db.query(ClassMaster).filter(ClassMaster.id == item.class_id).first():
        raise HTTPException(status_code=404, detail="Class not found")
    name = item.section_name.strip()
    if db.query(SectionMaster).filter(
        SectionMaster.class_id == item.class_id,
        SectionMaster.section_name == name
    ).first():
        raise HTTPException(status_code=400, detail="Section already exists for this class")

    section = SectionMaster(class_id=item.class_id, section_name=name)
    db.add(section)
    db.commit()
    return {"message": "Section Created", "id": section.id}
