from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from routers.results import query_cohort, serialize_result
from services.reports import class_performance, subject_performance, top_performers

router = APIRouter(prefix="/api/v1/results/reports", tags=["Result Reports"])


@router.get("/class-performance")
def get_class_performance(exam_id: int, class_id: Optional[int] = None, section_id: Optional[int] = None,
                          db: Session = Depends(get_db)):
    """Pass/fail/pending counts and percentage spread per class-section"""
    return class_performance(query_cohort(db, exam_id, class_id, section_id))


@router.get("/subject-performance")
def get_subject_performance(exam_id: int, class_id: Optional[int] = None, section_id: Optional[int] = None,
                            db: Session = Depends(get_db)):
    return subject_performance(query_cohort(db, exam_id, class_id, section_id))


@router.get("/top-performers")
def get_top_performers(exam_id: int, class_id: Optional[int] = None, section_id: Optional[int] = None,
                       limit: int = 10, db: Session = Depends(get_db)):
    results = top_performers(query_cohort(db, exam_id, class_id, section_id), limit=limit)
    return [serialize_result(r) for r in results]
