import logging
from types import SimpleNamespace
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from config import DEFAULT_MAX_MARKS, DEFAULT_PASS_MARKS, RANKING_MAX_ATTEMPTS
from database import get_db
from models.exams import ExamSchedule, ExamType, Subject
from models.results import Result, ResultSubject
from models.students import Student
from schemas.results import (
    BulkCreateSchema, BulkMarksUpdateSchema, CohortSchema, EvaluationRequestSchema,
    MarkEntrySchema, MarksUpdateSchema, PublishSchema, RankingCohortSchema, ResultCreateSchema,
    ResultOut, SubjectEntrySchema,
)
from services.aggregates import (
    EntryError, apply_aggregates, describe_entries, normalize_absent, validate_entries,
)
from services.exceptions import CohortChangedError, MarksValidationError, SubjectGroupingError
from services.grouping import find_grouping_conflicts
from services.publishing import publish_results, unpublish_results
from services.ranking import cohort_fingerprint, rank_results

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/results", tags=["Results"])

# ===========================
#   STORAGE HELPERS
# ===========================

def query_cohort(db: Session, exam_id: int, class_id: Optional[int] = None, section_id: Optional[int] = None):
    """All results of one exam, optionally narrowed to a class and section."""
    query = db.query(Result).options(
        selectinload(Result.subjects).joinedload(ResultSubject.subject_val),
        joinedload(Result.student_val),
    ).filter(Result.exam_id == exam_id)
    if class_id:
        query = query.filter(Result.class_id == class_id)
    if section_id:
        query = query.filter(Result.section_id == section_id)
    return query.all()


def current_cohort_fingerprint(db: Session, payload: RankingCohortSchema):
    query = db.query(Result.id, Result.result).filter(Result.exam_id == payload.exam_id)
    if payload.class_id:
        query = query.filter(Result.class_id == payload.class_id)
    if payload.section_id:
        query = query.filter(Result.section_id == payload.section_id)
    return cohort_fingerprint(query.all())


def get_result_or_404(db: Session, result_id: int) -> Result:
    result = db.query(Result).options(
        selectinload(Result.subjects).joinedload(ResultSubject.subject_val),
        joinedload(Result.student_val),
    ).filter(Result.id == result_id).first()
    if not result:
        raise HTTPException(status_code=404, detail="Result not found")
    return result


def load_schedule(db: Session, exam_id: int, class_id: int) -> Dict[int, ExamSchedule]:
    rows = db.query(ExamSchedule).filter(
        ExamSchedule.exam_id == exam_id,
        ExamSchedule.class_id == class_id,
    ).order_by(ExamSchedule.id).all()
    return {row.subject_id: row for row in rows}


def duplicate_subject_errors(subject_ids) -> List[EntryError]:
    """A subject may appear once per result; a repeat would be summed as a group."""
    seen = set()
    errors = []
    for index, subject_id in enumerate(subject_ids):
        if subject_id in seen:
            errors.append(EntryError(index, subject_id, "subject_id", "Subject is listed more than once"))
        seen.add(subject_id)
    return errors


def build_subject_entries(db: Session, exam_id: int, class_id: int, items: List[SubjectEntrySchema]) -> List[ResultSubject]:
    """
    Resolve payload subjects into ResultSubject rows: code copied from the
    Subject, total/passing marks from the payload, else the exam schedule,
    else the configured defaults.
    """
    subject_ids = [item.subject_id for item in items]
    duplicates = duplicate_subject_errors(subject_ids)
    if duplicates:
        raise MarksValidationError(entry_errors=duplicates)

    subjects = {s.id: s for s in db.query(Subject).filter(Subject.id.in_(subject_ids)).all()}
    missing = [sid for sid in subject_ids if sid not in subjects]
    if missing:
        raise HTTPException(status_code=404, detail=f"Subjects not found: {missing}")

    schedule = load_schedule(db, exam_id, class_id)
    entries = []
    for item in items:
        scheduled = schedule.get(item.subject_id)
        total = item.total_marks
        if total is None:
            total = scheduled.max_marks if scheduled else DEFAULT_MAX_MARKS
        passing = item.passing_marks
        if passing is None:
            passing = scheduled.pass_marks if scheduled else DEFAULT_PASS_MARKS

        obtained, remarks = normalize_absent(item.obtained_marks, item.remarks)
        entries.append(ResultSubject(
            subject_id=item.subject_id,
            subject_code=subjects[item.subject_id].subject_code,
            total_marks=total,
            passing_marks=passing,
            obtained_marks=obtained,
            remarks=remarks,
            grade="",
            is_passed=False,
        ))

    associations = {
        sid: (class_id, exam_id) if sid in schedule else None
        for sid in subject_ids
    }
    conflicts = find_grouping_conflicts(entries, associations)
    if conflicts:
        raise SubjectGroupingError(
            message="Subjects sharing a code are not all scheduled for this class and exam",
            conflicts=conflicts,
        )
    return entries


def merge_marks(result: Result, items: List[MarkEntrySchema]):
    """Validate new marks against the result's rows, then write them and recompute."""
    rows = {row.subject_id: row for row in result.subjects}
    unknown = [
        EntryError(index, item.subject_id, "subject_id", "Subject is not part of this result")
        for index, item in enumerate(items) if item.subject_id not in rows
    ]
    unknown += duplicate_subject_errors([item.subject_id for item in items])
    if unknown:
        raise MarksValidationError(entry_errors=unknown)

    changes = {}
    for item in items:
        changes[item.subject_id] = normalize_absent(item.obtained_marks, item.remarks)

    candidates = []
    for row in result.subjects:
        obtained, remarks = changes.get(row.subject_id, (row.obtained_marks, row.remarks))
        candidates.append(SimpleNamespace(
            subject_id=row.subject_id,
            subject_code=row.subject_code,
            total_marks=row.total_marks,
            passing_marks=row.passing_marks,
            obtained_marks=obtained,
            remarks=remarks,
        ))
    errors = validate_entries(candidates)
    if errors:
        raise MarksValidationError(entry_errors=errors)

    for subject_id, (obtained, remarks) in changes.items():
        rows[subject_id].obtained_marks = obtained
        rows[subject_id].remarks = remarks
    return apply_aggregates(result)


def engine_error_detail(error) -> dict:
    if isinstance(error, MarksValidationError):
        return {"message": error.message, "errors": error.as_list()}
    if isinstance(error, SubjectGroupingError):
        return {"message": error.message, "conflicts": error.conflicts}
    return {"message": str(error)}


def serialize_result(result: Result, with_groups: bool = False) -> dict:
    data = ResultOut.model_validate(result).model_dump()
    student = result.student_val
    data["student_name"] = student.student_name if student else None
    data["roll_no"] = student.roll_no if student else None
    data["admission_no"] = student.admission_no if student else None
    if with_groups:
        data.update(describe_entries(result.subjects))
    return data


def commit_or_500(db: Session):
    try:
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Database error while saving results: {e}")
        raise HTTPException(status_code=500, detail=str(e))


# ===========================
#   PART 1: RESULT RECORDS
# ===========================

@router.post("", status_code=201)
def create_result(payload: ResultCreateSchema, db: Session = Depends(get_db)):
    if not db.query(Student).filter(Student.id == payload.student_id).first():
        raise HTTPException(status_code=404, detail="Student not found")
    if not db.query(ExamType).filter(ExamType.id == payload.exam_id).first():
        raise HTTPException(status_code=404, detail="Exam not found")

    existing = db.query(Result).filter(
        Result.student_id == payload.student_id,
        Result.exam_id == payload.exam_id,
    ).first()
    if existing:
        raise HTTPException(status_code=409, detail="Result already exists for this exam")

    try:
        entries = build_subject_entries(db, payload.exam_id, payload.class_id, payload.subjects)
        result = Result(
            student_id=payload.student_id,
            exam_id=payload.exam_id,
            class_id=payload.class_id,
            section_id=payload.section_id,
            is_published=False,
        )
        result.subjects = entries
        apply_aggregates(result)
    except (MarksValidationError, SubjectGroupingError) as e:
        raise HTTPException(status_code=400, detail=engine_error_detail(e))

    db.add(result)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Result already exists for this exam")
    db.refresh(result)
    return serialize_result(result, with_groups=True)


@router.post("/bulk-create", status_code=201)
def bulk_create_results(payload: BulkCreateSchema, db: Session = Depends(get_db)):
    """Create empty results (marks unset) for every active student of a class/section."""
    if not db.query(ExamType).filter(ExamType.id == payload.exam_id).first():
        raise HTTPException(status_code=404, detail="Exam not found")

    schedule = load_schedule(db, payload.exam_id, payload.class_id)
    if not schedule:
        raise HTTPException(status_code=400, detail="No exam schedule found for this class and exam")

    query = db.query(Student).filter(Student.class_id == payload.class_id, Student.status == True)
    if payload.section_id:
        query = query.filter(Student.section_id == payload.section_id)
    students = query.order_by(Student.roll_no).all()
    if not students:
        raise HTTPException(status_code=404, detail="No students found for this class/section")

    existing_ids = {
        row.student_id for row in db.query(Result.student_id).filter(
            Result.exam_id == payload.exam_id,
            Result.student_id.in_([s.id for s in students]),
        ).all()
    }
    items = [SubjectEntrySchema(subject_id=sid) for sid in schedule]

    created = []
    errors = []
    for student in students:
        if student.id in existing_ids:
            errors.append({
                "student_id": student.id,
                "student_name": student.student_name,
                "message": "Result already exists for this exam",
            })
            continue
        try:
            result = Result(
                student_id=student.id,
                exam_id=payload.exam_id,
                class_id=payload.class_id,
                section_id=student.section_id,
                is_published=False,
            )
            result.subjects = build_subject_entries(db, payload.exam_id, payload.class_id, items)
            apply_aggregates(result)
        except (MarksValidationError, SubjectGroupingError) as e:
            errors.append({
                "student_id": student.id,
                "student_name": student.student_name,
                **engine_error_detail(e),
            })
            continue
        db.add(result)
        created.append(result)

    commit_or_500(db)
    logger.info(f"Bulk create for exam {payload.exam_id}, class {payload.class_id}: "
                f"{len(created)} created, {len(errors)} skipped")
    return {
        "success": True,
        "message": f"Created {len(created)} result records",
        "created_count": len(created),
        "result_ids": [r.id for r in created],
        "errors": errors,
    }


@router.get("")
def get_results(exam_id: int, class_id: Optional[int] = None, section_id: Optional[int] = None,
                db: Session = Depends(get_db)):
    results = query_cohort(db, exam_id, class_id, section_id)
    results.sort(key=lambda r: (
        r.class_id,
        r.section_id or 0,
        r.position is None,
        r.position or 0,
        (r.student_val.roll_no if r.student_val and r.student_val.roll_no is not None else 0),
    ))
    return [serialize_result(r) for r in results]


@router.get("/student/{student_id}")
def get_student_results(student_id: int, db: Session = Depends(get_db)):
    results = db.query(Result).options(
        selectinload(Result.subjects),
        joinedload(Result.student_val),
    ).filter(Result.student_id == student_id).order_by(Result.created_at.desc()).all()
    if not results:
        raise HTTPException(status_code=404, detail="No results found for this student")
    return [serialize_result(r, with_groups=True) for r in results]


@router.get("/{result_id}")
def get_result(result_id: int, db: Session = Depends(get_db)):
    return serialize_result(get_result_or_404(db, result_id), with_groups=True)


# ===========================
#   PART 2: MARKS ENTRY
# ===========================

@router.put("/{result_id}/marks")
def update_marks(result_id: int, payload: MarksUpdateSchema, db: Session = Depends(get_db)):
    result = get_result_or_404(db, result_id)
    try:
        merge_marks(result, payload.subjects)
    except MarksValidationError as e:
        raise HTTPException(status_code=400, detail=engine_error_detail(e))
    commit_or_500(db)
    db.refresh(result)
    return serialize_result(result, with_groups=True)


@router.post("/bulk-update")
def bulk_update_marks(payload: BulkMarksUpdateSchema, db: Session = Depends(get_db)):
    """Enter marks for many results; invalid results are reported, valid ones saved."""
    if not payload.results:
        raise HTTPException(status_code=400, detail="No results provided")

    ids = [item.result_id for item in payload.results]
    found = {
        r.id: r for r in db.query(Result).options(selectinload(Result.subjects))
        .filter(Result.id.in_(ids)).all()
    }

    updated = []
    errors = []
    for item in payload.results:
        result = found.get(item.result_id)
        if not result:
            errors.append({"result_id": item.result_id, "message": "Result not found"})
            continue
        try:
            merge_marks(result, item.subjects)
        except MarksValidationError as e:
            errors.append({"result_id": item.result_id, **engine_error_detail(e)})
            continue
        updated.append(result)

    commit_or_500(db)
    logger.info(f"Bulk marks update: {len(updated)} updated, {len(errors)} rejected")
    return {
        "success": True,
        "message": f"Updated {len(updated)} results",
        "updated": [
            {"result_id": r.id, "result": r.result, "percentage": r.percentage, "grade": r.grade}
            for r in updated
        ],
        "errors": errors,
    }


@router.post("/evaluate")
def evaluate_entries(payload: EvaluationRequestSchema):
    """Live feedback while marks are typed: nothing is saved."""
    entries = []
    for item in payload.subjects:
        obtained, remarks = normalize_absent(item.obtained_marks, item.remarks)
        entries.append(SimpleNamespace(
            subject_id=item.subject_id,
            subject_code=item.subject_code,
            total_marks=item.total_marks,
            passing_marks=item.passing_marks,
            obtained_marks=obtained,
            remarks=remarks,
        ))
    errors = validate_entries(entries)
    data = describe_entries(entries)
    data["errors"] = [e.as_dict() for e in errors]
    return data


# ===========================
#   PART 3: POSITIONS
# ===========================

def rank_cohort(db: Session, payload: RankingCohortSchema):
    """
    Read the whole cohort, rank it, and check the cohort did not change before
    the caller commits. A stale rank set is discarded and ranking rerun.
    """
    for attempt in range(1, RANKING_MAX_ATTEMPTS + 1):
        cohort = query_cohort(db, payload.exam_id, payload.class_id, payload.section_id)
        fingerprint = cohort_fingerprint(cohort)
        ranked = rank_results(cohort)
        if current_cohort_fingerprint(db, payload) == fingerprint:
            return cohort, ranked
        db.rollback()
        logger.warning(f"Cohort changed during ranking (attempt {attempt}/{RANKING_MAX_ATTEMPTS})")
    raise CohortChangedError(details={"exam_id": payload.exam_id, "attempts": RANKING_MAX_ATTEMPTS})


@router.post("/positions")
def calculate_positions(payload: RankingCohortSchema, db: Session = Depends(get_db)):
    try:
        cohort, ranked = rank_cohort(db, payload)
    except CohortChangedError as e:
        raise HTTPException(status_code=409, detail=f"{e.message}. Try again.")

    commit_or_500(db)
    return {
        "success": True,
        "message": f"Updated positions for {len(ranked)} students",
        "ranked_count": len(ranked),
        "unranked_count": len(cohort) - len(ranked),
        "data": [
            {
                "result_id": r.id,
                "student_id": r.student_id,
                "percentage": r.percentage,
                "position": r.position,
            }
            for r in ranked
        ],
    }


# ===========================
#   PART 4: PUBLICATION CONTROL
# ===========================

def select_for_publication(db: Session, payload: PublishSchema):
    if payload.result_ids:
        return db.query(Result).filter(
            Result.exam_id == payload.exam_id,
            Result.id.in_(payload.result_ids),
        ).all()
    return query_cohort(db, payload.exam_id, payload.class_id, payload.section_id)


@router.post("/publish")
def publish(payload: PublishSchema, db: Session = Depends(get_db)):
    outcome = publish_results(select_for_publication(db, payload))
    commit_or_500(db)
    return {
        "success": True,
        "message": f"Published {len(outcome.changed_ids)} results",
        **outcome.as_dict(),
    }


@router.post("/unpublish")
def unpublish(payload: PublishSchema, db: Session = Depends(get_db)):
    outcome = unpublish_results(select_for_publication(db, payload))
    commit_or_500(db)
    return {
        "success": True,
        "message": f"Unpublished {len(outcome.changed_ids)} results",
        **outcome.as_dict(),
    }


# ===========================
#   PART 5: DELETION
# ===========================

@router.delete("/{result_id}")
def delete_result(result_id: int, db: Session = Depends(get_db)):
    result = get_result_or_404(db, result_id)
    db.delete(result)
    commit_or_500(db)
    return {"success": True, "message": "Result deleted successfully"}


@router.post("/bulk-delete")
def bulk_delete_results(payload: CohortSchema, db: Session = Depends(get_db)):
    results = query_cohort(db, payload.exam_id, payload.class_id, payload.section_id)
    for result in results:
        db.delete(result)
    commit_or_500(db)
    logger.info(f"Deleted {len(results)} results for exam {payload.exam_id}")
    return {
        "success": True,
        "message": f"Deleted {len(results)} results",
        "deleted_count": len(results),
    }
