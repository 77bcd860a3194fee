"""
Mark Sheet Bulk Import Router
Lets staff upload an Excel mark sheet (one row per student, one column per
subject) and enter the marks of a whole class in one go. Rows with errors are
reported back while the valid rows are saved.
"""

import io
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session, joinedload

# Import pandas and openpyxl for Excel processing
import pandas as pd

from database import get_db
from models.exams import ExamSchedule
from routers.results import commit_or_500, engine_error_detail, merge_marks, query_cohort
from schemas.results import MarkEntrySchema
from services.evaluation import SubjectRemark
from services.exceptions import MarksValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bulk-import", tags=["Bulk Import"])

ABSENT_MARKERS = {"ab", "abs", "absent", "a"}

# ==========================================
#   CELL HELPERS
# ==========================================

def safe_str(value) -> Optional[str]:
    """Safely convert value to string, handling NaN and None"""
    if value is None or pd.isna(value):
        return None
    return str(value).strip() if str(value).strip() else None


def parse_mark_cell(value):
    """
    Returns (obtained_marks, remarks, error).
    Blank -> skipped, AB/Absent -> absent with 0 marks, number -> marks.
    """
    text = safe_str(value)
    if text is None:
        return None, None, None
    if text.lower() in ABSENT_MARKERS:
        return 0.0, SubjectRemark.ABSENT.value, None
    try:
        return float(text), "", None
    except (ValueError, TypeError):
        return None, None, f"'{text}' is not a valid mark"


def subject_columns(result, columns: List[str]) -> Dict[str, int]:
    """Map sheet columns to this result's subject ids, by subject name or unique code."""
    by_name = {}
    by_code: Dict[str, List[int]] = {}
    for row in result.subjects:
        if row.subject_val is not None and row.subject_val.subject_name:
            by_name[row.subject_val.subject_name.strip().lower()] = row.subject_id
        if row.subject_code:
            by_code.setdefault(row.subject_code.strip().lower(), []).append(row.subject_id)

    mapping = {}
    for column in columns:
        if column in by_name:
            mapping[column] = by_name[column]
        elif len(by_code.get(column, [])) == 1:
            mapping[column] = by_code[column][0]
    return mapping


# ==========================================
#   MAIN MARKS IMPORT ENDPOINT
# ==========================================

@router.post("/marks")
async def bulk_import_marks(
    exam_id: int,
    class_id: int,
    section_id: Optional[int] = None,
    file: UploadFile = File(...),
    db: Session = Depends(get_db)
):
    """
    Import marks for one exam/class from an Excel file.

    Expected columns: admission_no, then one column per subject (subject name,
    or subject code when the code is not shared). Cells: number = marks,
    AB = absent, blank = left as it is.
    """
    if not file.filename.endswith(('.xlsx', '.xls')):
        raise HTTPException(
            status_code=400,
            detail="Invalid file format. Please upload an Excel file (.xlsx or .xls)"
        )

    try:
        contents = await file.read()
        engine = 'openpyxl' if file.filename.endswith('.xlsx') else None
        df = pd.read_excel(io.BytesIO(contents), engine=engine)
        df.columns = df.columns.astype(str).str.strip().str.lower()
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Error reading Excel file: {str(e)}")

    if 'admission_no' not in df.columns:
        raise HTTPException(status_code=400, detail="Missing column 'admission_no' in Excel")

    results = query_cohort(db, exam_id, class_id, section_id)
    by_admission = {
        r.student_val.admission_no.strip().lower(): r
        for r in results if r.student_val is not None and r.student_val.admission_no
    }

    errors: List[Dict[str, Any]] = []
    updated_count = 0
    total_rows = len(df)
    mark_columns = [c for c in df.columns if c not in ('admission_no', 'student_name', 'roll_no')]

    for idx, row in df.iterrows():
        row_num = idx + 2  # Excel row number (1-indexed + header)

        if row.isna().all():
            continue

        admission_no = safe_str(row.get('admission_no'))
        if not admission_no:
            errors.append({"row": row_num, "error": "Missing required field 'admission_no'"})
            continue

        result = by_admission.get(admission_no.lower())
        if not result:
            errors.append({"row": row_num, "error": f"No result found for admission no '{admission_no}'"})
            continue

        mapping = subject_columns(result, mark_columns)
        unknown = [c for c in mark_columns if c not in mapping]
        if unknown:
            errors.append({"row": row_num, "error": f"Unknown subject column(s): {', '.join(unknown)}"})
            continue

        items = []
        cell_errors = []
        for column, subject_id in mapping.items():
            obtained, remarks, error = parse_mark_cell(row.get(column))
            if error:
                cell_errors.append(f"{column}: {error}")
            elif remarks is not None:
                items.append(MarkEntrySchema(subject_id=subject_id, obtained_marks=obtained, remarks=remarks))
        if cell_errors:
            errors.append({"row": row_num, "error": "; ".join(cell_errors)})
            continue
        if not items:
            continue

        try:
            merge_marks(result, items)
        except MarksValidationError as e:
            errors.append({"row": row_num, "error": engine_error_detail(e)})
            continue
        updated_count += 1

    commit_or_500(db)
    logger.info(f"Mark sheet import for exam {exam_id}, class {class_id}: "
                f"{updated_count} updated, {len(errors)} rejected")

    return {
        "success": True,
        "total_rows": total_rows,
        "updated_count": updated_count,
        "error_count": len(errors),
        "errors": errors
    }


# ==========================================
#   SAMPLE TEMPLATE DOWNLOAD
# ==========================================

@router.get("/marks-template")
async def get_marks_template(exam_id: int, class_id: int, db: Session = Depends(get_db)):
    """
    Returns the expected column names for the mark sheet of one exam/class.
    """
    schedules = db.query(ExamSchedule).filter(
        ExamSchedule.exam_id == exam_id,
        ExamSchedule.class_id == class_id
    ).options(joinedload(ExamSchedule.subject_val)).order_by(ExamSchedule.id).all()

    return {
        "required_columns": ["admission_no"],
        "subject_columns": [
            {
                "column": s.subject_val.subject_name,
                "subject_code": s.subject_val.subject_code,
                "max_marks": s.max_marks,
                "pass_marks": s.pass_marks,
            }
            for s in schedules
        ],
        "optional_columns": ["student_name", "roll_no"],
        "notes": [
            "admission_no should match the student's admission number exactly",
            "Enter a number for marks, AB for absent, leave blank to keep existing marks",
            "Results must be created for the class before importing marks",
        ]
    }
