from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, StringConstraints


# ===========================
#   INPUT SCHEMAS
# ===========================

# One subject while creating a result (marks may still be unset)
class SubjectEntrySchema(BaseModel):
    subject_id: int
    total_marks: Optional[float] = None    # falls back to the exam schedule
    passing_marks: Optional[float] = None
    obtained_marks: Optional[float] = None  # None = not entered yet
    remarks: Optional[str] = None

class ResultCreateSchema(BaseModel):
    student_id: int
    exam_id: int
    class_id: int
    section_id: Optional[int] = None
    subjects: List[SubjectEntrySchema] = []

class BulkCreateSchema(BaseModel):
    exam_id: int
    class_id: int
    section_id: Optional[int] = None

# Mark entry for an existing result
class MarkEntrySchema(BaseModel):
    subject_id: int
    obtained_marks: Optional[float] = None
    remarks: Optional[str] = None

class MarksUpdateSchema(BaseModel):
    subjects: List[MarkEntrySchema]

class BulkMarksItem(BaseModel):
    result_id: int
    subjects: List[MarkEntrySchema]

class BulkMarksUpdateSchema(BaseModel):
    results: List[BulkMarksItem]

# Live evaluation on the entry screen (nothing saved)
class EvaluationEntrySchema(BaseModel):
    subject_id: Optional[int] = None
    subject_code: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    total_marks: float
    passing_marks: float
    obtained_marks: Optional[float] = None
    remarks: Optional[str] = None

class EvaluationRequestSchema(BaseModel):
    subjects: List[EvaluationEntrySchema]

# exam + class (+ section) selection for batch operations
class CohortSchema(BaseModel):
    exam_id: int
    class_id: Optional[int] = None
    section_id: Optional[int] = None

class PublishSchema(CohortSchema):
    result_ids: Optional[List[int]] = None

# ranking always happens inside one class (optionally one section)
class RankingCohortSchema(BaseModel):
    exam_id: int
    class_id: int
    section_id: Optional[int] = None


# ===========================
#   RESPONSE SCHEMAS
# ===========================

class ResultSubjectOut(BaseModel):
    subject_id: int
    subject_code: str
    total_marks: float
    passing_marks: float
    obtained_marks: Optional[float] = None
    grade: Optional[str] = ""
    remarks: Optional[str] = ""
    is_passed: bool = False

    model_config = ConfigDict(from_attributes=True)

class ResultOut(BaseModel):
    id: int
    student_id: int
    exam_id: int
    class_id: int
    section_id: Optional[int] = None
    subjects: List[ResultSubjectOut] = []
    total_marks: float
    total_obtained_marks: float
    percentage: float
    grade: Optional[str] = ""
    result: str
    position: Optional[int] = None
    is_published: bool = False
    published_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
