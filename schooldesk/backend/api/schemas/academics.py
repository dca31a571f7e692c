# schooldesk/backend/api/schemas/academics.py
from datetime import date
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from .common import CamelModel, reject_null


class ClassRequest(CamelModel):
    name: str = Field(..., min_length=1)


class ClassResponse(CamelModel):
    id: UUID
    name: str


class SubjectCreateRequest(CamelModel):
    name: str = Field(..., min_length=1)
    class_id: UUID
    teacher_id: Optional[UUID] = None


class SubjectUpdateRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    class_id: Optional[UUID] = None
    teacher_id: Optional[UUID] = None

    not_null = field_validator("name", "class_id")(reject_null)


class SubjectResponse(CamelModel):
    id: UUID
    name: str
    class_id: UUID
    teacher_id: Optional[UUID] = None


class TermCreateRequest(CamelModel):
    year: int = Field(..., ge=1900, le=2200)
    term: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    is_active: bool = False


class TermUpdateRequest(CamelModel):
    year: Optional[int] = Field(None, ge=1900, le=2200)
    term: Optional[int] = Field(None, ge=1)
    name: Optional[str] = Field(None, min_length=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None

    not_null = field_validator("year", "term", "name", "start_date", "end_date", "is_active")(reject_null)


class TermResponse(CamelModel):
    id: UUID
    year: int
    term: int
    name: str
    start_date: date
    end_date: date
    is_active: bool


class GradeCreateRequest(CamelModel):
    student_id: UUID
    subject_id: UUID
    marks: float = Field(..., ge=0, le=100)
    term: Optional[str] = None
    academic_year: Optional[int] = None
    comment: Optional[str] = None


class GradeUpdateRequest(CamelModel):
    marks: Optional[float] = Field(None, ge=0, le=100)
    comment: Optional[str] = None

    not_null = field_validator("marks")(reject_null)


class GradeResponse(CamelModel):
    id: UUID
    student_id: UUID
    subject_id: UUID
    marks: float
    term: str
    academic_year: int
    comment: Optional[str] = None


class GradeSheetRow(CamelModel):
    student_id: UUID
    student_name: str
    student_number: str
    total: float
    average: Optional[float] = None


class GradeSheetResponse(CamelModel):
    class_id: UUID
    term: str
    academic_year: int
    students: List[GradeSheetRow]
    subjects: List[SubjectResponse]
    grades: List[GradeResponse]
