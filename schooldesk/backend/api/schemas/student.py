# schooldesk/backend/api/schemas/student.py
from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from ...models.db_models import RecordStatus
from .common import CamelModel, reject_null
from .attendance import AttendanceResponse
from .document import TermReportResponse


class StudentContactSchema(CamelModel):
    full_name: str
    relationship: str
    phone: str
    email: Optional[str] = None


class StudentCreateRequest(CamelModel):
    student_number: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    class_id: Optional[UUID] = None
    dob: Optional[date] = None
    gender: str = ""
    address: str = ""
    allergies: Optional[str] = None
    medical_notes: Optional[str] = None
    parent_contact: StudentContactSchema
    guardian_contact: Optional[StudentContactSchema] = None
    status: RecordStatus = "active"


class StudentUpdateRequest(CamelModel):
    student_number: Optional[str] = Field(None, min_length=1)
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    class_id: Optional[UUID] = None
    dob: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    allergies: Optional[str] = None
    medical_notes: Optional[str] = None
    parent_contact: Optional[StudentContactSchema] = None
    guardian_contact: Optional[StudentContactSchema] = None
    status: Optional[RecordStatus] = None

    not_null = field_validator("student_number", "first_name", "last_name", "gender", "address",
                               "parent_contact", "status")(reject_null)


class StudentResponse(CamelModel):
    id: UUID
    student_number: str
    first_name: str
    last_name: str
    class_id: Optional[UUID] = None
    dob: Optional[date] = None
    gender: str
    address: str
    allergies: Optional[str] = None
    medical_notes: Optional[str] = None
    parent_contact: StudentContactSchema
    guardian_contact: Optional[StudentContactSchema] = None
    status: str


class StudentGradeEntry(CamelModel):
    id: UUID
    subject_id: UUID
    subject_name: str
    marks: float
    letter: str
    comment: Optional[str] = None


class TermGrades(CamelModel):
    term: str
    academic_year: int
    average: Optional[float] = None
    grades: List[StudentGradeEntry]


class StudentDetailResponse(CamelModel):
    student: StudentResponse
    class_name: Optional[str] = None
    grades_by_term: List[TermGrades]
    attendance_summary: Dict[str, int]
    attendance_rate: int
    recent_attendance: List[AttendanceResponse]
    reports: List[TermReportResponse]
