# schooldesk/backend/models/db_models.py

from pydantic import BaseModel, Field
from datetime import date
from typing import Optional, List, Literal
from uuid import UUID

Role = Literal["admin", "teacher"]
RecordStatus = Literal["active", "inactive", "archived"]
AttendanceStatus = Literal["present", "absent", "late", "excused"]
TemplateType = Literal["report", "certificate", "indemnity"]


class User(BaseModel):
    """
    Represents an account in the system, mapping to the 'users' table.
    """
    id: UUID
    name: str
    role: Role = Field(..., description="Either 'admin' or 'teacher'")
    email: str
    password: str = Field(..., description="Stored and compared as plain text")
    status: RecordStatus = "active"

class StudentContact(BaseModel):
    """A parent or guardian contact, stored as JSONB on the student row."""
    full_name: str
    relationship: str
    phone: str
    email: Optional[str] = None

class Student(BaseModel):
    """
    Represents a student, mapping to the 'students' table.
    """
    id: UUID
    student_number: str
    first_name: str
    last_name: str
    class_id: Optional[UUID] = None
    dob: Optional[date] = None
    gender: str = ""
    address: str = ""
    allergies: Optional[str] = None
    medical_notes: Optional[str] = None
    parent_contact: StudentContact
    guardian_contact: Optional[StudentContact] = None
    status: RecordStatus = "active"

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

class Teacher(BaseModel):
    """
    A teacher as the rest of the system sees it: the 'teachers' row joined
    with its 'users' account and its 'teacher_classes' assignments.
    """
    id: UUID = Field(..., description="teachers.id")
    user_id: UUID = Field(..., description="FK to users.id")
    name: str = ""
    email: str = ""
    status: RecordStatus = "active"
    phone: Optional[str] = None
    signature_image: Optional[str] = None
    assigned_classes: List[UUID] = Field(default_factory=list)

class SchoolClass(BaseModel):
    id: UUID
    name: str

class Subject(BaseModel):
    id: UUID
    name: str
    class_id: UUID
    teacher_id: Optional[UUID] = Field(None, description="FK to users.id of the teaching account")

class Grade(BaseModel):
    """
    Represents a mark, mapping to the 'grades' table.
    Unique per (student_id, subject_id, term, academic_year).
    """
    id: UUID
    student_id: UUID
    subject_id: UUID
    marks: float = Field(..., ge=0, le=100)
    term: str
    academic_year: int
    comment: Optional[str] = None

class AcademicTerm(BaseModel):
    id: UUID
    year: int
    term: int
    name: str
    start_date: date
    end_date: date
    is_active: bool = False

class Attendance(BaseModel):
    """
    One student's status in one class on one date, mapping to the 'attendance' table.
    """
    id: UUID
    student_id: UUID
    class_id: UUID
    date: date
    status: AttendanceStatus
    comment: Optional[str] = None

class Template(BaseModel):
    id: UUID
    type: TemplateType
    name: str
    content: str
    created_by: Optional[UUID] = None

class TermReportRecord(BaseModel):
    """A rendered end-of-term report, mapping to the 'term_reports' table."""
    id: UUID
    student_id: UUID
    class_id: Optional[UUID] = None
    term: str
    template_id: Optional[UUID] = None
    generated_date: date
    generated_by: str
    content: str
    comments: str = ""

class IndemnityForm(BaseModel):
    """A rendered indemnity form, mapping to the 'indemnity_forms' table."""
    id: UUID
    student_id: UUID
    template_id: Optional[UUID] = None
    generated_date: date
    content: str
    signed_by: Optional[str] = None

class Certificate(BaseModel):
    id: UUID
    student_id: UUID
    type: str
    template_id: Optional[UUID] = None
    generated_date: date
