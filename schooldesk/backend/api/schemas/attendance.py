# schooldesk/backend/api/schemas/attendance.py
from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import Field

from ...models.db_models import AttendanceStatus
from .common import CamelModel


class AttendanceResponse(CamelModel):
    id: UUID
    student_id: UUID
    class_id: UUID
    date: date
    status: AttendanceStatus
    comment: Optional[str] = None


class RegisterEntry(CamelModel):
    student_id: UUID
    student_name: str
    student_number: str
    status: AttendanceStatus
    comment: Optional[str] = None


class RegisterResponse(CamelModel):
    class_id: UUID
    date: date
    saved: bool
    locked: bool
    entries: List[RegisterEntry]
    summary: Dict[str, int]


class AttendanceEntryRequest(CamelModel):
    student_id: UUID
    status: AttendanceStatus = "present"
    comment: Optional[str] = None


class AttendanceSaveRequest(CamelModel):
    class_id: UUID
    date: date
    records: List[AttendanceEntryRequest] = Field(default_factory=list)


class StudentAttendanceResponse(CamelModel):
    student_id: UUID
    records: List[AttendanceResponse]
    summary: Dict[str, int]
    rate: int
