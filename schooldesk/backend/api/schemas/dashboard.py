# schooldesk/backend/api/schemas/dashboard.py
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import Field

from .common import CamelModel


class NavigationItem(CamelModel):
    key: str
    label: str


class DashboardStudent(CamelModel):
    id: UUID
    student_number: str
    name: str
    class_name: Optional[str] = None
    parent_contact: Optional[str] = None
    average: Optional[float] = None
    status: Optional[str] = None


class DashboardClass(CamelModel):
    id: UUID
    name: str
    student_count: int
    teacher_names: Optional[List[str]] = None


class DashboardResponse(CamelModel):
    """Admins get counts, recent students and all classes; teachers their classes and students."""
    role: str
    counts: Optional[Dict[str, int]] = None
    recent_students: List[DashboardStudent] = Field(default_factory=list)
    students: List[DashboardStudent] = Field(default_factory=list)
    classes: List[DashboardClass] = Field(default_factory=list)
