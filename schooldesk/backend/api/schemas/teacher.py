# schooldesk/backend/api/schemas/teacher.py
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from ...models.db_models import RecordStatus
from .common import CamelModel, reject_null


class TeacherCreateRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: Optional[str] = None
    signature_image: Optional[str] = None
    assigned_classes: List[UUID] = Field(default_factory=list)


class TeacherUpdateRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None, min_length=3)
    status: Optional[RecordStatus] = None
    phone: Optional[str] = None
    signature_image: Optional[str] = None
    assigned_classes: Optional[List[UUID]] = None

    not_null = field_validator("name", "email", "status")(reject_null)


class TeacherResponse(CamelModel):
    id: UUID
    user_id: UUID
    name: str
    email: str
    status: str
    phone: Optional[str] = None
    signature_image: Optional[str] = None
    assigned_classes: List[UUID]


class TeacherCreatedResponse(CamelModel):
    """Returned once, on creation: the generated password is not retrievable later."""
    teacher: TeacherResponse
    password: str
