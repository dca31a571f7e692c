# schooldesk/backend/api/schemas/document.py
from datetime import date
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from ...models.db_models import TemplateType
from .common import CamelModel, reject_null


class TemplateCreateRequest(CamelModel):
    type: TemplateType
    name: str = Field(..., min_length=1)
    content: str


class TemplateUpdateRequest(CamelModel):
    type: Optional[TemplateType] = None
    name: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = None

    not_null = field_validator("type", "name", "content")(reject_null)


class TemplateResponse(CamelModel):
    id: UUID
    type: TemplateType
    name: str
    content: str
    created_by: Optional[UUID] = None


class ReportRequest(CamelModel):
    student_id: UUID
    term: str = Field(..., min_length=1)
    class_id: Optional[UUID] = None
    academic_year: Optional[int] = None
    template_id: Optional[UUID] = None
    teacher_comment: Optional[str] = None


class CertificateRequest(CamelModel):
    student_id: UUID
    term: Optional[str] = None
    class_id: Optional[UUID] = None
    template_id: Optional[UUID] = None
    subject: Optional[str] = None


class IndemnityRequest(CamelModel):
    student_id: UUID
    class_id: Optional[UUID] = None
    template_id: Optional[UUID] = None


class GeneratedDocumentResponse(CamelModel):
    content: str
    template_id: Optional[UUID] = None
    record_id: Optional[UUID] = None
    persisted: bool


class TermReportResponse(CamelModel):
    id: UUID
    student_id: UUID
    class_id: Optional[UUID] = None
    term: str
    template_id: Optional[UUID] = None
    generated_date: date
    generated_by: str
    content: str
    comments: str


class IndemnityFormResponse(CamelModel):
    id: UUID
    student_id: UUID
    template_id: Optional[UUID] = None
    generated_date: date
    content: str
    signed_by: Optional[str] = None


class CertificateResponse(CamelModel):
    id: UUID
    student_id: UUID
    type: str
    template_id: Optional[UUID] = None
    generated_date: date


class DocumentHistoryResponse(CamelModel):
    reports: List[TermReportResponse]
    indemnity_forms: List[IndemnityFormResponse]
    certificates: List[CertificateResponse]
