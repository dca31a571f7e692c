from fastapi import APIRouter, Depends, HTTPException, Query, status, Response, Request
from fastapi.responses import HTMLResponse
from typing import List, Literal, Optional
from uuid import UUID

from ..services.document_service import DocumentService
from ..services.errors import ServiceError
from ..models.db_models import User, TemplateType
from .schemas.document import (
    TemplateCreateRequest,
    TemplateUpdateRequest,
    TemplateResponse,
    ReportRequest,
    CertificateRequest,
    IndemnityRequest,
    GeneratedDocumentResponse,
    DocumentHistoryResponse,
)
from .auth import require_admin, require_staff
from .dependencies import get_document_service
from .utilities.http_errors import to_http_exception
from .utilities.limiter import limiter

templates_router = APIRouter(prefix="/templates", tags=["Templates"])
router = APIRouter(prefix="/documents", tags=["Documents"])

# === Templates ===

@templates_router.get("", response_model=List[TemplateResponse], summary="List templates, optionally of one type")
@limiter.limit("60/minute")
async def list_templates(request: Request, template_type: Optional[TemplateType] = Query(None, alias="type"),
                         user: User = Depends(require_staff), service: DocumentService = Depends(get_document_service)):
    return await service.list_templates(template_type)


@templates_router.get("/{template_id}", response_model=TemplateResponse, summary="Get a template")
@limiter.limit("60/minute")
async def get_template(request: Request, template_id: UUID, user: User = Depends(require_staff),
                       service: DocumentService = Depends(get_document_service)):
    try:
        return await service.get_template(template_id)
    except ServiceError as e:
        raise to_http_exception(e)


@templates_router.post("", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED, summary="Create a template")
@limiter.limit("30/minute")
async def create_template(request: Request, body: TemplateCreateRequest, user: User = Depends(require_admin),
                          service: DocumentService = Depends(get_document_service)):
    return await service.create_template(user, body.model_dump())


@templates_router.patch("/{template_id}", response_model=TemplateResponse, summary="Update a template")
@limiter.limit("30/minute")
async def update_template(request: Request, template_id: UUID, body: TemplateUpdateRequest,
                          user: User = Depends(require_admin), service: DocumentService = Depends(get_document_service)):
    updates = body.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update.")
    try:
        return await service.update_template(template_id, updates)
    except ServiceError as e:
        raise to_http_exception(e)


@templates_router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a template")
@limiter.limit("10/minute")
async def delete_template(request: Request, template_id: UUID, user: User = Depends(require_admin),
                          service: DocumentService = Depends(get_document_service)):
    try:
        await service.delete_template(template_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ServiceError as e:
        raise to_http_exception(e)

# === Generation ===

@router.post("/reports", response_model=GeneratedDocumentResponse, summary="Generate a term report")
@limiter.limit("60/minute")
async def generate_report(request: Request, body: ReportRequest, user: User = Depends(require_staff),
                          service: DocumentService = Depends(get_document_service)):
    try:
        return await service.generate_report(user, **body.model_dump())
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("/certificates", response_model=GeneratedDocumentResponse, summary="Generate a certificate")
@limiter.limit("60/minute")
async def generate_certificate(request: Request, body: CertificateRequest, user: User = Depends(require_staff),
                               service: DocumentService = Depends(get_document_service)):
    try:
        return await service.generate_certificate(user, **body.model_dump())
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("/indemnity", response_model=GeneratedDocumentResponse, summary="Generate an indemnity form")
@limiter.limit("60/minute")
async def generate_indemnity(request: Request, body: IndemnityRequest, user: User = Depends(require_staff),
                             service: DocumentService = Depends(get_document_service)):
    try:
        return await service.generate_indemnity(user, **body.model_dump())
    except ServiceError as e:
        raise to_http_exception(e)

# === History & printing ===

@router.get("/students/{student_id}", response_model=DocumentHistoryResponse, summary="Documents generated for a student")
@limiter.limit("60/minute")
async def get_history(request: Request, student_id: UUID, user: User = Depends(require_staff),
                      service: DocumentService = Depends(get_document_service)):
    try:
        return await service.get_history(user, student_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("/{kind}/{record_id}/print", response_class=HTMLResponse, summary="Printable page of a stored document")
@limiter.limit("60/minute")
async def print_document(request: Request, kind: Literal["reports", "indemnity"], record_id: UUID,
                         user: User = Depends(require_staff), service: DocumentService = Depends(get_document_service)):
    try:
        return HTMLResponse(await service.render_printable(user, kind, record_id))
    except ServiceError as e:
        raise to_http_exception(e)
