from fastapi import APIRouter, Depends, HTTPException, status, Request
from typing import List, Optional

from uuid import UUID

from ..services.academic_service import AcademicService
from ..services.errors import ServiceError
from ..models.db_models import User
from .schemas.academics import TermCreateRequest, TermUpdateRequest, TermResponse
from .auth import require_admin, require_staff
from .dependencies import get_academic_service
from .utilities.http_errors import to_http_exception
from .utilities.limiter import limiter

router = APIRouter(prefix="/terms", tags=["Academic Terms"])


@router.get("", response_model=List[TermResponse], summary="All academic terms, newest year first")
@limiter.limit("60/minute")
async def list_terms(request: Request, user: User = Depends(require_staff),
                     service: AcademicService = Depends(get_academic_service)):
    return await service.list_terms()


@router.get("/active", response_model=Optional[TermResponse], summary="The active academic term, if any")
@limiter.limit("120/minute")
async def get_active_term(request: Request, user: User = Depends(require_staff),
                          service: AcademicService = Depends(get_academic_service)):
    return await service.get_active_term()


@router.post("", response_model=TermResponse, status_code=status.HTTP_201_CREATED, summary="Create an academic term")
@limiter.limit("20/minute")
async def create_term(request: Request, body: TermCreateRequest, user: User = Depends(require_admin),
                      service: AcademicService = Depends(get_academic_service)):
    try:
        return await service.create_term(body.model_dump())
    except ServiceError as e:
        raise to_http_exception(e)


@router.patch("/{term_id}", response_model=TermResponse, summary="Update an academic term")
@limiter.limit("20/minute")
async def update_term(request: Request, term_id: UUID, body: TermUpdateRequest, user: User = Depends(require_admin),
                      service: AcademicService = Depends(get_academic_service)):
    updates = body.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update.")
    try:
        return await service.update_term(term_id, updates)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("/{term_id}/activate", response_model=TermResponse, summary="Make a term the active one")
@limiter.limit("20/minute")
async def activate_term(request: Request, term_id: UUID, user: User = Depends(require_admin),
                        service: AcademicService = Depends(get_academic_service)):
    try:
        return await service.activate_term(term_id)
    except ServiceError as e:
        raise to_http_exception(e)
