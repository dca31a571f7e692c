from fastapi import APIRouter, Depends, HTTPException, Query, status, Response, Request
from typing import List, Optional
from uuid import UUID

from ..services.teacher_service import TeacherService
from ..services.errors import ServiceError
from ..models.db_models import User, RecordStatus
from .schemas.teacher import (
    TeacherCreateRequest,
    TeacherUpdateRequest,
    TeacherResponse,
    TeacherCreatedResponse,
)
from .auth import require_admin
from .dependencies import get_teacher_service
from .utilities.http_errors import to_http_exception
from .utilities.limiter import limiter

router = APIRouter(prefix="/teachers", tags=["Teachers"])


@router.get("", response_model=List[TeacherResponse], summary="List teachers")
@limiter.limit("60/minute")
async def list_teachers(request: Request, status_filter: Optional[RecordStatus] = Query(None, alias="status"),
                        user: User = Depends(require_admin), service: TeacherService = Depends(get_teacher_service)):
    return await service.list_teachers(status=status_filter)


@router.post("", response_model=TeacherCreatedResponse, status_code=status.HTTP_201_CREATED,
             summary="Create a teacher account with a generated password")
@limiter.limit("20/minute")
async def create_teacher(request: Request, body: TeacherCreateRequest, user: User = Depends(require_admin),
                         service: TeacherService = Depends(get_teacher_service)):
    try:
        teacher, password = await service.create_teacher(**body.model_dump())
        return {"teacher": teacher, "password": password}
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("/{teacher_id}", response_model=TeacherResponse, summary="Get a teacher")
@limiter.limit("60/minute")
async def get_teacher(request: Request, teacher_id: UUID, user: User = Depends(require_admin),
                      service: TeacherService = Depends(get_teacher_service)):
    try:
        return await service.get_teacher(teacher_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.patch("/{teacher_id}", response_model=TeacherResponse, summary="Update a teacher and their class assignments")
@limiter.limit("30/minute")
async def update_teacher(request: Request, teacher_id: UUID, body: TeacherUpdateRequest,
                         user: User = Depends(require_admin), service: TeacherService = Depends(get_teacher_service)):
    updates = body.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update.")
    try:
        return await service.update_teacher(teacher_id, updates)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("/{teacher_id}/archive", status_code=status.HTTP_204_NO_CONTENT, summary="Archive a teacher")
@limiter.limit("30/minute")
async def archive_teacher(request: Request, teacher_id: UUID, user: User = Depends(require_admin),
                          service: TeacherService = Depends(get_teacher_service)):
    try:
        await service.archive_teacher(teacher_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete("/{teacher_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a teacher profile")
@limiter.limit("10/minute")
async def delete_teacher(request: Request, teacher_id: UUID, user: User = Depends(require_admin),
                         service: TeacherService = Depends(get_teacher_service)):
    try:
        await service.delete_teacher(teacher_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ServiceError as e:
        raise to_http_exception(e)
