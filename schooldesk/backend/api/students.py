from fastapi import APIRouter, Depends, HTTPException, Query, status, Response, Request
from typing import List, Optional
from uuid import UUID

from ..services.student_service import StudentService
from ..services.errors import ServiceError
from ..models.db_models import User, RecordStatus
from .schemas.student import (
    StudentCreateRequest,
    StudentUpdateRequest,
    StudentResponse,
    StudentDetailResponse,
)
from .auth import require_admin
from .dependencies import get_student_service
from .utilities.http_errors import to_http_exception
from .utilities.limiter import limiter

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("", response_model=List[StudentResponse], summary="List students")
@limiter.limit("60/minute")
async def list_students(request: Request, class_id: Optional[UUID] = Query(None, alias="classId"),
                        status_filter: Optional[RecordStatus] = Query(None, alias="status"),
                        search: Optional[str] = None, user: User = Depends(require_admin),
                        service: StudentService = Depends(get_student_service)):
    return await service.list_students(class_id=class_id, status=status_filter, search=search)


@router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED, summary="Create a student")
@limiter.limit("30/minute")
async def create_student(request: Request, body: StudentCreateRequest, user: User = Depends(require_admin),
                         service: StudentService = Depends(get_student_service)):
    try:
        return await service.create_student(body.model_dump())
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("/{student_id}", response_model=StudentResponse, summary="Get a student")
@limiter.limit("60/minute")
async def get_student(request: Request, student_id: UUID, user: User = Depends(require_admin),
                      service: StudentService = Depends(get_student_service)):
    try:
        return await service.get_student(student_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("/{student_id}/detail", response_model=StudentDetailResponse, summary="Student page: grades by term, attendance and reports")
@limiter.limit("60/minute")
async def get_student_detail(request: Request, student_id: UUID, user: User = Depends(require_admin),
                             service: StudentService = Depends(get_student_service)):
    try:
        return await service.get_student_detail(student_id)
    except ServiceError as e:
        raise to_http_exception(e)


@router.patch("/{student_id}", response_model=StudentResponse, summary="Update a student")
@limiter.limit("30/minute")
async def update_student(request: Request, student_id: UUID, body: StudentUpdateRequest,
                         user: User = Depends(require_admin), service: StudentService = Depends(get_student_service)):
    updates = body.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update.")
    try:
        return await service.update_student(student_id, updates)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("/{student_id}/archive", status_code=status.HTTP_204_NO_CONTENT, summary="Archive a student")
@limiter.limit("30/minute")
async def archive_student(request: Request, student_id: UUID, user: User = Depends(require_admin),
                          service: StudentService = Depends(get_student_service)):
    try:
        await service.archive_student(student_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a student permanently")
@limiter.limit("10/minute")
async def delete_student(request: Request, student_id: UUID, user: User = Depends(require_admin),
                         service: StudentService = Depends(get_student_service)):
    try:
        await service.delete_student(student_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ServiceError as e:
        raise to_http_exception(e)
