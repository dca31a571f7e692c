from fastapi import APIRouter, Depends, HTTPException, Query, status, Response, Request
from typing import List, Optional
from uuid import UUID

from ..services.academic_service import AcademicService
from ..services.errors import ServiceError
from ..models.db_models import User
from .schemas.academics import (
    ClassRequest,
    ClassResponse,
    SubjectCreateRequest,
    SubjectUpdateRequest,
    SubjectResponse,
)
from .schemas.teacher import TeacherResponse
from .auth import require_admin, require_staff
from .dependencies import get_academic_service
from .utilities.http_errors import to_http_exception
from .utilities.limiter import limiter

router = APIRouter(tags=["Classes & Subjects"])

# === Classes ===

@router.get("/classes", response_model=List[ClassResponse], summary="Classes visible to the current user")
@limiter.limit("60/minute")
async def list_classes(request: Request, user: User = Depends(require_staff),
                       service: AcademicService = Depends(get_academic_service)):
    return await service.list_classes(user)


@router.post("/classes", response_model=ClassResponse, status_code=status.HTTP_201_CREATED, summary="Create a class")
@limiter.limit("30/minute")
async def create_class(request: Request, body: ClassRequest, user: User = Depends(require_admin),
                       service: AcademicService = Depends(get_academic_service)):
    try:
        return await service.create_class(body.name)
    except ServiceError as e:
        raise to_http_exception(e)


@router.put("/classes/{class_id}", response_model=ClassResponse, summary="Rename a class")
@limiter.limit("30/minute")
async def update_class(request: Request, class_id: UUID, body: ClassRequest, user: User = Depends(require_admin),
                       service: AcademicService = Depends(get_academic_service)):
    try:
        return await service.update_class(class_id, body.name)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete("/classes/{class_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a class")
@limiter.limit("10/minute")
async def delete_class(request: Request, class_id: UUID, user: User = Depends(require_admin),
                       service: AcademicService = Depends(get_academic_service)):
    try:
        await service.delete_class(class_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("/classes/{class_id}/teachers", response_model=List[TeacherResponse], summary="Teachers assigned to a class")
@limiter.limit("60/minute")
async def get_class_teachers(request: Request, class_id: UUID, user: User = Depends(require_admin),
                             service: AcademicService = Depends(get_academic_service)):
    try:
        return await service.get_class_teachers(class_id)
    except ServiceError as e:
        raise to_http_exception(e)

# === Subjects ===

@router.get("/subjects", response_model=List[SubjectResponse], summary="List subjects, optionally of one class")
@limiter.limit("60/minute")
async def list_subjects(request: Request, class_id: Optional[UUID] = Query(None, alias="classId"),
                        user: User = Depends(require_staff), service: AcademicService = Depends(get_academic_service)):
    return await service.list_subjects(class_id)


@router.post("/subjects", response_model=SubjectResponse, status_code=status.HTTP_201_CREATED, summary="Create a subject")
@limiter.limit("30/minute")
async def create_subject(request: Request, body: SubjectCreateRequest, user: User = Depends(require_admin),
                         service: AcademicService = Depends(get_academic_service)):
    try:
        return await service.create_subject(body.model_dump())
    except ServiceError as e:
        raise to_http_exception(e)


@router.patch("/subjects/{subject_id}", response_model=SubjectResponse, summary="Update a subject")
@limiter.limit("30/minute")
async def update_subject(request: Request, subject_id: UUID, body: SubjectUpdateRequest,
                         user: User = Depends(require_admin), service: AcademicService = Depends(get_academic_service)):
    updates = body.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update.")
    try:
        return await service.update_subject(subject_id, updates)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete("/subjects/{subject_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a subject")
@limiter.limit("10/minute")
async def delete_subject(request: Request, subject_id: UUID, user: User = Depends(require_admin),
                         service: AcademicService = Depends(get_academic_service)):
    try:
        await service.delete_subject(subject_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ServiceError as e:
        raise to_http_exception(e)
