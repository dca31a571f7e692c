from fastapi import APIRouter, Depends, HTTPException, Query, status, Response, Request
from typing import Optional
from uuid import UUID

from ..services.academic_service import AcademicService
from ..services.errors import ServiceError
from ..models.db_models import User
from .schemas.academics import GradeCreateRequest, GradeUpdateRequest, GradeResponse, GradeSheetResponse
from .auth import require_staff
from .dependencies import get_academic_service
from .utilities.http_errors import to_http_exception
from .utilities.limiter import limiter

router = APIRouter(prefix="/grades", tags=["Grades"])


@router.get("/sheet", response_model=GradeSheetResponse, summary="Grade sheet of a class for one term")
@limiter.limit("60/minute")
async def get_grade_sheet(request: Request, class_id: UUID = Query(..., alias="classId"),
                          term: Optional[str] = None,
                          academic_year: Optional[int] = Query(None, alias="academicYear"),
                          user: User = Depends(require_staff),
                          service: AcademicService = Depends(get_academic_service)):
    try:
        return await service.get_grade_sheet(user, class_id, term, academic_year)
    except ServiceError as e:
        raise to_http_exception(e)


@router.post("", response_model=GradeResponse, status_code=status.HTTP_201_CREATED, summary="Record a grade")
@limiter.limit("200/minute")
async def add_grade(request: Request, body: GradeCreateRequest, user: User = Depends(require_staff),
                    service: AcademicService = Depends(get_academic_service)):
    try:
        return await service.add_grade(user, body.model_dump())
    except ServiceError as e:
        raise to_http_exception(e)


@router.patch("/{grade_id}", response_model=GradeResponse, summary="Change a grade's marks or comment")
@limiter.limit("200/minute")
async def update_grade(request: Request, grade_id: UUID, body: GradeUpdateRequest, user: User = Depends(require_staff),
                       service: AcademicService = Depends(get_academic_service)):
    updates = body.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update.")
    try:
        return await service.update_grade(user, grade_id, updates)
    except ServiceError as e:
        raise to_http_exception(e)


@router.delete("/{grade_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a grade")
@limiter.limit("60/minute")
async def delete_grade(request: Request, grade_id: UUID, user: User = Depends(require_staff),
                       service: AcademicService = Depends(get_academic_service)):
    try:
        await service.delete_grade(user, grade_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except ServiceError as e:
        raise to_http_exception(e)
