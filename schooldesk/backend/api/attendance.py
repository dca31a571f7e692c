from fastapi import APIRouter, Depends, Query, Request
from datetime import date
from typing import List
from uuid import UUID

from ..services.attendance_service import AttendanceService
from ..services.errors import ServiceError
from ..models.db_models import User
from .schemas.attendance import (
    AttendanceResponse,
    AttendanceSaveRequest,
    RegisterResponse,
    StudentAttendanceResponse,
)
from .auth import require_staff
from .dependencies import get_attendance_service
from .utilities.http_errors import to_http_exception
from .utilities.limiter import limiter

router = APIRouter(prefix="/attendance", tags=["Attendance"])


@router.get("/register", response_model=RegisterResponse, summary="Register of a class on a date")
@limiter.limit("60/minute")
async def get_register(request: Request, class_id: UUID = Query(..., alias="classId"),
                       day: date = Query(..., alias="date"), user: User = Depends(require_staff),
                       service: AttendanceService = Depends(get_attendance_service)):
    try:
        return await service.get_register(user, class_id, day)
    except ServiceError as e:
        raise to_http_exception(e)


@router.put("/register", response_model=List[AttendanceResponse], summary="Save (replace) a class register")
@limiter.limit("30/minute")
async def save_register(request: Request, body: AttendanceSaveRequest, user: User = Depends(require_staff),
                        service: AttendanceService = Depends(get_attendance_service)):
    entries = [entry.model_dump() for entry in body.records]
    try:
        return await service.save_register(user, body.class_id, body.date, entries)
    except ServiceError as e:
        raise to_http_exception(e)


@router.get("/students/{student_id}", response_model=StudentAttendanceResponse, summary="A student's attendance history")
@limiter.limit("60/minute")
async def get_student_history(request: Request, student_id: UUID, user: User = Depends(require_staff),
                              service: AttendanceService = Depends(get_attendance_service)):
    try:
        return await service.get_student_history(user, student_id)
    except ServiceError as e:
        raise to_http_exception(e)
