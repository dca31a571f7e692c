from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status, Request
from fastapi.responses import Response
from typing import Literal

from ..services.import_service import ImportService
from ..services.errors import ServiceError
from ..models.db_models import User
from ..modules.spreadsheet import build_template
from .schemas.imports import ImportResponse
from .auth import require_admin
from .dependencies import get_import_service
from .utilities.http_errors import to_http_exception
from .utilities.limiter import limiter

router = APIRouter(prefix="/imports", tags=["Spreadsheet Import"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MAX_UPLOAD_BYTES = 5 * 1024 * 1024


@router.get("/{kind}/template", summary="Download the column template for an import")
@limiter.limit("30/minute")
async def download_template(request: Request, kind: Literal["students", "teachers"],
                            user: User = Depends(require_admin)):
    return Response(
        content=build_template(kind),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{kind}_template.xlsx"'},
    )


@router.post("/{kind}", response_model=ImportResponse, summary="Import students or teachers from an .xlsx file")
@limiter.limit("10/minute")
async def import_sheet(request: Request, kind: Literal["students", "teachers"], file: UploadFile = File(...),
                       user: User = Depends(require_admin), service: ImportService = Depends(get_import_service)):
    data = await file.read()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="The uploaded file is empty.")
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="The uploaded file is too large.")
    try:
        if kind == "students":
            return await service.import_students(data)
        return await service.import_teachers(data)
    except ServiceError as e:
        raise to_http_exception(e)
