# schooldesk/backend/api/schemas/imports.py
from typing import Dict, List

from .common import CamelModel


class RowErrorResponse(CamelModel):
    row: int
    message: str


class ImportResponse(CamelModel):
    """Outcome of a spreadsheet upload. Teacher credentials are only returned here."""
    created: int
    errors: List[RowErrorResponse]
    warnings: List[RowErrorResponse]
    credentials: List[Dict[str, str]]
