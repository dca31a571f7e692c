"""
Spreadsheet templates and imports for students and teachers.

Each kind has a fixed column template. Uploaded sheets are read with
openpyxl, headers are folded to snake_case and every data row is validated
by a pydantic row schema. Rows that fail validation are reported with their
sheet row number and never reach the stores.
"""
import io
import logging
from datetime import date, datetime
from typing import Dict, List, Literal, Optional, Tuple, Type

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from pydantic import BaseModel, ValidationError, field_validator

from .naming import to_snake_case

logger = logging.getLogger(__name__)

SheetKind = Literal["students", "teachers"]

TEMPLATE_COLUMNS: Dict[str, List[str]] = {
    "students": ["first_name", "last_name", "email", "gender", "date_of_birth", "grade", "section"],
    "teachers": ["first_name", "last_name", "email", "phone", "subject", "qualification"],
}


class SpreadsheetError(Exception):
    """The upload is not a readable workbook or lacks required columns."""
    pass


class _SheetRow(BaseModel):
    @field_validator("*", mode="before")
    @classmethod
    def _cell_to_text(cls, value):
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        text = str(value).strip()
        return text or None

    @field_validator("email", mode="after", check_fields=False)
    @classmethod
    def _check_email(cls, value):
        if value is not None and ("@" not in value or value.startswith("@") or value.endswith("@")):
            raise ValueError("not a valid email address")
        return value.lower() if value else value


class StudentRow(_SheetRow):
    first_name: str
    last_name: str
    email: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    grade: Optional[str] = None
    section: Optional[str] = None


class TeacherRow(_SheetRow):
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    subject: Optional[str] = None
    qualification: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


ROW_SCHEMAS: Dict[str, Type[_SheetRow]] = {"students": StudentRow, "teachers": TeacherRow}


class RowError(BaseModel):
    row: int
    message: str


def build_template(kind: SheetKind) -> bytes:
    """An .xlsx with the header row for `kind` and nothing else."""
    columns = TEMPLATE_COLUMNS[kind]
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Template"
    sheet.append(columns)
    header_fill = PatternFill(start_color="F5F5F5", end_color="F5F5F5", fill_type="solid")
    for index, cell in enumerate(sheet[1], start=1):
        cell.font = Font(bold=True)
        cell.fill = header_fill
        sheet.column_dimensions[get_column_letter(index)].width = max(14, len(columns[index - 1]) + 4)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _format_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item["loc"])
        parts.append(f"{field}: {item['msg']}" if field else item["msg"])
    return "; ".join(parts)


def parse_rows(data: bytes, kind: SheetKind) -> Tuple[List[Tuple[int, _SheetRow]], List[RowError]]:
    """
    Reads the first sheet of an uploaded workbook.

    Returns the valid rows paired with their sheet row number, and the
    errors of the invalid ones. Fully blank rows are skipped.
    """
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except Exception as e:
        logger.warning(f"Could not open uploaded workbook: {e}")
        raise SpreadsheetError("The file is not a valid .xlsx workbook.") from e

    sheet = workbook.worksheets[0]
    rows = sheet.iter_rows(values_only=True)
    header = next(rows, None)
    if header is None:
        raise SpreadsheetError("The workbook is empty.")

    headers = [to_snake_case(str(cell)) if cell is not None else "" for cell in header]
    schema = ROW_SCHEMAS[kind]
    required = [name for name, field in schema.model_fields.items() if field.is_required()]
    missing = [name for name in required if name not in headers]
    if missing:
        raise SpreadsheetError(f"Missing required column(s): {', '.join(missing)}")

    valid, errors = [], []
    for row_number, values in enumerate(rows, start=2):
        if values is None or all(value is None or str(value).strip() == "" for value in values):
            continue
        record = {
            name: value for name, value in zip(headers, values)
            if name in schema.model_fields
        }
        try:
            valid.append((row_number, schema.model_validate(record)))
        except ValidationError as e:
            errors.append(RowError(row=row_number, message=_format_error(e)))
    workbook.close()
    logger.info(f"Parsed {kind} sheet: {len(valid)} valid row(s), {len(errors)} rejected.")
    return valid, errors
