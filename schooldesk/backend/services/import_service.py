import logging
import re
import secrets
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..db.stores.academics import ClassesStore
from ..db.stores.students import StudentsStore
from ..modules.spreadsheet import RowError, SpreadsheetError, StudentRow, parse_rows
from .errors import ServiceError
from .teacher_service import TeacherService

logger = logging.getLogger(__name__)


class ImportResult(BaseModel):
    created: int = 0
    errors: List[RowError] = Field(default_factory=list)
    warnings: List[RowError] = Field(default_factory=list)
    credentials: List[Dict[str, str]] = Field(default_factory=list)


def _class_key(name: str) -> str:
    return re.sub(r"\s+", "", name).lower()


def generate_student_number() -> str:
    return f"STU-{secrets.token_hex(4).upper()}"


class ImportService:
    """
    Bulk creation of students and teachers from uploaded .xlsx sheets.
    Invalid rows are reported and skipped; valid rows are created one by one.
    """
    def __init__(self, students: StudentsStore, classes: ClassesStore, teacher_service: TeacherService):
        self.students = students
        self.classes = classes
        self.teacher_service = teacher_service

    def _parse(self, data: bytes, kind: str):
        try:
            return parse_rows(data, kind)
        except SpreadsheetError as e:
            raise ServiceError(str(e)) from e

    @staticmethod
    def _match_class(classes: Dict[str, UUID], row: StudentRow) -> Optional[UUID]:
        """A class named after grade + section ('7A', '7 A', 'Grade 7A'), ignoring case and spaces."""
        if not row.grade:
            return None
        label = _class_key(f"{row.grade}{row.section or ''}")
        return classes.get(label) or classes.get(f"grade{label}")

    async def import_students(self, data: bytes) -> ImportResult:
        rows, errors = self._parse(data, "students")
        result = ImportResult(errors=errors)
        classes = {_class_key(c.name): c.id for c in await self.classes.get_all()}

        for row_number, row in rows:
            class_id = self._match_class(classes, row)
            if row.grade and class_id is None:
                result.warnings.append(RowError(
                    row=row_number, message=f"No class found for grade '{row.grade}' section '{row.section or ''}'."
                ))
            values: Dict[str, Any] = {
                "student_number": generate_student_number(),
                "first_name": row.first_name,
                "last_name": row.last_name,
                "class_id": class_id,
                "dob": row.date_of_birth,
                "gender": row.gender or "",
                "address": "",
                "parent_contact": {"full_name": "", "relationship": "Parent", "phone": "", "email": row.email},
                "status": "active",
            }
            try:
                await self.students.add(values)
                result.created += 1
            except Exception as e:
                logger.error(f"Student import failed on row {row_number}.", exc_info=True)
                result.errors.append(RowError(row=row_number, message=f"Could not be saved: {e}"))
        logger.info(f"Student import finished: {result.created} created, {len(result.errors)} rejected.")
        return result

    async def import_teachers(self, data: bytes) -> ImportResult:
        rows, errors = self._parse(data, "teachers")
        result = ImportResult(errors=errors)

        for row_number, row in rows:
            try:
                teacher, password = await self.teacher_service.create_teacher(
                    name=row.full_name, email=row.email, phone=row.phone
                )
            except ServiceError as e:
                result.errors.append(RowError(row=row_number, message=str(e)))
                continue
            result.created += 1
            result.credentials.append({"email": teacher.email, "password": password})
        logger.info(f"Teacher import finished: {result.created} created, {len(result.errors)} rejected.")
        return result
