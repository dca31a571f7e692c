import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional
from uuid import UUID

import asyncpg

from ..db.db_client import affected_rows
from ..db.stores.students import StudentsStore
from ..db.stores.academics import ClassesStore, SubjectsStore, GradesStore
from ..db.stores.attendance import AttendanceStore
from ..db.stores.documents import ReportsStore
from ..models.db_models import Student
from ..modules import metrics
from .errors import ServiceError, NotFoundError, ConflictError

logger = logging.getLogger(__name__)


class StudentService:
    """
    Student records and the student detail view.
    """
    def __init__(self, students: StudentsStore, classes: ClassesStore, subjects: SubjectsStore,
                 grades: GradesStore, attendance: AttendanceStore, reports: ReportsStore):
        self.students = students
        self.classes = classes
        self.subjects = subjects
        self.grades = grades
        self.attendance = attendance
        self.reports = reports

    async def list_students(self, class_id: Optional[UUID] = None, status: Optional[str] = None,
                            search: Optional[str] = None) -> List[Student]:
        students = await (self.students.get_by_class(class_id) if class_id else self.students.get_all())
        if status:
            students = [student for student in students if student.status == status]
        if search:
            needle = search.strip().lower()
            students = [
                student for student in students
                if needle in student.full_name.lower() or needle in student.student_number.lower()
            ]
        return students

    async def get_student(self, student_id: UUID) -> Student:
        student = await self.students.get_by_id(student_id)
        if student is None:
            raise NotFoundError("Student not found.")
        return student

    async def _check_class(self, class_id: Optional[UUID]):
        if class_id and await self.classes.get_by_id(class_id) is None:
            raise NotFoundError("Class not found.")

    async def create_student(self, values: Dict[str, Any]) -> Student:
        await self._check_class(values.get("class_id"))
        try:
            student = await self.students.add(values)
            logger.info(f"Student {student.id} ({student.student_number}) created.")
            return student
        except asyncpg.UniqueViolationError as e:
            raise ConflictError("A student with this student number already exists.") from e
        except Exception as e:
            logger.error("Error while creating a student.", exc_info=True)
            raise ServiceError("A database error occurred while creating the student.") from e

    async def update_student(self, student_id: UUID, updates: Dict[str, Any]) -> Student:
        await self.get_student(student_id)
        if "class_id" in updates:
            await self._check_class(updates["class_id"])
        try:
            await self.students.update(student_id, updates)
        except asyncpg.UniqueViolationError as e:
            raise ConflictError("A student with this student number already exists.") from e
        except Exception as e:
            logger.error(f"Error while updating student {student_id}.", exc_info=True)
            raise ServiceError("A database error occurred while updating the student.") from e
        return await self.get_student(student_id)

    async def archive_student(self, student_id: UUID):
        status = await self.students.archive(student_id)
        if not affected_rows(status):
            raise NotFoundError("Student not found.")
        logger.info(f"Student {student_id} archived.")

    async def delete_student(self, student_id: UUID):
        try:
            status = await self.students.delete(student_id)
        except Exception as e:
            logger.error(f"Error while deleting student {student_id}.", exc_info=True)
            raise ServiceError("A database error occurred while deleting the student.") from e
        if not affected_rows(status):
            raise NotFoundError("Student not found.")
        logger.info(f"Student {student_id} deleted.")

    async def get_student_detail(self, student_id: UUID) -> Dict[str, Any]:
        """
        Everything the student page shows: the record, the class name, grades
        grouped by term with a per-term average, the attendance summary and
        rate, and the report history.
        """
        student = await self.get_student(student_id)
        school_class = await self.classes.get_by_id(student.class_id) if student.class_id else None
        grades = await self.grades.get_by_student(student_id)
        records = await self.attendance.get_by_student(student_id)
        reports = await self.reports.get_by_student(student_id)
        subjects = {subject.id: subject.name for subject in await self.subjects.get_all()}

        terms: "OrderedDict[str, List]" = OrderedDict()
        for grade in sorted(grades, key=lambda g: (g.academic_year, g.term)):
            terms.setdefault(f"{grade.term} {grade.academic_year}", []).append(grade)

        return {
            "student": student,
            "class_name": school_class.name if school_class else None,
            "grades_by_term": [
                {
                    "term": items[0].term,
                    "academic_year": items[0].academic_year,
                    "average": metrics.average_marks(items),
                    "grades": [
                        {**grade.model_dump(), "subject_name": subjects.get(grade.subject_id, "Unknown"),
                         "letter": metrics.grade_letter(grade.marks)}
                        for grade in items
                    ],
                }
                for items in terms.values()
            ],
            "attendance_summary": metrics.attendance_summary(records),
            "attendance_rate": metrics.attendance_rate(records),
            "recent_attendance": records[:10],
            "reports": reports,
        }
