import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

import asyncpg

from ..db.db_client import StoreError, affected_rows
from ..db.stores.academics import (
    DUPLICATE_GRADE_MESSAGE, ClassesStore, SubjectsStore, GradesStore, AcademicTermsStore
)
from ..db.stores.students import StudentsStore
from ..db.stores.teachers import TeachersStore
from ..models.db_models import AcademicTerm, Grade, SchoolClass, Subject, User
from ..modules import metrics
from .access import ensure_class_access, visible_classes
from .errors import ServiceError, NotFoundError, ConflictError

logger = logging.getLogger(__name__)


class AcademicService:
    """
    Classes, subjects, academic terms and the grade sheet.
    """
    def __init__(self, classes: ClassesStore, subjects: SubjectsStore, grades: GradesStore,
                 terms: AcademicTermsStore, students: StudentsStore, teachers: TeachersStore):
        self.classes = classes
        self.subjects = subjects
        self.grades = grades
        self.terms = terms
        self.students = students
        self.teachers = teachers

    # ===== Classes =====

    async def list_classes(self, user: User) -> List[SchoolClass]:
        return await visible_classes(self.classes, user)

    async def get_class(self, class_id: UUID) -> SchoolClass:
        school_class = await self.classes.get_by_id(class_id)
        if school_class is None:
            raise NotFoundError("Class not found.")
        return school_class

    async def create_class(self, name: str) -> SchoolClass:
        try:
            return await self.classes.add({"name": name.strip()})
        except asyncpg.UniqueViolationError as e:
            raise ConflictError("A class with this name already exists.") from e

    async def update_class(self, class_id: UUID, name: str) -> SchoolClass:
        try:
            status = await self.classes.update(class_id, {"name": name.strip()})
        except asyncpg.UniqueViolationError as e:
            raise ConflictError("A class with this name already exists.") from e
        if not affected_rows(status):
            raise NotFoundError("Class not found.")
        return await self.get_class(class_id)

    async def delete_class(self, class_id: UUID):
        try:
            status = await self.classes.delete(class_id)
        except Exception as e:
            logger.error(f"Error while deleting class {class_id}.", exc_info=True)
            raise ServiceError("A database error occurred while deleting the class.") from e
        if not affected_rows(status):
            raise NotFoundError("Class not found.")

    async def get_class_teachers(self, class_id: UUID) -> List:
        """Teacher profiles linked to the class."""
        await self.get_class(class_id)
        user_ids = set(await self.classes.get_teachers_for_class(class_id))
        return [teacher for teacher in await self.teachers.get_all() if teacher.user_id in user_ids]

    # ===== Subjects =====

    async def list_subjects(self, class_id: Optional[UUID] = None) -> List[Subject]:
        if class_id:
            return await self.subjects.get_by_class(class_id)
        return await self.subjects.get_all()

    async def create_subject(self, values: Dict[str, Any]) -> Subject:
        await self.get_class(values["class_id"])
        try:
            return await self.subjects.add(values)
        except StoreError as e:
            raise ServiceError(str(e)) from e

    async def update_subject(self, subject_id: UUID, updates: Dict[str, Any]) -> Subject:
        try:
            status = await self.subjects.update(subject_id, updates)
        except StoreError as e:
            raise ServiceError(str(e)) from e
        if not affected_rows(status):
            raise NotFoundError("Subject not found.")
        return await self.subjects.get_by_id(subject_id)

    async def delete_subject(self, subject_id: UUID):
        if not affected_rows(await self.subjects.delete(subject_id)):
            raise NotFoundError("Subject not found.")

    # ===== Academic terms =====

    async def list_terms(self) -> List[AcademicTerm]:
        return await self.terms.get_all()

    async def get_active_term(self) -> Optional[AcademicTerm]:
        return await self.terms.get_active()

    @staticmethod
    def _check_dates(start_date, end_date):
        if end_date < start_date:
            raise ServiceError("The term must end after it starts.")

    async def create_term(self, values: Dict[str, Any]) -> AcademicTerm:
        self._check_dates(values["start_date"], values["end_date"])
        try:
            term = await self.terms.add({**values, "is_active": False})
        except asyncpg.UniqueViolationError as e:
            raise ConflictError("This term already exists for that year.") from e
        if values.get("is_active"):
            term = await self.terms.set_active(term.id)
        return term

    async def update_term(self, term_id: UUID, updates: Dict[str, Any]) -> AcademicTerm:
        activate = updates.pop("is_active", None)
        if "start_date" in updates or "end_date" in updates:
            current = await self.terms.get_by_id(term_id)
            if current is None:
                raise NotFoundError("Academic term not found.")
            self._check_dates(updates.get("start_date", current.start_date),
                              updates.get("end_date", current.end_date))
        try:
            status = await self.terms.update(term_id, updates)
        except asyncpg.UniqueViolationError as e:
            raise ConflictError("This term already exists for that year.") from e
        except Exception as e:
            logger.error(f"Error while updating academic term {term_id}.", exc_info=True)
            raise ServiceError("A database error occurred while updating the academic term.") from e
        if updates and not affected_rows(status):
            raise NotFoundError("Academic term not found.")
        if activate:
            return await self.activate_term(term_id)
        term = await self.terms.get_by_id(term_id)
        if term is None:
            raise NotFoundError("Academic term not found.")
        return term

    async def activate_term(self, term_id: UUID) -> AcademicTerm:
        term = await self.terms.set_active(term_id)
        if term is None:
            raise NotFoundError("Academic term not found.")
        logger.info(f"Academic term '{term.name}' ({term.year}) is now active.")
        return term

    # ===== Grades =====

    async def _resolve_term(self, term: Optional[str], academic_year: Optional[int]):
        if term and academic_year:
            return term, academic_year
        active = await self.terms.get_active()
        if active is None:
            raise ServiceError("No active academic term. Please choose a term and year.")
        return term or active.name, academic_year or active.year

    async def get_grade_sheet(self, user: User, class_id: UUID, term: Optional[str] = None,
                              academic_year: Optional[int] = None) -> Dict[str, Any]:
        """
        The grade sheet of a class for one term: its students, its subjects,
        the recorded grades and each student's total and average.
        Term and year default to the active academic term.
        """
        await ensure_class_access(self.classes, user, class_id)
        await self.get_class(class_id)
        term, academic_year = await self._resolve_term(term, academic_year)
        students = [s for s in await self.students.get_by_class(class_id) if s.status == "active"]
        subjects = await self.subjects.get_by_class(class_id)
        grades = await self.grades.get_by_students([s.id for s in students], term, academic_year)

        rows = []
        for student in students:
            own = [grade for grade in grades if grade.student_id == student.id]
            rows.append({
                "student_id": student.id,
                "student_name": student.full_name,
                "student_number": student.student_number,
                "total": metrics.marks_total(own),
                "average": metrics.average_marks(own),
            })
        return {
            "class_id": class_id,
            "term": term,
            "academic_year": academic_year,
            "students": rows,
            "subjects": subjects,
            "grades": grades,
        }

    async def _subject_class(self, subject_id: UUID) -> UUID:
        subject = await self.subjects.get_by_id(subject_id)
        if subject is None:
            raise NotFoundError("Subject not found.")
        return subject.class_id

    async def add_grade(self, user: User, values: Dict[str, Any]) -> Grade:
        class_id = await self._subject_class(values["subject_id"])
        await ensure_class_access(self.classes, user, class_id)
        values["term"], values["academic_year"] = await self._resolve_term(
            values.get("term"), values.get("academic_year")
        )
        try:
            grade = await self.grades.add(values)
        except StoreError as e:
            logger.warning(f"Grade rejected: {e}")
            if str(e) == DUPLICATE_GRADE_MESSAGE:
                raise ConflictError(str(e)) from e
            raise ServiceError(str(e)) from e
        except asyncpg.UniqueViolationError as e:
            raise ConflictError(DUPLICATE_GRADE_MESSAGE) from e
        logger.info(f"Grade {grade.id} recorded by user {user.id}.")
        return grade

    async def update_grade(self, user: User, grade_id: UUID, updates: Dict[str, Any]) -> Grade:
        grade = await self.grades.get_by_id(grade_id)
        if grade is None:
            raise NotFoundError("Grade not found.")
        await ensure_class_access(self.classes, user, await self._subject_class(grade.subject_id))
        try:
            await self.grades.update(grade_id, updates)
        except asyncpg.UniqueViolationError as e:
            raise ConflictError(DUPLICATE_GRADE_MESSAGE) from e
        except Exception as e:
            logger.error(f"Error while updating grade {grade_id}.", exc_info=True)
            raise ServiceError("A database error occurred while updating the grade.") from e
        return await self.grades.get_by_id(grade_id)

    async def delete_grade(self, user: User, grade_id: UUID):
        grade = await self.grades.get_by_id(grade_id)
        if grade is None:
            raise NotFoundError("Grade not found.")
        await ensure_class_access(self.classes, user, await self._subject_class(grade.subject_id))
        await self.grades.delete(grade_id)
