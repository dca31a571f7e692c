import logging
from datetime import date
from typing import Any, Dict, List, Optional

from ..db_client import AsyncPostgresClient, StoreError
from ...models.db_models import SchoolClass, Subject, Grade, AcademicTerm

logger = logging.getLogger(__name__)

UNASSIGNED_TEACHER_MESSAGE = (
    "This teacher is not assigned to teach this class. "
    "Please assign them to the class first in Teacher Management."
)
DUPLICATE_GRADE_MESSAGE = "A grade for this student, subject, and term already exists"
CLASS_MISMATCH_MESSAGE = "Student is not enrolled in the class for this subject"


class ClassesStore(AsyncPostgresClient):
    table = "classes"
    model = SchoolClass

    async def get_all(self) -> List[SchoolClass]:
        return await self._select(order_by="name")

    async def get_by_name(self, name: str) -> Optional[SchoolClass]:
        return await self._select_one({"name": name})

    async def get_teachers_for_class(self, class_id) -> List:
        """User ids of the teachers linked to the class."""
        async with self._connection() as conn:
            records = await conn.fetch("SELECT user_id FROM teacher_classes WHERE class_id = $1;", class_id)
            return [record["user_id"] for record in records]

    async def get_classes_for_teacher(self, user_id) -> List[SchoolClass]:
        query = """
            SELECT c.* FROM classes c
            JOIN teacher_classes tc ON tc.class_id = c.id
            WHERE tc.user_id = $1
            ORDER BY c.name;
        """
        async with self._connection() as conn:
            records = await conn.fetch(query, user_id)
            return [self._to_model(record) for record in records]

    async def is_teacher_assigned(self, user_id, class_id) -> bool:
        async with self._connection() as conn:
            found = await conn.fetchval(
                "SELECT 1 FROM teacher_classes WHERE user_id = $1 AND class_id = $2;", user_id, class_id
            )
            return found is not None


class SubjectsStore(AsyncPostgresClient):
    """Subjects of a class. A subject's teacher must be linked to that class."""
    table = "subjects"
    model = Subject

    def __init__(self, pool):
        super().__init__(pool)
        self.classes = ClassesStore(pool)

    async def get_all(self) -> List[Subject]:
        return await self._select(order_by="name")

    async def get_by_class(self, class_id) -> List[Subject]:
        return await self._select({"class_id": class_id}, order_by="name")

    async def _check_assignment(self, teacher_id, class_id):
        if teacher_id and class_id and not await self.classes.is_teacher_assigned(teacher_id, class_id):
            raise StoreError(UNASSIGNED_TEACHER_MESSAGE)

    async def add(self, values: Dict[str, Any]) -> Subject:
        await self._check_assignment(values.get("teacher_id"), values.get("class_id"))
        return await super().add(values)

    async def update(self, subject_id, updates: Dict[str, Any]) -> str:
        if updates.get("teacher_id") or updates.get("class_id"):
            current = await self.get_by_id(subject_id)
            if current is not None:
                teacher_id = updates.get("teacher_id", current.teacher_id)
                class_id = updates.get("class_id", current.class_id)
                await self._check_assignment(teacher_id, class_id)
        return await super().update(subject_id, updates)


class GradesStore(AsyncPostgresClient):
    """
    Marks per student, subject, term and academic year. `add` prechecks the
    uniqueness constraint and the class match so callers get a readable
    message instead of a constraint violation.
    """
    table = "grades"
    model = Grade

    async def get_by_student(self, student_id) -> List[Grade]:
        return await self._select({"student_id": student_id}, order_by="academic_year, term")

    async def get_by_student_and_term(self, student_id, term: str, academic_year: int) -> List[Grade]:
        return await self._select({"student_id": student_id, "term": term, "academic_year": academic_year})

    async def get_by_students(self, student_ids: List, term: Optional[str] = None,
                              academic_year: Optional[int] = None) -> List[Grade]:
        if not student_ids:
            return []
        query = "SELECT * FROM grades WHERE student_id = ANY($1::uuid[])"
        args: List[Any] = [list(student_ids)]
        if term:
            args.append(term)
            query += f" AND term = ${len(args)}"
        if academic_year:
            args.append(academic_year)
            query += f" AND academic_year = ${len(args)}"
        async with self._connection() as conn:
            records = await conn.fetch(query + ";", *args)
            return [self._to_model(record) for record in records]

    async def add(self, values: Dict[str, Any]) -> Grade:
        async with self._connection() as conn:
            existing = await conn.fetchval(
                """
                SELECT 1 FROM grades
                WHERE student_id = $1 AND subject_id = $2 AND term = $3 AND academic_year = $4;
                """,
                values["student_id"], values["subject_id"], values["term"], values["academic_year"],
            )
            if existing is not None:
                raise StoreError(DUPLICATE_GRADE_MESSAGE)

            student_class = await conn.fetchrow("SELECT class_id FROM students WHERE id = $1;", values["student_id"])
            subject_class = await conn.fetchrow("SELECT class_id FROM subjects WHERE id = $1;", values["subject_id"])
            if student_class and subject_class and student_class["class_id"] != subject_class["class_id"]:
                raise StoreError(CLASS_MISMATCH_MESSAGE)

            values = {key: value for key, value in values.items() if key != "id"}
            return await self._insert(values, connection=conn)


class AcademicTermsStore(AsyncPostgresClient):
    table = "academic_terms"
    model = AcademicTerm

    async def get_all(self) -> List[AcademicTerm]:
        return await self._select(order_by="year DESC, term ASC")

    async def get_active(self) -> Optional[AcademicTerm]:
        return await self._select_one({"is_active": True})

    async def get_by_year(self, year: int) -> List[AcademicTerm]:
        return await self._select({"year": year}, order_by="term ASC")

    async def get_for_date(self, day: date) -> Optional[AcademicTerm]:
        async with self._connection() as conn:
            record = await conn.fetchrow(
                """
                SELECT * FROM academic_terms
                WHERE start_date <= $1 AND end_date >= $1
                ORDER BY start_date DESC LIMIT 1;
                """,
                day,
            )
            return self._to_model(record) if record else None

    async def set_active(self, term_id) -> Optional[AcademicTerm]:
        """Deactivates every term and activates `term_id`, atomically."""
        async with self.transaction() as connection:
            await connection.execute("UPDATE academic_terms SET is_active = FALSE WHERE is_active;")
            await self._update({"id": term_id}, {"is_active": True}, connection=connection)
            return await self._select_one({"id": term_id}, connection=connection)
