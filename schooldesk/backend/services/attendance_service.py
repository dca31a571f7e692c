import logging
from datetime import date
from typing import Any, Dict, List
from uuid import UUID

from ..db.stores.academics import ClassesStore
from ..db.stores.attendance import AttendanceStore
from ..db.stores.students import StudentsStore
from ..models.db_models import Attendance, User
from ..modules import metrics
from .access import ensure_class_access
from .errors import ServiceError, NotFoundError, ConflictError

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "present"


class AttendanceService:
    """
    The attendance register: one sheet per class per date. Saving a register
    replaces every row of that class and date.
    """
    def __init__(self, attendance: AttendanceStore, students: StudentsStore, classes: ClassesStore):
        self.attendance = attendance
        self.students = students
        self.classes = classes

    async def get_register(self, user: User, class_id: UUID, day: date) -> Dict[str, Any]:
        await ensure_class_access(self.classes, user, class_id)
        if await self.classes.get_by_id(class_id) is None:
            raise NotFoundError("Class not found.")
        students = [s for s in await self.students.get_by_class(class_id) if s.status == "active"]
        stored = {record.student_id: record for record in await self.attendance.get_by_class_and_date(class_id, day)}

        entries = []
        for student in students:
            record = stored.get(student.id)
            entries.append({
                "student_id": student.id,
                "student_name": student.full_name,
                "student_number": student.student_number,
                "status": record.status if record else DEFAULT_STATUS,
                "comment": record.comment if record else None,
            })
        return {
            "class_id": class_id,
            "date": day,
            "saved": bool(stored),
            "locked": bool(stored) and user.role != "admin",
            "entries": entries,
            "summary": metrics.attendance_summary(stored.values()),
        }

    async def save_register(self, user: User, class_id: UUID, day: date,
                            entries: List[Dict[str, Any]]) -> List[Attendance]:
        """
        Replaces the register of `class_id` on `day` with `entries`. Once a
        register exists only an admin may overwrite it.
        """
        await ensure_class_access(self.classes, user, class_id)
        if await self.classes.get_by_id(class_id) is None:
            raise NotFoundError("Class not found.")

        existing = await self.attendance.get_by_class_and_date(class_id, day)
        if existing and user.role != "admin":
            logger.warning(f"Teacher {user.id} tried to overwrite the locked register of class {class_id} on {day}.")
            raise ConflictError("Attendance for this class and date has already been recorded.")

        student_ids = [entry["student_id"] for entry in entries]
        if len(set(student_ids)) != len(student_ids):
            raise ServiceError("Each student may appear only once in a register.")
        enrolled = {student.id for student in await self.students.get_by_class(class_id)}
        strangers = [str(student_id) for student_id in student_ids if student_id not in enrolled]
        if strangers:
            raise ServiceError(f"Students not enrolled in this class: {', '.join(strangers)}")

        try:
            await self.attendance.replace_for_class_date(class_id, day, entries)
        except Exception as e:
            logger.error(f"Error while saving attendance for class {class_id} on {day}.", exc_info=True)
            raise ServiceError("A database error occurred while saving attendance.") from e
        return await self.attendance.get_by_class_and_date(class_id, day)

    async def get_student_history(self, user: User, student_id: UUID) -> Dict[str, Any]:
        student = await self.students.get_by_id(student_id)
        if student is None:
            raise NotFoundError("Student not found.")
        await ensure_class_access(self.classes, user, student.class_id)
        records = await self.attendance.get_by_student(student_id)
        return {
            "student_id": student_id,
            "records": records,
            "summary": metrics.attendance_summary(records),
            "rate": metrics.attendance_rate(records),
        }
