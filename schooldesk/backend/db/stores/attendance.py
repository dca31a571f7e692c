import logging
from datetime import date
from typing import Any, Dict, List

from ..db_client import AsyncPostgresClient
from ...models.db_models import Attendance

logger = logging.getLogger(__name__)

_COLUMNS = ("student_id", "class_id", "date", "status", "comment")


class AttendanceStore(AsyncPostgresClient):
    table = "attendance"
    model = Attendance

    async def get_by_student(self, student_id) -> List[Attendance]:
        return await self._select({"student_id": student_id}, order_by="date DESC")

    async def get_by_class_and_date(self, class_id, day: date) -> List[Attendance]:
        return await self._select({"class_id": class_id, "date": day})

    async def get_by_students(self, student_ids: List) -> List[Attendance]:
        if not student_ids:
            return []
        async with self._connection() as conn:
            records = await conn.fetch(
                "SELECT * FROM attendance WHERE student_id = ANY($1::uuid[]);", list(student_ids)
            )
            return [self._to_model(record) for record in records]

    async def replace_for_class_date(self, class_id, day: date, records: List[Dict[str, Any]]) -> int:
        """
        Replaces the whole register of `class_id` on `day`. The delete and the
        insert share one transaction, so readers see either the old or the
        new register.
        """
        rows = [
            (record["student_id"], class_id, day, record.get("status", "present"), record.get("comment"))
            for record in records
        ]
        async with self.transaction() as connection:
            await self._delete({"class_id": class_id, "date": day}, connection=connection)
            await self._insert_many(_COLUMNS, rows, connection=connection)
        logger.info(f"Attendance for class {class_id} on {day} replaced with {len(rows)} row(s).")
        return len(rows)
