import logging
from typing import List

from ..db_client import AsyncPostgresClient
from ...models.db_models import Student

logger = logging.getLogger(__name__)


class StudentsStore(AsyncPostgresClient):
    """Student records. Contacts are JSONB columns, encoded by the pool's codec."""
    table = "students"
    model = Student

    async def get_all(self) -> List[Student]:
        return await self._select(order_by="last_name, first_name")

    async def get_by_class(self, class_id) -> List[Student]:
        return await self._select({"class_id": class_id}, order_by="last_name, first_name")

    async def get_by_student_number(self, student_number: str):
        return await self._select_one({"student_number": student_number})

    async def archive(self, student_id) -> str:
        return await self._update({"id": student_id}, {"status": "archived"})
