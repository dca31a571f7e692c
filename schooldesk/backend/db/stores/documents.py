import logging
from typing import List, Optional

from ..db_client import AsyncPostgresClient
from ...models.db_models import Template, TermReportRecord, IndemnityForm, Certificate

logger = logging.getLogger(__name__)


class TemplatesStore(AsyncPostgresClient):
    table = "templates"
    model = Template

    async def get_all(self) -> List[Template]:
        return await self._select(order_by="type, name")

    async def get_by_type(self, template_type: str) -> List[Template]:
        return await self._select({"type": template_type}, order_by="name")


class ReportsStore(AsyncPostgresClient):
    table = "term_reports"
    model = TermReportRecord

    async def get_all(self) -> List[TermReportRecord]:
        return await self._select(order_by="generated_date DESC")

    async def get_by_student(self, student_id) -> List[TermReportRecord]:
        return await self._select({"student_id": student_id}, order_by="generated_date DESC")

    async def get_by_student_and_term(self, student_id, term: str) -> Optional[TermReportRecord]:
        return await self._select_one({"student_id": student_id, "term": term})


class IndemnityStore(AsyncPostgresClient):
    table = "indemnity_forms"
    model = IndemnityForm

    async def get_all(self) -> List[IndemnityForm]:
        return await self._select(order_by="generated_date DESC")

    async def get_by_student(self, student_id) -> List[IndemnityForm]:
        return await self._select({"student_id": student_id}, order_by="generated_date DESC")


class CertificatesStore(AsyncPostgresClient):
    table = "certificates"
    model = Certificate

    async def get_all(self) -> List[Certificate]:
        return await self._select(order_by="generated_date DESC")

    async def get_by_student(self, student_id) -> List[Certificate]:
        return await self._select({"student_id": student_id}, order_by="generated_date DESC")
