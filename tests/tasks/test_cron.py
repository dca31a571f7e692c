import uuid
from datetime import date
from unittest.mock import AsyncMock

import pytest

from schooldesk.backend.models.db_models import AcademicTerm
from schooldesk.backend.tasks.cron import activate_current_term_task


def term(number: int, start: date, end: date, active: bool = False) -> AcademicTerm:
    return AcademicTerm(id=uuid.uuid4(), year=start.year, term=number, name=f"Term {number}",
                        start_date=start, end_date=end, is_active=active)


TERM_1 = term(1, date(2025, 1, 10), date(2025, 4, 10), active=True)
TERM_2 = term(2, date(2025, 5, 1), date(2025, 8, 1))


@pytest.fixture
def terms_store():
    return AsyncMock()


@pytest.mark.asyncio
class TestActivateCurrentTermTask:

    async def test_active_term_covering_today_is_left_alone(self, terms_store):
        terms_store.get_active.return_value = TERM_1
        await activate_current_term_task(terms_store, today=date(2025, 2, 1))
        terms_store.get_for_date.assert_not_called()
        terms_store.set_active.assert_not_called()

    async def test_rolls_over_when_the_active_term_has_ended(self, terms_store):
        """Scenario: Term 1 is still active but today falls inside Term 2."""
        terms_store.get_active.return_value = TERM_1
        terms_store.get_for_date.return_value = TERM_2

        await activate_current_term_task(terms_store, today=date(2025, 5, 2))

        terms_store.get_for_date.assert_called_once_with(date(2025, 5, 2))
        terms_store.set_active.assert_called_once_with(TERM_2.id)

    async def test_activates_a_term_when_none_is_active(self, terms_store):
        terms_store.get_active.return_value = None
        terms_store.get_for_date.return_value = TERM_1
        await activate_current_term_task(terms_store, today=date(2025, 3, 1))
        terms_store.set_active.assert_called_once_with(TERM_1.id)

    async def test_holidays_keep_the_previous_term(self, terms_store):
        terms_store.get_active.return_value = TERM_1
        terms_store.get_for_date.return_value = None
        await activate_current_term_task(terms_store, today=date(2025, 4, 20))
        terms_store.set_active.assert_not_called()

    async def test_database_errors_do_not_escape(self, terms_store):
        terms_store.get_active.side_effect = ConnectionError("database unavailable")
        await activate_current_term_task(terms_store, today=date(2025, 3, 1))
        terms_store.set_active.assert_not_called()
