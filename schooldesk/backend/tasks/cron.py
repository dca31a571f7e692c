import logging
from datetime import date
from typing import Optional

from ..db.stores.academics import AcademicTermsStore

logger = logging.getLogger(__name__)


async def activate_current_term_task(terms: AcademicTermsStore, today: Optional[date] = None):
    """
    Runs periodically. When no term is active, or the active term has ended
    or not yet started, the term whose dates contain today becomes active.
    Errors are logged and swallowed so the scheduler keeps running.
    """
    today = today or date.today()
    logger.info("Running activate_current_term_task...")
    try:
        active = await terms.get_active()
        if active and active.start_date <= today <= active.end_date:
            return

        current = await terms.get_for_date(today)
        if current is None:
            logger.info(f"No academic term covers {today}; leaving the active term unchanged.")
            return

        await terms.set_active(current.id)
        logger.info(f"Academic term '{current.name}' ({current.year}) activated for {today}.")
    except Exception as e:
        logger.error(f"Failed to roll over the academic term: {e}", exc_info=True)
