import calendar
import logging
from datetime import datetime
from typing import Dict, List, Optional

import config
from models import utcnow
from storage import Storage

logger = logging.getLogger(__name__)


def _month_date(year: int, month: int, day: int) -> datetime:
    """
    Date for a month index that may run past December (month 13 -> next January).
    The day is clamped to the month, so day 31 in April is April 30.
    """
    extra_years, month_index = divmod(month - 1, 12)
    year, month = year + extra_years, month_index + 1
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, min(max(day, 1), last_day))


def default_deadlines(
    now: Optional[datetime] = None,
    quarterly_day: Optional[int] = None,
    psur_day: Optional[int] = None,
    webinar_day: Optional[int] = None,
) -> List[Dict]:
    """
    Compute the recurring deadlines the calendar starts with.

    The quarterly report is due on `quarterly_day` of the month after the
    current quarter ends, the PSUR on `psur_day` of next month, and the
    training webinar on `webinar_day` of this month. Dates already behind
    `now` move forward (a quarter for the report, a month for the webinar).
    """
    now = now or utcnow()
    if quarterly_day is None:
        quarterly_day = config.QUARTERLY_REPORT_DAY
    if psur_day is None:
        psur_day = config.PSUR_DEADLINE_DAY
    if webinar_day is None:
        webinar_day = config.WEBINAR_DAY

    next_quarter_month = (now.month - 1) // 3 * 3 + 4
    quarterly_due = _month_date(now.year, next_quarter_month, quarterly_day)
    if quarterly_due < now:
        quarterly_due = _month_date(now.year, next_quarter_month + 3, quarterly_day)

    psur_due = _month_date(now.year, now.month + 1, psur_day)

    webinar = _month_date(now.year, now.month, webinar_day)
    if webinar < now:
        webinar = _month_date(now.year, now.month + 1, webinar_day)

    return [
        {
            "title": "Quarterly ADR Reports Due",
            "event_date": quarterly_due,
            "event_type": "accent",
            "description": "Submit quarterly adverse drug reaction reports to the regulatory authority.",
        },
        {
            "title": "PSUR Submission Deadline",
            "event_date": psur_due,
            "event_type": "muted",
            "description": "Submit Periodic Safety Update Reports for all registered products.",
        },
        {
            "title": "PvPI Training Webinar",
            "event_date": webinar,
            "event_type": "secondary",
            "description": "Mandatory training webinar on latest pharmacovigilance practices.",
        },
    ]


def seed_default_deadlines(storage: Storage, now: Optional[datetime] = None) -> int:
    """Add the default deadlines to an empty calendar. Returns how many were added."""
    if storage.calendar.count():
        return 0
    events = default_deadlines(now)
    for event in events:
        storage.calendar.create(**event)
    logger.info("Seeded %d default calendar deadlines", len(events))
    return len(events)
