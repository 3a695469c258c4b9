from datetime import datetime

import pytest

from deadlines import default_deadlines, seed_default_deadlines


def _dates(now, **days):
    return {event["title"]: event["event_date"] for event in default_deadlines(now, **days)}


def test_defaults_mid_october():
    dates = _dates(datetime(2026, 10, 18, 12, 0))

    assert dates["Quarterly ADR Reports Due"] == datetime(2027, 1, 15)
    assert dates["PSUR Submission Deadline"] == datetime(2026, 11, 10)
    assert dates["PvPI Training Webinar"] == datetime(2026, 10, 25)


def test_webinar_rolls_to_next_month_once_past():
    dates = _dates(datetime(2026, 12, 26))

    assert dates["PvPI Training Webinar"] == datetime(2027, 1, 25)
    assert dates["PSUR Submission Deadline"] == datetime(2027, 1, 10)


@pytest.mark.parametrize("now, due", [
    (datetime(2026, 1, 1), datetime(2026, 4, 15)),
    (datetime(2026, 3, 31), datetime(2026, 4, 15)),
    (datetime(2026, 4, 1), datetime(2026, 7, 15)),
    (datetime(2026, 9, 30), datetime(2026, 10, 15)),
])
def test_quarterly_deadline_follows_quarter_end(now, due):
    assert _dates(now)["Quarterly ADR Reports Due"] == due


def test_days_are_configurable():
    dates = _dates(datetime(2026, 10, 18), quarterly_day=20, psur_day=5, webinar_day=28)

    assert dates["Quarterly ADR Reports Due"] == datetime(2027, 1, 20)
    assert dates["PSUR Submission Deadline"] == datetime(2026, 11, 5)
    assert dates["PvPI Training Webinar"] == datetime(2026, 10, 28)


def test_event_types():
    types = {e["title"]: e["event_type"] for e in default_deadlines(datetime(2026, 10, 18))}

    assert types == {
        "Quarterly ADR Reports Due": "accent",
        "PSUR Submission Deadline": "muted",
        "PvPI Training Webinar": "secondary",
    }


def test_seed_only_fills_an_empty_calendar(storage):
    now = datetime(2026, 10, 18)

    assert seed_default_deadlines(storage, now) == 3
    assert seed_default_deadlines(storage, now) == 0
    assert [e.id for e in storage.calendar.get_all()] == [1, 2, 3]


def test_day_past_month_end_is_clamped():
    dates = _dates(datetime(2026, 4, 2), quarterly_day=31, psur_day=31, webinar_day=31)

    assert dates["PvPI Training Webinar"] == datetime(2026, 4, 30)
    assert dates["PSUR Submission Deadline"] == datetime(2026, 5, 31)
    assert dates["Quarterly ADR Reports Due"] == datetime(2026, 7, 31)


def test_february_webinar_lands_on_last_day():
    assert _dates(datetime(2027, 2, 1), webinar_day=30)["PvPI Training Webinar"] == datetime(2027, 2, 28)


def test_zero_day_is_not_replaced_by_the_default():
    assert _dates(datetime(2026, 10, 18), psur_day=0)["PSUR Submission Deadline"] == datetime(2026, 11, 1)
