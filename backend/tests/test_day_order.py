from datetime import date

import pytest

from schemas.itinerary import WarningKind
from schemas.schedule import ServerScheduleItem
from modules.ingestion.day_order import DayOrderNormalizer, day_number, organize_schedule_by_day


def _item(block, name="x"):
    return ServerScheduleItem(place_name=name, time_block=block)


@pytest.fixture
def normalizer():
    return DayOrderNormalizer()


def test_organize_groups_by_day_and_sorts_times():
    items = [
        _item("Tue_1000", "b"), _item("Mon_끝", "end"), _item("Mon_1300", "late"),
        _item("Mon_09", "early"), _item("Mon_시작", "start"),
    ]
    by_day = organize_schedule_by_day(items)

    assert list(by_day) == ["Tue", "Mon"]
    assert [i.place_name for i in by_day["Mon"]] == ["start", "early", "late", "end"]


def test_label_order_without_start_date(normalizer):
    slots, warnings = normalizer.normalize(
        ["Wed", "Holiday", "Mon", "Tue"], reference_date=date(2025, 5, 19),
    )

    assert [s.day_key for s in slots] == ["Mon", "Tue", "Wed", "Holiday"]
    assert [s.day for s in slots] == [1, 2, 3, 4]
    assert [s.date_label for s in slots] == ["05/19", "05/20", "05/21", "05/22"]
    assert warnings == []


def test_trip_crossing_the_week_boundary(normalizer):
    # Friday start: Fri, Sat, Sun, Mon must not be sorted Mon-first.
    slots, warnings = normalizer.normalize(
        ["Mon", "Fri", "Sun", "Sat"], trip_start=date(2025, 5, 23),
    )

    assert [s.day_key for s in slots] == ["Fri", "Sat", "Sun", "Mon"]
    assert [s.day_of_week for s in slots] == ["Fri", "Sat", "Sun", "Mon"]
    assert [s.date_label for s in slots] == ["05/23", "05/24", "05/25", "05/26"]
    assert warnings == []


def test_gap_in_labels_is_reported_as_mismatch(normalizer):
    slots, warnings = normalizer.normalize(["Mon", "Wed"], trip_start=date(2025, 5, 19))

    assert [(s.day, s.day_key, s.day_of_week) for s in slots] == [(1, "Mon", "Mon"), (2, "Wed", "Tue")]
    assert [w.kind for w in warnings] == [WarningKind.DAY_LABEL_MISMATCH]
    assert warnings[0].day == 2


def test_duplicate_keys_collapse(normalizer):
    slots, _ = normalizer.normalize(["Mon", "Mon", "Tue"], trip_start=date(2025, 5, 19))
    assert [s.day for s in slots] == [1, 2]


def test_repeated_time_block_is_flagged_as_collision(normalizer):
    by_day = organize_schedule_by_day([
        _item("Mon_0900", "week one"), _item("Mon_0900", "week two"), _item("Tue_0900"),
    ])
    slots, _ = normalizer.normalize(by_day.keys(), trip_start=date(2025, 5, 19))
    warnings = normalizer.collisions(by_day, slots)

    assert [w.kind for w in warnings] == [WarningKind.DAY_KEY_COLLISION]
    assert warnings[0].day == 1
    # Flagged, not resolved: both items stay on Monday.
    assert len(by_day["Mon"]) == 2


SUNDAY_FIRST = {"Sun": 0, "Mon": 1, "Tue": 2, "Wed": 3, "Thu": 4, "Fri": 5, "Sat": 6}


def test_sunday_zero_table_crossing_the_weekend():
    normalizer = DayOrderNormalizer(SUNDAY_FIRST)
    slots, warnings = normalizer.normalize(["Sun", "Sat"], trip_start=date(2025, 5, 24))

    assert [(s.day, s.day_key, s.day_of_week) for s in slots] == [(1, "Sat", "Sat"), (2, "Sun", "Sun")]
    assert warnings == []


def test_sunday_zero_table_without_start_date():
    normalizer = DayOrderNormalizer(SUNDAY_FIRST)
    slots, _ = normalizer.normalize(["Mon", "Sun"], reference_date=date(2025, 5, 18))

    assert [s.day_key for s in slots] == ["Sun", "Mon"]
    assert [s.day_of_week for s in slots] == ["Sun", "Mon"]
    assert normalizer.weekday_rank("sunday") == 0


def test_numbered_day_keys_follow_their_number(normalizer):
    slots, warnings = normalizer.normalize(["Day2", "Day10", "Day1"], trip_start=date(2025, 5, 19))

    assert [s.day_key for s in slots] == ["Day1", "Day2", "Day10"]
    assert [s.day for s in slots] == [1, 2, 3]
    assert [s.day_of_week for s in slots] == ["Mon", "Tue", "Wed"]
    # Day10 cannot be day 3; the gap is reported, not filled.
    assert [(w.kind, w.day) for w in warnings] == [(WarningKind.DAY_LABEL_MISMATCH, 3)]


def test_numbered_day_keys_without_start_date(normalizer):
    slots, warnings = normalizer.normalize(["Day2", "Day1"], reference_date=date(2025, 5, 23))

    assert [s.day_key for s in slots] == ["Day1", "Day2"]
    assert [s.day_of_week for s in slots] == ["Fri", "Sat"]
    assert warnings == []


def test_day_number_parsing():
    assert day_number("Day3") == 3
    assert day_number("day 12") == 12
    assert day_number("Day0") is None
    assert day_number("Mon") is None
