from datetime import datetime

import pytest

from schemas.itinerary import WarningKind
from modules.planning.auto_complete import AutoCompleteEngine
from modules.planning.payload_builder import build_schedule_payload, prepare_schedule_payload
from conftest import make_place


def _small_minimums(days):
    return {"attraction": 2, "restaurant": 1, "cafe": 1, "accommodation": 0}


@pytest.fixture
def engine():
    return AutoCompleteEngine(minimum_required=_small_minimums)


@pytest.fixture
def pools():
    return {
        "관광지": [
            make_place("10", "A10"),
            make_place("11", "A11"),
            make_place("12", "A12"),
        ],
        "restaurant": [make_place("20", "R20", "restaurant")],
        "카페": [],
    }


def test_fills_shortage_in_pool_order(engine, pools):
    selected = [make_place("11", "A11")]
    result = engine.complete(selected, pools, 1)

    assert [p.id for p in result.added] == ["10", "20"]
    assert all(p.is_candidate for p in result.added)
    # Pool entries are copied, never flagged in place.
    assert not pools["관광지"][0].is_candidate


def test_short_pool_reports_quota_shortfall(engine, pools):
    result = engine.complete([], pools, 1)

    shortfalls = [w for w in result.warnings if w.kind == WarningKind.QUOTA_SHORTFALL]
    assert [(w.category, w.shortage) for w in shortfalls] == [("cafe", 1)]


def test_second_run_never_adds_selected_ids(engine, pools):
    selected = [make_place("11", "A11")]
    first = engine.complete(selected, pools, 1)
    selected_after = selected + first.added
    second = engine.complete(selected_after, pools, 1)

    selected_ids = {p.id for p in selected_after}
    assert not any(p.id in selected_ids for p in second.added)


def test_duplicate_pool_entries_are_added_once(engine):
    pools = {"attraction": [make_place("1", "A"), make_place(1, "A again")], "tourist spot": []}
    result = engine.complete([], pools, 1)

    assert [p.id for p in result.added] == ["1"]


def test_invalid_trip_duration_is_missing_input(engine, pools):
    result = engine.complete([], pools, 0)

    assert result.added == []
    assert [w.kind for w in result.warnings] == [WarningKind.MISSING_INPUT]


def test_remaining_candidates_exclude_selected_and_added(engine, pools):
    result = engine.complete([make_place("11", "A11")], pools, 1)
    assert [p.id for p in result.remaining_candidates] == ["12"]


def test_default_minimums_scale_with_trip_length():
    pool = {"attraction": [make_place(str(i), f"A{i}") for i in range(20)]}
    result = AutoCompleteEngine().complete([], pool, 2)
    assert len([p for p in result.added if p.category == "attraction"]) == 8


# ── Payload ───────────────────────────────────────────────────────────────────

def test_payload_splits_selected_and_candidates():
    places = [
        make_place("7", "Picked"),
        make_place("abc", "Picked text id"),
        make_place("8", "Auto", is_candidate=True),
    ]
    payload = build_schedule_payload(
        places, datetime(2025, 5, 19, 9, 0), datetime(2025, 5, 21, 18, 0),
    )

    dumped = payload.model_dump()
    assert dumped["selected_places"] == [{"id": 7, "name": "Picked"}, {"id": "abc", "name": "Picked text id"}]
    assert dumped["candidate_places"] == [{"id": 8, "name": "Auto"}]
    assert dumped["start_datetime"] == "2025-05-19T09:00:00"
    assert dumped["end_datetime"] == "2025-05-21T18:00:00"


def test_prepare_payload_runs_auto_complete(engine, pools):
    payload, completion = prepare_schedule_payload(
        [make_place("11", "A11")],
        datetime(2025, 5, 19, 9, 0),
        datetime(2025, 5, 19, 18, 0),
        pools,
        engine,
    )

    assert [p.id for p in payload.selected_places] == [11]
    assert [p.id for p in payload.candidate_places] == [10, 20]
    assert completion.warnings[0].category == "cafe"
