import math

import pytest

from modules.validation import filter_valid, validate_place
from modules.tool_usage.place_lookup import InMemoryPlaceStore
from conftest import make_place


def test_valid_place_passes():
    result = validate_place(make_place("1", "성산일출봉", rating=4.5))
    assert result.valid
    assert bool(result)
    assert result.errors == []


def test_place_without_coordinates_is_valid():
    assert validate_place(make_place("1", "Somewhere", x=None, y=None)).valid


@pytest.mark.parametrize("record, fragment", [
    ({"name": "", "x": 126.5, "y": 33.4}, "name"),
    ({"name": "A", "x": 126.5, "y": None}, "together"),
    ({"name": "A", "x": 200.0, "y": 33.4}, "longitude"),
    ({"name": "A", "x": 126.5, "y": -95.0}, "latitude"),
    ({"name": "A", "x": 0.0, "y": 0.0}, "missing"),
    ({"name": "A", "x": math.nan, "y": 33.4}, "finite"),
    ({"name": "A", "x": 126.5, "y": 33.4, "rating": 7}, "rating"),
    ({"name": "A", "x": 126.5, "y": 33.4, "rating": "great"}, "numeric"),
])
def test_invalid_records_are_explained(record, fragment):
    result = validate_place(record)
    assert not result.valid
    assert any(fragment in e for e in result.errors)


def test_zero_rating_means_absent():
    assert validate_place({"name": "A", "x": 126.5, "y": 33.4, "rating": 0}).valid


def test_filter_valid_keeps_order():
    places = [
        make_place("1", "a"),
        make_place("2", "", x=126.5, y=33.4),
        make_place("3", "c"),
    ]
    assert [p.id for p in filter_valid(places, validate_place)] == ["1", "3"]


def test_validation_reports_failing_fields():
    assert validate_place({"name": "", "x": 126.5, "y": 33.4}).fields == {"name"}
    assert validate_place({"name": "A", "x": math.inf, "y": 33.4, "rating": 9}).fields == {
        "coordinates", "rating",
    }
    assert validate_place(make_place("1", "ok")).fields == set()


def test_store_keeps_places_with_unusable_coordinates():
    store = InMemoryPlaceStore([
        make_place("7", "Museum", x=math.nan, y=math.nan, address="1 Museum Rd", rating=4.2),
        {"id": 8, "name": "Null Island Cafe", "category": "cafe", "x": 0.0, "y": 0.0},
        make_place("9", "Overrated", rating=11),
    ])

    museum = store.find_by_id(7)
    assert museum is not None
    assert museum.name == "Museum"
    assert museum.address == "1 Museum Rd"
    assert museum.rating == 4.2
    assert (museum.x, museum.y) == (None, None)
    assert not museum.has_coordinates

    cafe = store.find_by_name("Null Island Cafe")
    assert cafe.category == "cafe"
    assert not cafe.has_coordinates
    assert store.find_by_id(9).rating == 0.0
    assert store.rejected == []


def test_store_leaves_out_nameless_records():
    store = InMemoryPlaceStore([
        make_place("1", "Museum"),
        {"id": 2, "name": "  ", "category": "cafe", "x": 126.5, "y": 33.4},
        make_place("3", "Museum", x=126.9, y=33.1),
    ])

    assert len(store) == 1
    assert len(store.rejected) == 1
    assert store.find_by_id(2) is None
    assert store.find_by_name("Museum").id == "1"
    assert store.find_by_id(3).id == "3"
