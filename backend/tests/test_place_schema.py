import math

import pytest

from schemas.place import Place, format_id, normalize_id, parse_id, same_id


@pytest.mark.parametrize("raw, expected", [
    (123, 123),
    ("123", 123),
    (" 42 ", 42),
    ("N123", 123),
    (7.0, 7),
    ("-5", -5),
])
def test_parse_id_accepts_numeric_forms(raw, expected):
    assert parse_id(raw) == expected


@pytest.mark.parametrize("raw", [None, True, False, "n/a", "", "12abc", 1.5, math.nan, "N", []])
def test_parse_id_rejects_everything_else(raw):
    assert parse_id(raw) is None


def test_format_and_normalize_id():
    assert format_id(12) == "12"
    assert normalize_id(12) == "12"
    assert normalize_id("N12") == "12"
    assert normalize_id(" abc ") == "abc"
    assert normalize_id(None) == ""


def test_same_id_crosses_number_and_string():
    assert same_id(5, "5")
    assert same_id("N5", 5.0)
    assert same_id("abc", "abc")
    assert not same_id(5, "6")
    assert not same_id("", "")
    assert not same_id(None, None)


def test_place_normalizes_id_and_reports_coordinates():
    p = Place(id=10, name="x", x=126.5, y=33.4)
    assert p.id == "10"
    assert p.numeric_id == 10
    assert p.has_coordinates

    no_coords = Place(id="a", name="y", x=None, y=33.4)
    assert not no_coords.has_coordinates
    assert not Place(id="b", name="z", x=math.inf, y=1.0).has_coordinates


def test_place_from_dict_is_lenient():
    p = Place.from_dict({
        "id": 77, "name": "Museum", "category": "attraction",
        "x": "126.1", "y": "33.2", "rating": "bad", "geoNodeId": "N9",
    })
    assert p.id == "77"
    assert p.x == pytest.approx(126.1)
    assert p.y == pytest.approx(33.2)
    assert p.rating == 0.0
    assert p.geo_node_id == "N9"

    blank = Place.from_dict({"id": "q", "name": "Blank", "x": "", "y": None})
    assert blank.x is None and blank.y is None
