import pytest
from datetime import date

from schemas.place import Place
from modules.tool_usage.place_lookup import InMemoryPlaceStore
from modules.observability.logger import StructuredLogger


def make_place(id, name, category="attraction", x=126.5, y=33.4, **kwargs) -> Place:
    return Place(id=id, name=name, category=category, x=x, y=y, **kwargs)


@pytest.fixture
def trip_start():
    return date(2025, 5, 19)    # a Monday


@pytest.fixture
def quiet_log(tmp_path):
    # Never writes: BUILD_LOG_ENABLED is off unless a test turns it on.
    return StructuredLogger(logs_dir=tmp_path, enabled=False)


@pytest.fixture
def scenario_places():
    return [
        make_place("1", "Attraction A", "attraction", 126.50, 33.40),
        make_place("2", "Restaurant R", "restaurant", 126.52, 33.41),
        make_place("3", "Cafe C", "cafe", 126.51, 33.405),
    ]


@pytest.fixture
def jeju_places():
    return [
        make_place("101", "성산일출봉", "관광지", 126.9425, 33.4587),
        make_place("102", "만장굴", "관광지", 126.7714, 33.5283),
        make_place("103", "한라산", "관광지", 126.5331, 33.3617),
        make_place("201", "흑돼지 식당", "음식점", 126.5219, 33.4996),
        make_place("202", "고기국수집", "음식점", 126.5412, 33.5101),
        make_place("301", "바다 카페", "카페", 126.3211, 33.4563),
        make_place("401", "제주 호텔", "숙소", 126.4920, 33.4890),
    ]


@pytest.fixture
def place_store(jeju_places):
    return InMemoryPlaceStore(jeju_places)
