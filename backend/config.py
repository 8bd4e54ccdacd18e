"""
config.py
---------
Central configuration for the itinerary pipeline.
Tunables are read from environment variables (optionally from backend/.env);
nothing here holds per-build state.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the backend directory (if it exists) so env vars in that file
# are picked up by os.getenv() below.  Won't override vars already set in the shell.
_env_path = Path(__file__).parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path, override=False)

# ── Travel-time model ─────────────────────────────────────────────────────────
# Straight-line (Haversine) distance divided by a flat average speed.
TRAVEL_SPEED_KMH: float = float(os.getenv("TRAVEL_SPEED_KMH", "40.0"))

# ── Day scheduling (minutes) ──────────────────────────────────────────────────
DEFAULT_DAY_START: str = os.getenv("DEFAULT_DAY_START", "09:00")   # HH:MM
ACCOMMODATION_STAY_MINUTES: int = int(os.getenv("ACCOMMODATION_STAY_MINUTES", "30"))

STAY_DURATION_MINUTES: dict[str, int] = {
    "accommodation": ACCOMMODATION_STAY_MINUTES,
    "attraction":    60,
    "restaurant":    90,
    "cafe":          60,
    "other":         45,
}

# Every planner time block covers one hour.
SCHEDULE_SLOT_MINUTES: int = int(os.getenv("SCHEDULE_SLOT_MINUTES", "60"))

# ── Labels ────────────────────────────────────────────────────────────────────
TRAVEL_TIME_PENDING: str = "N/A"    # not computed yet
TRAVEL_TIME_LAST: str    = "-"      # last stop of a day

# ── Fallback / special-case places ────────────────────────────────────────────
# Jeju City Hall, used when an unresolved schedule item carries no coordinates.
FALLBACK_COORDINATES: tuple[float, float] = (
    float(os.getenv("FALLBACK_X", "126.5312")),   # lng
    float(os.getenv("FALLBACK_Y", "33.4996")),    # lat
)

AIRPORT_NAMES: tuple[str, ...] = ("제주국제공항", "제주공항")

AIRPORT_RECORD: dict = {
    "name":         "제주국제공항",
    "category":     "transport",
    "x":            126.4891647,
    "y":            33.510418,
    "address":      "제주특별자치도 제주시 공항로 2",
    "road_address": "제주특별자치도 제주시 공항로 2",
    "phone":        "064-797-2114",
    "description":  "제주도의 관문 국제공항",
    "rating":       4.0,
    "homepage":     "https://www.airport.co.kr/jeju/",
}

# ── Day-label table ───────────────────────────────────────────────────────────
# Planner day keys are weekday abbreviations; unknown labels sort after Sun.
WEEKDAY_ORDER: dict[str, int] = {
    "Mon": 1, "Tue": 2, "Wed": 3, "Thu": 4, "Fri": 5, "Sat": 6, "Sun": 7,
}

# Time-block suffixes the planner uses for the day's start / end anchors.
TIME_BLOCK_START_MARKERS: tuple[str, ...] = ("시작", "start")
TIME_BLOCK_END_MARKERS:   tuple[str, ...] = ("끝", "end")

# ── Category keyword translation ──────────────────────────────────────────────
# Single table shared by the categorizer and the schedule matcher; callers may
# inject their own mapping instead.
CATEGORY_ALIASES: dict[str, str] = {
    "accommodation": "accommodation",
    "숙소":          "accommodation",
    "숙박":          "accommodation",
    "hotel":         "accommodation",
    "attraction":    "attraction",
    "관광지":        "attraction",
    "관광":          "attraction",
    "landmark":      "attraction",
    "touristspot":   "attraction",
    "restaurant":    "restaurant",
    "음식점":        "restaurant",
    "음식":          "restaurant",
    "식당":          "restaurant",
    "cafe":          "cafe",
    "카페":          "cafe",
    "other":         "other",
    "기타":          "other",
    "transport":     "transport",
    "교통":          "transport",
}

# Name-similarity cut-off for the last-resort hint match (0..1).
NAME_SIMILARITY_THRESHOLD: float = float(os.getenv("NAME_SIMILARITY_THRESHOLD", "0.7"))

# ── Remote planner ────────────────────────────────────────────────────────────
PLANNER_API_URL: str = os.getenv("PLANNER_API_URL", "")
PLANNER_TIMEOUT_SECONDS: int = int(os.getenv("PLANNER_TIMEOUT_SECONDS", "30"))

# ── Build log (JSONL) ─────────────────────────────────────────────────────────
BUILD_LOG_ENABLED: bool = os.getenv("BUILD_LOG_ENABLED", "false").lower() in ("1", "true", "yes")
BUILD_LOG_DIR: str = os.getenv("BUILD_LOG_DIR", str(Path(__file__).parent / "logs"))
