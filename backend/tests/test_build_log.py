import json
from datetime import date

import pytest

from main import create_itinerary
from modules.observability.logger import StructuredLogger


def test_enabled_logger_appends_jsonl(tmp_path):
    build_log = StructuredLogger(logs_dir=tmp_path, enabled=True)
    build_log.log("build_1", "PERFORMANCE", {"stage": "assign", "duration_ms": 1.5})
    build_log.log("build_1", "BUILD_COMPLETE", {"days": 2})
    build_log.close()

    lines = (tmp_path / "build_1.jsonl").read_text(encoding="utf-8").splitlines()
    records = [json.loads(line) for line in lines]
    assert [r["event_type"] for r in records] == ["PERFORMANCE", "BUILD_COMPLETE"]
    assert records[0]["build_id"] == "build_1"
    assert records[1]["payload"] == {"days": 2}
    assert "timestamp" in records[0]


def test_disabled_logger_writes_nothing(tmp_path):
    build_log = StructuredLogger(logs_dir=tmp_path, enabled=False)
    build_log.log("build_1", "BUILD_COMPLETE", {"days": 2})
    assert list(tmp_path.iterdir()) == []


def test_heuristic_build_records_its_stages(tmp_path, scenario_places):
    build_log = StructuredLogger(logs_dir=tmp_path, enabled=True)
    create_itinerary(
        scenario_places, date(2025, 5, 19), date(2025, 5, 19),
        build_log=build_log, build_id="build_h",
    )
    build_log.close()

    records = [
        json.loads(line)
        for line in (tmp_path / "build_h.jsonl").read_text(encoding="utf-8").splitlines()
    ]
    events = [r["event_type"] for r in records]
    assert events[-1] == "BUILD_COMPLETE"
    assert "PERFORMANCE" in events
    assert records[-1]["payload"]["source"] == "heuristic"


def test_stage_times_the_block_and_merges_extras(tmp_path):
    build_log = StructuredLogger(logs_dir=tmp_path, enabled=True)
    with build_log.stage("build_s", "assemble") as extra:
        extra["days"] = 3
    with pytest.raises(RuntimeError):
        with build_log.stage("build_s", "broken"):
            raise RuntimeError("boom")
    build_log.close()

    (record,) = [json.loads(line) for line in (tmp_path / "build_s.jsonl").read_text(encoding="utf-8").splitlines()]
    assert record["event_type"] == "PERFORMANCE"
    assert record["payload"]["stage"] == "assemble"
    assert record["payload"]["days"] == 3
    assert record["payload"]["duration_ms"] >= 0
