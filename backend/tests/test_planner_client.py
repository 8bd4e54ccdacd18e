from unittest.mock import MagicMock

import pytest
import requests

from schemas.schedule import SchedulePayload, SchedulePlace
from modules.tool_usage.planner_client import PlannerClient, PlannerError


URL = "http://planner.test/schedule"


@pytest.fixture
def payload():
    return SchedulePayload(
        selected_places=[SchedulePlace(id=101, name="성산일출봉")],
        start_datetime="2025-05-19T09:00:00",
        end_datetime="2025-05-20T18:00:00",
    )


def _session(body=None, status_error=None, json_error=None):
    resp = MagicMock()
    if status_error is not None:
        resp.raise_for_status.side_effect = status_error
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = body
    session = MagicMock()
    session.post.return_value = resp
    return session


def test_request_schedule_posts_payload_and_parses_response(payload):
    session = _session({
        "total_reward": 3.0,
        "schedule": [{"id": 101, "place_name": "성산일출봉", "time_block": "Mon_0900"}],
        "route_summary": [{"day": "Mon", "total_distance_m": 0}],
    })
    client = PlannerClient(base_url=URL, timeout=5, session=session)

    response = client.request_schedule(payload)

    assert response.total_reward == 3.0
    assert len(response.schedule) == 1
    _, kwargs = session.post.call_args
    assert session.post.call_args.args[0] == URL
    assert kwargs["timeout"] == 5
    assert kwargs["json"]["selected_places"] == [{"id": 101, "name": "성산일출봉"}]
    assert kwargs["json"]["start_datetime"] == "2025-05-19T09:00:00"


def test_unconfigured_client_refuses(payload):
    session = MagicMock()
    client = PlannerClient(base_url="", session=session)

    assert not client.enabled
    with pytest.raises(PlannerError, match="ERROR_PLANNER_NOT_CONFIGURED"):
        client.request_schedule(payload)
    session.post.assert_not_called()


@pytest.mark.parametrize("session, code", [
    (_session(status_error=requests.HTTPError("500 Server Error")), "ERROR_PLANNER_HTTP"),
    (_session(json_error=ValueError("Expecting value")), "ERROR_PLANNER_INVALID_JSON"),
    (_session(["not", "an", "object"]), "ERROR_PLANNER_INVALID_JSON"),
    (_session({"schedule": "nope"}), "ERROR_PLANNER_INVALID_RESPONSE"),
])
def test_failures_surface_as_planner_error(session, code, payload):
    client = PlannerClient(base_url=URL, session=session)
    with pytest.raises(PlannerError, match=code):
        client.request_schedule(payload)


def test_timeout_is_reported(payload):
    session = MagicMock()
    session.post.side_effect = requests.Timeout("read timed out")
    client = PlannerClient(base_url=URL, timeout=2, session=session)

    with pytest.raises(PlannerError, match="ERROR_PLANNER_TIMEOUT"):
        client.request_schedule(payload)


def test_connection_error_is_reported(payload):
    session = MagicMock()
    session.post.side_effect = requests.ConnectionError("refused")
    client = PlannerClient(base_url=URL, session=session)

    with pytest.raises(PlannerError, match="ERROR_PLANNER_HTTP"):
        client.request_schedule(payload)
