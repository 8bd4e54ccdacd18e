"""
modules/tool_usage/planner_client.py
---------------------------------------
Thin HTTP adapter for the remote schedule planner.

Endpoint:
    POST {PLANNER_API_URL}
        body: SchedulePayload JSON
        200:  ServerScheduleResponse JSON

Every transport problem (no URL configured, connection error, timeout,
non-2xx status, non-JSON or wrongly shaped body) surfaces as PlannerError so
callers have a single thing to catch.

Config knobs (config.py):
  PLANNER_API_URL         -- planner endpoint (empty disables the client)
  PLANNER_TIMEOUT_SECONDS -- request timeout (default: 30)
"""

from __future__ import annotations
import logging
import time as _time_mod
from typing import Optional

import requests
from pydantic import ValidationError

import config
from schemas.schedule import SchedulePayload, ServerScheduleResponse

logger = logging.getLogger(__name__)


class PlannerError(RuntimeError):
    """The remote planner could not produce a usable response."""


class PlannerClient:
    """POSTs a SchedulePayload and parses the planner's reply."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = config.PLANNER_API_URL if base_url is None else base_url
        self.timeout = timeout or config.PLANNER_TIMEOUT_SECONDS
        self._session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def request_schedule(self, payload: SchedulePayload) -> ServerScheduleResponse:
        if not self.enabled:
            raise PlannerError("ERROR_PLANNER_NOT_CONFIGURED: PLANNER_API_URL is empty")

        _t0 = _time_mod.perf_counter()
        try:
            resp = self._session.post(
                self.base_url,
                json=payload.model_dump(),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except requests.Timeout as exc:
            raise PlannerError(
                f"ERROR_PLANNER_TIMEOUT: no response within {self.timeout}s"
            ) from exc
        except requests.JSONDecodeError as exc:
            raise PlannerError(f"ERROR_PLANNER_INVALID_JSON: {exc}") from exc
        except requests.RequestException as exc:
            raise PlannerError(f"ERROR_PLANNER_HTTP: {exc}") from exc
        except ValueError as exc:
            raise PlannerError(f"ERROR_PLANNER_INVALID_JSON: {exc}") from exc

        if not isinstance(body, dict):
            raise PlannerError(
                f"ERROR_PLANNER_INVALID_JSON: expected an object, got {type(body).__name__}"
            )
        try:
            response = ServerScheduleResponse.model_validate(body)
        except ValidationError as exc:
            raise PlannerError(f"ERROR_PLANNER_INVALID_RESPONSE: {exc}") from exc

        logger.info(
            "Planner returned %d schedule items, %d route summaries in %.0f ms",
            len(response.schedule), len(response.route_summary),
            (_time_mod.perf_counter() - _t0) * 1000,
        )
        return response
