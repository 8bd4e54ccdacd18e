"""
modules/observability/logger.py
---------------------------------
Per-build JSONL trace of the itinerary pipeline.

Each build (heuristic or planner) gets a build id; every event of that build
lands as one JSON object per line in  <BUILD_LOG_DIR>/<build_id>.jsonl :

    {"timestamp": ..., "build_id": ..., "event_type": ..., "payload": {...}}

Event types written by the pipeline:
  PAYLOAD         request body sent to the remote planner
  PERFORMANCE     one pipeline stage with its duration_ms
  BUILD_COMPLETE  source, day count and warning kinds of the finished build

Nothing is written unless BUILD_LOG_ENABLED is set or enabled=True is passed.

Usage:
    build_log = StructuredLogger()
    with build_log.stage(build_id, "greedy_assign") as extra:
        ...
        extra["days"] = len(days)
"""

from __future__ import annotations
import json
import threading
import time as _time_mod
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Any, Iterator, Optional

import config


class StructuredLogger:
    """Append-only build trace; one open file per build id, guarded by a lock."""

    def __init__(
        self,
        logs_dir: Path | str | None = None,
        enabled: Optional[bool] = None,
    ) -> None:
        self.logs_dir = Path(logs_dir or config.BUILD_LOG_DIR)
        self.enabled = config.BUILD_LOG_ENABLED if enabled is None else enabled
        self._lock = threading.Lock()
        self._files: dict[str, IO[str]] = {}

    def log(self, build_id: str, event_type: str, payload: dict[str, Any]) -> None:
        """Append one event to the build's trace file."""
        if not self.enabled:
            return
        line = json.dumps(
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "build_id": build_id,
                "event_type": event_type,
                "payload": payload,
            },
            default=str,
            ensure_ascii=False,
        )
        with self._lock:
            out = self._files.get(build_id) or self._open(build_id)
            out.write(line + "\n")
            out.flush()

    @contextmanager
    def stage(self, build_id: str, name: str) -> Iterator[dict[str, Any]]:
        """
        Time a pipeline stage and emit it as a PERFORMANCE event.

        Yields a dict; whatever the block puts in it is added to the payload.
        The event is written only when the block completes.
        """
        extra: dict[str, Any] = {}
        started = _time_mod.perf_counter()
        yield extra
        self.log(build_id, "PERFORMANCE", {
            "stage": name,
            "duration_ms": round((_time_mod.perf_counter() - started) * 1000, 2),
            **extra,
        })

    def close(self, build_id: str | None = None) -> None:
        with self._lock:
            ids = [build_id] if build_id else list(self._files)
            for key in ids:
                out = self._files.pop(key, None)
                if out is not None:
                    out.close()

    def _open(self, build_id: str) -> IO[str]:
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        out = (self.logs_dir / f"{build_id}.jsonl").open("a", encoding="utf-8")
        self._files[build_id] = out
        return out
