"""Per-stage timing lines for the report pipeline.

Every decorated stage logs one ``SENSOR:`` JSON line on the ``sensors``
logger with its duration, whether it raised (and what), and how many items
it produced where the result has a size: entity blocks for ``scrape``,
vessels for ``report``.
"""

from __future__ import annotations

import functools
import json
import logging
import time
from collections.abc import Callable
from typing import Any

from flotilla_report.common.diagnostics import shape_of

LOG = logging.getLogger("sensors")


def sensor(stage: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorate(fn: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            payload: dict[str, Any] = {"stage": stage, "fn": fn.__qualname__}
            try:
                result = fn(*args, **kwargs)
            except Exception as exc:
                payload.update(ok=False, error=type(exc).__name__)
                raise
            else:
                payload.update(ok=True, items=shape_of(result)[1])
                return result
            finally:
                payload["dt_ms"] = round((time.perf_counter() - started) * 1000, 2)
                LOG.info("SENSOR: %s", json.dumps(payload))

        return wrapper

    return decorate
