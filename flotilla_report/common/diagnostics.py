from __future__ import annotations

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

log = logging.getLogger(__name__)


def shape_of(obj: Any) -> tuple[str, int | None]:
    """Return (type name, len) for *obj* if possible.

    Reports expose their vessel count through ``total_vessels``.
    """
    t = type(obj).__name__
    if hasattr(obj, "total_vessels"):
        return t, obj.total_vessels
    try:
        length = len(obj)  # type: ignore[arg-type]
    except TypeError:
        length = None
    return t, length


def validate_io(func: Callable[..., Any]) -> Callable[..., Any]:
    """Log simple input/output type and length details."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        arg = args[0] if args else (next(iter(kwargs.values())) if kwargs else None)
        in_t, in_len = shape_of(arg)
        result = func(*args, **kwargs)
        out_t, out_len = shape_of(result)
        log.info(
            "%s input=%s len=%s output=%s len=%s",
            func.__name__,
            in_t,
            in_len,
            out_t,
            out_len,
        )
        return result

    return wrapper
