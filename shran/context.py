"""Utilities for tracking the operation currently in progress."""

import contextvars
from contextlib import contextmanager
import logging
from time import perf_counter
from typing import Any, Generator

from .exceptions import ShranException

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "operation",
]


_operations: contextvars.ContextVar[list[str]] = contextvars.ContextVar("operations")


def _describe(name: str, details: dict[str, Any]) -> str:
    if not details:
        return name
    parts = ", ".join(f"{key}={value}" for key, value in details.items())
    return f"{name} ({parts})"


@contextmanager
def operation(name: str, **details: Any) -> Generator[None, None, None]:
    """Log the start and end of an operation.

    Any `ShranException` raised within the block is annotated with the
    operation and its details (e.g. the manifest key or cache path involved)
    so the failure can be inspected or repaired by hand.
    """
    stack = _operations.get([])
    label = _describe(name, details)
    token = _operations.set(stack + [label])
    t1 = perf_counter()
    _LOGGER.debug("[Operation] > %s", " > ".join(stack + [label]))
    try:
        yield
    except ShranException as err:
        err.add_note(f"While running: {label}")
        raise
    finally:
        t2 = perf_counter()
        _operations.reset(token)
        _LOGGER.debug("[Operation] < %s (%0.2fs)", label, (t2 - t1))
