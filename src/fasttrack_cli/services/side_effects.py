"""Explicit results for best-effort side effects.

Persistence writes and notification calls never raise into the timer. Each call
goes through :func:`attempt` (or :func:`attempt_with_timeout`) and comes back as
an :class:`Ok` or a :class:`Failed`; the caller logs failures and moves on.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A side effect that completed."""

    operation: str
    value: T | None = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed:
    """A side effect that raised or timed out."""

    operation: str
    reason: str

    @property
    def ok(self) -> bool:
        return False


SideEffectResult = Ok[Any] | Failed


def attempt(operation: str, func: Callable[..., T], *args: Any) -> SideEffectResult:
    """Run *func* and wrap the outcome."""
    try:
        value = func(*args)
    except Exception as e:
        logger.warning("%s failed: %s", operation, e)
        return Failed(operation, f"{type(e).__name__}: {e}")
    return Ok(operation, value)


def attempt_with_timeout(
    operation: str,
    timeout: float,
    func: Callable[..., T],
    *args: Any,
    on_late_result: Callable[[T], Any] | None = None,
) -> SideEffectResult:
    """Run *func* on a daemon thread, giving up after *timeout* seconds.

    A timed-out call is reported as ``Failed`` and left to finish on its own.
    If it later succeeds, its value is passed to *on_late_result* on that
    thread, so the caller can undo an effect it no longer tracks. Daemon threads
    never hold up interpreter exit.
    """
    outcome: dict[str, Any] = {}
    finished = threading.Event()
    lock = threading.Lock()

    def run() -> None:
        try:
            outcome["value"] = func(*args)
        except Exception as e:
            outcome["error"] = e
        with lock:
            finished.set()
            abandoned = outcome.get("abandoned", False)
        if abandoned and "value" in outcome and on_late_result is not None:
            logger.info("%s finished after timing out; undoing it", operation)
            attempt(f"undo late {operation}", on_late_result, outcome["value"])

    threading.Thread(target=run, name=f"fasttrack-{operation}", daemon=True).start()
    finished.wait(timeout)

    with lock:
        if not finished.is_set():
            outcome["abandoned"] = True
            logger.warning("%s timed out after %.1fs", operation, timeout)
            return Failed(operation, f"timed out after {timeout}s")

    if "error" in outcome:
        e = outcome["error"]
        logger.warning("%s failed: %s", operation, e)
        return Failed(operation, f"{type(e).__name__}: {e}")
    return Ok(operation, outcome["value"])
