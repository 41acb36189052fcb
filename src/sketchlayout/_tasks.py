"""Fan-out helpers for detector tasks.

Every detector task resolves to a list. A task that raises or outlives
the shared deadline resolves to an empty list, and the error is handed
back so the caller can record it.

A timed-out task cannot be interrupted. Its worker thread runs on after
:func:`run_tasks` returns, and because executor threads are joined at
interpreter exit a hung detector still delays process shutdown until it
finishes. Detectors are expected to return on their own.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Callable, Dict, List, Optional, Tuple

log = logging.getLogger(__name__)


class DetectorTimeout(Exception):
    """A detector task did not finish before the run deadline."""


def run_tasks(
    tasks: Dict[str, Callable[[], List[Any]]],
    timeout_s: float,
    max_workers: int,
) -> Dict[str, Tuple[List[Any], Optional[BaseException]]]:
    """Run *tasks* concurrently and join them against one deadline.

    Returns ``{name: (result, error)}``. ``error`` is ``None`` on success;
    otherwise ``result`` is ``[]``.
    """
    if not tasks:
        return {}
    pool = ThreadPoolExecutor(
        max_workers=max(1, min(max_workers, len(tasks))),
        thread_name_prefix="sketch-detect",
    )
    futures: Dict[str, Future] = {}
    try:
        futures = {name: pool.submit(fn) for name, fn in tasks.items()}
        deadline = time.monotonic() + timeout_s
        return {
            name: await_result(fut, name, max(0.0, deadline - time.monotonic()))
            for name, fut in futures.items()
        }
    finally:
        # A timed-out task keeps its thread; the run does not wait for it.
        pool.shutdown(wait=False, cancel_futures=True)
        abandoned = sorted(name for name, fut in futures.items() if not fut.done())
        if abandoned:
            log.warning(
                "Detector threads still running after the deadline: %s",
                ", ".join(abandoned),
            )


def await_result(
    fut: Future,
    name: str,
    timeout_s: float,
) -> Tuple[List[Any], Optional[BaseException]]:
    """Wait for one task; failures and timeouts become ``([], error)``."""
    try:
        result = fut.result(timeout=timeout_s)
    except FutureTimeout:
        fut.cancel()
        log.warning("Detector task %s did not finish before the deadline", name)
        return [], DetectorTimeout(f"{name} did not finish before the deadline")
    except Exception as exc:
        log.warning("Detector task %s failed", name, exc_info=True)
        return [], exc
    return list(result or []), None
