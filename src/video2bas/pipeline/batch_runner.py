"""Bounded-parallel, order-preserving batch execution.

Every stage that maps a per-frame function over all frames (classify,
trace, parse, generate) goes through ``run_batch``. Results come back in
input order regardless of completion order. Progress reporting is a plain
callback; ``ProgressCounter`` and ``ProgressTicker`` are the caller-side
helpers the orchestrator uses to log ``"N/total done"``.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

from video2bas.contracts import FailurePolicy

__all__ = [
    'BatchFailure',
    'BatchResult',
    'ProgressCounter',
    'ProgressTicker',
    'run_batch',
]

logger = logging.getLogger(__name__)


@dataclass
class BatchFailure:
    index: int
    error: BaseException


@dataclass
class BatchResult:
    """Outcome of a ``collect`` batch: ``None`` marks failed slots."""
    results: List[Any] = field(default_factory=list)
    failures: List[BatchFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failed_indices(self) -> List[int]:
        return sorted(f.index for f in self.failures)

    def succeeded(self) -> List[Any]:
        """Results of the items that did not fail, in input order."""
        failed = set(self.failed_indices)
        return [r for i, r in enumerate(self.results) if i not in failed]


class ProgressCounter:
    """Thread-safe completion counter usable as a ``progress`` callback."""

    def __init__(self, total: int = 0):
        self.total = total
        self._count = 0
        self._lock = threading.Lock()

    def __call__(self, index: int) -> None:
        with self._lock:
            self._count += 1

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def reset(self, total: Optional[int] = None) -> None:
        with self._lock:
            self._count = 0
            if total is not None:
                self.total = total


class ProgressTicker(threading.Thread):
    """Daemon thread that logs ``"N/total done"`` every ``interval`` seconds.

    The count it reads may trail the true value by a few items; it only
    reports.

    Example::

        counter = ProgressCounter(total=len(frames))
        ticker = ProgressTicker(counter, label="trace", interval=5.0)
        ticker.start()
        try:
            run_batch(frames, trace_one, parallel=4, progress=counter)
        finally:
            ticker.stop()
            ticker.join()
    """

    def __init__(self, counter: ProgressCounter, label: str = "progress",
                 interval: float = 5.0, name: str = "ProgressTicker"):
        super().__init__(daemon=True, name=name)
        self.counter = counter
        self.label = label
        self.interval = interval
        self._stop_event = threading.Event()

    def stop(self):
        """Signal the ticker to stop."""
        self._stop_event.set()

    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run(self):
        while not self._stop_event.wait(self.interval):
            logger.info("%s: %d/%d done", self.label, self.counter.count, self.counter.total)


def _run_sequential(items, worker, progress, policy):
    results = []
    failures = []
    first_error = None
    for idx, item in enumerate(items):
        try:
            results.append(worker(item))
        except Exception as e:
            results.append(None)
            failures.append(BatchFailure(index=idx, error=e))
            if first_error is None:
                first_error = e
        if progress is not None:
            progress(idx)
        # nothing else is in flight, so fail-fast stops here
        if first_error is not None and policy == FailurePolicy.FAIL_FAST:
            break
    return results, failures, first_error


def _run_pooled(items, worker, parallel, progress):
    results: List[Any] = [None] * len(items)
    failures = []
    first_error = None
    with ThreadPoolExecutor(max_workers=parallel, thread_name_prefix="batch") as pool:
        futures = {pool.submit(worker, item): idx for idx, item in enumerate(items)}
        for future in as_completed(futures):
            idx = futures[future]
            try:
                results[idx] = future.result()
            except Exception as e:
                failures.append(BatchFailure(index=idx, error=e))
                if first_error is None:
                    first_error = e
            if progress is not None:
                progress(idx)
    return results, failures, first_error


def run_batch(items: Sequence[Any], worker: Callable[[Any], Any], parallel: int,
              progress: Optional[Callable[[int], None]] = None,
              policy=FailurePolicy.FAIL_FAST):
    """Apply ``worker`` to every item with at most ``parallel`` in flight.

    Parameters
    ----------
    items : sequence
        Work items; ``result[i]`` comes from ``items[i]``.
    worker : callable
        ``worker(item) -> result``. Must be safe to call from several threads.
    parallel : int
        Concurrency limit. Values <= 0 are treated as 1; 1 runs in the
        calling thread.
    progress : callable, optional
        ``progress(index)`` called once per finished item (success or
        failure), in completion order, possibly from several threads.
    policy : FailurePolicy or str
        ``fail_fast`` raises the first error once in-flight work has
        finished. ``collect`` returns a ``BatchResult`` instead.

    Returns
    -------
    list or BatchResult
        A plain list under ``fail_fast``; a ``BatchResult`` under ``collect``.
    """
    policy = FailurePolicy(policy)
    items = list(items)
    if parallel <= 0:
        parallel = 1

    if not items:
        return BatchResult() if policy == FailurePolicy.COLLECT else []

    if parallel == 1:
        results, failures, first_error = _run_sequential(items, worker, progress, policy)
    else:
        results, failures, first_error = _run_pooled(items, worker, min(parallel, len(items)), progress)

    if policy == FailurePolicy.COLLECT:
        if failures:
            logger.warning("%d/%d items failed", len(failures), len(items))
        return BatchResult(results=results, failures=sorted(failures, key=lambda f: f.index))

    if first_error is not None:
        raise first_error
    return results
