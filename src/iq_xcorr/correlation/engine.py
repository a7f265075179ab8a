"""
Correlation Engine - Direct cross-correlation over every lag, in parallel.

For two length-N sequences the full correlation has 2N-1 lags. The lag
index space is split up front into contiguous, disjoint ranges, one per
worker thread. Each worker writes only its own slice of a pre-allocated
output vector, so result writes need no locking.

Sign convention: index k holds lag L = k - (N-1), and a positive lag
means `x` leads `y` (y[i + L] lines up with x[i]).
"""

import os
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from iq_xcorr.errors import InvalidWorkerCountError, LengthMismatchError

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 100  # lags between progress reports

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class LagRange:
    """Half-open range [start, stop) of correlation vector indices owned by one worker."""
    worker: int
    start: int
    stop: int

    def __len__(self) -> int:
        return self.stop - self.start


class ProgressCounter:
    """
    Lock-guarded count of completed lags shared by all workers.

    Only used for reporting; the correlation result never depends on it.
    """

    def __init__(self, total: int, callback: Optional[ProgressCallback] = None):
        self.total = total
        self._callback = callback
        self._done = 0
        self._lock = threading.Lock()

    def add(self, n: int) -> int:
        with self._lock:
            self._done += n
            done = self._done
        # Outside the lock so a slow callback never stalls other workers
        if self._callback is not None:
            self._callback(done, self.total)
        return done

    @property
    def done(self) -> int:
        with self._lock:
            return self._done


def check_worker_count(worker_count) -> int:
    """Return worker_count as an int, or raise InvalidWorkerCountError."""
    if isinstance(worker_count, bool) or not isinstance(worker_count, (int, np.integer)):
        raise InvalidWorkerCountError(
            f"worker_count must be an integer (got {worker_count!r})"
        )
    if worker_count <= 0:
        raise InvalidWorkerCountError(f"worker_count must be > 0 (got {worker_count})")
    return int(worker_count)


def partition_lags(total: int, worker_count: int) -> List[LagRange]:
    """
    Split `total` correlation indices into `worker_count` contiguous ranges.

    Every range has `total // worker_count` indices except the last, which
    absorbs the remainder. When there are more workers than indices the
    leading ranges are empty.
    """
    worker_count = check_worker_count(worker_count)

    part = total // worker_count
    ranges = []
    for w in range(worker_count):
        start = w * part
        stop = total if w == worker_count - 1 else start + part
        ranges.append(LagRange(worker=w, start=start, stop=stop))
    return ranges


def correlate_lag(x: np.ndarray, y: np.ndarray, lag: int) -> complex:
    """Unnormalized correlation sum of x against conj(y) at a single lag."""
    n = len(x)
    if lag >= 0:
        # np.vdot conjugates its first argument
        return np.vdot(y[lag:], x[:n - lag])
    return np.vdot(y[:n + lag], x[-lag:])


def _correlate_range(
    x: np.ndarray,
    y: np.ndarray,
    result: np.ndarray,
    lag_range: LagRange,
    progress: Optional[ProgressCounter]
) -> None:
    """Fill result[lag_range.start:lag_range.stop]. Runs on a worker thread."""
    zero_lag = len(x) - 1
    pending = 0

    for k in range(lag_range.start, lag_range.stop):
        result[k] = correlate_lag(x, y, k - zero_lag)

        pending += 1
        if progress is not None and pending == PROGRESS_EVERY:
            progress.add(pending)
            pending = 0

    if progress is not None and pending:
        progress.add(pending)


def cross_correlate(
    x: np.ndarray,
    y: np.ndarray,
    worker_count: Optional[int] = None,
    progress: Optional[ProgressCallback] = None
) -> np.ndarray:
    """
    Compute the full cross-correlation of two equal-length sequences.

    result[k] = sum_i x[i] * conj(y[i + L]) with L = k - (N-1), summed over
    the overlapping samples only.

    Args:
        x: First complex sequence
        y: Second complex sequence, same length as `x`
        worker_count: Number of worker threads (default: CPU count)
        progress: Optional callback(done_lags, total_lags); calls may arrive
            out of order from different workers

    Returns:
        complex64 vector of length 2N-1 (empty when N == 0)
    """
    x = np.asarray(x)
    y = np.asarray(y)

    if x.ndim != 1 or y.ndim != 1:
        raise ValueError(
            f"Sequences must be 1-D complex arrays (got shapes {x.shape} and {y.shape})"
        )
    if len(x) != len(y):
        raise LengthMismatchError(f"Sequence lengths differ: {len(x)} != {len(y)}")

    if worker_count is None:
        worker_count = os.cpu_count() or 1
    worker_count = check_worker_count(worker_count)

    n = len(x)
    total = 2 * n - 1 if n else 0
    result = np.zeros(total, dtype=np.complex64)

    ranges = [r for r in partition_lags(total, worker_count) if len(r)]
    counter = ProgressCounter(total, progress) if progress is not None else None

    logger.info(f"Cross-correlating {n} samples ({total} lags) "
                f"with {worker_count} workers")

    if ranges:
        with ThreadPoolExecutor(max_workers=len(ranges),
                                thread_name_prefix="xcorr") as pool:
            futures = [
                pool.submit(_correlate_range, x, y, result, r, counter)
                for r in ranges
            ]
            # Re-raises the first worker failure after all workers finish
            for future in futures:
                future.result()

    logger.info("Cross-correlation complete")
    return result
