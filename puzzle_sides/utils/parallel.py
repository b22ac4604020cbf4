"""Parallel processing utilities."""

import concurrent.futures
import logging
import multiprocessing
import time
from typing import Any, Callable, List, Optional, Sequence

import psutil

from ..config.settings import DEFAULT_MAX_WORKERS, WORKER_MEMORY_GB

logger = logging.getLogger(__name__)


class Timer:
    """Context manager for timing operations."""

    def __init__(self, description: str, log: Optional[logging.Logger] = None):
        self.description = description
        self.log = log or logging.getLogger('progress')
        self.start_time = None
        self.end_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.perf_counter()
        if exc_type is None:
            self.log.info(f"{self.description} completed in {self.elapsed:.3f}s")

    @property
    def elapsed(self) -> float:
        end = self.end_time if self.end_time is not None else time.perf_counter()
        return end - self.start_time


def get_optimal_worker_count() -> int:
    """Get optimal number of workers for parallel processing.

    Returns:
        Optimal number of workers
    """
    if DEFAULT_MAX_WORKERS:
        return DEFAULT_MAX_WORKERS

    cpu_count = multiprocessing.cpu_count()

    # Leave one core free for system
    optimal_count = max(1, cpu_count - 1)

    # Limit based on available memory
    try:
        available_memory_gb = psutil.virtual_memory().available / (1024 ** 3)
        memory_limited_workers = max(1, int(available_memory_gb / WORKER_MEMORY_GB))
        optimal_count = min(optimal_count, memory_limited_workers)
    except (OSError, RuntimeError) as e:
        logger.debug(f"Memory check failed, using CPU-based worker count: {e}")

    return optimal_count


def parallel_map(func: Callable[[Any], Any], items: Sequence[Any],
                 max_workers: Optional[int] = None,
                 use_processes: bool = False) -> List[Any]:
    """Apply ``func`` to every item on a worker pool.

    Results come back in input order. The first exception raised by a
    worker is re-raised here and the remaining work is cancelled.

    Args:
        func: Function of one argument (picklable when ``use_processes``)
        items: Work items
        max_workers: Maximum number of workers
        use_processes: Use a process pool instead of a thread pool

    Returns:
        List of results, one per item
    """
    if not items:
        return []

    if max_workers is None:
        max_workers = get_optimal_worker_count()
    max_workers = max(1, min(max_workers, len(items)))

    if max_workers == 1:
        return [func(item) for item in items]

    executor_cls = (concurrent.futures.ProcessPoolExecutor if use_processes
                    else concurrent.futures.ThreadPoolExecutor)
    logger.debug(f"Processing {len(items)} items using {max_workers} workers")

    results: List[Any] = [None] * len(items)
    with executor_cls(max_workers=max_workers) as executor:
        future_to_index = {executor.submit(func, item): i for i, item in enumerate(items)}
        try:
            for future in concurrent.futures.as_completed(future_to_index):
                results[future_to_index[future]] = future.result()
        except BaseException:
            for future in future_to_index:
                future.cancel()
            raise

    return results
