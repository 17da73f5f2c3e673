"""
Parallel Map for CPU-Bound Batches

Runs independent accumulator work (witness checks, witness refreshes,
proof verification) across worker processes. Exponentiation holds the GIL,
so threads would not help here.
"""

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

from .config import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def parallel_map(
    func: Callable[[T], R],
    items: Sequence[T],
    *,
    max_workers: Optional[int] = None,
    threshold: Optional[int] = None,
) -> List[R]:
    """
    Apply func to every item, in worker processes for large batches.

    Results come back in input order. func must be picklable: a module-level
    function or a functools.partial of one. Tasks share no mutable state.

    Args:
        func: Function of one argument
        items: Inputs
        max_workers: Worker processes (default: settings.worker_count)
        threshold: Batches smaller than this run in-process
            (default: settings.parallel_threshold)

    Returns:
        List[R]: func(item) for each item, in input order

    Raises:
        Exception: The first exception raised by any task, re-raised as is
    """
    items = list(items)
    if not items:
        return []

    settings = get_settings()
    workers = max_workers if max_workers is not None else settings.worker_count
    if threshold is None:
        threshold = settings.parallel_threshold

    if workers <= 1 or len(items) < threshold:
        return [func(item) for item in items]

    workers = min(workers, len(items))
    logger.debug(f"Dispatching {len(items)} tasks to {workers} worker processes")

    results: Dict[int, R] = {}
    with ProcessPoolExecutor(max_workers=workers) as executor:
        future_to_idx = {executor.submit(func, item): idx for idx, item in enumerate(items)}
        for future in as_completed(future_to_idx):
            results[future_to_idx[future]] = future.result()

    return [results[idx] for idx in range(len(items))]
