"""
Data-parallel helpers over independent items
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, Optional, TypeVar

from . import config

T = TypeVar("T")
U = TypeVar("U")


def parallel_map(fn: Callable[[T], U], items: Iterable[T], workers: Optional[int] = None) -> List[U]:
    """ Apply `fn` to every item, returning results in input order.
    Items must be independent: `fn` may run on them concurrently.
    Small inputs, and single-worker configurations, run serially. """
    items = list(items)
    workers = workers or config.WORKERS
    if workers <= 1 or len(items) < max(config.PARALLEL_THRESHOLD, 2):
        return [fn(item) for item in items]

    # A fresh pool per call keeps nested parallel regions from starving each other.
    with ThreadPoolExecutor(max_workers=min(workers, len(items))) as executor:
        return list(executor.map(fn, items))


def parallel_for_each(fn: Callable[[T], None], items: Iterable[T], workers: Optional[int] = None) -> None:
    parallel_map(fn, items, workers=workers)
