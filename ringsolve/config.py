"""
'Configuration' of worker pools and the randomized rank estimators.
Each value may be overridden from the environment.
"""

import os
from typing import Optional


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return int(value)


WORKERS: int = _env_int("RINGSOLVE_WORKERS", os.cpu_count() or 1)
""" Size of the worker pool used for data-parallel row operations """

PARALLEL_THRESHOLD: int = _env_int("RINGSOLVE_PARALLEL_THRESHOLD", 16)
""" Below this many independent items, parallel maps run serially """

RANK_SLOTS: int = _env_int("RINGSOLVE_RANK_SLOTS", 8)
""" Number of concurrent candidate rows per round of the rank estimators """

RANK_SEED: Optional[int] = _env_int("RINGSOLVE_SEED", None)
""" Seed for the rank estimators.  `None` draws fresh entropy. """

DISPLAY_LIMIT: int = 100
""" Largest row or column count rendered in debug displays """
