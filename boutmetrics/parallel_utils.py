"""
Thread pool for per-animal classification.

Once the day table is fixed, animals share no mutable state, so each one
can be classified on its own thread. Results keep the input order, which
keeps cohort members in file order.
"""

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List


MAX_WORKERS = 8

# Fewer animals than this are classified inline
MIN_ANIMALS_FOR_POOL = 3


def default_worker_count(n_animals: int) -> int:
    """One thread per animal, capped by the CPU count and MAX_WORKERS."""
    cpus = os.cpu_count() or 1
    return max(1, min(n_animals, cpus, MAX_WORKERS))


def map_animals(func: Callable, animals: Iterable, max_workers: int = None) -> List:
    """
    Apply func to every animal's work item.

    Args:
        func: Per-animal function (may be a closure; threads need no pickling)
        animals: Work items, one per animal
        max_workers: Thread count (default: default_worker_count);
            1 or less runs inline

    Returns:
        Results in the same order as animals
    """
    animals = list(animals)

    if max_workers is None:
        max_workers = default_worker_count(len(animals))

    if len(animals) < MIN_ANIMALS_FOR_POOL or max_workers <= 1:
        return [func(animal) for animal in animals]

    with ThreadPoolExecutor(max_workers=min(max_workers, len(animals)),
                            thread_name_prefix='boutmetrics') as pool:
        return list(pool.map(func, animals))
