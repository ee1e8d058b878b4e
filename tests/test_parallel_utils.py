"""
Tests for the per-animal thread pool.
"""

import threading

from boutmetrics.parallel_utils import MAX_WORKERS, default_worker_count, map_animals


class TestDefaultWorkerCount:

    def test_bounds(self):
        assert default_worker_count(0) == 1
        assert default_worker_count(1) == 1
        assert 1 <= default_worker_count(100) <= MAX_WORKERS


class TestMapAnimals:

    def test_keeps_input_order(self):
        animals = [f'M{i}' for i in range(20)]
        assert map_animals(str.lower, animals, max_workers=4) == [a.lower() for a in animals]

    def test_closure_runs_on_pool(self):
        offset = 10
        threads = set()

        def work(value):
            threads.add(threading.current_thread().name)
            return value + offset

        assert map_animals(work, range(6), max_workers=3) == list(range(10, 16))
        assert all(name.startswith('boutmetrics') for name in threads)

    def test_inline_for_few_animals_or_one_worker(self):
        main = threading.current_thread().name
        seen = []

        def work(value):
            seen.append(threading.current_thread().name)
            return value

        map_animals(work, [1, 2])
        map_animals(work, range(5), max_workers=1)
        map_animals(work, range(5), max_workers=0)
        assert set(seen) == {main}

    def test_empty(self):
        assert map_animals(str.lower, []) == []
