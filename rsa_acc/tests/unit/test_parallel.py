"""
Unit Tests for the Parallel Map Helper
"""

import pytest

from rsa_acc.parallel import parallel_map


class TestParallelMap:
    """Test ordering, thresholds and error propagation."""

    def test_in_process_below_threshold(self):
        assert parallel_map(abs, [-1, -2, 3], max_workers=4, threshold=16) == [1, 2, 3]

    def test_worker_processes_keep_order(self):
        items = list(range(-20, 0))
        assert parallel_map(abs, items, max_workers=2, threshold=1) == [abs(i) for i in items]

    def test_exceptions_propagate(self):
        with pytest.raises(ValueError):
            parallel_map(int, ["1", "not a number", "3"], max_workers=2, threshold=1)

    def test_empty(self):
        assert parallel_map(abs, [], max_workers=2, threshold=1) == []

    def test_defaults_from_settings(self, monkeypatch):
        monkeypatch.setenv("RSA_ACC_MAX_WORKERS", "1")
        assert parallel_map(abs, list(range(-40, 0))) == list(range(40, 0, -1))
