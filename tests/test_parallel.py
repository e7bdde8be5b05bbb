"""Tests for simreport.utils.parallel utilities."""

from __future__ import annotations

import os
import time

import pytest

from simreport.utils.parallel import parallel_map, resolve_n_jobs

# ---------------------------------------------------------------------------
# resolve_n_jobs
# ---------------------------------------------------------------------------


class TestResolveNJobs:
    """Tests for the resolve_n_jobs function."""

    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        monkeypatch.delenv("SIMREPORT_NJOBS", raising=False)
        monkeypatch.delenv("SLURM_CPUS_PER_TASK", raising=False)

    def test_config_takes_priority(self):
        assert resolve_n_jobs({"n_jobs": 4}, default=8) == 4

    def test_default_fallback(self):
        assert resolve_n_jobs({}, default=2) == 2

    def test_none_config(self):
        assert resolve_n_jobs(None, default=3) == 3

    def test_minus_one_uses_cpu_count(self, monkeypatch):
        monkeypatch.setattr("simreport.utils.parallel.os.cpu_count", lambda: 16)
        assert resolve_n_jobs(default=-1) == 16

    def test_zero_uses_cpu_count(self, monkeypatch):
        monkeypatch.setattr("simreport.utils.parallel.os.cpu_count", lambda: 8)
        assert resolve_n_jobs({"n_jobs": 0}) == 8

    def test_env_var_overrides_slurm(self, monkeypatch):
        monkeypatch.setenv("SIMREPORT_NJOBS", "6")
        monkeypatch.setenv("SLURM_CPUS_PER_TASK", "32")
        assert resolve_n_jobs(default=-1) == 6

    def test_invalid_env_var_is_ignored(self, monkeypatch):
        monkeypatch.setenv("SIMREPORT_NJOBS", "many")
        monkeypatch.setattr("simreport.utils.parallel.os.cpu_count", lambda: 4)
        assert resolve_n_jobs(default=-1) == 4

    def test_slurm_env_var(self, monkeypatch):
        monkeypatch.setenv("SLURM_CPUS_PER_TASK", "32")
        assert resolve_n_jobs(default=-1) == 32

    def test_minimum_is_one(self, monkeypatch):
        monkeypatch.setattr("simreport.utils.parallel.os.cpu_count", lambda: None)
        assert resolve_n_jobs(default=-1) == 1


# ---------------------------------------------------------------------------
# parallel_map
# ---------------------------------------------------------------------------


def _square(x):
    """Top-level picklable function for testing."""
    return x * x


def _identity(x):
    return x


def _fail_on_three(x):
    if x == 3:
        raise ValueError("three")
    return x


def _stuck_on_negative(x):
    if x < 0:
        time.sleep(60)
    return x


def _replace_with_none(item, exc):
    return None


class TestParallelMap:
    """Tests for the parallel_map function."""

    def test_sequential_mode(self):
        result = parallel_map(_square, [1, 2, 3, 4], n_jobs=1)
        assert result == [1, 4, 9, 16]

    def test_empty_list(self):
        assert parallel_map(_square, [], n_jobs=4) == []

    def test_sequential_accepts_unpicklable_callable(self):
        result = parallel_map(lambda x: x + 1, [1, 2], n_jobs=1)
        assert result == [2, 3]

    def test_progress_callback(self):
        calls = []
        parallel_map(_square, [1, 2, 3], n_jobs=1, progress=lambda d, t: calls.append((d, t)))
        assert calls == [(1, 3), (2, 3), (3, 3)]

    def test_error_propagates_without_handler(self):
        with pytest.raises(ValueError, match="three"):
            parallel_map(_fail_on_three, [1, 2, 3, 4], n_jobs=1)

    def test_on_error_isolates_failure(self):
        errors = []

        def on_error(item, exc):
            errors.append((item, str(exc)))
            return -1

        result = parallel_map(_fail_on_three, [1, 2, 3, 4], n_jobs=1, on_error=on_error)
        assert result == [1, 2, -1, 4]
        assert errors == [(3, "three")]

    @pytest.mark.integration
    @pytest.mark.skipif(
        os.name == "nt", reason="multiprocessing fork semantics differ on Windows"
    )
    def test_parallel_mode(self):
        result = parallel_map(_square, list(range(20)), n_jobs=2)
        assert result == [x * x for x in range(20)]

    @pytest.mark.integration
    @pytest.mark.skipif(
        os.name == "nt", reason="multiprocessing fork semantics differ on Windows"
    )
    def test_preserves_order(self):
        items = list(range(30))
        assert parallel_map(_identity, items, n_jobs=4) == items

    @pytest.mark.integration
    @pytest.mark.skipif(
        os.name == "nt", reason="multiprocessing fork semantics differ on Windows"
    )
    def test_parallel_isolates_failures(self):
        result = parallel_map(
            _fail_on_three, [1, 2, 3, 4, 5], n_jobs=2, on_error=_replace_with_none
        )
        assert result == [1, 2, None, 4, 5]

    @pytest.mark.integration
    @pytest.mark.skipif(
        os.name == "nt", reason="multiprocessing fork semantics differ on Windows"
    )
    def test_timeout_marks_stuck_item_and_continues(self):
        start = time.monotonic()
        result = parallel_map(
            _stuck_on_negative,
            [1, -1, 2, 3],
            n_jobs=2,
            timeout=5,
            on_error=_replace_with_none,
        )
        assert result == [1, None, 2, 3]
        assert time.monotonic() - start < 50
