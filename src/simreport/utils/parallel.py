"""Process-pool helpers with per-item failure isolation and timeouts."""

from __future__ import annotations

import multiprocessing
import os
import sys
import time
from collections.abc import Callable, Sequence
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


def resolve_n_jobs(config: dict | None = None, default: int = 1) -> int:
    """Resolve the number of worker processes.

    ``config["n_jobs"]`` wins over *default*. ``-1`` or ``0`` mean all
    available cores: ``SIMREPORT_NJOBS`` if set, then ``SLURM_CPUS_PER_TASK``,
    otherwise ``os.cpu_count()``.

    Returns:
        Positive integer >= 1.
    """
    n_jobs = default
    if config and config.get("n_jobs") is not None:
        n_jobs = int(config["n_jobs"])

    if n_jobs <= 0:
        env_n_jobs = os.environ.get("SIMREPORT_NJOBS")
        if env_n_jobs:
            try:
                parsed = int(env_n_jobs)
                if parsed > 0:
                    n_jobs = parsed
            except ValueError:
                pass

    if n_jobs <= 0:
        slurm_cpus = os.environ.get("SLURM_CPUS_PER_TASK")
        if slurm_cpus:
            n_jobs = int(slurm_cpus)
        else:
            n_jobs = os.cpu_count() or 1

    return max(1, n_jobs)


def _get_mp_context() -> multiprocessing.context.BaseContext:
    """Select a safe multiprocessing start method.

    Notes:
    - ``fork`` can deadlock in multi-threaded parents (e.g., Rich live
      rendering). Prefer ``forkserver`` on Linux when available.
    - ``spawn`` is the most portable fallback.
    - Override via ``SIMREPORT_MP_START_METHOD`` if needed.
    """
    forced = os.environ.get("SIMREPORT_MP_START_METHOD")
    if forced:
        return multiprocessing.get_context(forced)

    if sys.platform.startswith("linux"):
        try:
            return multiprocessing.get_context("forkserver")
        except ValueError:
            return multiprocessing.get_context("spawn")

    return multiprocessing.get_context("spawn")


def _call(func, item, on_error):
    if on_error is None:
        return func(item)
    try:
        return func(item)
    except Exception as exc:  # noqa: BLE001
        return on_error(item, exc)


def parallel_map(
    func: Callable[[T], R],
    items: Sequence[T],
    n_jobs: int,
    timeout: float | None = None,
    on_error: Callable[[T, BaseException], R] | None = None,
    progress: Callable[[int, int], None] | None = None,
) -> list[R]:
    """Apply *func* to every element of *items*, optionally in parallel.

    With ``n_jobs == 1`` and no *timeout* the work runs sequentially in this
    process, which is handy for debugging and for unpicklable callables.
    Otherwise items are sent to a process pool in waves of at most *n_jobs*,
    so every item starts as soon as its wave does and *timeout* bounds each
    call individually. When a wave times out the pool is terminated and
    replaced, so a stuck worker never delays later items.

    Args:
        func: A **picklable** callable when a pool is used.
        items: Sequence of arguments to map over.
        n_jobs: Number of worker processes.
        timeout: Seconds allowed per item, ``None`` for no limit.
        on_error: Called as ``on_error(item, exc)`` when *func* raises or
            times out; its return value takes the item's place. Without it
            the first error propagates.
        progress: Called as ``progress(done, total)`` after each item.

    Returns:
        List of results in the same order as *items*. All workers have exited
        when this function returns.
    """
    length = len(items)
    if length == 0:
        return []

    if timeout is None and (n_jobs == 1 or length == 1):
        out = []
        for idx, item in enumerate(items, start=1):
            out.append(_call(func, item, on_error))
            if progress:
                progress(idx, length)
        return out

    ctx = _get_mp_context()
    n_workers = max(1, min(n_jobs, length))
    pool = ctx.Pool(processes=n_workers)
    out = []
    try:
        for start in range(0, length, n_workers):
            wave = items[start : start + n_workers]
            pending = [pool.apply_async(func, (item,)) for item in wave]
            deadline = None if timeout is None else time.monotonic() + timeout
            stalled = False
            for item, async_result in zip(wave, pending):
                remaining = (
                    None if deadline is None else max(0.0, deadline - time.monotonic())
                )
                try:
                    out.append(async_result.get(remaining))
                except Exception as exc:  # noqa: BLE001
                    if isinstance(exc, multiprocessing.TimeoutError):
                        stalled = True
                    if on_error is None:
                        raise
                    out.append(on_error(item, exc))
                if progress:
                    progress(len(out), length)
            if stalled and start + n_workers < length:
                pool.terminate()
                pool.join()
                pool = ctx.Pool(processes=n_workers)
    finally:
        pool.terminate()
        pool.join()
    return out
