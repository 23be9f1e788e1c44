r"""
Parallel execution backends.

This module provides:

Classes
    :class:`ThreadBackend` — Thread-based parallelism using ThreadPoolExecutor
    :class:`ProcessBackend` — Process-based parallelism using ProcessPoolExecutor

Both backends fork the root generator state into one state per trial before any
work is dispatched, so the payoff of trial ``i`` does not depend on the chunk size
or the number of workers.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Callable, Optional

import numpy as np

from .base import CHUNKS_PER_WORKER, prepare_blocks, worker_run_chunk

if TYPE_CHECKING:
    from ..paths import TrialKernel
    from ..rng import GeneratorState

logger = logging.getLogger(__name__)

__all__ = [
    "ThreadBackend",
    "ProcessBackend",
]


class _PoolBackend:
    """Shared configuration for the pool-based backends."""

    def __init__(
        self,
        n_workers: int,
        chunk_size: Optional[int] = None,
        chunks_per_worker: int = CHUNKS_PER_WORKER,
    ):
        if n_workers <= 0:
            logger.warning("n_workers=%d is not positive; using 1 worker and chunk size 1.", n_workers)
            chunk_size = 1
        self.n_workers = n_workers
        self.chunk_size = chunk_size
        self.chunks_per_worker = chunks_per_worker

    def _prepare(self, n_trials: int, state: "GeneratorState"):
        if n_trials <= 0:
            raise ValueError("n_trials must be positive")
        blocks, states = prepare_blocks(
            n_trials, state, self.n_workers, self.chunk_size, self.chunks_per_worker
        )
        max_workers = max(1, min(self.n_workers, len(blocks)))
        return blocks, states, max_workers


class ThreadBackend(_PoolBackend):
    r"""
    Thread-based parallel execution backend.

    Uses :class:`concurrent.futures.ThreadPoolExecutor` for parallel execution.

    Parameters
    ----------
    n_workers : int
        Number of worker threads to use.
    chunk_size : int, optional
        Trials per chunk. Defaults to :func:`~asianmc.backends.base.chunk_size_for`.
    chunks_per_worker : int, default 10
        Number of work chunks per worker for load balancing.

    Examples
    --------
    >>> backend = ThreadBackend(n_workers=4)
    >>> payoffs = backend.run(kernel, n_trials=100000, state=root, progress_callback=None)  # doctest: +SKIP
    """

    def run(
        self,
        kernel: "TrialKernel",
        n_trials: int,
        state: "GeneratorState",
        progress_callback: Callable[[int, int], None] | None,
    ) -> np.ndarray:
        r"""
        Run trials in parallel using threads.

        Parameters
        ----------
        kernel : TrialKernel
            Per-trial evaluator.
        n_trials : int
            Number of trials.
        state : GeneratorState
            Root state, split into one independent state per trial.
        progress_callback : callable or None
            Optional callback ``f(completed, total)`` for progress reporting.

        Returns
        -------
        np.ndarray
            Payoffs with shape ``(n_trials,)``, ordered by trial index.
        """
        blocks, states, max_workers = self._prepare(n_trials, state)
        results = np.empty(n_trials, dtype=float)
        completed = 0

        with ThreadPoolExecutor(max_workers=max_workers) as ex:
            futs = {ex.submit(worker_run_chunk, kernel, states[i:j]): (i, j) for i, j in blocks}
            for f in as_completed(futs):
                i, j = futs[f]
                results[i:j] = f.result()
                completed += j - i
                if progress_callback:
                    progress_callback(completed, n_trials)

        return results


class ProcessBackend(_PoolBackend):
    r"""
    Process-based parallel execution backend.

    Uses :class:`concurrent.futures.ProcessPoolExecutor` with spawn context
    for parallel execution. Gives real parallelism for the Python-bound trial loop.

    Parameters
    ----------
    n_workers : int
        Number of worker processes to use.
    chunk_size : int, optional
        Trials per chunk. Defaults to :func:`~asianmc.backends.base.chunk_size_for`.
    chunks_per_worker : int, default 10
        Number of work chunks per worker for load balancing.

    Notes
    -----
    The kernel and the generator states are pickled to the workers.
    """

    def run(
        self,
        kernel: "TrialKernel",
        n_trials: int,
        state: "GeneratorState",
        progress_callback: Callable[[int, int], None] | None,
    ) -> np.ndarray:
        r"""
        Run trials in parallel using processes.

        Parameters
        ----------
        kernel : TrialKernel
            Per-trial evaluator.
        n_trials : int
            Number of trials.
        state : GeneratorState
            Root state, split into one independent state per trial.
        progress_callback : callable or None
            Optional callback ``f(completed, total)`` for progress reporting.

        Returns
        -------
        np.ndarray
            Payoffs with shape ``(n_trials,)``, ordered by trial index.
        """
        blocks, states, max_workers = self._prepare(n_trials, state)
        results = np.empty(n_trials, dtype=float)
        completed = 0

        with ProcessPoolExecutor(
            max_workers=max_workers,
            mp_context=mp.get_context("spawn"),
        ) as ex:
            futs = {ex.submit(worker_run_chunk, kernel, states[i:j]): (i, j) for i, j in blocks}
            try:
                for f in as_completed(futs):
                    i, j = futs[f]
                    results[i:j] = f.result()
                    completed += j - i
                    if progress_callback:
                        progress_callback(completed, n_trials)  # pragma: no cover
            except KeyboardInterrupt:  # pragma: no cover
                for f in futs:
                    f.cancel()
                raise

        return results
