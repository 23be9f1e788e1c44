r"""
Base classes and utilities for execution backends.

This module provides:

Protocol
    :class:`ExecutionBackend` — Interface for trial execution strategies

Functions
    :func:`make_blocks` — Chunking helper for parallel work distribution
    :func:`chunk_size_for` — Default chunk length for a trial and worker count
    :func:`spawn_trial_states` — Fan a root state out into one state per trial
    :func:`worker_run_chunk` — Top-level worker for process-based parallelism

Helpers
    :func:`is_windows_platform` — Platform detection for backend selection
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Callable, Optional, Protocol, Sequence

import numpy as np

if TYPE_CHECKING:
    from ..paths import TrialKernel
    from ..rng import GeneratorState

logger = logging.getLogger(__name__)

__all__ = [
    "CHUNKS_PER_WORKER",
    "ExecutionBackend",
    "chunk_size_for",
    "is_windows_platform",
    "make_blocks",
    "prepare_blocks",
    "spawn_trial_states",
    "worker_run_chunk",
]

# Chunks per worker; more chunks than workers keeps the pool busy at the tail.
CHUNKS_PER_WORKER = 10


def is_windows_platform() -> bool:
    """Return True when running on a Windows platform."""
    return sys.platform.startswith("win") or (sys.platform == "cli")


def make_blocks(n: int, block_size: int = 10_000) -> list[tuple[int, int]]:
    r"""
    Partition an integer range :math:`[0, n)` into half-open blocks :math:`(i, j)`.

    Parameters
    ----------
    n : int
        Total number of items.
    block_size : int, default: 10_000
        Target block length. Values below 1 are treated as 1.

    Returns
    -------
    list of tuple[int, int]
        List of ``(i, j)`` index pairs covering ``[0, n)``.

    Examples
    --------
    >>> make_blocks(5, block_size=2)
    [(0, 2), (2, 4), (4, 5)]
    """
    block_size = max(1, int(block_size))
    blocks = []
    i = 0
    while i < n:
        j = min(i + block_size, n)
        blocks.append((i, j))
        i = j
    return blocks


def chunk_size_for(n: int, n_workers: int, chunks_per_worker: int = CHUNKS_PER_WORKER) -> int:
    r"""
    Default chunk length :math:`\max(1, \lfloor n / (c \cdot w) \rfloor)`.

    Parameters
    ----------
    n : int
        Number of trials.
    n_workers : int
        Worker count :math:`w`. Non-positive counts give a chunk length of 1.
    chunks_per_worker : int, default 10
        Chunks per worker :math:`c`.

    Examples
    --------
    >>> chunk_size_for(100_000, 4)
    2500
    >>> chunk_size_for(5, 4)
    1
    """
    if n_workers <= 0 or chunks_per_worker <= 0:
        return 1
    return max(1, n // (chunks_per_worker * n_workers))


def spawn_trial_states(state: "GeneratorState", n: int) -> list["GeneratorState"]:
    r"""
    Produce ``n`` independent generator states, one per trial.

    ``result[i]`` depends only on ``state`` and ``i``, never on how the trials are
    later chunked, which is what makes the per-trial payoffs independent of the
    block layout and worker count.
    """
    return state.spawn(n)


def prepare_blocks(
    n_trials: int,
    state: "GeneratorState",
    n_workers: int,
    chunk_size: Optional[int] = None,
    chunks_per_worker: int = CHUNKS_PER_WORKER,
) -> tuple[list[tuple[int, int]], list["GeneratorState"]]:
    """Prepare work blocks and one independent state per trial."""
    if chunk_size is None:
        chunk_size = chunk_size_for(n_trials, n_workers, chunks_per_worker)
    blocks = make_blocks(n_trials, chunk_size)
    states = spawn_trial_states(state, n_trials)
    logger.debug("Split %d trials into %d blocks of up to %d", n_trials, len(blocks), max(1, chunk_size))
    return blocks, states


def worker_run_chunk(kernel: "TrialKernel", states: Sequence["GeneratorState"]) -> np.ndarray:
    r"""
    Evaluate a batch of trials in a **separate worker**.

    Parameters
    ----------
    kernel : TrialKernel
        Per-trial evaluator. Pickleable, so it works with a process backend.
    states : sequence of GeneratorState
        One entry state per trial, each used exactly once.

    Returns
    -------
    ndarray
        Fully evaluated payoffs, in the order of ``states``.
    """
    out = np.empty(len(states), dtype=float)
    for idx, state in enumerate(states):
        out[idx] = kernel.evaluate(state)
    return out


class ExecutionBackend(Protocol):
    r"""
    Protocol defining the interface for execution backends.

    Backends are responsible for executing trials and returning their payoffs.
    They handle the details of sequential vs parallel execution, thread vs process
    pools, and progress reporting.
    """

    def run(
        self,
        kernel: "TrialKernel",
        n_trials: int,
        state: "GeneratorState",
        progress_callback: Callable[[int, int], None] | None,
    ) -> np.ndarray:
        r"""
        Run trials and return their undiscounted payoffs.

        Parameters
        ----------
        kernel : TrialKernel
            Per-trial evaluator.
        n_trials : int
            Number of trials to perform.
        state : GeneratorState
            Root generator state.
        progress_callback : callable or None
            Optional callback ``f(completed, total)`` for progress reporting.

        Returns
        -------
        np.ndarray
            Payoffs with shape ``(n_trials,)``, ordered by trial index.
        """
