r"""
Sequential execution backend.

Trials share a single generator stream: each trial's exit state is the next trial's
entry state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

import numpy as np

if TYPE_CHECKING:
    from ..paths import TrialKernel
    from ..rng import GeneratorState

__all__ = ["SequentialBackend"]


class SequentialBackend:
    r"""
    Sequential (single-threaded) execution backend.

    Executes trials one at a time on the calling thread, threading one generator
    state through all of them. Suitable for small runs or debugging.

    Examples
    --------
    >>> backend = SequentialBackend()
    >>> payoffs = backend.run(kernel, n_trials=1000, state=root, progress_callback=None)  # doctest: +SKIP
    """

    def run(
        self,
        kernel: "TrialKernel",
        n_trials: int,
        state: "GeneratorState",
        progress_callback: Callable[[int, int], None] | None,
    ) -> np.ndarray:
        r"""
        Run trials sequentially on a single thread.

        Parameters
        ----------
        kernel : TrialKernel
            Per-trial evaluator.
        n_trials : int
            Number of trials.
        state : GeneratorState
            Entry state of the first trial.
        progress_callback : callable or None
            Optional callback ``f(completed, total)`` for progress reporting.

        Returns
        -------
        np.ndarray
            Payoffs with shape ``(n_trials,)``.
        """
        if n_trials <= 0:
            raise ValueError("n_trials must be positive")
        results = np.empty(n_trials, dtype=float)
        # Report progress every 1% of trials
        step = max(1, n_trials // 100)

        for i in range(n_trials):
            results[i], state = kernel.step(state)
            if progress_callback and (((i + 1) % step == 0) or (i + 1 == n_trials)):
                progress_callback(i + 1, n_trials)

        return results
