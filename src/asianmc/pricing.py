r"""

asianmc.pricing
===============

Monte Carlo pricing of an arithmetic-average Asian call under a binomial random walk.

This module provides:

* :class:`~asianmc.pricing.AsianOptionPricer` – validated parameters + backend dispatch.
* :class:`~asianmc.pricing.PricingResult` – a lightweight container for outputs.
* :func:`~asianmc.pricing.price_asian_sequential` – one shared stream, one thread.
* :func:`~asianmc.pricing.price_asian_parallel` – one stream per trial, chunked pool.

Sequential vs parallel
----------------------

The sequential mode threads a single generator state through every trial. The parallel
mode splits the seed into ``n`` independent per-trial states first, so the payoffs are
the same for any chunk size and any worker count, and two runs with the same arguments
return identical bits. The two modes draw different numbers and agree only in
distribution.

The estimate is

.. math::

   \widehat{V} = \frac{(1+r)^{-t}}{n} \sum_{i=1}^{n} \max\left(\bar S^{(i)} - K, 0\right).
"""

from __future__ import annotations

import logging
import multiprocessing as mp
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import numpy as np

from .backends import ProcessBackend, SequentialBackend, ThreadBackend, chunk_size_for, is_windows_platform
from .model import ModelParameters
from .paths import TrialKernel
from .rng import GeneratorState, SeedLike
from .stats import ci_mean, estimate, std_error

logger = logging.getLogger(__name__)  # pragma: no cover
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

__all__ = [
    "PricingResult",
    "AsianOptionPricer",
    "price_asian_sequential",
    "price_asian_parallel",
]


@dataclass
class PricingResult:
    r"""
    Container for the outcome of a pricing run.

    Attributes
    ----------
    price : float
        Discounted price estimate.
    payoffs : ndarray of float
        Undiscounted per-trial payoffs, ordered by trial index.
    n_trials : int
        Number of trials performed.
    execution_time : float
        Wall-clock time in seconds.
    std_error : float
        Standard error of :attr:`price`.
    ci : dict
        Confidence interval from :func:`asianmc.stats.ci_mean`.
    metadata : dict
        Includes ``"mode"``, ``"backend"``, ``"num_cores"``, ``"chunk_size"``,
        ``"path_method"``, ``"seed_entropy"`` and ``"timestamp"``.
    """

    price: float
    payoffs: np.ndarray
    n_trials: int
    execution_time: float
    std_error: float
    ci: dict[str, Any] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    def result_to_string(self) -> str:
        """Pretty, human-readable summary of the result."""
        lines = [
            "=" * 20 + " PRICING RESULTS " + "=" * 20,
            f"  Mode: {self.metadata.get('mode', 'unknown')}",
            f"  Number of trials: {self.n_trials}",
            f"  Execution time: {self.execution_time:.2f} seconds",
            f"  Price: {self.price:.5f}   (SE: {self.std_error:.5f})",
        ]
        if self.ci:
            lines.append(
                f"  {int(self.ci['confidence'] * 100)}% {self.ci['method']}-CI: "
                f"[{self.ci['low']:.5f}, {self.ci['high']:.5f}]"
            )
        if self.metadata:
            lines.append("Metadata:")
        for k, v in self.metadata.items():
            lines.append(f"    {k}: {v}")
        lines.append("=" * 20 + " END " + "=" * 20)
        return "\n".join(lines)


class AsianOptionPricer:
    r"""
    Price an Asian call for fixed, validated :class:`~asianmc.model.ModelParameters`.

    Parameters
    ----------
    params : ModelParameters
        Model inputs. Validated on construction.
    path_method : {"vector", "stream"}, default ``"vector"``
        Path generator used by every trial.

    Raises
    ------
    ValidationError
        If ``params`` violates a pricing precondition.

    Examples
    --------
    >>> params = ModelParameters(n=10_000, t=10, r=0.05, u=1.15, d=1.01, s0=50.0, k=70.0)
    >>> pricer = AsianOptionPricer(params)
    >>> res = pricer.run(backend="thread", num_cores=4, seed=42)  # doctest: +SKIP
    >>> print(res.result_to_string())  # doctest: +SKIP
    """

    _VALID_BACKENDS = ("auto", "sequential", "thread", "process")
    _VALID_CI_METHODS = ("auto", "z", "t")

    def __init__(self, params: ModelParameters, path_method: str = "vector"):
        self.params = params.validate()
        self.path_method = path_method
        self.kernel = TrialKernel.from_params(params, path_method)

    def _validate_run_params(self, backend: str, confidence: float, ci_method: str) -> None:
        """Validate parameters for run() method."""
        if backend not in self._VALID_BACKENDS:
            raise ValueError(f"backend must be one of {self._VALID_BACKENDS}, got '{backend}'")
        if not 0.0 < confidence < 1.0:
            raise ValueError("confidence must be in the interval (0, 1)")
        if ci_method not in self._VALID_CI_METHODS:
            raise ValueError(f"ci_method must be one of {self._VALID_CI_METHODS}, got '{ci_method}'")

    @staticmethod
    def _resolve_backend(backend: str, num_cores: int) -> str:
        r"""
        Resolve ``"auto"`` to a concrete backend.

        ``"auto"`` runs sequentially on one core, otherwise on threads, or on
        processes on Windows where threads serialize under the GIL.
        """
        if backend != "auto":
            return backend
        if num_cores <= 1:
            return "sequential"
        if is_windows_platform():
            logger.info("Backend 'auto' resolved to 'process' on Windows platform.")
            return "process"
        return "thread"

    def _create_backend(
        self, backend: str, num_cores: int, chunk_size: Optional[int]
    ) -> SequentialBackend | ThreadBackend | ProcessBackend:
        """Create and instantiate the requested execution backend."""
        if backend == "sequential":
            return SequentialBackend()
        if backend == "thread":
            return ThreadBackend(n_workers=num_cores, chunk_size=chunk_size)
        return ProcessBackend(n_workers=num_cores, chunk_size=chunk_size)

    @staticmethod
    def _effective_chunk_size(runner, n: int, num_cores: int) -> Optional[int]:
        """Chunk length a pool backend used, or None for sequential runs."""
        if isinstance(runner, SequentialBackend):
            return None
        if runner.chunk_size is not None:
            return max(1, runner.chunk_size)
        return chunk_size_for(n, num_cores, runner.chunks_per_worker)

    def run(
        self,
        *,
        backend: str = "sequential",
        seed: SeedLike = None,
        num_cores: Optional[int] = None,
        chunk_size: Optional[int] = None,
        progress_callback: Optional[Callable[[int, int], None]] = None,
        confidence: float = 0.95,
        ci_method: str = "auto",
    ) -> PricingResult:
        r"""
        Run the simulation and aggregate the payoffs.

        Parameters
        ----------
        backend : {"sequential", "thread", "process", "auto"}, default ``"sequential"``
            Execution backend:

            - ``"sequential"`` — one generator stream threaded through all trials
            - ``"thread"`` — per-trial streams evaluated on a thread pool
            - ``"process"`` — per-trial streams evaluated on a process pool
            - ``"auto"`` — sequential on one core, otherwise thread (process on Windows)

        seed : int, SeedSequence, GeneratorState or None
            Root of the random stream. ``None`` seeds from OS entropy; the entropy is
            recorded in ``metadata["seed_entropy"]``.
        num_cores : int, optional
            Worker count for parallel backends. Defaults to CPU count.
        chunk_size : int, optional
            Trials per chunk. Defaults to ``max(1, n // (10 * num_cores))``.
        progress_callback : callable, optional
            A function ``f(completed: int, total: int)`` called periodically.
        confidence : float, default ``0.95``
            Confidence level of the reported interval.
        ci_method : {"auto", "z", "t"}, default ``"auto"``
            Critical value selection for the interval.

        Returns
        -------
        PricingResult
        """
        self._validate_run_params(backend, confidence, ci_method)
        if num_cores is None:
            num_cores = mp.cpu_count()  # pragma: no cover
        backend = self._resolve_backend(backend, num_cores)
        state = GeneratorState.from_seed(seed)
        n = self.params.n

        if backend == "sequential":
            logger.info("Pricing with %d trials sequentially...", n)
        else:
            logger.info("Pricing with %d trials in parallel using %s backend with %d workers...", n, backend, num_cores)

        t0 = time.time()
        runner = self._create_backend(backend, num_cores, chunk_size)
        payoffs = runner.run(self.kernel, n, state, progress_callback)
        discount = self.params.discount
        price = estimate(payoffs, discount, n)
        exec_time = time.time() - t0
        logger.info("Estimated price %.6f in %.2f seconds", price, exec_time)

        meta = {
            "mode": "sequential" if backend == "sequential" else "parallel",
            "backend": backend,
            "num_cores": num_cores,
            "chunk_size": self._effective_chunk_size(runner, n, num_cores),
            "path_method": self.path_method,
            "seed_entropy": state.entropy,
            "timestamp": time.time(),
        }
        return PricingResult(
            price=price,
            payoffs=payoffs,
            n_trials=n,
            execution_time=exec_time,
            std_error=std_error(payoffs, discount),
            ci=ci_mean(payoffs, discount, confidence, ci_method),
            metadata=meta,
        )


def price_asian_sequential(
    n: int,
    t: int,
    r: float,
    u: float,
    d: float,
    s0: float,
    k: float,
    seed: SeedLike = None,
) -> float:
    r"""
    Price with one generator stream threaded through all ``n`` trials.

    Parameters
    ----------
    n, t, r, u, d, s0, k :
        Model inputs, see :class:`~asianmc.model.ModelParameters`.
    seed : int, SeedSequence, GeneratorState or None
        Explicit entropy source. ``None`` seeds from the OS, so results vary run to
        run.

    Returns
    -------
    float
        Discounted price estimate, non-negative.

    Raises
    ------
    ValidationError
        Before any simulation, if a parameter is out of range.
    """
    params = ModelParameters(n, t, r, u, d, s0, k)
    return AsianOptionPricer(params).run(backend="sequential", seed=seed).price


def price_asian_parallel(
    num_cores: int,
    n: int,
    t: int,
    r: float,
    u: float,
    d: float,
    s0: float,
    k: float,
    seed: SeedLike,
    chunk_size: Optional[int] = None,
    backend: str = "thread",
) -> float:
    r"""
    Price with one independent generator stream per trial on a worker pool.

    Parameters
    ----------
    num_cores : int
        Worker count. Non-positive values fall back to one worker and chunk size 1.
    n, t, r, u, d, s0, k :
        Model inputs, see :class:`~asianmc.model.ModelParameters`.
    seed : int, SeedSequence or GeneratorState
        Root of the split tree. The same arguments always give the same bits.
    chunk_size : int, optional
        Trials per chunk. Defaults to ``max(1, n // (10 * num_cores))``.
    backend : {"thread", "process"}, default ``"thread"``
        Pool type.

    Returns
    -------
    float
        Discounted price estimate, non-negative.

    Raises
    ------
    ValidationError
        Before any simulation, if a parameter is out of range.
    ValueError
        If ``backend`` is not a parallel backend.
    """
    if backend not in ("thread", "process"):
        raise ValueError(f"backend must be 'thread' or 'process', got '{backend}'")
    params = ModelParameters(n, t, r, u, d, s0, k)
    pricer = AsianOptionPricer(params)
    return pricer.run(backend=backend, seed=seed, num_cores=num_cores, chunk_size=chunk_size).price
