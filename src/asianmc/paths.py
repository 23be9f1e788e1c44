r"""
Binomial price paths and single-trial payoffs.

This module provides:

Functions
    :func:`generate_path` — Streaming path average, one Bernoulli draw per step
    :func:`generate_path_vector` — Same average from a materialized NumPy path
    :func:`path_prices` — Full ``t + 1`` price path
    :func:`trial_step` — One trial's payoff plus the successor state
    :func:`evaluate_trial` — One trial's payoff

Classes
    :class:`TrialKernel` — Picklable per-trial evaluator used by the backends

A path starts at :math:`S_0` and moves :math:`S_{i+1} = S_i \cdot u` on an up draw and
:math:`S_{i+1} = S_i \cdot d` otherwise. The Asian payoff averages the ``t``
post-initial prices:

.. math::
   \max\left(\frac{1}{t}\sum_{i=1}^{t} S_i - K,\ 0\right).

Both path methods multiply and add strictly left to right over the same draws, so
they return bit-identical averages for the same entry state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np

from .model import ModelParameters
from .rng import GeneratorState, bernoulli, bernoulli_steps

__all__ = [
    "PATH_METHODS",
    "TrialKernel",
    "evaluate_trial",
    "generate_path",
    "generate_path_vector",
    "path_prices",
    "trial_step",
]


def generate_path(
    p_star: float,
    u: float,
    d: float,
    s0: float,
    t: int,
    state: GeneratorState,
) -> tuple[float, GeneratorState]:
    r"""
    Average price of one path, computed in a single streaming pass.

    Parameters
    ----------
    p_star : float
        Up-move probability.
    u, d : float
        Up and down factors.
    s0 : float
        Initial price (excluded from the average).
    t : int
        Number of steps.
    state : GeneratorState
        Entry state; one uniform is consumed per step.

    Returns
    -------
    tuple[float, GeneratorState]
        Mean of the ``t`` post-initial prices and the successor state.
    """
    price = s0
    total = 0.0
    for _ in range(t):
        step, state = bernoulli(p_star, state)
        price = price * (u if step == 1 else d)
        total = total + price
    return total / t, state


def _prices_from_steps(steps: np.ndarray, u: float, d: float, s0: float) -> np.ndarray:
    factors = np.empty(steps.size + 1, dtype=float)
    factors[0] = s0
    factors[1:] = np.where(steps == 1, u, d)
    return np.multiply.accumulate(factors)


def path_prices(
    p_star: float,
    u: float,
    d: float,
    s0: float,
    t: int,
    state: GeneratorState,
) -> tuple[np.ndarray, GeneratorState]:
    """Return the ``t + 1`` prices ``[s0, S_1, ..., S_t]`` and the successor state."""
    steps, state = bernoulli_steps(p_star, state, t)
    return _prices_from_steps(steps, u, d, s0), state


def generate_path_vector(
    p_star: float,
    u: float,
    d: float,
    s0: float,
    t: int,
    state: GeneratorState,
) -> tuple[float, GeneratorState]:
    r"""
    Average price of one path from a fully materialized price vector.

    Equivalent to :func:`generate_path`. Prices come from
    :data:`numpy.multiply.accumulate` and the sum from :data:`numpy.add.accumulate`,
    both sequential, so the result matches the streaming pass bit for bit.
    """
    prices, state = path_prices(p_star, u, d, s0, t, state)
    total = np.add.accumulate(prices[1:])[-1]
    return float(total / t), state


PATH_METHODS: dict[str, Callable[..., tuple[float, GeneratorState]]] = {
    "stream": generate_path,
    "vector": generate_path_vector,
}


def trial_step(
    p_star: float,
    u: float,
    d: float,
    s0: float,
    k: float,
    t: int,
    state: GeneratorState,
    method: str = "vector",
) -> tuple[float, GeneratorState]:
    r"""
    Payoff :math:`\max(\bar S - K, 0)` of one trial and the successor state.

    Parameters
    ----------
    method : {"vector", "stream"}, default ``"vector"``
        Path generator to use. See :data:`PATH_METHODS`.

    Raises
    ------
    ValueError
        If ``method`` is unknown.
    """
    try:
        path_fn = PATH_METHODS[method]
    except KeyError:
        raise ValueError(f"method must be one of {tuple(PATH_METHODS)}, got '{method}'") from None
    mean_price, state = path_fn(p_star, u, d, s0, t, state)
    return max(mean_price - k, 0.0), state


def evaluate_trial(
    p_star: float,
    u: float,
    d: float,
    s0: float,
    k: float,
    t: int,
    state: GeneratorState,
    method: str = "vector",
) -> float:
    """Undiscounted payoff of the trial driven by ``state``."""
    payoff, _ = trial_step(p_star, u, d, s0, k, t, state, method)
    return payoff


@dataclass(frozen=True)
class TrialKernel:
    r"""
    Picklable bundle of everything one trial needs besides its generator state.

    Attributes
    ----------
    p_star : float
        Up-move probability.
    u, d : float
        Up and down factors.
    s0 : float
        Initial price.
    k : float
        Strike.
    t : int
        Number of steps.
    method : {"vector", "stream"}
        Path generator, see :data:`PATH_METHODS`.
    """

    p_star: float
    u: float
    d: float
    s0: float
    k: float
    t: int
    method: str = "vector"

    def __post_init__(self) -> None:
        if self.method not in PATH_METHODS:
            raise ValueError(f"method must be one of {tuple(PATH_METHODS)}, got '{self.method}'")

    @classmethod
    def from_params(cls, params: ModelParameters, method: str = "vector") -> "TrialKernel":
        """Build the kernel for ``params``."""
        return cls(params.p_star, params.u, params.d, params.s0, params.k, params.t, method)

    def step(self, state: GeneratorState) -> tuple[float, GeneratorState]:
        """Payoff of the trial driven by ``state`` and the successor state."""
        return trial_step(self.p_star, self.u, self.d, self.s0, self.k, self.t, state, self.method)

    def evaluate(self, state: GeneratorState) -> float:
        """Payoff of the trial driven by ``state``."""
        return self.step(state)[0]
