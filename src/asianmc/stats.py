r"""
Aggregation of per-trial payoffs into a price estimate.

This module provides :func:`estimate`, the discounted Monte Carlo average

.. math::
   \widehat{V} = \frac{D}{n}\sum_{i=1}^{n} X_i, \qquad D = (1 + r)^{-t},

plus the sample statistics reported alongside it: :func:`std_error` and the z/t
interval :func:`ci_mean`.

See Also
--------
asianmc.utils.autocrit
    Selects a z/t critical value for a target confidence level and sample size.
"""

from __future__ import annotations

import numpy as np

from .utils import autocrit

__all__ = ["estimate", "std_error", "ci_mean"]


def estimate(payoffs: np.ndarray, discount: float, n: int) -> float:
    r"""
    Discounted average of the payoffs, :math:`(\sum X_i \cdot D) / n`.

    The sum runs left to right in index order, so a fixed payoff ordering always
    gives the same bits.

    Parameters
    ----------
    payoffs : array_like
        Undiscounted per-trial payoffs.
    discount : float
        Discount factor :math:`D`.
    n : int
        Trial count.

    Examples
    --------
    >>> estimate(np.array([1.0, 2.0, 3.0]), 0.5, 3)
    1.0
    """
    arr = np.ascontiguousarray(payoffs, dtype=float)
    total = float(np.add.accumulate(arr)[-1]) if arr.size else 0.0
    return (total * discount) / n


def std_error(payoffs: np.ndarray, discount: float) -> float:
    r"""
    Standard error of :func:`estimate`, :math:`D \cdot s / \sqrt{n}` with ``ddof=1``.

    Returns ``nan`` for fewer than two payoffs.
    """
    arr = np.asarray(payoffs, dtype=float)
    if arr.size < 2:
        return float("nan")
    return float(discount * np.std(arr, ddof=1) / np.sqrt(arr.size))


def ci_mean(
    payoffs: np.ndarray,
    discount: float,
    confidence: float = 0.95,
    method: str = "auto",
) -> dict[str, float | str]:
    r"""
    Parametric CI for the discounted price using z/t critical values.

    Parameters
    ----------
    payoffs : ndarray
        Undiscounted per-trial payoffs.
    discount : float
        Discount factor.
    confidence : float, default 0.95
        Confidence level in :math:`(0, 1)`.
    method : {"auto", "z", "t"}, default ``"auto"``
        Critical value selection, see :func:`asianmc.utils.autocrit`.

    Returns
    -------
    dict[str, float | str]
        Keys ``confidence``, ``method``, ``se``, ``crit``, ``low`` and ``high``.
        Endpoints are ``nan`` when fewer than two payoffs are given.
    """
    arr = np.asarray(payoffs, dtype=float)
    if arr.size < 2:
        return {
            "confidence": confidence,
            "method": method,
            "se": float("nan"),
            "crit": float("nan"),
            "low": float("nan"),
            "high": float("nan"),
        }

    mu = estimate(arr, discount, arr.size)
    se = std_error(arr, discount)
    crit, resolved = autocrit(confidence, arr.size, method)
    return {
        "confidence": confidence,
        "method": resolved,
        "se": se,
        "crit": float(crit),
        "low": float(mu - crit * se),
        "high": float(mu + crit * se),
    }
