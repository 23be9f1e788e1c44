r"""
Critical values for confidence intervals on the price estimate.
"""

from __future__ import annotations

from scipy.stats import norm
from scipy.stats import t as student_t

__all__ = ["z_crit", "t_crit", "autocrit"]


def z_crit(confidence: float) -> float:
    r"""
    Two-sided normal critical value :math:`z_{1-\alpha/2}`.

    Parameters
    ----------
    confidence : float
        Confidence level in :math:`(0, 1)`.

    Examples
    --------
    >>> round(z_crit(0.95), 4)
    1.96
    """
    if not 0.0 < confidence < 1.0:
        raise ValueError("confidence must be in the interval (0, 1)")
    return float(norm.ppf(0.5 + confidence / 2.0))


def t_crit(confidence: float, df: int) -> float:
    r"""Two-sided Student-:math:`t` critical value with ``df`` degrees of freedom."""
    if not 0.0 < confidence < 1.0:
        raise ValueError("confidence must be in the interval (0, 1)")
    if df < 1:
        raise ValueError("df must be at least 1")
    return float(student_t.ppf(0.5 + confidence / 2.0, df))


def autocrit(confidence: float, n: int, method: str = "auto") -> tuple[float, str]:
    r"""
    Select a critical value for a sample of size ``n``.

    Parameters
    ----------
    confidence : float
        Confidence level in :math:`(0, 1)`.
    n : int
        Effective sample size.
    method : {"auto", "z", "t"}, default ``"auto"``
        ``"auto"`` uses Student-t when :math:`n < 30`, otherwise z.

    Returns
    -------
    tuple[float, str]
        Critical value and the resolved method (``"z"`` or ``"t"``).
    """
    if method not in ("auto", "z", "t"):
        raise ValueError(f"method must be one of 'auto', 'z', 't', got '{method}'")
    if method == "auto":
        method = "t" if n < 30 else "z"
    if method == "t":
        return t_crit(confidence, max(1, n - 1)), "t"
    return z_crit(confidence), "z"
