r"""
Binomial model parameters and their validation.

Under the Cox-Ross-Rubinstein style random walk the underlying moves by a factor
:math:`u` or :math:`d` each period, and the risk-neutral up-probability is

.. math::
   p^* = \frac{1 + r - d}{u - d},

which lies in :math:`(0, 1)` exactly when :math:`0 < d < 1 + r < u`.
"""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import ValidationError

__all__ = ["ModelParameters", "validate_parameters"]


def validate_parameters(n: int, t: int, r: float, u: float, d: float, s0: float, k: float) -> None:
    r"""
    Check the pricing preconditions and fail on the first violated one.

    Parameters
    ----------
    n : int
        Number of trials, ``> 0``.
    t : int
        Number of time steps, ``>= 1``.
    r : float
        Per-period interest rate, ``> 0``.
    u, d : float
        Up and down factors, both ``> 0``.
    s0 : float
        Initial price, ``> 0``.
    k : float
        Strike, ``> 0``.

    Raises
    ------
    ValidationError
        Naming the offending parameter. The relation ``0 < d < 1 + r < u`` is
        checked last, as a single combined constraint.
    """
    if n <= 0:
        raise ValidationError("n", "Number of trials (n) must be greater than 0.")
    if t < 1:
        raise ValidationError("t", "Number of time steps (t) must be greater than or equal to 1.")
    if r <= 0:
        raise ValidationError("r", "The interest rate (r) must be greater than 0.")
    if u <= 0:
        raise ValidationError("u", "The up factor (u) must be greater than 0.")
    if d <= 0:
        raise ValidationError("d", "The down factor (d) must be greater than 0.")
    if s0 <= 0:
        raise ValidationError("s0", "Initial stock price (s0) must be greater than 0.")
    if k <= 0:
        raise ValidationError("k", "Strike price (k) must be greater than 0.")
    if not (0 < d < 1 + r < u):
        raise ValidationError(
            "d, r, u",
            f"The relationship 0 < d < 1 + r < u must hold (got d={d}, 1 + r={1 + r}, u={u}).",
        )


@dataclass(frozen=True)
class ModelParameters:
    r"""
    Inputs of one pricing run.

    Attributes
    ----------
    n : int
        Number of Monte Carlo trials.
    t : int
        Number of time steps per path.
    r : float
        Per-period interest rate.
    u : float
        Up factor.
    d : float
        Down factor.
    s0 : float
        Initial price.
    k : float
        Strike.

    Examples
    --------
    >>> params = ModelParameters(n=1000, t=10, r=0.05, u=1.15, d=1.01, s0=50.0, k=70.0)
    >>> round(params.p_star, 6)
    0.285714
    """

    n: int
    t: int
    r: float
    u: float
    d: float
    s0: float
    k: float

    def validate(self) -> "ModelParameters":
        """Run :func:`validate_parameters` and return ``self``."""
        validate_parameters(self.n, self.t, self.r, self.u, self.d, self.s0, self.k)
        return self

    @property
    def discount(self) -> float:
        r"""Discount factor :math:`(1 + r)^{-t}` with an integer exponent."""
        return 1.0 / ((1.0 + self.r) ** int(self.t))

    @property
    def p_star(self) -> float:
        """Risk-neutral probability of an up move."""
        return (1.0 + self.r - self.d) / (self.u - self.d)
