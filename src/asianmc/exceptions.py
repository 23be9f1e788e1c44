"""Exception types raised by :mod:`asianmc`."""

__all__ = ["PricingError", "ValidationError"]


class PricingError(Exception):
    """Base class for pricing errors."""


class ValidationError(PricingError, ValueError):
    r"""
    Raised when model parameters violate a pricing precondition.

    Parameters
    ----------
    parameter : str
        Name of the offending parameter, or ``"d, r, u"`` for the combined
        ordering constraint.
    message : str
        Human-readable description of the violated constraint.

    Examples
    --------
    >>> err = ValidationError("n", "Number of trials (n) must be greater than 0.")
    >>> err.parameter
    'n'
    """

    def __init__(self, parameter: str, message: str):
        self.parameter = parameter
        super().__init__(f"Invalid value for {parameter}. {message}")
