"""asianmc package public API."""

from .exceptions import PricingError, ValidationError
from .model import ModelParameters, validate_parameters
from .paths import TrialKernel, evaluate_trial, generate_path, generate_path_vector
from .pricing import AsianOptionPricer, PricingResult, price_asian_parallel, price_asian_sequential
from .rng import GeneratorState, bernoulli
from .stats import ci_mean, estimate, std_error
from .utils import autocrit, t_crit, z_crit

__all__ = [
    "PricingError",
    "ValidationError",
    "ModelParameters",
    "validate_parameters",
    "GeneratorState",
    "bernoulli",
    "TrialKernel",
    "generate_path",
    "generate_path_vector",
    "evaluate_trial",
    "estimate",
    "std_error",
    "ci_mean",
    "AsianOptionPricer",
    "PricingResult",
    "price_asian_sequential",
    "price_asian_parallel",
    "z_crit",
    "t_crit",
    "autocrit",
]

__version__ = "0.1.0"
