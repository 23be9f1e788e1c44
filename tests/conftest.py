import multiprocessing as mp

import pytest

from asianmc import GeneratorState, ModelParameters, TrialKernel

# n, t, r, u, d, s0, k
BASE_ARGS = (2_000, 10, 0.05, 1.15, 1.01, 50.0, 70.0)


@pytest.fixture(scope="session", autouse=True)
def _set_spawn_start_method():
    try:
        mp.set_start_method("spawn")
    except RuntimeError:
        pass  # already set


@pytest.fixture
def base_args():
    """Valid positional arguments ``(n, t, r, u, d, s0, k)``."""
    return BASE_ARGS


@pytest.fixture
def params():
    """Valid model parameters with a small trial count."""
    return ModelParameters(*BASE_ARGS)


@pytest.fixture
def kernel(params):
    """Trial kernel for the default parameters."""
    return TrialKernel.from_params(params)


@pytest.fixture
def root_state():
    """Reproducible root generator state."""
    return GeneratorState.from_seed(12345)
