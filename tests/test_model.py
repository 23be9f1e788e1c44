import pytest

from asianmc import ModelParameters, PricingError, ValidationError, validate_parameters

_NAMES = ("n", "t", "r", "u", "d", "s0", "k")
BASE_ARGS = (2_000, 10, 0.05, 1.15, 1.01, 50.0, 70.0)


def _with(**changes):
    args = dict(zip(_NAMES, BASE_ARGS))
    args.update(changes)
    return tuple(args[name] for name in _NAMES)


class TestValidateParameters:
    """Test the pricing preconditions"""

    def test_valid_parameters_pass(self):
        """Test a tuple satisfying every constraint is accepted"""
        assert validate_parameters(*BASE_ARGS) is None

    @pytest.mark.parametrize(
        "changes, parameter",
        [
            ({"n": 0}, "n"),
            ({"n": -5}, "n"),
            ({"t": 0}, "t"),
            ({"r": 0.0}, "r"),
            ({"r": -0.01}, "r"),
            ({"u": 0.0}, "u"),
            ({"d": 0.0}, "d"),
            ({"d": -1.0}, "d"),
            ({"s0": 0.0}, "s0"),
            ({"k": 0.0}, "k"),
            ({"k": -70.0}, "k"),
        ],
    )
    def test_single_violation_names_parameter(self, changes, parameter):
        """Test each range violation is reported against its own parameter"""
        with pytest.raises(ValidationError) as excinfo:
            validate_parameters(*_with(**changes))
        assert excinfo.value.parameter == parameter
        assert f"Invalid value for {parameter}." in str(excinfo.value)

    @pytest.mark.parametrize(
        "changes",
        [
            {"d": 1.06},  # d above 1 + r
            {"d": 1.05},  # d equal to 1 + r
            {"u": 1.04},  # u below 1 + r
            {"u": 1.05},  # u equal to 1 + r
            {"d": 1.2, "u": 1.1},
        ],
    )
    def test_ordering_violation(self, changes):
        """Test the combined 0 < d < 1 + r < u relation"""
        with pytest.raises(ValidationError) as excinfo:
            validate_parameters(*_with(**changes))
        assert excinfo.value.parameter == "d, r, u"
        assert "0 < d < 1 + r < u" in str(excinfo.value)

    def test_first_violation_wins(self):
        """Test checks run in declaration order"""
        with pytest.raises(ValidationError) as excinfo:
            validate_parameters(*_with(n=0, k=0.0))
        assert excinfo.value.parameter == "n"

    def test_validation_error_hierarchy(self):
        """Test ValidationError is both a PricingError and a ValueError"""
        with pytest.raises(PricingError):
            validate_parameters(*_with(t=0))
        with pytest.raises(ValueError):
            validate_parameters(*_with(t=0))


class TestModelParameters:
    """Test derived constants"""

    def test_p_star(self, params):
        """Test the risk-neutral probability"""
        assert params.p_star == pytest.approx((1.05 - 1.01) / (1.15 - 1.01))
        assert 0.0 < params.p_star < 1.0

    def test_discount_integer_power(self, params):
        """Test the discount factor uses (1 + r) ** -t"""
        assert params.discount == 1.0 / (1.05 ** 10)

    def test_validate_returns_self(self, params):
        """Test validate() is chainable"""
        assert params.validate() is params

    def test_validate_raises(self):
        """Test validate() surfaces the violated constraint"""
        with pytest.raises(ValidationError, match="s0"):
            ModelParameters(*_with(s0=-1.0)).validate()

    def test_frozen(self, params):
        """Test parameters are immutable"""
        with pytest.raises(AttributeError):
            params.k = 1.0
