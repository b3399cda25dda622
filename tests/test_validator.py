"""
Unit tests for parameter validation.
"""

import pytest

from roadsmq_core.queue.errors import ErrorKind, ValidationError
from roadsmq_core.queue.validator import ValidationRule, Validator, default_validator

validate = default_validator().validate


class TestDefaultRules:
    """Tests for the default validation rules."""

    @pytest.mark.parametrize("name", ["q", "orders-1", "A_b", "x" * 160])
    def test_valid_queue_names(self, name):
        """Test accepted queue names."""
        validate(queue=name)

    @pytest.mark.parametrize("name", ["", "x" * 161, "has space", "dot.ted", "colon:", 5])
    def test_invalid_queue_names(self, name):
        """Test rejected queue names."""
        with pytest.raises(ValidationError) as exc_info:
            validate(queue=name)
        assert exc_info.value.kind == ErrorKind.VALIDATION
        assert exc_info.value.message == "Invalid queue name"

    def test_message_id_must_be_32_characters(self):
        """Test message id length and alphabet."""
        validate(id="a" * 32)
        with pytest.raises(ValidationError):
            validate(id="a" * 31)
        with pytest.raises(ValidationError):
            validate(id="-" * 32)

    @pytest.mark.parametrize("param", ["vt", "delay"])
    def test_time_bounds(self, param):
        """Test vt and delay must be within 0..9999999."""
        validate(**{param: 0})
        validate(**{param: 9999999})
        for bad in (-1, 10000000, 1.5, True, "10"):
            with pytest.raises(ValidationError):
                validate(**{param: bad})

    def test_maxsize_bounds(self):
        """Test maxsize accepts 1024..65536 or -1."""
        for good in (1024, 65536, -1):
            validate(maxsize=good)
        for bad in (1023, 65537, 0, -2):
            with pytest.raises(ValidationError) as exc_info:
                validate(maxsize=bad)
            assert exc_info.value.details == {"maxsize": bad}

    def test_none_is_skipped(self):
        """Test parameters passed as None are not checked."""
        validate(queue="q", vt=None, delay=None, maxsize=None)


class TestValidator:
    """Tests for the Validator container."""

    def test_custom_rule(self):
        """Test a user-supplied rule."""
        validator = Validator().add_rule(
            ValidationRule(name="n", validator=lambda v: v > 0, error_message="n must be positive")
        )
        validator.validate(n=1)
        with pytest.raises(ValidationError, match="n must be positive"):
            validator.validate(n=0)

    def test_unknown_parameter(self):
        """Test parameters without a rule are a programming error."""
        with pytest.raises(KeyError):
            default_validator().validate(colour="red")
