"""
Unit Tests for Sparkwell Exceptions
===================================

Test Coverage
-------------
- Domain exception codes, details and severity
- Infrastructure exception retry flags
- Exception classification helpers
"""

import pytest

from sparkwell.core.exceptions import (
    ConfigurationError,
    ErrorSeverity,
    UpstreamStorageError,
    get_error_severity,
    is_transient_error,
    should_alert,
)
from sparkwell.modules.shared.exceptions import (
    ConflictError,
    InsufficientBalanceError,
    InvalidOperationError,
    InvalidRewardError,
    NotFoundError,
    SparkwellDomainException,
    ValidationError,
)


@pytest.mark.unit
class TestDomainExceptions:
    """Test domain exception payloads."""

    def test_insufficient_balance(self):
        exc = InsufficientBalanceError(required=100, current=80)

        assert exc.deficit == 20
        assert exc.error_code == "INSUFFICIENT_SPARK_POINTS"
        assert exc.to_dict()["details"]["current"] == 80
        assert exc.severity is ErrorSeverity.INFO
        assert "need 100, have 80" in str(exc)

    def test_not_found(self):
        exc = NotFoundError("User", 42)

        assert exc.message == "User not found: 42"
        assert exc.error_code == "USER_NOT_FOUND"

    def test_invalid_reward_is_a_not_found(self):
        exc = InvalidRewardError("unicorn")

        assert isinstance(exc, NotFoundError)
        assert exc.reward_id == "unicorn"
        assert exc.error_code == "INVALID_REWARD"

    def test_validation_error(self):
        exc = ValidationError("reward_id", "Value is required")

        assert exc.field == "reward_id"
        assert exc.error_code == "VALIDATION_REWARD_ID"

    def test_invalid_operation(self):
        exc = InvalidOperationError("start_quest", "already started today")

        assert exc.message == "Cannot start_quest: already started today"
        assert isinstance(exc, SparkwellDomainException)

    def test_conflict(self):
        exc = ConflictError("transaction", "UNIQUE constraint failed: users.email")

        assert exc.error_code == "CONFLICT"
        assert exc.details["operation"] == "transaction"
        assert is_transient_error(exc)
        assert not should_alert(exc)


@pytest.mark.unit
class TestErrorClassification:
    """Test helpers used by log handlers."""

    def test_storage_errors_are_transient(self):
        exc = UpstreamStorageError("transaction", RuntimeError("database is locked"))

        assert is_transient_error(exc)
        assert should_alert(exc)
        assert exc.details["error_type"] == "RuntimeError"

    def test_domain_errors_do_not_alert(self):
        exc = InsufficientBalanceError(required=10, current=0)

        assert not is_transient_error(exc)
        assert not should_alert(exc)

    def test_configuration_errors_are_critical(self):
        exc = ConfigurationError("rewards.catalog", "duplicate reward id")

        assert get_error_severity(exc) is ErrorSeverity.CRITICAL
        assert exc.config_key == "rewards.catalog"

    def test_plain_exceptions_default_to_error(self):
        assert get_error_severity(ValueError("boom")) is ErrorSeverity.ERROR
        assert not is_transient_error(ValueError("boom"))
