"""Tests for spine_timer.core.errors — the typed error hierarchy."""

from __future__ import annotations

from datetime import timedelta

from spine_timer.core.errors import (
    ConfigError,
    ErrorCategory,
    ErrorContext,
    InvalidConfigError,
    InvalidScheduleError,
    NegativeDurationError,
    PeriodError,
    ScheduleError,
    SchedulerStoppedError,
    SpineTimerError,
    ZeroDurationError,
)


class TestHierarchy:
    def test_period_errors(self):
        """Duration errors are validation-category PeriodErrors."""
        for error in (ZeroDurationError(timedelta(0)), NegativeDurationError(timedelta(-1))):
            assert isinstance(error, PeriodError)
            assert isinstance(error, SpineTimerError)
            assert error.category == ErrorCategory.VALIDATION

    def test_schedule_errors(self):
        """Schedule errors are orchestration-category."""
        for error in (InvalidScheduleError("x"), SchedulerStoppedError()):
            assert isinstance(error, ScheduleError)
            assert error.category == ErrorCategory.ORCHESTRATION

    def test_config_errors(self):
        """Config errors keep the offending key and value."""
        error = InvalidConfigError("timezone", "Mars/Base")
        assert isinstance(error, ConfigError)
        assert error.category == ErrorCategory.CONFIG
        assert error.key == "timezone"
        assert error.value == "Mars/Base"
        assert "Mars/Base" in error.message


class TestSerialization:
    def test_period_error_to_dict(self):
        """to_dict includes the rejected duration."""
        data = NegativeDurationError(timedelta(seconds=-5)).to_dict()
        assert data["error_type"] == "NegativeDurationError"
        assert data["category"] == "VALIDATION"
        assert "duration" in data

    def test_invalid_schedule_context(self):
        """The expression is recorded in the error context."""
        cause = ValueError("bad field")
        error = InvalidScheduleError("* *", cause=cause)
        assert error.expression == "* *"
        assert error.__cause__ is cause
        data = error.to_dict()
        assert data["context"] == {"source": "* *"}
        assert data["cause"] == "bad field"

    def test_with_context(self):
        """with_context fills known fields and collects the rest as metadata."""
        error = SpineTimerError("boom").with_context(entry="nightly", attempt=3)
        assert error.context.entry == "nightly"
        assert error.context.metadata == {"attempt": 3}
        assert error.to_dict()["context"] == {"entry": "nightly", "attempt": 3}

    def test_empty_context_is_omitted(self):
        """No context key when nothing was attached."""
        assert "context" not in SpineTimerError("boom").to_dict()
        assert ErrorContext().to_dict() == {}

    def test_category_override(self):
        """Callers may override the default category."""
        error = SpineTimerError("boom", category=ErrorCategory.CONFIG)
        assert error.category == ErrorCategory.CONFIG
        assert "CONFIG" in repr(error)
