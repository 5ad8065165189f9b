"""
Test suite for retry logic and performance tracking.
"""

import logging
from unittest.mock import patch

import pytest
from tenacity import RetryError

from momentx.utils.reliability import track_performance, with_retry


class TestRetryLogic:
    """Test retry decorator functionality."""

    @patch("time.sleep")
    def test_retry_succeeds_eventually(self, mock_sleep):
        """Test retry succeeds after initial failures."""
        call_count = 0

        @with_retry(max_attempts=3, retry_exceptions=(ValueError,))
        def flaky_func():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ValueError("Not ready yet")
            return "success"

        result = flaky_func()
        assert result == "success"
        assert call_count == 3
        assert mock_sleep.call_count == 2

    @patch("time.sleep")
    def test_retry_gives_up_after_max_attempts(self, mock_sleep):
        """Test retry gives up after max attempts."""
        call_count = 0

        @with_retry(max_attempts=2, retry_exceptions=(ValueError,))
        def always_fail():
            nonlocal call_count
            call_count += 1
            raise ValueError("Always fails")

        with pytest.raises(RetryError):
            always_fail()
        assert call_count == 2

    @patch("time.sleep")
    def test_reraise_keeps_original_exception(self, mock_sleep):
        """With reraise the last exception itself propagates."""

        @with_retry(max_attempts=2, retry_exceptions=(ValueError,), reraise=True)
        def always_fail():
            raise ValueError("Always fails")

        with pytest.raises(ValueError, match="Always fails"):
            always_fail()

    @patch("time.sleep")
    def test_warns_only_before_a_retry(self, mock_sleep, caplog):
        """Three failed attempts log two retry warnings, none for the last attempt."""
        caplog.set_level(logging.WARNING, logger="momentx.utils.reliability")

        @with_retry(max_attempts=3, retry_exceptions=(ValueError,), reraise=True)
        def always_fail():
            raise ValueError("Always fails")

        with pytest.raises(ValueError):
            always_fail()

        retries = [r for r in caplog.records if "Retrying" in r.getMessage()]
        assert len(retries) == 2

    def test_retry_ignores_non_retry_exceptions(self):
        """Test retry doesn't retry non-specified exceptions."""
        call_count = 0

        @with_retry(max_attempts=3, retry_exceptions=(ValueError,))
        def wrong_exception():
            nonlocal call_count
            call_count += 1
            raise TypeError("Wrong exception type")

        with pytest.raises(TypeError):
            wrong_exception()
        assert call_count == 1  # No retries


class TestTrackPerformance:
    """Test performance tracking decorator."""

    def test_returns_result(self):
        """Wrapped function result is passed through."""

        @track_performance("test_operation")
        def operation(x):
            return x * 2

        assert operation(21) == 42

    def test_propagates_errors(self):
        """Failures are logged and re-raised unchanged."""

        @track_performance("test_operation")
        def operation():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            operation()
