"""Unit tests for BackoffPolicy and retry_delay."""

import pytest

from procedure_client.runtime.retry import DEFAULT_BACKOFF_POLICY, BackoffPolicy, retry_delay


class TestBackoffPolicy:
    """Tests for BackoffPolicy configuration."""

    def test_default_values(self):
        policy = BackoffPolicy()

        assert policy.base_delay == 1.0
        assert policy.max_delay == 30.0
        assert policy.exponential_base == 2.0
        assert policy.jitter is False

    def test_is_frozen(self):
        """Should be immutable."""
        policy = BackoffPolicy()
        with pytest.raises(Exception):
            policy.max_delay = 10.0


class TestCalculateDelay:
    """Tests for delay calculation."""

    def test_first_attempt_is_unthrottled(self):
        assert BackoffPolicy().calculate_delay(0) == 0.0

    def test_exponential_backoff(self):
        policy = BackoffPolicy()

        assert policy.calculate_delay(1) == 2.0  # 1 * 2^1
        assert policy.calculate_delay(2) == 4.0  # 1 * 2^2
        assert policy.calculate_delay(3) == 8.0
        assert policy.calculate_delay(4) == 16.0

    def test_caps_at_thirty_seconds(self):
        policy = BackoffPolicy()

        assert policy.calculate_delay(5) == 30.0  # 32 without cap
        assert policy.calculate_delay(50) == 30.0

    def test_custom_base_and_cap(self):
        policy = BackoffPolicy(base_delay=0.5, max_delay=3.0)

        assert policy.calculate_delay(1) == 1.0
        assert policy.calculate_delay(3) == 3.0

    def test_jitter_stays_within_a_quarter(self):
        policy = BackoffPolicy(jitter=True)

        delays = [policy.calculate_delay(2) for _ in range(20)]

        assert all(4.0 <= d <= 5.0 for d in delays)
        assert policy.calculate_delay(0) == 0.0


class TestRetryDelay:
    """Tests for the default-policy helper."""

    @pytest.mark.parametrize(
        "attempt, expected",
        [(0, 0.0), (1, 2.0), (2, 4.0), (3, 8.0), (4, 16.0), (5, 30.0), (10, 30.0)],
    )
    def test_matches_min_of_power_and_cap(self, attempt, expected):
        assert retry_delay(attempt) == expected

    def test_uses_default_policy(self):
        assert isinstance(DEFAULT_BACKOFF_POLICY, BackoffPolicy)
        assert retry_delay(3) == DEFAULT_BACKOFF_POLICY.calculate_delay(3)
