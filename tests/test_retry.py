"""
Tests for conflict retry
"""

import pytest
from unittest.mock import Mock

from operator_dev.libs.override.retry import Backoff, retry_on_conflict

from test_constants import api_exception


def scripted(*outcomes):
    """Callable that raises or returns the given outcomes in order"""
    fn = Mock(side_effect=list(outcomes))
    return fn


class TestRetryOnConflict:
    """Test the retry combinator"""

    @pytest.mark.parametrize("conflicts", [0, 1, 3])
    def test_succeeds_after_k_conflicts(self, conflicts):
        fn = scripted(*([api_exception(409)] * conflicts + ["done"]))
        sleep = Mock()

        result = retry_on_conflict(fn, backoff=Backoff(steps=4), sleep=sleep)

        assert result == "done"
        assert fn.call_count == conflicts + 1
        assert sleep.call_count == conflicts

    def test_non_conflict_error_is_not_retried(self):
        error = api_exception(500, "Internal Server Error")
        fn = scripted(error, "never")
        sleep = Mock()

        with pytest.raises(Exception) as exc_info:
            retry_on_conflict(fn, sleep=sleep)

        assert exc_info.value is error
        assert fn.call_count == 1
        sleep.assert_not_called()

    def test_plain_exceptions_are_not_retried(self):
        fn = scripted(ValueError("boom"))

        with pytest.raises(ValueError):
            retry_on_conflict(fn, sleep=Mock())

        assert fn.call_count == 1

    def test_exhaustion_raises_last_conflict(self):
        errors = [api_exception(409, f"Conflict {i}") for i in range(3)]
        fn = scripted(*errors)
        sleep = Mock()

        with pytest.raises(Exception) as exc_info:
            retry_on_conflict(fn, backoff=Backoff(steps=3), sleep=sleep)

        assert exc_info.value is errors[-1]
        assert fn.call_count == 3
        # No sleep after the final attempt
        assert sleep.call_count == 2

    def test_custom_conflict_predicate(self):
        fn = scripted(KeyError("stale"), "ok")

        result = retry_on_conflict(fn, conflict=lambda e: isinstance(e, KeyError), sleep=Mock())

        assert result == "ok"
        assert fn.call_count == 2

    def test_sleeps_follow_backoff_policy(self):
        fn = scripted(api_exception(409), api_exception(409), api_exception(409), "ok")
        sleep = Mock()

        retry_on_conflict(fn, backoff=Backoff(steps=4, duration=0.01, factor=5.0, jitter=0, cap=5.0), sleep=sleep)

        assert [c.args[0] for c in sleep.call_args_list] == pytest.approx([0.01, 0.05, 0.25])


class TestBackoff:
    """Test backoff delay computation"""

    def test_delay_is_capped(self):
        backoff = Backoff(steps=10, duration=1.0, factor=10.0, jitter=0.5, cap=3.0)

        assert backoff.delay(5, rand=lambda: 0.99) == 3.0

    def test_jitter_adds_fraction_of_delay(self):
        backoff = Backoff(duration=1.0, factor=2.0, jitter=0.5, cap=100.0)

        assert backoff.delay(1, rand=lambda: 1.0) == pytest.approx(3.0)
        assert backoff.delay(1, rand=lambda: 0.0) == pytest.approx(2.0)

    def test_from_config_overrides_defaults(self):
        backoff = Backoff.from_config({"steps": 7, "cap": 1.5, "unknown": True, "factor": None})

        assert backoff.steps == 7
        assert backoff.cap == 1.5
        assert backoff.factor == Backoff().factor

    def test_from_empty_config(self):
        assert Backoff.from_config(None) == Backoff()
