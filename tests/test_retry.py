"""Tests for retry with exponential backoff."""

import pytest

from mindtutor.generation import BASE_DELAY, MAX_RETRY, GenerationError, backoff_delay, with_retry


class FlakyCall:
    """Fails a fixed number of times, then returns a value."""

    def __init__(self, failures: int, error: Exception = None):
        self.failures = failures
        self.error = error or GenerationError("AI generation failed: 503", status=503)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "generated"


class TestBackoff:

    def test_constants(self):
        assert MAX_RETRY == 3
        assert BASE_DELAY == 0.4

    def test_delays_double(self):
        assert [backoff_delay(n) for n in range(3)] == pytest.approx([0.4, 0.8, 1.6])


class TestWithRetry:

    def test_first_try(self):
        sleeps = []
        fn = FlakyCall(failures=0)
        assert with_retry(fn, "explain:OT:OT-1:0", sleep=sleeps.append) == "generated"
        assert fn.calls == 1
        assert sleeps == []

    def test_succeeds_on_third_call(self):
        sleeps = []
        fn = FlakyCall(failures=2)
        assert with_retry(fn, "summary:OT:OT-1:2", sleep=sleeps.append) == "generated"
        assert fn.calls == 3
        assert sleeps == pytest.approx([0.4, 0.8])

    def test_succeeds_on_last_retry(self):
        sleeps = []
        fn = FlakyCall(failures=3)
        assert with_retry(fn, "summary:OT:OT-1:2", sleep=sleeps.append) == "generated"
        assert fn.calls == 4

    def test_propagates_after_four_failures(self):
        sleeps = []
        fn = FlakyCall(failures=10)
        with pytest.raises(GenerationError):
            with_retry(fn, "homework:U:U-1:3:partial", sleep=sleeps.append)
        assert fn.calls == 4
        assert sleeps == pytest.approx([0.4, 0.8, 1.6])

    def test_retries_any_error_type(self):
        fn = FlakyCall(failures=1, error=ValueError("bad payload"))
        assert with_retry(fn, "explain:OT:OT-1:0", sleep=lambda _: None) == "generated"
        assert fn.calls == 2

    def test_custom_limits(self):
        sleeps = []
        fn = FlakyCall(failures=10)
        with pytest.raises(GenerationError):
            with_retry(fn, "explain:OT:OT-1:0", max_retry=1, base_delay=0.1, sleep=sleeps.append)
        assert fn.calls == 2
        assert sleeps == pytest.approx([0.1])
