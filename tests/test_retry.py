import sys
import unittest
from pathlib import Path
from unittest.mock import Mock

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_optimizer.services.retry import (  # noqa: E402
    PermanentError,
    RetryConfig,
    TransientError,
    is_transient_error,
    retry_with_backoff,
)


class RetryTests(unittest.TestCase):
    def setUp(self):
        self.sleeps: list[float] = []

    def test_transient_failures_back_off_exponentially(self):
        func = Mock(side_effect=[ConnectionError("reset by peer"), TimeoutError("slow"), "ok"])
        result = retry_with_backoff(func, RetryConfig(), "a", sleep=self.sleeps.append, flag=True)
        self.assertEqual(result, "ok")
        self.assertEqual(func.call_count, 3)
        func.assert_called_with("a", flag=True)
        self.assertEqual(self.sleeps, [1.0, 2.0])

    def test_exhausted_attempts_reraise_last_error(self):
        func = Mock(side_effect=ConnectionError("still down"))
        with self.assertRaises(ConnectionError):
            retry_with_backoff(func, RetryConfig(max_attempts=3), sleep=self.sleeps.append)
        self.assertEqual(func.call_count, 3)
        self.assertEqual(self.sleeps, [1.0, 2.0])

    def test_permanent_errors_are_not_retried(self):
        func = Mock(side_effect=ValueError("bad schema"))
        with self.assertRaises(ValueError):
            retry_with_backoff(func, RetryConfig(), sleep=self.sleeps.append)
        self.assertEqual(func.call_count, 1)
        self.assertEqual(self.sleeps, [])

    def test_error_classification(self):
        self.assertTrue(is_transient_error(TransientError("anything")))
        self.assertFalse(is_transient_error(PermanentError("timeout while parsing")))
        self.assertTrue(is_transient_error(RuntimeError("HTTP 503 Service Unavailable")))
        self.assertFalse(is_transient_error(KeyError("choices")))

    def test_delay_is_capped(self):
        config = RetryConfig(base_delay=10.0, max_delay=15.0)
        self.assertEqual(config.delay_for(0), 10.0)
        self.assertEqual(config.delay_for(3), 15.0)


if __name__ == "__main__":
    unittest.main()
