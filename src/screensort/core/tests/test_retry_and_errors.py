import os
import tempfile
import unittest
from unittest.mock import AsyncMock, patch

from screensort.core.exceptions import (
    ConfidenceTooLowError,
    InvalidImageError,
    LookupNetworkError,
    NoResultsFoundError,
    RecognitionFailedError,
    SafetyRefusalError,
    TitleNotFoundError,
)
from screensort.core.retry_utils import (
    Attempt,
    attempt_async,
    attempt_sync,
    resolve_with_fallback,
    retry_lookup_call,
)
from screensort.core.settings import BackendSettings, LogLevel


class TestExceptions(unittest.TestCase):

    def test_confidence_message_uses_percentages(self):
        error = ConfidenceTooLowError(0.65, 0.7)
        self.assertEqual(error.user_message, "Extraction confidence (65%) is below the 70% threshold.")

    def test_retryability_is_per_kind(self):
        self.assertFalse(InvalidImageError("a.png").is_retryable)
        self.assertTrue(TitleNotFoundError("song").is_retryable)
        self.assertTrue(NoResultsFoundError("TMDb", "Inception").is_retryable)

    def test_user_message_hides_internals(self):
        error = RecognitionFailedError("exit status 127", "a.png")
        self.assertIn("exit status 127", str(error))
        self.assertEqual(error.user_message, "Text recognition failed.")

    def test_provider_detail_kept_in_details(self):
        error = SafetyRefusalError("blocked", "gemini")
        self.assertEqual(error.details["provider"], "gemini")
        self.assertNotIn("gemini", error.user_message)


class TestAttempts(unittest.IsolatedAsyncioTestCase):

    async def test_attempt_async_captures_listed_errors(self):
        async def fails():
            raise TitleNotFoundError("song")

        attempt = await attempt_async(fails, strategy="semantic")
        self.assertFalse(attempt.ok)
        self.assertEqual(attempt.strategy, "semantic")
        with self.assertRaises(TitleNotFoundError):
            attempt.unwrap()

    async def test_attempt_async_propagates_other_errors(self):
        async def broken():
            raise KeyError("bug")

        with self.assertRaises(KeyError):
            await attempt_async(broken)

    def test_attempt_sync_narrow_capture(self):
        def refuse():
            raise SafetyRefusalError("no")

        with self.assertRaises(SafetyRefusalError):
            attempt_sync(refuse, capture=(TitleNotFoundError,))

    def test_resolve_keeps_primary(self):
        primary = Attempt.succeeded("semantic result")
        fallback_calls = []
        result = resolve_with_fallback(
            primary, lambda a: not a.ok, lambda: fallback_calls.append(1) or Attempt.succeeded("x")
        )
        self.assertIs(result, primary)
        self.assertEqual(fallback_calls, [])

    def test_resolve_switches(self):
        primary = Attempt.failed(SafetyRefusalError("no"), "semantic")
        result = resolve_with_fallback(primary, lambda a: not a.ok, lambda: Attempt.succeeded("keyword"))
        self.assertEqual(result.unwrap(), "keyword")


class TestRetryLookupCall(unittest.IsolatedAsyncioTestCase):

    async def test_retries_network_errors_then_succeeds(self):
        calls = []

        @retry_lookup_call(max_attempts=3)
        async def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise LookupNetworkError("TMDb", "timeout")
            return "ok"

        with patch("screensort.core.retry_utils.asyncio.sleep", new=AsyncMock()):
            self.assertEqual(await flaky(), "ok")
        self.assertEqual(len(calls), 3)

    async def test_does_not_retry_missing_results(self):
        calls = []

        @retry_lookup_call(max_attempts=3)
        async def empty():
            calls.append(1)
            raise NoResultsFoundError("TMDb", "Inception")

        with patch("screensort.core.retry_utils.asyncio.sleep", new=AsyncMock()):
            with self.assertRaises(NoResultsFoundError):
                await empty()
        self.assertEqual(len(calls), 1)


class TestBackendSettings(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.env = patch.dict(os.environ, {
            "SCREENSORT_DB_PATH": os.path.join(self.temp_dir.name, "settings.db"),
            "SCREENSORT_HOME": self.temp_dir.name,
        })
        self.env.start()

    def tearDown(self):
        self.env.stop()
        self.temp_dir.cleanup()

    def test_defaults(self):
        self.assertEqual(BackendSettings.get_semantic_provider(), "ollama")
        self.assertEqual(BackendSettings.get_log_level(), LogLevel.INFO)
        self.assertIsNone(BackendSettings.get_library_dir())

    def test_round_trip_values(self):
        self.assertTrue(BackendSettings.set_setting("tmdb_api_key", "abc"))
        self.assertTrue(BackendSettings.set_log_level(LogLevel.DEBUG))
        self.assertEqual(BackendSettings.get_tmdb_api_key(), "abc")
        self.assertEqual(BackendSettings.get_log_level(), LogLevel.DEBUG)

    def test_state_dir_under_home(self):
        self.assertEqual(str(BackendSettings.get_state_dir()), os.path.join(self.temp_dir.name, "state"))


if __name__ == '__main__':
    unittest.main()
