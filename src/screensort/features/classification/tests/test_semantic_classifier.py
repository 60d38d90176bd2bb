import unittest

from screensort.core.exceptions import ModelUnavailableError, SafetyRefusalError, SemanticServiceFailure
from screensort.features.classification.content_types import ContentType
from screensort.features.classification.semantic_classifier import (
    ClassificationReply,
    ClassificationResult,
    ContentClassifier,
)
from screensort.features.semantic.interfaces import UnavailableModelClient
from screensort.testing.fakes import FakeModelClient, observations


class TestClassificationResult(unittest.TestCase):

    def test_confidence_clamped(self):
        self.assertEqual(ClassificationResult(type=ContentType.MUSIC, confidence=3.2).confidence, 1.0)
        self.assertEqual(ClassificationResult(type=ContentType.MUSIC, confidence=-1).confidence, 0.0)
        self.assertEqual(ClassificationResult(type=ContentType.MUSIC, confidence=float("nan")).confidence, 0.0)


class TestContentClassifier(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.music_obs = observations("Bohemian Rhapsody", "Queen", "Now Playing")

    async def test_semantic_result_mapped_and_clamped(self):
        client = FakeModelClient({ClassificationReply: {"content_type": "TV Show", "confidence": 1.4,
                                                        "reasoning": "streaming UI"}})
        result = await ContentClassifier(client).classify_with_semantic_model(observations("Severance"))
        self.assertEqual(result.type, ContentType.MOVIE)
        self.assertEqual(result.confidence, 1.0)
        self.assertEqual(result.rationale, "streaming UI")

    async def test_prompt_uses_reading_order(self):
        client = FakeModelClient({ClassificationReply: {"content_type": "music", "confidence": 0.9}})
        await ContentClassifier(client).classify_with_semantic_model(self.music_obs)
        self.assertIn("Bohemian Rhapsody\nQueen\nNow Playing", client.prompts[0])

    async def test_confident_semantic_answer_wins(self):
        client = FakeModelClient({ClassificationReply: {"content_type": "meme", "confidence": 0.8}})
        result = await ContentClassifier(client).classify_with_fallback(self.music_obs)
        self.assertEqual(result.type, ContentType.MEME)

    async def test_low_confidence_falls_back_to_keywords(self):
        client = FakeModelClient({ClassificationReply: {"content_type": "meme", "confidence": 0.59}})
        result = await ContentClassifier(client).classify_with_fallback(self.music_obs)
        self.assertEqual(result.type, ContentType.MUSIC)

    async def test_threshold_is_inclusive(self):
        client = FakeModelClient({ClassificationReply: {"content_type": "book", "confidence": 0.6}})
        result = await ContentClassifier(client).classify_with_fallback(self.music_obs)
        self.assertEqual(result.type, ContentType.BOOK)

    async def test_errors_fall_back_to_keywords(self):
        for error in (SafetyRefusalError("no", "fake"), SemanticServiceFailure("boom", "fake")):
            client = FakeModelClient({ClassificationReply: error})
            result = await ContentClassifier(client).classify_with_fallback(self.music_obs)
            self.assertEqual(result.type, ContentType.MUSIC)

    async def test_unavailable_model_falls_back(self):
        classifier = ContentClassifier(UnavailableModelClient())
        with self.assertRaises(ModelUnavailableError):
            await classifier.classify_with_semantic_model(self.music_obs)
        result = await classifier.classify_with_fallback(self.music_obs)
        self.assertEqual(result.type, ContentType.MUSIC)

    async def test_malformed_reply_falls_back(self):
        client = FakeModelClient({ClassificationReply: {"confidence": "very"}})
        result = await ContentClassifier(client).classify_with_fallback(self.music_obs)
        self.assertEqual(result.type, ContentType.MUSIC)

    async def test_fallback_never_fails(self):
        client = FakeModelClient({ClassificationReply: SemanticServiceFailure("boom")})
        result = await ContentClassifier(client).classify_with_fallback(observations("nothing useful"))
        self.assertEqual(result.type, ContentType.UNKNOWN)
        self.assertTrue(0.0 <= result.confidence <= 1.0)

    async def test_empty_text_is_unknown_without_calling_model(self):
        client = FakeModelClient()
        result = await ContentClassifier(client).classify_with_semantic_model([])
        self.assertEqual(result.type, ContentType.UNKNOWN)
        self.assertEqual(client.prompts, [])


if __name__ == '__main__':
    unittest.main()
