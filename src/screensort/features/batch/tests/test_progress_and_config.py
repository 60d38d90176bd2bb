import json
import os
import tempfile
import unittest
from unittest.mock import patch

from screensort.features.batch.pipeline_config import PipelineConfig
from screensort.features.batch.progress import ProgressThrottle
from screensort.features.classification.content_types import ContentType
from screensort.testing.fakes import ManualClock


class TestProgressThrottle(unittest.TestCase):

    def setUp(self):
        self.updates = []
        self.clock = ManualClock()
        self.throttle = ProgressThrottle(lambda c, t: self.updates.append((c, t)), interval=0.1, clock=self.clock)

    def test_at_most_ten_updates_per_second(self):
        for i in range(1, 101):
            self.clock.advance(0.01)
            self.throttle.update(i, 1000)
        # 100 updates over one second
        self.assertLessEqual(len(self.updates), 11)
        self.assertGreaterEqual(len(self.updates), 9)

    def test_final_update_always_delivered(self):
        self.throttle.update(1, 3)
        self.throttle.update(2, 3)
        self.throttle.update(3, 3)
        self.assertEqual(self.updates, [(1, 3), (3, 3)])

    def test_flush_forces_delivery_once(self):
        self.throttle.update(1, 5)
        self.throttle.flush(2, 5)
        self.throttle.flush(2, 5)
        self.assertEqual(self.updates, [(1, 5), (2, 5)])

    def test_without_callback(self):
        self.assertFalse(ProgressThrottle(None).update(1, 1))


class TestPipelineConfig(unittest.TestCase):

    def test_defaults(self):
        config = PipelineConfig()
        self.assertEqual(config.semantic_acceptance_threshold, 0.6)
        self.assertEqual(config.minimum_keyword_matches, 1)
        self.assertEqual(config.progress_interval_seconds, 0.1)
        self.assertEqual(config.extraction_config(ContentType.BOOK).confidence_threshold, 0.7)

    def test_validation(self):
        with self.assertRaises(ValueError):
            PipelineConfig(semantic_acceptance_threshold=1.2)
        with self.assertRaises(ValueError):
            PipelineConfig(minimum_keyword_matches=0)

    def test_from_dict_with_extraction_overrides(self):
        config = PipelineConfig.from_dict({
            "spatial_minimum_items": 3,
            "extraction": {"movie": {"confidence_threshold": 0.5}},
        })
        self.assertEqual(config.spatial_minimum_items, 3)
        self.assertEqual(config.extraction_config(ContentType.MOVIE).confidence_threshold, 0.5)
        self.assertFalse(config.extraction_config(ContentType.MOVIE).creator_required)
        self.assertEqual(config.classification_config().spatial_minimum_items, 3)

    def test_json_round_trip(self):
        config = PipelineConfig(progress_interval_seconds=0.5)
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "pipeline.json")
            config.save_to_json(path)
            with open(path) as f:
                self.assertIn("extraction", json.load(f))
            loaded = PipelineConfig.from_json_file(path)
        self.assertEqual(loaded.progress_interval_seconds, 0.5)

    def test_from_env(self):
        env = {
            "SCREENSORT_SEMANTIC_ACCEPTANCE_THRESHOLD": "0.75",
            "SCREENSORT_MUSIC_CONFIDENCE_THRESHOLD": "0.8",
            "SCREENSORT_SPATIAL_MINIMUM_ITEMS": "not-a-number",
        }
        with patch.dict(os.environ, env):
            config = PipelineConfig.from_env()
        self.assertEqual(config.semantic_acceptance_threshold, 0.75)
        self.assertEqual(config.extraction_config(ContentType.MUSIC).confidence_threshold, 0.8)
        self.assertEqual(config.spatial_minimum_items, 2)


if __name__ == '__main__':
    unittest.main()
