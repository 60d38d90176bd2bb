import json
import tempfile
import unittest
from pathlib import Path

from screensort.core.exceptions import SchemaValidationError
from screensort.features.batch.models import Outcome, OutcomeStatus
from screensort.features.batch.processed_store import ProcessedStore
from screensort.features.classification.content_types import ContentType
from screensort.features.extraction.models import ExtractedMetadata


def _outcome(item_id, status=OutcomeStatus.SUCCESS):
    return Outcome(
        item_id=item_id,
        status=status,
        content_type=ContentType.MUSIC,
        metadata=ExtractedMetadata(content_type=ContentType.MUSIC, title="Bohemian Rhapsody",
                                   creator="Queen", confidence_score=0.9),
        message="sorted",
    )


class TestProcessedStore(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.state_dir = Path(self.tmp.name) / "state"
        self.store = ProcessedStore(self.state_dir)

    def tearDown(self):
        self.tmp.cleanup()

    def test_empty_store(self):
        self.assertEqual(self.store.load_processed_ids(), set())
        self.assertEqual(self.store.load_outcomes(), [])

    def test_record_persists_both_documents(self):
        self.store.record(_outcome("a"))
        self.store.record(_outcome("b", OutcomeStatus.FLAGGED))

        reopened = ProcessedStore(self.state_dir)
        self.assertEqual(reopened.load_processed_ids(), {"a", "b"})
        outcomes = reopened.load_outcomes()
        self.assertEqual([o.item_id for o in outcomes], ["a", "b"])
        self.assertEqual(outcomes[0].metadata.creator, "Queen")
        self.assertEqual(outcomes[1].status, OutcomeStatus.FLAGGED)

    def test_mark_processed_is_idempotent(self):
        self.store.mark_processed("a")
        self.store.mark_processed("a")
        data = json.loads(self.store.index_path.read_text())
        self.assertEqual(data["item_ids"], ["a"])
        self.assertTrue(self.store.is_processed("a"))
        self.assertFalse(self.store.is_processed("b"))

    def test_replace_outcome(self):
        self.store.record(_outcome("a", OutcomeStatus.FLAGGED))
        previous = self.store.replace_outcome(_outcome("a"))
        self.assertEqual(previous.status, OutcomeStatus.FLAGGED)
        self.assertEqual(ProcessedStore(self.state_dir).get_outcome("a").status, OutcomeStatus.SUCCESS)

    def test_replace_missing_outcome(self):
        with self.assertRaises(KeyError):
            self.store.replace_outcome(_outcome("zzz"))

    def test_remove_many(self):
        for item_id in ("a", "b", "c"):
            self.store.record(_outcome(item_id))
        removed = self.store.remove_many(["a", "c", "not-there"])
        self.assertEqual(removed, 2)
        reopened = ProcessedStore(self.state_dir)
        self.assertEqual(reopened.load_processed_ids(), {"b"})
        self.assertEqual([o.item_id for o in reopened.load_outcomes()], ["b"])

    def test_no_temp_files_left_behind(self):
        self.store.record(_outcome("a"))
        self.assertEqual(sorted(p.name for p in self.state_dir.iterdir()),
                         ["processed_index.json", "result_cache.json"])

    def test_corrupt_index_is_rejected(self):
        self.state_dir.mkdir(parents=True)
        (self.state_dir / "processed_index.json").write_text('{"version": 1, "item_ids": [1, 2]}')
        with self.assertRaises(SchemaValidationError):
            self.store.load_processed_ids()

    def test_invalid_json_is_rejected(self):
        self.state_dir.mkdir(parents=True)
        (self.state_dir / "result_cache.json").write_text("{not json")
        with self.assertRaises(SchemaValidationError):
            self.store.load_outcomes()


if __name__ == '__main__':
    unittest.main()
