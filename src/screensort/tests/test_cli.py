import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from screensort.cli_commands import cli
from screensort.cli_handlers import build_orchestrator, collect_candidates
from screensort.core.settings import BackendSettings
from screensort.features.batch import BatchOrchestrator, Outcome, OutcomeStatus, ProcessedStore
from screensort.features.classification import ContentClassifier
from screensort.features.classification.content_types import ContentType
from screensort.features.extraction import build_extractors
from screensort.features.lookup import DirectoryRouter, GoogleBooksLookup, TMDbLookup
from screensort.features.semantic import UnavailableModelClient
from screensort.testing.fakes import FakeRecognizer, observations


class TestCli(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.home = Path(self.temp_dir.name)
        self.env = patch.dict(os.environ, {
            "SCREENSORT_HOME": str(self.home),
            "SCREENSORT_DB_PATH": str(self.home / "settings.db"),
        })
        self.env.start()
        self.runner = CliRunner()

    def tearDown(self):
        self.env.stop()
        self.temp_dir.cleanup()

    def test_settings_round_trip_masks_secrets(self):
        result = self.runner.invoke(cli, ["settings", "set", "tmdb_api_key", "secret-key"])
        self.assertEqual(result.exit_code, 0, result.output)

        result = self.runner.invoke(cli, ["settings", "get", "tmdb_api_key", "--format", "json"])
        self.assertEqual(json.loads(result.output), {"tmdb_api_key": "secr…"})

    def test_unknown_setting_rejected(self):
        result = self.runner.invoke(cli, ["settings", "set", "favourite_colour", "blue"])
        self.assertNotEqual(result.exit_code, 0)

    def test_results_lists_cached_outcomes(self):
        store = ProcessedStore(self.home / "state")
        store.record(Outcome(item_id="/shots/a.png", status=OutcomeStatus.FLAGGED,
                             content_type=ContentType.UNKNOWN, message="Could not classify"))

        result = self.runner.invoke(cli, ["results", "--format", "json"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(json.loads(result.output)[0]["status"], "flagged")

        result = self.runner.invoke(cli, ["results", "--status", "success"])
        self.assertIn("No results found.", result.output)

    def test_reconcile_removes_vanished_screenshots(self):
        shots = self.home / "shots"
        shots.mkdir()
        kept = (shots / "kept.png").resolve()
        kept.write_bytes(b"")
        store = ProcessedStore(self.home / "state")
        store.record(Outcome(item_id=str(kept), status=OutcomeStatus.FAILED))
        store.record(Outcome(item_id=str(shots.resolve() / "gone.png"), status=OutcomeStatus.FAILED))

        result = self.runner.invoke(cli, ["reconcile", str(shots)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Removed 1", result.output)
        self.assertEqual(ProcessedStore(self.home / "state").load_processed_ids(), {str(kept)})

    def test_correct_updates_outcome(self):
        store = ProcessedStore(self.home / "state")
        store.record(Outcome(item_id="shot-1", status=OutcomeStatus.FLAGGED))

        result = self.runner.invoke(cli, ["correct", "shot-1", "--type", "movie", "--title", "Inception",
                                          "--reason", "wrong_category"])
        self.assertEqual(result.exit_code, 0, result.output)

        outcome = ProcessedStore(self.home / "state").get_outcome("shot-1")
        self.assertTrue(outcome.corrected)
        self.assertEqual(outcome.content_type, ContentType.MOVIE)
        self.assertEqual(outcome.metadata.title, "Inception")

    def test_run_on_empty_directory(self):
        shots = self.home / "shots"
        shots.mkdir()
        result = self.runner.invoke(cli, ["run", str(shots), "--provider", "none"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("No screenshots found", result.output)


class TestWiring(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.home = Path(self.temp_dir.name)
        self.env = patch.dict(os.environ, {
            "SCREENSORT_HOME": str(self.home),
            "SCREENSORT_DB_PATH": str(self.home / "settings.db"),
        })
        self.env.start()

    def tearDown(self):
        self.env.stop()
        self.temp_dir.cleanup()

    def test_lookups_without_keys_are_not_registered(self):
        orchestrator = build_orchestrator(provider="none", move_files=False)
        self.assertIsNone(orchestrator.lookups.get(ContentType.MUSIC))
        self.assertIsNone(orchestrator.lookups.get(ContentType.MOVIE))
        self.assertIsInstance(orchestrator.lookups.get(ContentType.BOOK), GoogleBooksLookup)

    def test_lookup_registered_once_key_is_set(self):
        BackendSettings.set_setting("tmdb_api_key", "abc")
        orchestrator = build_orchestrator(provider="none", move_files=False)
        self.assertIsInstance(orchestrator.lookups.get(ContentType.MOVIE), TMDbLookup)
        self.assertIsNone(orchestrator.lookups.get(ContentType.MUSIC))

    def test_sorted_folders_are_not_candidates(self):
        shots = self.home / "shots"
        (shots / "ScreenSort - Music").mkdir(parents=True)
        (shots / "holiday").mkdir()
        (shots / "new.png").write_bytes(b"")
        (shots / "holiday" / "beach.jpg").write_bytes(b"")
        (shots / "ScreenSort - Music" / "sorted.png").write_bytes(b"")

        names = sorted(Path(item.item_id).name for item in collect_candidates(shots, library_dir=shots))
        self.assertEqual(names, ["beach.jpg", "new.png"])

        names = sorted(Path(item.item_id).name for item in collect_candidates(shots))
        self.assertEqual(names, ["beach.jpg", "new.png", "sorted.png"])


class TestSortedLibraryInsideScreenshots(unittest.IsolatedAsyncioTestCase):

    async def test_second_run_over_sorted_tree_processes_nothing(self):
        with tempfile.TemporaryDirectory() as tmp:
            shots = Path(tmp, "shots").resolve()
            shots.mkdir()
            (shots / "meme.png").write_bytes(b"")
            moved = shots / ContentType.MEME.destination / "meme.png"

            meme = observations("Nobody:", "Me: at 3am", "made with mematic")
            recognizer = FakeRecognizer({shots / "meme.png": meme, moved: meme})
            orchestrator = BatchOrchestrator(
                recognizer=recognizer,
                classifier=ContentClassifier(UnavailableModelClient()),
                extractors=build_extractors(UnavailableModelClient()),
                store=ProcessedStore(Path(tmp, "state")),
                router=DirectoryRouter(shots),
            )

            first = await orchestrator.run_batch(collect_candidates(shots, library_dir=shots))
            self.assertEqual(first.processed, 1)
            self.assertTrue(moved.exists())

            second = await orchestrator.run_batch(collect_candidates(shots, library_dir=shots))
            self.assertEqual(second.processed, 0)
            self.assertEqual(len(orchestrator.outcomes), 1)
            self.assertEqual(recognizer.calls, [shots / "meme.png"])


if __name__ == '__main__':
    unittest.main()
