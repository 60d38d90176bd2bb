"""
CLI Command Handlers.
Contains the implementation logic for CLI commands.
"""

import asyncio
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

import click

from .core.exceptions import ScreenSortError
from .core.logging import get_logger

logger = get_logger(__name__)

IMAGE_SUFFIXES = {'.png', '.jpg', '.jpeg', '.heic', '.webp'}

STATUS_ICONS = {
    "success": "✅",
    "flagged": "⚠️",
    "failed": "❌",
}

# Keys accepted by ``screensort settings``; everything else is rejected
SETTING_KEYS = [
    "log_level",
    "semantic_provider",
    "ollama_base_url",
    "ollama_model",
    "ollama_temperature",
    "ollama_num_ctx",
    "openai_api_key",
    "openai_model",
    "gemini_api_key",
    "gemini_model",
    "tmdb_api_key",
    "google_books_api_key",
    "youtube_api_key",
    "state_dir",
    "library_dir",
]

SECRET_KEYS = {"openai_api_key", "gemini_api_key", "tmdb_api_key", "google_books_api_key", "youtube_api_key"}


def collect_candidates(directory: Path, library_dir: Optional[Path] = None):
    """
    Screenshots under ``directory``, oldest capture first.

    Files already sorted into the destination folders of ``library_dir`` are
    skipped, so a library kept inside the screenshot folder is never processed
    a second time.
    """
    from .features.batch import BatchItem
    from .features.classification.content_types import ContentType

    sorted_dirs = set()
    if library_dir is not None:
        library = Path(library_dir).expanduser().resolve()
        sorted_dirs = {library / content_type.destination for content_type in ContentType}
    paths = [p for p in Path(directory).rglob("*") if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES]
    items = []
    for path in paths:
        resolved = path.resolve()
        if sorted_dirs.intersection(resolved.parents):
            continue
        captured_at = datetime.fromtimestamp(resolved.stat().st_mtime, tz=timezone.utc)
        items.append(BatchItem(item_id=str(resolved), handle=resolved, captured_at=captured_at))
    items.sort(key=lambda item: item.captured_at)
    return items


def build_orchestrator(provider: Optional[str] = None, move_files: bool = True, on_progress=None, on_outcome=None):
    """Wire the orchestrator from persisted settings and environment overrides."""
    from .core.settings import backend_settings
    from .features.batch import BatchOrchestrator, CorrectionStore, PipelineConfig, ProcessedStore
    from .features.classification import ContentClassifier, KeywordClassifier
    from .features.classification.content_types import ContentType
    from .features.extraction import build_extractors
    from .features.lookup import (
        DirectoryRouter,
        GoogleBooksLookup,
        JsonLinesActivityLog,
        LookupRegistry,
        TMDbLookup,
        YouTubeLookup,
    )
    from .features.recognition.tesseract_recognizer import TesseractRecognizer
    from .features.semantic import create_model_client

    config = PipelineConfig.from_env()
    state_dir = backend_settings.get_state_dir()
    model_client = create_model_client(provider)
    keyword_classifier = KeywordClassifier(config.classification_config())

    # Google Books answers without a key; TMDb and YouTube do not. A type with
    # no lookup registered succeeds without a link instead of being flagged.
    lookups = LookupRegistry({ContentType.BOOK: GoogleBooksLookup()})
    if backend_settings.get_tmdb_api_key():
        lookups.register(ContentType.MOVIE, TMDbLookup())
    else:
        logger.info("No TMDb API key set; movies are sorted without a link")
    if backend_settings.get_youtube_api_key():
        lookups.register(ContentType.MUSIC, YouTubeLookup())
    else:
        logger.info("No YouTube API key set; music is sorted without a link")

    router = None
    library_dir = backend_settings.get_library_dir()
    if move_files and library_dir is not None:
        router = DirectoryRouter(library_dir)

    return BatchOrchestrator(
        recognizer=TesseractRecognizer(min_confidence=config.recognition_min_confidence),
        classifier=ContentClassifier(
            model_client,
            keyword_classifier=keyword_classifier,
            acceptance_threshold=config.semantic_acceptance_threshold,
        ),
        extractors=build_extractors(
            model_client,
            keyword_classifier=keyword_classifier,
            configs={ct: config.extraction_config(ct) for ct in ContentType if ct.requires_extraction},
        ),
        store=ProcessedStore(state_dir),
        lookups=lookups,
        router=router,
        activity_log=JsonLinesActivityLog(state_dir / "activity.jsonl"),
        correction_store=CorrectionStore(state_dir / "corrections.json"),
        config=config,
        on_progress=on_progress,
        on_outcome=on_outcome,
    )


def _outcome_line(outcome) -> str:
    icon = STATUS_ICONS.get(outcome.status.value, "•")
    name = Path(outcome.item_id).name
    title = outcome.metadata.display_title if outcome.metadata else outcome.message
    link = f" <{outcome.external_link}>" if outcome.external_link else ""
    return f"{icon} {name:<40} {outcome.content_type.value:<8} {title}{link}"


# Batch command handlers
def handle_run(directory, provider, move_files, quiet):
    """Handle the batch run command."""
    try:
        from .core.settings import backend_settings

        candidates = collect_candidates(Path(directory), backend_settings.get_library_dir())
        if not candidates:
            click.echo(f"No screenshots found in {directory}.")
            return

        def on_progress(current, total):
            if not quiet:
                click.echo(f"⏳ {current}/{total}", err=True)

        def on_outcome(outcome):
            if not quiet:
                click.echo(_outcome_line(outcome))

        orchestrator = build_orchestrator(provider, move_files, on_progress, on_outcome)
        click.echo(f"📂 Found {len(candidates)} screenshots in {directory}")

        async def run():
            task = asyncio.create_task(orchestrator.run_batch(candidates))
            try:
                return await asyncio.shield(task)
            except asyncio.CancelledError:
                # Ctrl-C: let the current screenshot finish, then stop
                orchestrator.cancel()
                return await task

        try:
            report = asyncio.run(run())
        except KeyboardInterrupt:
            logger.warning("Batch interrupted before the current screenshot finished")
            click.echo("🛑 Batch interrupted.", err=True)
            raise click.Abort()

        click.echo(
            f"✅ Batch {report.state.value}: {report.processed} processed, "
            f"{report.skipped} already sorted"
        )

    except ScreenSortError as e:
        click.echo(f"❌ Error running batch: {e.user_message}", err=True)
        raise click.Abort()


def handle_results(status, output_format):
    """Handle the cached results listing command."""
    try:
        from .core.settings import backend_settings
        from .features.batch import ProcessedStore

        outcomes = ProcessedStore(backend_settings.get_state_dir()).load_outcomes()
        if status:
            outcomes = [o for o in outcomes if o.status.value == status]
        outcomes.sort(key=lambda o: o.processed_at)

        if not outcomes:
            click.echo("No results found.")
            return

        if output_format == "json":
            click.echo(json.dumps([o.model_dump(mode="json") for o in outcomes], indent=2))
            return

        click.echo(f"Results (Total: {len(outcomes)}):")
        click.echo("-" * 100)
        for outcome in outcomes:
            click.echo(_outcome_line(outcome))

    except ScreenSortError as e:
        click.echo(f"❌ Error loading results: {e.user_message}", err=True)
        raise click.Abort()


def handle_reconcile(directory):
    """Handle the reconcile command."""
    try:
        from .core.settings import backend_settings

        orchestrator = build_orchestrator(provider="none", move_files=False)
        present = {
            item.item_id for item in collect_candidates(Path(directory), backend_settings.get_library_dir())
        }
        locations: Dict[str, str] = {
            o.item_id: o.location for o in orchestrator.store.load_outcomes() if o.location
        }

        def still_exists(item_id: str) -> bool:
            # Sorted screenshots live on at their routed location
            if item_id in present:
                return True
            return item_id in locations and Path(locations[item_id]).exists()

        removed = orchestrator.reconcile(still_exists)
        click.echo(f"🧹 Removed {removed} screenshots that no longer exist.")

    except ScreenSortError as e:
        click.echo(f"❌ Error reconciling: {e.user_message}", err=True)
        raise click.Abort()


def handle_correct(item_id, content_type, title, creator, reason):
    """Handle the correction command."""
    try:
        from .features.batch import Correction, CorrectionReason
        from .features.classification.content_types import ContentType

        orchestrator = build_orchestrator(provider="none", move_files=False)
        item_id = str(Path(item_id).resolve()) if Path(item_id).exists() else item_id
        current = orchestrator.store.get_outcome(item_id)
        if current is None:
            raise click.BadParameter(f"No processed screenshot with id {item_id}")

        correction = Correction.for_outcome(
            current,
            corrected_type=ContentType(content_type) if content_type else current.content_type,
            corrected_title=title,
            corrected_creator=creator,
            reason=CorrectionReason(reason) if reason else None,
        )
        corrected = orchestrator.apply_correction(correction)
        click.echo(f"✏️ {_outcome_line(corrected)}")

    except ScreenSortError as e:
        click.echo(f"❌ Error applying correction: {e.user_message}", err=True)
        raise click.Abort()


# Settings command handlers
def handle_settings_get(key, output_format):
    """Handle settings lookup; secrets are masked."""
    from .core.settings import BackendSettings

    keys: List[str] = [key] if key else SETTING_KEYS
    values = {}
    for name in keys:
        value = BackendSettings.get_setting(name, None)
        if name in SECRET_KEYS and value:
            value = f"{str(value)[:4]}…"
        values[name] = value

    if output_format == "json":
        click.echo(json.dumps(values, indent=2, default=str))
        return
    for name, value in values.items():
        click.echo(f"{name:<22} {'' if value is None else value}")


def handle_settings_set(key, value):
    """Handle settings update."""
    from .core.settings import BackendSettings

    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value

    if not BackendSettings.set_setting(key, parsed):
        click.echo(f"❌ Could not save {key}: settings database unavailable", err=True)
        raise click.Abort()
    click.echo(f"✅ {key} updated")


def handle_show_config(output_format):
    """Handle the effective pipeline configuration command."""
    from .features.batch import PipelineConfig

    config = PipelineConfig.from_env()
    data = config.to_dict()
    if output_format == "json":
        click.echo(json.dumps(data, indent=2))
        return
    for name, value in data.items():
        if isinstance(value, dict):
            click.echo(f"{name}:")
            for sub_name, sub_value in value.items():
                click.echo(f"  {sub_name}: {sub_value}")
        else:
            click.echo(f"{name}: {value}")
