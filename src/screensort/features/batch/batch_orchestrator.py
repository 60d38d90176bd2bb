"""
Batch orchestrator: drives screenshots through recognition, classification,
extraction, lookup and routing, one at a time.

Items are processed sequentially in the order given. Cancellation is
cooperative and checked before each item. A failure on one item becomes that
item's Outcome and never stops the loop. The processed index makes repeated
runs idempotent: only items it does not contain are processed.
"""

import asyncio
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from .corrections import Correction, CorrectionStore
from .models import BatchItem, BatchReport, BatchRun, Outcome, OutcomeStatus, RunState
from .pipeline_config import PipelineConfig
from .processed_store import ProcessedStore
from .progress import ProgressCallback, ProgressThrottle
from ..classification.content_types import ContentType
from ..classification.semantic_classifier import ContentClassifier
from ..extraction.extractor import ContentExtractor
from ..extraction.models import ExtractedMetadata
from ..lookup.interfaces import ActivityLog, DestinationRouter, LookupRegistry
from ..recognition.interfaces import TextRecognizer
from ...core.exceptions import (
    BatchAlreadyRunningError,
    BatchError,
    ConfidenceTooLowError,
    CreatorNotFoundError,
    ExtractionError,
    InvalidExtractionResultError,
    MetadataLookupError,
    RecognitionError,
    RoutingError,
    ScreenSortError,
    SemanticServiceError,
    StorageError,
    TitleNotFoundError,
    WrongContentTypeError,
)
from ...core.logging import get_logger

logger = get_logger(__name__)

# Extraction outcomes that mean "ambiguous screenshot" rather than "something broke"
AMBIGUOUS_EXTRACTION_ERRORS = (
    WrongContentTypeError,
    ConfidenceTooLowError,
    InvalidExtractionResultError,
    TitleNotFoundError,
    CreatorNotFoundError,
)

OutcomeCallback = Callable[[Outcome], None]
StateCallback = Callable[[RunState], None]


class BatchOrchestrator:
    """Runs one batch at a time over injected collaborators and stores."""

    def __init__(
        self,
        recognizer: TextRecognizer,
        classifier: ContentClassifier,
        extractors: Dict[ContentType, ContentExtractor],
        store: ProcessedStore,
        lookups: Optional[LookupRegistry] = None,
        router: Optional[DestinationRouter] = None,
        activity_log: Optional[ActivityLog] = None,
        correction_store: Optional[CorrectionStore] = None,
        config: Optional[PipelineConfig] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_outcome: Optional[OutcomeCallback] = None,
        on_state_change: Optional[StateCallback] = None,
    ):
        self.recognizer = recognizer
        self.classifier = classifier
        self.extractors = extractors
        self.store = store
        self.lookups = lookups or LookupRegistry()
        self.router = router
        self.activity_log = activity_log
        self.correction_store = correction_store
        self.config = config or PipelineConfig()
        self.on_progress = on_progress
        self.on_outcome = on_outcome
        self.on_state_change = on_state_change

        self._state = RunState.IDLE
        self._run: Optional[BatchRun] = None
        self.is_processing = False

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def progress(self):
        """``(current, total)`` of the active or most recent run."""
        if self._run is None:
            return 0, 0
        return self._run.current, self._run.total

    @property
    def outcomes(self) -> List[Outcome]:
        return self.store.load_outcomes()

    def load_cached_outcomes(self) -> List[Outcome]:
        """Outcomes from earlier runs, for display before any processing starts."""
        outcomes = self.store.load_outcomes()
        logger.debug(f"Loaded {len(outcomes)} cached outcomes")
        return outcomes

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def cancel(self) -> None:
        """Request cooperative cancellation; the current item is allowed to finish."""
        if self._run is not None and self._state == RunState.RUNNING:
            logger.info("Cancellation requested")
            self._run.cancelled = True

    async def run_batch(self, candidates: Sequence[BatchItem]) -> BatchReport:
        """
        Process every candidate not yet in the processed index.

        Args:
            candidates: Items in the order they should be processed

        Returns:
            BatchReport describing the run

        Raises:
            BatchAlreadyRunningError: if another run is active
        """
        if self._state == RunState.RUNNING:
            raise BatchAlreadyRunningError()

        processed_ids = self.store.load_processed_ids()
        unprocessed: List[BatchItem] = []
        seen = set()
        for item in candidates:
            if item.item_id in processed_ids or item.item_id in seen:
                continue
            seen.add(item.item_id)
            unprocessed.append(item)

        # Cached results already on screen: refresh quietly
        background_refresh = bool(self.store.load_outcomes())

        self._run = BatchRun(current=0, total=len(unprocessed))
        throttle = ProgressThrottle(
            self._report_progress if self.on_progress is not None else None,
            self.config.progress_interval_seconds,
        )
        outcomes_added = 0
        self._set_state(RunState.RUNNING)
        if not background_refresh:
            self.is_processing = True

        logger.info(
            f"Starting batch: {len(unprocessed)} new of {len(candidates)} candidates"
            f"{' (background refresh)' if background_refresh else ''}"
        )
        # Stays CANCELLED if the loop is interrupted
        final_state = RunState.CANCELLED
        try:
            throttle.flush(0, self._run.total)
            for item in unprocessed:
                if self._run.cancelled:
                    break

                outcome = await self._process_safely(item)
                self.store.record(outcome)
                outcomes_added += 1
                self._run.current += 1
                self._notify_outcome(outcome)
                throttle.update(self._run.current, self._run.total)

            throttle.flush(self._run.current, self._run.total)
            final_state = RunState.CANCELLED if self._run.cancelled else RunState.COMPLETED
        finally:
            self.is_processing = False
            self._set_state(final_state)

        logger.info(
            f"Batch {final_state.value}: processed {self._run.current} of {self._run.total}"
        )
        return BatchReport(
            state=final_state,
            processed=self._run.current,
            outcomes_added=outcomes_added,
            skipped=len(candidates) - len(unprocessed),
        )

    async def _process_safely(self, item: BatchItem) -> Outcome:
        try:
            return await self.process_item(item)
        except (asyncio.CancelledError, StorageError):
            raise
        except Exception as e:
            logger.error(f"Unexpected error processing {item.item_id}: {e}", exc_info=True)
            return Outcome(
                item_id=item.item_id,
                status=OutcomeStatus.FAILED,
                message="Something went wrong while processing this screenshot.",
                retryable=True,
            )

    async def process_item(self, item: BatchItem) -> Outcome:
        """
        Run one item through the pipeline and describe the result.

        Expected failures become flagged or failed outcomes. Only unexpected
        exceptions propagate.
        """
        logger.debug(f"Processing {item.item_id}")

        try:
            observations = await self.recognizer.recognize(item.handle)
        except RecognitionError as e:
            return self._failure(item, OutcomeStatus.FAILED, e)

        classification = await self.classifier.classify_with_fallback(observations)
        content_type = classification.type

        if content_type == ContentType.UNKNOWN:
            logger.warning(f"{item.item_id}: could not determine screenshot type")
            return Outcome(
                item_id=item.item_id,
                status=OutcomeStatus.FLAGGED,
                content_type=content_type,
                message="Could not determine what this screenshot shows.",
                retryable=True,
            )

        metadata: Optional[ExtractedMetadata] = None
        if content_type.requires_extraction:
            extractor = self.extractors.get(content_type)
            if extractor is None:
                raise BatchError(f"No extractor configured for {content_type.value}")
            try:
                metadata = await extractor.extract(observations, content_type, classification=content_type)
            except AMBIGUOUS_EXTRACTION_ERRORS as e:
                return self._failure(item, OutcomeStatus.FLAGGED, e, content_type)
            except (ExtractionError, SemanticServiceError) as e:
                return self._failure(item, OutcomeStatus.FAILED, e, content_type)

        external_link = None
        if metadata is not None:
            try:
                result = await self.lookups.lookup(metadata)
            except MetadataLookupError as e:
                return self._failure(item, OutcomeStatus.FLAGGED, e, content_type, metadata)
            external_link = result.url if result else None

        location = None
        if self.router is not None:
            try:
                location = await self.router.route(item.handle, content_type)
            except RoutingError as e:
                return self._failure(item, OutcomeStatus.FAILED, e, content_type, metadata)

        outcome = Outcome(
            item_id=item.item_id,
            status=OutcomeStatus.SUCCESS,
            content_type=content_type,
            metadata=metadata,
            message=f"{metadata.display_title if metadata else content_type.display_name} sorted",
            external_link=external_link,
            location=location,
        )
        await self._record_activity(item, outcome)
        return outcome

    def _failure(
        self,
        item: BatchItem,
        status: OutcomeStatus,
        error: ScreenSortError,
        content_type: ContentType = ContentType.UNKNOWN,
        metadata: Optional[ExtractedMetadata] = None,
    ) -> Outcome:
        logger.warning(f"{item.item_id} {status.value}: {error}")
        return Outcome(
            item_id=item.item_id,
            status=status,
            content_type=content_type,
            metadata=metadata,
            message=error.user_message,
            retryable=error.is_retryable,
        )

    async def _record_activity(self, item: BatchItem, outcome: Outcome) -> None:
        if self.activity_log is None:
            return
        entry = {
            "item_id": item.item_id,
            "type": outcome.content_type.value,
            "title": outcome.metadata.title if outcome.metadata else None,
            "creator": outcome.metadata.creator if outcome.metadata else None,
            "link": outcome.external_link,
            "captured_at": item.captured_at.isoformat() if item.captured_at else None,
        }
        try:
            await self.activity_log.record(entry)
        except ScreenSortError as e:
            logger.warning(f"Could not log activity for {item.item_id}: {e}")

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def reconcile(self, existing: Union[Iterable[str], Callable[[str], bool]]) -> int:
        """
        Forget processed items whose backing screenshot no longer exists.

        Args:
            existing: Identifiers that still exist, or a predicate answering that per identifier

        Returns:
            Number of identifiers removed
        """
        if self._state == RunState.RUNNING:
            raise BatchAlreadyRunningError()

        if callable(existing):
            still_exists = existing
        else:
            present = set(existing)
            still_exists = present.__contains__

        processed = self.store.load_processed_ids() | {o.item_id for o in self.store.load_outcomes()}
        missing = [item_id for item_id in processed if not still_exists(item_id)]
        removed = self.store.remove_many(missing)
        if missing:
            logger.info(f"Reconciled: removed {len(missing)} vanished screenshots")
        return removed

    def apply_correction(self, correction: Correction) -> Outcome:
        """
        Replace an item's outcome with a user correction.

        The item stays in the processed index so it is never reprocessed.

        Raises:
            BatchAlreadyRunningError: while a run is active
            BatchError: if the item has no cached outcome
        """
        if self._state == RunState.RUNNING:
            raise BatchAlreadyRunningError()

        current = self.store.get_outcome(correction.item_id)
        if current is None:
            raise BatchError(f"No processed screenshot with id {correction.item_id}")

        corrected = correction.apply_to(current)
        self.store.replace_outcome(corrected)
        self.store.mark_processed(corrected.item_id)
        if self.correction_store is not None:
            self.correction_store.add(correction)
        self._notify_outcome(corrected)
        return corrected

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _set_state(self, state: RunState) -> None:
        self._state = state
        self._notify(self.on_state_change, state)

    def _notify_outcome(self, outcome: Outcome) -> None:
        self._notify(self.on_outcome, outcome)

    def _report_progress(self, current: int, total: int) -> None:
        self._notify(self.on_progress, current, total)

    def _notify(self, callback: Optional[Callable[..., None]], *args) -> None:
        """Call an observer; a failing observer is logged and never stops the run."""
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as e:
            name = getattr(callback, "__name__", type(callback).__name__)
            logger.error(f"Observer {name} failed: {e}", exc_info=True)
