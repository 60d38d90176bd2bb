"""
Processed index and result cache.

Two JSON documents under the state directory:

* ``processed_index.json``: identifiers of screenshots already handled
* ``result_cache.json``: the last known Outcome per identifier, in processing order

Both are written atomically and validated against a JSON schema on every read
and write. Only the batch orchestrator mutates them.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from .models import Outcome
from ...core.logging import get_logger
from ...storage.json_files import atomic_write_json, read_json

logger = get_logger(__name__)

STORE_VERSION = 1

PROCESSED_INDEX_SCHEMA = {
    "type": "object",
    "properties": {
        "version": {"type": "integer"},
        "item_ids": {"type": "array", "items": {"type": "string"}, "uniqueItems": True},
    },
    "required": ["version", "item_ids"],
}

RESULT_CACHE_SCHEMA = {
    "type": "object",
    "properties": {
        "version": {"type": "integer"},
        "outcomes": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "item_id": {"type": "string"},
                    "status": {"type": "string", "enum": ["success", "flagged", "failed"]},
                    "content_type": {"type": "string"},
                    "message": {"type": "string"},
                    "external_link": {"type": ["string", "null"]},
                    "metadata": {"type": ["object", "null"]},
                },
                "required": ["item_id", "status", "content_type"],
            },
        },
    },
    "required": ["version", "outcomes"],
}


class ProcessedStore:
    """File-backed processed index plus result cache."""

    def __init__(self, state_dir: Path):
        self.state_dir = Path(state_dir)
        self.index_path = self.state_dir / "processed_index.json"
        self.cache_path = self.state_dir / "result_cache.json"
        self._item_ids: Optional[List[str]] = None
        self._outcomes: Optional[Dict[str, Outcome]] = None

    # -- processed index ----------------------------------------------------

    def load_processed_ids(self) -> Set[str]:
        return set(self._ids())

    def is_processed(self, item_id: str) -> bool:
        return item_id in self._ids()

    def mark_processed(self, item_id: str) -> None:
        ids = self._ids()
        if item_id in ids:
            return
        ids.append(item_id)
        self._save_index()

    # -- result cache -------------------------------------------------------

    def load_outcomes(self) -> List[Outcome]:
        return list(self._cache().values())

    def get_outcome(self, item_id: str) -> Optional[Outcome]:
        return self._cache().get(item_id)

    def save_outcome(self, outcome: Outcome) -> None:
        """Append a new outcome or update the existing one in place."""
        self._cache()[outcome.item_id] = outcome
        self._save_cache()

    def replace_outcome(self, outcome: Outcome) -> Outcome:
        """
        Replace the cached outcome for an already processed item.

        Returns:
            The previous outcome

        Raises:
            KeyError: if the item has no cached outcome
        """
        cache = self._cache()
        previous = cache[outcome.item_id]
        cache[outcome.item_id] = outcome
        self._save_cache()
        return previous

    # -- both ---------------------------------------------------------------

    def record(self, outcome: Outcome) -> None:
        """Persist an item's outcome, then mark it processed."""
        self.save_outcome(outcome)
        self.mark_processed(outcome.item_id)

    def remove_many(self, item_ids: Iterable[str]) -> int:
        """
        Drop identifiers from the index and their outcomes from the cache.

        Returns:
            Number of index entries removed
        """
        doomed = set(item_ids)
        if not doomed:
            return 0

        ids = self._ids()
        kept = [i for i in ids if i not in doomed]
        removed = len(ids) - len(kept)
        if removed:
            self._item_ids = kept
            self._save_index()

        cache = self._cache()
        stale = [i for i in cache if i in doomed]
        for item_id in stale:
            del cache[item_id]
        if stale:
            self._save_cache()

        logger.debug(f"Removed {removed} index entries and {len(stale)} cached outcomes")
        return removed

    # -- io -----------------------------------------------------------------

    def _ids(self) -> List[str]:
        if self._item_ids is None:
            data = read_json(self.index_path, default=None, schema=PROCESSED_INDEX_SCHEMA)
            self._item_ids = list(data["item_ids"]) if data else []
        return self._item_ids

    def _cache(self) -> Dict[str, Outcome]:
        if self._outcomes is None:
            data = read_json(self.cache_path, default=None, schema=RESULT_CACHE_SCHEMA)
            outcomes = [Outcome.model_validate(raw) for raw in data["outcomes"]] if data else []
            self._outcomes = {o.item_id: o for o in outcomes}
        return self._outcomes

    def _save_index(self) -> None:
        atomic_write_json(
            self.index_path,
            {"version": STORE_VERSION, "item_ids": self._ids()},
            schema=PROCESSED_INDEX_SCHEMA,
        )

    def _save_cache(self) -> None:
        payload = {
            "version": STORE_VERSION,
            "outcomes": [o.model_dump(mode="json") for o in self._cache().values()],
        }
        atomic_write_json(self.cache_path, payload, schema=RESULT_CACHE_SCHEMA)
