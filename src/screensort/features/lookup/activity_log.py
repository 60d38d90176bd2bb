"""
JSON-lines activity log of sorted screenshots.
"""

import asyncio
import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from .interfaces import ActivityLog
from ...core.exceptions import StorageOperationError
from ...core.logging import get_logger

logger = get_logger(__name__)


class JsonLinesActivityLog(ActivityLog):
    """Appends one JSON object per sorted screenshot."""

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)
        self._lock = threading.Lock()

    async def record(self, entry: Dict[str, Any]) -> None:
        await asyncio.to_thread(self._append, entry)

    def _append(self, entry: Dict[str, Any]) -> None:
        line = dict(entry)
        line.setdefault("logged_at", datetime.now(timezone.utc).isoformat())
        try:
            with self._lock:
                self.file_path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.file_path, 'a', encoding='utf-8') as f:
                    f.write(json.dumps(line, ensure_ascii=False, default=str) + "\n")
        except OSError as e:
            raise StorageOperationError(f"Failed to append activity: {e}", str(self.file_path), "append")

    def read_entries(self) -> List[Dict[str, Any]]:
        if not self.file_path.exists():
            return []
        entries = []
        with open(self.file_path, 'r', encoding='utf-8') as f:
            for number, raw in enumerate(f, start=1):
                raw = raw.strip()
                if not raw:
                    continue
                try:
                    entries.append(json.loads(raw))
                except json.JSONDecodeError:
                    logger.warning(f"Skipping malformed activity line {number} in {self.file_path}")
        return entries
