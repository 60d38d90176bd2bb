"""
Filesystem destination routing: sorted screenshots move into one folder per content type.
"""

import asyncio
import shutil
from pathlib import Path
from typing import Any, Optional

from .interfaces import DestinationRouter
from ..classification.content_types import ContentType
from ...core.exceptions import RoutingError
from ...core.logging import get_logger

logger = get_logger(__name__)


class DirectoryRouter(DestinationRouter):
    """Moves image files into ``<library_dir>/<destination name>/``."""

    def __init__(self, library_dir: Path):
        self.library_dir = Path(library_dir)

    def destination_dir(self, content_type: ContentType) -> Path:
        return self.library_dir / content_type.destination

    async def route(self, handle: Any, content_type: ContentType) -> Optional[str]:
        return await asyncio.to_thread(self._move, Path(handle), content_type)

    def _move(self, source: Path, content_type: ContentType) -> str:
        target_dir = self.destination_dir(content_type)
        if not source.exists():
            raise RoutingError(f"{source.name} no longer exists", str(target_dir))

        target = target_dir / source.name
        if target.resolve() == source.resolve():
            return str(target)

        # Never overwrite an earlier screenshot with the same name
        counter = 1
        while target.exists():
            target = target_dir / f"{source.stem} ({counter}){source.suffix}"
            counter += 1

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
        except OSError as e:
            raise RoutingError(str(e), str(target_dir))

        logger.debug(f"Moved {source.name} to {target_dir}")
        return str(target)
