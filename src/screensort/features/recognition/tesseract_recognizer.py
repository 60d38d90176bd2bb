"""
Tesseract-backed text recognizer.

Words reported by ``pytesseract.image_to_data`` are grouped back into lines so
that each TextObservation matches what a user reads as one on-screen label.
The OCR call is CPU bound and runs in a worker thread; callers await it.
"""

import asyncio
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import pytesseract
from pillow_heif import register_heif_opener
from PIL import Image, UnidentifiedImageError

from .interfaces import TextRecognizer
from .models import BoundingBox, TextObservation
from ...core.exceptions import InvalidImageError, NoTextFoundError, RecognitionFailedError
from ...core.logging import get_logger

logger = get_logger(__name__)

# iPhone screenshots and photos are often HEIC
register_heif_opener()

LineKey = Tuple[int, int, int]


class TesseractRecognizer(TextRecognizer):
    """Recognizes screenshot text with the local Tesseract engine."""

    def __init__(
        self,
        min_confidence: float = 0.0,
        lang: Optional[str] = None,
        config: str = "--psm 11",
    ):
        """
        Args:
            min_confidence: Drop lines whose mean confidence (0-1) is below this value
            lang: Tesseract language code(s), e.g. "eng"
            config: Extra tesseract CLI flags; sparse-text mode suits app screenshots
        """
        self.min_confidence = min_confidence
        self.lang = lang
        self.config = config

    async def recognize(self, item: Union[str, Path]) -> List[TextObservation]:
        return await asyncio.to_thread(self._recognize_sync, Path(item))

    def _recognize_sync(self, path: Path) -> List[TextObservation]:
        try:
            with Image.open(path) as image:
                image.load()
                width, height = image.size
                data = pytesseract.image_to_data(
                    image.convert("RGB"),
                    lang=self.lang,
                    config=self.config,
                    output_type=pytesseract.Output.DICT,
                )
        except pytesseract.TesseractNotFoundError:
            # Subclass of OSError, so it must be matched first
            raise RecognitionFailedError("tesseract is not installed or not on PATH", str(path))
        except pytesseract.TesseractError as e:
            raise RecognitionFailedError(str(e), str(path))
        except (UnidentifiedImageError, OSError) as e:
            logger.warning(f"Could not open image {path}: {e}")
            raise InvalidImageError(str(path))

        observations = self.observations_from_data(data, width, height)
        if not observations:
            raise NoTextFoundError(str(path))

        logger.debug(f"Recognized {len(observations)} lines in {path.name}")
        return observations

    def observations_from_data(self, data: Dict[str, List[Any]], width: int, height: int) -> List[TextObservation]:
        """
        Convert tesseract word-level output into line-level observations.

        Args:
            data: ``image_to_data`` dictionary output
            width: Image width in pixels
            height: Image height in pixels

        Returns:
            Observations in discovery order
        """
        if width <= 0 or height <= 0:
            return []

        lines: "OrderedDict[LineKey, Dict[str, Any]]" = OrderedDict()
        for i, raw_text in enumerate(data.get("text", [])):
            text = (raw_text or "").strip()
            if not text:
                continue
            try:
                conf = float(data["conf"][i])
            except (KeyError, IndexError, TypeError, ValueError):
                conf = -1.0
            if conf < 0:
                continue

            key = (int(data["block_num"][i]), int(data["par_num"][i]), int(data["line_num"][i]))
            left, top = int(data["left"][i]), int(data["top"][i])
            right, bottom = left + int(data["width"][i]), top + int(data["height"][i])

            line = lines.setdefault(key, {"words": [], "confs": [], "box": [left, top, right, bottom]})
            line["words"].append(text)
            line["confs"].append(conf / 100.0)
            box = line["box"]
            box[0], box[1] = min(box[0], left), min(box[1], top)
            box[2], box[3] = max(box[2], right), max(box[3], bottom)

        observations = []
        for line in lines.values():
            confidence = sum(line["confs"]) / len(line["confs"])
            if confidence < self.min_confidence:
                continue
            left, top, right, bottom = line["box"]
            observations.append(TextObservation(
                text=" ".join(line["words"]),
                confidence=confidence,
                bounding_box=BoundingBox(
                    x=_clamp(left / width),
                    # Flip to a bottom-left origin
                    y=_clamp(1.0 - bottom / height),
                    width=_clamp((right - left) / width),
                    height=_clamp((bottom - top) / height),
                ),
            ))
        return observations


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 1.0)
