"""
Recognition collaborator interface.
"""

from abc import ABC, abstractmethod
from typing import Any, List

from .models import TextObservation


class TextRecognizer(ABC):
    """Turns an item handle (e.g. an image path) into text observations."""

    @abstractmethod
    async def recognize(self, item: Any) -> List[TextObservation]:
        """
        Recognize text in an item.

        Raises:
            NoTextFoundError: Nothing legible in the item
            RecognitionFailedError: The engine failed
            InvalidImageError: The item could not be decoded
        """
        raise NotImplementedError
