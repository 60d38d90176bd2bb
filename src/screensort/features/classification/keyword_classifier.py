"""
Deterministic keyword-scoring classifier.

Scores each category by how many of its keywords occur as substrings of the
lower-cased, space-joined screenshot text. The result depends only on the
observations and the keyword tables.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Sequence

from .content_types import ContentType
from ..recognition.models import TextObservation
from ...core.logging import get_logger

logger = get_logger(__name__)

# Tie-break order: an equal score never displaces an earlier category
PRIORITY_ORDER = (ContentType.MUSIC, ContentType.MOVIE, ContentType.BOOK, ContentType.MEME)

MUSIC_KEYWORDS = frozenset([
    # App names
    "now playing", "apple music", "spotify", "shazam", "soundcloud",
    "youtube music", "amazon music", "tidal", "deezer", "pandora",
    # Player UI
    "playing from", "pause", "play", "shuffle", "repeat", "add to library",
    "share song", "lyrics", "up next", "queue",
])

MOVIE_KEYWORDS = frozenset([
    # Streaming services
    "netflix", "prime video", "disney+", "hbo max", "hulu", "peacock",
    "paramount+", "apple tv+",
    # Review sites
    "imdb", "rotten tomatoes", "metacritic",
    # UI
    "watch now", "play movie", "episodes", "season", "trailer", "cast & crew",
])

BOOK_KEYWORDS = frozenset([
    "goodreads", "kindle", "apple books", "audible", "libby", "kobo", "scribd",
    "reading", "want to read", "currently reading", "pages", "chapter",
    "author", "publisher", "isbn",
])

MEME_KEYWORDS = frozenset([
    "imgflip", "mematic", "made with mematic", "9gag", "reddit", "ifunny",
    "memedroid", "kapwing",
    # Caption formats
    "nobody:", "me:", "when you", "pov:", "be like", "change my mind",
])


@dataclass
class ClassificationConfig:
    """Keyword tables and thresholds for deterministic classification."""

    keywords: Dict[ContentType, FrozenSet[str]] = field(default_factory=lambda: {
        ContentType.MUSIC: MUSIC_KEYWORDS,
        ContentType.MOVIE: MOVIE_KEYWORDS,
        ContentType.BOOK: BOOK_KEYWORDS,
        ContentType.MEME: MEME_KEYWORDS,
    })
    minimum_keyword_matches: int = 1
    spatial_confidence_threshold: float = 0.8
    spatial_minimum_items: int = 2


@dataclass
class KeywordClassification:
    """Selected type plus the per-category match counts behind it."""

    content_type: ContentType
    scores: Dict[ContentType, int]

    @property
    def best_score(self) -> int:
        return max(self.scores.values()) if self.scores else 0

    @property
    def is_confident(self) -> bool:
        """A single top scorer with at least two matches."""
        top = self.best_score
        if top < 2:
            return False
        return sum(1 for score in self.scores.values() if score == top) == 1


class KeywordClassifier:
    """Classifies observation sets by keyword matches."""

    def __init__(self, config: Optional[ClassificationConfig] = None):
        self.config = config or ClassificationConfig()

    def classify(self, observations: Sequence[TextObservation]) -> ContentType:
        """Return the best-matching content type, or UNKNOWN."""
        return self.classify_with_details(observations).content_type

    def classify_with_details(self, observations: Sequence[TextObservation]) -> KeywordClassification:
        """
        Score every category and select the winner.

        Args:
            observations: Recognized text fragments

        Returns:
            KeywordClassification with the winner and all category scores
        """
        combined = " ".join(o.text for o in observations).lower()
        scores = {
            content_type: self._count_matches(combined, self.config.keywords.get(content_type, frozenset()))
            for content_type in PRIORITY_ORDER
        }

        best_type = ContentType.UNKNOWN
        best_score = 0
        for content_type in PRIORITY_ORDER:
            if scores[content_type] > best_score:
                best_type = content_type
                best_score = scores[content_type]

        if best_score < self.config.minimum_keyword_matches:
            best_type = ContentType.UNKNOWN

        summary = ", ".join(f"{t.value}={s}" for t, s in scores.items())
        logger.debug(f"Keyword scores: {summary} -> {best_type.value}")
        return KeywordClassification(content_type=best_type, scores=scores)

    def has_spatial_music_pattern(self, observations: Sequence[TextObservation]) -> bool:
        """
        Detect the stacked title/artist layout of music players.

        True when enough high-confidence fragments sit in the upper half of the frame.
        """
        upper_confident = [
            o for o in observations
            if o.bounding_box.y > 0.5 and o.confidence > self.config.spatial_confidence_threshold
        ]
        return len(upper_confident) >= self.config.spatial_minimum_items

    @staticmethod
    def _count_matches(text: str, keywords: FrozenSet[str]) -> int:
        return sum(1 for keyword in keywords if keyword in text)
