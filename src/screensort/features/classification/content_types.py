"""
Content categories a screenshot can be sorted into.
"""

from enum import Enum


class ContentType(str, Enum):
    """Closed set of screenshot content categories."""
    MUSIC = "music"
    MOVIE = "movie"
    BOOK = "book"
    MEME = "meme"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        """Display name for UI and logs."""
        return _DISPLAY_NAMES[self]

    @property
    def requires_extraction(self) -> bool:
        """Whether this type carries structured title/creator metadata."""
        return self in (ContentType.MUSIC, ContentType.MOVIE, ContentType.BOOK)

    @property
    def destination(self) -> str:
        """Destination name used by the routing collaborator."""
        return _DESTINATIONS[self]

    @property
    def icon_name(self) -> str:
        return _ICONS[self]

    @classmethod
    def parse(cls, value: str) -> "ContentType":
        """
        Map a free-form type string (as returned by a language model) onto the enumeration.

        Args:
            value: Raw type label, e.g. "TV Show" or "books"

        Returns:
            The matching ContentType, or UNKNOWN when nothing matches
        """
        if not isinstance(value, str):
            return cls.UNKNOWN
        return _SYNONYMS.get(value.strip().lower(), cls.UNKNOWN)


_DISPLAY_NAMES = {
    ContentType.MUSIC: "Music",
    ContentType.MOVIE: "Movie",
    ContentType.BOOK: "Book",
    ContentType.MEME: "Meme",
    ContentType.UNKNOWN: "Unknown",
}

_DESTINATIONS = {
    ContentType.MUSIC: "ScreenSort - Music",
    ContentType.MOVIE: "ScreenSort - Movies",
    ContentType.BOOK: "ScreenSort - Books",
    ContentType.MEME: "ScreenSort - Memes",
    ContentType.UNKNOWN: "ScreenSort - Flagged",
}

_ICONS = {
    ContentType.MUSIC: "music.note",
    ContentType.MOVIE: "film",
    ContentType.BOOK: "book",
    ContentType.MEME: "face.smiling",
    ContentType.UNKNOWN: "questionmark.circle",
}

_SYNONYMS = {
    "music": ContentType.MUSIC,
    "song": ContentType.MUSIC,
    "songs": ContentType.MUSIC,
    "movie": ContentType.MOVIE,
    "movies": ContentType.MOVIE,
    "film": ContentType.MOVIE,
    "tv": ContentType.MOVIE,
    "show": ContentType.MOVIE,
    "tv show": ContentType.MOVIE,
    "book": ContentType.BOOK,
    "books": ContentType.BOOK,
    "reading": ContentType.BOOK,
    "meme": ContentType.MEME,
    "memes": ContentType.MEME,
    "unknown": ContentType.UNKNOWN,
}
