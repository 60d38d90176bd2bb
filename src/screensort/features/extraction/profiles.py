"""
Per-type extraction profiles: prompt, reply shape and fallback hints.
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional, Type

from pydantic import BaseModel

from .models import BookReply, MovieReply, MusicReply
from ..classification.content_types import ContentType

ISBN_PATTERN = re.compile(r"(?<!\d)97[89]\d{10}(?!\d)")
YEAR_PATTERN = re.compile(r"\b(?:19|20)\d{2}\b")

MUSIC_PROMPT = """Extract the song name and artist from this music player screenshot text.

IMPORTANT INSTRUCTIONS:
- Extract the ACTUAL song title and artist shown in the text
- Do NOT return placeholder text like "Song Title" or "Artist Name"
- Ignore UI elements: timestamps, battery percentage, playback controls, app names
- If you cannot identify both song and artist clearly, set confidence below 0.5

Screenshot text:
{text}"""

MOVIE_PROMPT = """Extract the movie or TV show information from this streaming app screenshot text.

IMPORTANT INSTRUCTIONS:
- Extract the ACTUAL movie/show title shown in the text
- Do NOT return placeholder text like "Movie Title" or "Unknown"
- Look for year of release if visible (usually in parentheses or near the title)
- Look for director name if visible
- Ignore UI elements: ratings, duration, play buttons, app names
- If you cannot identify the title clearly, set confidence below 0.5

Screenshot text:
{text}"""

BOOK_PROMPT = """Extract the book information from this book app screenshot text.

IMPORTANT INSTRUCTIONS:
- Extract the ACTUAL book title shown in the text
- Extract the ACTUAL author name shown in the text
- Do NOT return placeholder text like "Book Title" or "Author Name"
- Look for ISBN if visible (usually starts with 978 or 979)
- Ignore UI elements: ratings, reviews count, page numbers, app names
- If you cannot identify both title and author clearly, set confidence below 0.5

Screenshot text:
{text}"""


@dataclass(frozen=True)
class ReplyFields:
    """A model reply reduced to the shared title/creator shape."""

    title: str
    creator: str
    confidence: float
    auxiliary_fields: Dict[str, object]


@dataclass(frozen=True)
class ExtractionProfile:
    content_type: ContentType
    creator_label: str
    prompt_template: str
    reply_model: Type[BaseModel]
    read_reply: Callable[[BaseModel], ReplyFields]
    noise_patterns: FrozenSet[str]
    # "creator_first", "title_first" or None to skip single-line dash splits
    dash_order: Optional[str] = None
    # Movies carry an optional director, so one substantial line is enough
    minimum_fallback_lines: int = 2

    def build_prompt(self, text: str) -> str:
        return self.prompt_template.format(text=text)


def _read_music(reply: MusicReply) -> ReplyFields:
    return ReplyFields(reply.song_title, reply.artist, reply.confidence, {})


def _read_movie(reply: MovieReply) -> ReplyFields:
    return ReplyFields(reply.title, reply.director, reply.confidence, {"year": reply.year or None})


def _read_book(reply: BookReply) -> ReplyFields:
    return ReplyFields(reply.title, reply.author, reply.confidence, {"isbn": find_isbn([reply.isbn])})


def find_isbn(lines: List[str]) -> Optional[str]:
    for line in lines:
        match = ISBN_PATTERN.search((line or "").replace("-", "").replace(" ", ""))
        if match:
            return match.group(0)
    return None


def find_year(lines: List[str]) -> Optional[int]:
    for line in lines:
        match = YEAR_PATTERN.search(line)
        if match:
            return int(match.group(0))
    return None


PROFILES: Dict[ContentType, ExtractionProfile] = {
    ContentType.MUSIC: ExtractionProfile(
        content_type=ContentType.MUSIC,
        creator_label="artist",
        prompt_template=MUSIC_PROMPT,
        reply_model=MusicReply,
        read_reply=_read_music,
        noise_patterns=frozenset([
            "play", "pause", "shuffle", "repeat", "share", "add to",
            "library", "lyrics", "queue", "airplay", "cast",
            "am", "pm", "battery", "%", "wifi", "cellular",
            "apple music", "spotify", "youtube music", "soundcloud",
            "now playing", "up next", "playing from",
        ]),
        dash_order="creator_first",
    ),
    ContentType.MOVIE: ExtractionProfile(
        content_type=ContentType.MOVIE,
        creator_label="director",
        prompt_template=MOVIE_PROMPT,
        reply_model=MovieReply,
        read_reply=_read_movie,
        noise_patterns=frozenset([
            "play", "watch", "trailer", "episodes", "season",
            "netflix", "prime video", "disney+", "hbo", "hulu",
            "continue watching", "my list", "trending", "top 10",
            "new", "popular", "because you watched", "more like this",
        ]),
        minimum_fallback_lines=1,
    ),
    ContentType.BOOK: ExtractionProfile(
        content_type=ContentType.BOOK,
        creator_label="author",
        prompt_template=BOOK_PROMPT,
        reply_model=BookReply,
        read_reply=_read_book,
        noise_patterns=frozenset([
            "goodreads", "kindle", "apple books", "audible", "libby",
            "want to read", "currently reading", "read",
            "ratings", "reviews", "pages", "chapter",
            "buy", "sample", "download", "share",
        ]),
        dash_order="title_first",
    ),
}


def profile_for(content_type: ContentType) -> ExtractionProfile:
    try:
        return PROFILES[content_type]
    except KeyError:
        raise ValueError(f"No extraction profile for content type: {content_type.value}")
