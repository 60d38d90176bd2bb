"""
Rejects model output that looks like template filler instead of real content.
"""

from .models import ExtractionConfig
from ...core.exceptions import CreatorNotFoundError, InvalidExtractionResultError, TitleNotFoundError


def validate_extraction(
    title: str,
    creator: str,
    confidence: float,
    config: ExtractionConfig,
    content_label: str = "content",
    creator_label: str = "creator",
) -> None:
    """
    Check extracted fields against the placeholder denylist, minimum lengths and confidence range.

    Placeholder matching is a case-insensitive substring test and runs before any
    other check, so a placeholder is rejected regardless of confidence.

    Args:
        title: Extracted title
        creator: Extracted creator; may be empty when the config does not require one
        confidence: Self-reported model confidence, before clamping
        config: Per-type extraction config
        content_label: Used in the TitleNotFoundError message, e.g. "song"
        creator_label: Used in the CreatorNotFoundError message, e.g. "artist"

    Raises:
        InvalidExtractionResultError: naming the rejected field and, for placeholders, the pattern
        TitleNotFoundError: when the title is empty
        CreatorNotFoundError: when a required creator is empty
    """
    title = (title or "").strip()
    creator = (creator or "").strip()
    check_creator = bool(creator) or config.creator_required

    for field_name, value in (("title", title), ("creator", creator)):
        if field_name == "creator" and not check_creator:
            continue
        lowered = value.lower()
        for pattern in config.placeholder_patterns:
            if pattern in lowered:
                raise InvalidExtractionResultError(
                    f"{field_name} contains placeholder pattern '{pattern}'",
                    field=field_name,
                    pattern=pattern,
                )

    if not title:
        raise TitleNotFoundError(content_label)
    if len(title) < config.minimum_title_length:
        raise InvalidExtractionResultError(f"title too short ({len(title)} chars)", field="title")

    if check_creator:
        if not creator:
            raise CreatorNotFoundError(creator_label)
        if len(creator) < config.minimum_creator_length:
            raise InvalidExtractionResultError(f"creator too short ({len(creator)} chars)", field="creator")

    if not 0.0 <= confidence <= 1.0:
        raise InvalidExtractionResultError(f"confidence score out of range: {confidence}", field="confidence")
