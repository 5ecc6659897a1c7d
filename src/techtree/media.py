"""Helpers for turning raw video references into clip descriptors."""

import logging
import re

from pydantic import ValidationError

from techtree.models.records import MediaClip

logger = logging.getLogger(__name__)

VIDEO_ID_PATTERNS = [
    re.compile(r"(?:https?://)?(?:www\.)?youtu\.be/([\w-]{11})"),
    re.compile(r"(?:https?://)?(?:www\.)?youtube\.com/watch\?v=([\w-]{11})"),
    re.compile(r"(?:https?://)?(?:www\.)?youtube\.com/embed/([\w-]{11})"),
]


def extract_video_id(raw: str) -> str:
    """Extract a canonical video id from a URL or bare identifier.

    Recognizes youtu.be/ID, youtube.com/watch?v=ID and youtube.com/embed/ID.
    Anything else is assumed to already be an id and returned unchanged.
    """
    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(raw)
        if match:
            return match.group(1)
    return raw


def make_clip(raw_source: str, start: float, end: float, loop: bool = True) -> MediaClip:
    """Build a validated clip descriptor from a raw source reference.

    Raises:
        ValueError: If the offsets are invalid (negative start, end not after start)
    """
    source_id = extract_video_id(raw_source.strip())
    try:
        return MediaClip(source_id=source_id, start_offset=start, end_offset=end, loop=loop)
    except ValidationError as e:
        raise ValueError(f"Invalid clip for {source_id}: {e.errors()[0]['msg']}") from e
