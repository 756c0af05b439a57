"""
Input validation utilities for bot command arguments.
"""

from typing import Optional, Tuple

from models.revision_item import RevisionItemCreate, Subject
from utils.exceptions import ValidationError

MAX_TITLE_LENGTH = 200
MAX_NOTES_LENGTH = 2000


def parse_subject(raw: str) -> Subject:
    """
    Resolve a subject name case-insensitively.

    Raises:
        ValidationError: If the subject is unknown
    """
    value = raw.strip().lower()
    for subject in Subject:
        if subject.value.lower() == value:
            return subject

    choices = ", ".join(s.value for s in Subject)
    raise ValidationError(f"Unknown subject '{raw.strip()}'. Choose one of: {choices}")


def sanitize_text(text: Optional[str], max_length: int) -> Optional[str]:
    """Strip whitespace and cut to max_length. Empty input becomes None."""
    if text is None:
        return None
    text = " ".join(text.split())
    if not text:
        return None
    return text[:max_length]


def parse_add_command(args: Optional[str]) -> RevisionItemCreate:
    """
    Parse ``/add <subject> | <title> [| notes]`` arguments.

    Args:
        args: Raw text following the command

    Returns:
        Revision item creation model

    Raises:
        ValidationError: If the arguments are incomplete or invalid
    """
    if not args:
        raise ValidationError("Usage: /add <subject> | <title> [| notes]")

    parts = [part.strip() for part in args.split("|", 2)]
    if len(parts) < 2:
        raise ValidationError("Usage: /add <subject> | <title> [| notes]")

    subject = parse_subject(parts[0])
    title = sanitize_text(parts[1], MAX_TITLE_LENGTH)
    if not title:
        raise ValidationError("Title must not be empty")

    notes = sanitize_text(parts[2], MAX_NOTES_LENGTH) if len(parts) > 2 else None

    return RevisionItemCreate(title=title, subject=subject, content_text=notes)


def split_callback_data(data: Optional[str]) -> Tuple[str, str]:
    """Split ``prefix:value`` callback data."""
    if not data or ":" not in data:
        raise ValidationError(f"Malformed callback data: {data!r}")
    prefix, value = data.split(":", 1)
    if not value:
        raise ValidationError(f"Malformed callback data: {data!r}")
    return prefix, value
