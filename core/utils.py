"""Utility functions for deutschweg application."""

import unicodedata
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(tz=timezone.utc)


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 string or epoch milliseconds into an aware datetime.

    Naive ISO strings are taken to be UTC.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        # JavaScript's toISOString() ends in 'Z'
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported timestamp: {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(dt: datetime) -> str:
    return dt.isoformat()


def normalize_text(text: str) -> str:
    """Lower-case and drop punctuation and symbols, keeping diacritics."""
    text = (text or '').lower()
    kept = [ch for ch in text if unicodedata.category(ch)[0] not in ('P', 'S')]
    return ''.join(kept).strip()


def normalize_german(text: str) -> str:
    """Lower-case, strip diacritics, keep only letters, digits and whitespace."""
    text = unicodedata.normalize('NFD', (text or '').lower())
    kept = []
    for ch in text:
        if unicodedata.combining(ch):
            continue
        if ch.isalnum() or ch.isspace():
            kept.append(ch)
    return ''.join(kept).strip()


def tokens(text: str) -> list[str]:
    """Whitespace-delimited tokens."""
    return text.split()
