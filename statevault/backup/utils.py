"""Naming and hashing helpers for backup storage."""

import hashlib
from datetime import datetime, timezone
from typing import Optional, Union

Timestamp = Union[int, float, str]


def make_chunk_id(timestamp: Timestamp, index: int) -> str:
    """Build the temp store key for one uploaded chunk.

    The timestamp is embedded exactly as the client sent it, so every chunk
    of one upload shares a prefix.
    """
    return f"chunk_{timestamp}_{index}"


def parse_timestamp(timestamp: Timestamp) -> datetime:
    """Convert a client timestamp to an aware UTC datetime.

    Args:
        timestamp: Epoch milliseconds (as produced by ``Date.now()``) or an
            ISO-8601 string. Numeric strings are treated as milliseconds.

    Returns:
        UTC datetime

    Raises:
        ValueError: If the timestamp cannot be interpreted
    """
    if isinstance(timestamp, bool):
        raise ValueError(f"Invalid timestamp: {timestamp!r}")

    if isinstance(timestamp, str):
        text = timestamp.strip()
        try:
            return parse_timestamp(float(text))
        except ValueError:
            pass
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    try:
        return datetime.fromtimestamp(timestamp / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError) as e:
        raise ValueError(f"Invalid timestamp: {timestamp!r}") from e


def format_backup_timestamp(dt: datetime) -> str:
    """Render a datetime as a filename-safe ISO string.

    ``2024-05-01T12:30:45.123Z`` becomes ``2024-05-01T12-30-45-123Z``.
    """
    dt = dt.astimezone(timezone.utc)
    iso = dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{dt.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


def generate_backup_filename(timestamp: Optional[Timestamp] = None) -> str:
    """Generate a backup filename.

    Args:
        timestamp: Client timestamp. If None, uses the current time.

    Returns:
        Filename in format: backup_YYYY-MM-DDTHH-MM-SS-mmmZ.json
    """
    if timestamp is None:
        dt = datetime.now(timezone.utc)
    else:
        dt = parse_timestamp(timestamp)
    return f"backup_{format_backup_timestamp(dt)}.json"


def with_sequence(filename: str, sequence: int) -> str:
    """Append a collision suffix that sorts after the unsuffixed name."""
    stem, dot, ext = filename.rpartition(".")
    if not dot:
        return f"{filename}_{sequence:03d}"
    return f"{stem}_{sequence:03d}.{ext}"


def compute_text_checksum(text: str) -> str:
    """Compute SHA-256 checksum of text.

    Returns:
        SHA-256 checksum as hex string with 'sha256:' prefix
    """
    return f"sha256:{hashlib.sha256(text.encode('utf-8', 'surrogatepass')).hexdigest()}"


def verify_text_checksum(text: str, expected_checksum: str) -> bool:
    """Verify text checksum. A bare hex digest is accepted too."""
    expected = expected_checksum.strip().lower()
    if not expected.startswith("sha256:"):
        expected = f"sha256:{expected}"
    return compute_text_checksum(text) == expected
