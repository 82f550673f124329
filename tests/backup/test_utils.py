"""Tests for backup naming and checksum helpers."""

import pytest
from datetime import datetime, timezone

from statevault.backup.utils import (
    compute_text_checksum,
    format_backup_timestamp,
    generate_backup_filename,
    make_chunk_id,
    parse_timestamp,
    verify_text_checksum,
    with_sequence,
)


def test_make_chunk_id():
    assert make_chunk_id(1714566645123, 0) == "chunk_1714566645123_0"
    assert make_chunk_id("abc", 12) == "chunk_abc_12"


def test_parse_timestamp_epoch_millis():
    dt = parse_timestamp(1714566645123)

    assert dt == datetime(2024, 5, 1, 12, 30, 45, 123000, tzinfo=timezone.utc)


def test_parse_timestamp_iso_string():
    assert parse_timestamp("2024-05-01T12:30:45.123Z") == datetime(
        2024, 5, 1, 12, 30, 45, 123000, tzinfo=timezone.utc
    )
    assert parse_timestamp("2024-05-01T14:30:45+02:00") == datetime(
        2024, 5, 1, 12, 30, 45, tzinfo=timezone.utc
    )


def test_parse_timestamp_numeric_string():
    assert parse_timestamp("1714566645123") == parse_timestamp(1714566645123)


def test_parse_timestamp_invalid():
    with pytest.raises(ValueError):
        parse_timestamp("not a timestamp")
    with pytest.raises(ValueError):
        parse_timestamp(True)


def test_format_backup_timestamp_replaces_separators():
    dt = datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)

    assert format_backup_timestamp(dt) == "2024-05-01T12-30-45-123Z"


def test_generate_backup_filename():
    filename = generate_backup_filename(1714566645123)
    assert filename == "backup_2024-05-01T12-30-45-123Z.json"

    current = generate_backup_filename()
    assert current.startswith("backup_")
    assert current.endswith("Z.json")
    assert ":" not in current


def test_filenames_sort_by_time():
    earlier = generate_backup_filename(1714566645123)
    later = generate_backup_filename(1714566645124)

    assert sorted([later, earlier]) == [earlier, later]


def test_with_sequence_sorts_after_original():
    original = "backup_2024-05-01T12-30-45-123Z.json"
    first = with_sequence(original, 1)
    second = with_sequence(original, 2)

    assert first == "backup_2024-05-01T12-30-45-123Z_001.json"
    assert sorted([second, original, first]) == [original, first, second]


def test_compute_and_verify_checksum():
    checksum = compute_text_checksum('{"a": 1}')

    assert checksum.startswith("sha256:")
    assert verify_text_checksum('{"a": 1}', checksum) is True
    assert verify_text_checksum('{"a": 1}', checksum.split(":", 1)[1]) is True
    assert verify_text_checksum('{"a": 2}', checksum) is False
