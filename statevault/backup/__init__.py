"""Backup storage, chunk reassembly and retention sweeping."""

from .exceptions import (
    ChecksumMismatchError,
    InvalidTimestampError,
    NotFoundError,
    ParseError,
    StatevaultError,
    StorageIOError,
)
from .manager import BackupManager
from .reassembler import ChunkReassembler
from .stores import BackupStore, TempStore
from .sweeper import RetentionSweeper

__all__ = [
    "BackupManager",
    "BackupStore",
    "ChecksumMismatchError",
    "ChunkReassembler",
    "InvalidTimestampError",
    "NotFoundError",
    "ParseError",
    "RetentionSweeper",
    "StatevaultError",
    "StorageIOError",
    "TempStore",
]
