"""Errors raised by the backup stores and the chunk reassembler."""


class StatevaultError(Exception):
    """Base exception for backup storage errors."""
    pass


class StorageIOError(StatevaultError):
    """Read, write or delete on a store directory failed."""
    pass


class NotFoundError(StatevaultError):
    """A chunk or backup file does not exist."""
    pass


class ParseError(StatevaultError):
    """Reassembled content is not valid JSON."""
    pass


class ChecksumMismatchError(ParseError):
    def __init__(self, expected: str, actual: str):
        super().__init__(f"Checksum mismatch: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class InvalidTimestampError(StatevaultError):
    """A client timestamp cannot be turned into a backup filename."""
    pass
