"""Chunked upload reassembly."""

import json
from typing import Any, List, Optional

from .._utils import logger
from .exceptions import ChecksumMismatchError, InvalidTimestampError, ParseError
from .stores import BackupStore, TempStore
from .utils import (
    Timestamp,
    compute_text_checksum,
    generate_backup_filename,
    make_chunk_id,
    verify_text_checksum,
)


def serialize_document(document: Any) -> str:
    """Serialize a backup document with stable formatting.

    Documents holding lone surrogates (valid as JSON escapes) fall back to
    ASCII escaping so the result is always encodable as UTF-8.
    """
    text = json.dumps(document, indent=2, ensure_ascii=False)
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return json.dumps(document, indent=2, ensure_ascii=True)
    return text


def join_surrogates(text: str) -> str:
    """Merge surrogate pairs that were split across chunk boundaries."""
    return text.encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")


class ChunkReassembler:
    """Store uploaded chunks and combine them into backup files."""

    def __init__(self, temp_store: TempStore, backup_store: BackupStore):
        self.temp_store = temp_store
        self.backup_store = backup_store

    async def receive_chunk(
        self,
        chunk: str,
        index: int,
        total: int,
        timestamp: Timestamp
    ) -> str:
        """Store one chunk verbatim.

        ``total`` is informational only; nothing checks it against ``index``
        or against other chunks of the same upload.

        Returns:
            Chunk id to pass to :meth:`combine`
        """
        chunk_id = make_chunk_id(timestamp, index)
        await self.temp_store.put(chunk_id, chunk)
        logger.debug(f"Received chunk {chunk_id} ({index + 1}/{total})")
        return chunk_id

    async def combine(
        self,
        chunk_ids: List[str],
        timestamp: Timestamp,
        checksum: Optional[str] = None
    ) -> str:
        """Reassemble chunks in the given order and save them as a backup.

        Chunks are concatenated without a delimiter in exactly the order of
        ``chunk_ids``. They are deleted only after the backup file has been
        written, so a failed combine can be retried with the same ids.

        Args:
            chunk_ids: Ordered chunk ids
            timestamp: Client timestamp used to name the backup file
            checksum: Optional ``sha256:<hex>`` of the concatenated text

        Returns:
            Filename of the created backup

        Raises:
            NotFoundError: If any chunk is missing
            InvalidTimestampError: If ``timestamp`` cannot be interpreted
            ChecksumMismatchError: If ``checksum`` does not match
            ParseError: If the concatenated text is not valid JSON
            StorageIOError: On read/write failure
        """
        try:
            filename = generate_backup_filename(timestamp)
        except ValueError as e:
            raise InvalidTimestampError(f"Invalid timestamp {timestamp!r}: {e}") from e

        parts = []
        for chunk_id in chunk_ids:
            parts.append(await self.temp_store.get(chunk_id))
        combined = join_surrogates("".join(parts))

        if checksum and not verify_text_checksum(combined, checksum):
            raise ChecksumMismatchError(checksum, compute_text_checksum(combined))

        try:
            document = json.loads(combined)
        except json.JSONDecodeError as e:
            raise ParseError(f"Combined data from {len(chunk_ids)} chunks is not valid JSON: {e}") from e

        filename = await self.backup_store.save(filename, serialize_document(document))

        for chunk_id in chunk_ids:
            await self.temp_store.delete(chunk_id)

        logger.info(f"Combined {len(chunk_ids)} chunks into {filename}")
        return filename
