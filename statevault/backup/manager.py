"""Backup save and load orchestration."""

import json
from typing import Any

from .._utils import logger
from .exceptions import NotFoundError, ParseError
from .reassembler import ChunkReassembler, serialize_document
from .stores import BackupStore, TempStore
from .utils import generate_backup_filename


class BackupManager:
    """Orchestrate backup save, chunked upload and retrieval."""

    def __init__(self, temp_store: TempStore, backup_store: BackupStore):
        """Initialize backup manager.

        Args:
            temp_store: Store for uploaded chunks
            backup_store: Store for finalized backups
        """
        self.temp_store = temp_store
        self.backup_store = backup_store
        self.reassembler = ChunkReassembler(temp_store, backup_store)

    async def save_backup(self, document: Any) -> str:
        """Save a full backup document under the current server time.

        Returns:
            Filename of the created backup
        """
        filename = await self.backup_store.save(
            generate_backup_filename(),
            serialize_document(document)
        )
        logger.info(f"Backup saved: {filename}")
        return filename

    async def load_latest(self) -> Any:
        """Load the most recent backup document.

        Raises:
            NotFoundError: If no backup exists
            ParseError: If the latest backup file is not valid JSON
        """
        filename = await self.backup_store.latest()
        if filename is None:
            raise NotFoundError("No backups found")

        content = await self.backup_store.read(filename)
        try:
            document = json.loads(content)
        except json.JSONDecodeError as e:
            raise ParseError(f"Backup {filename} is not valid JSON: {e}") from e

        logger.debug(f"Loaded latest backup: {filename}")
        return document
