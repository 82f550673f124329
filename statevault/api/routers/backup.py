"""Backup upload and retrieval API endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from ..dependencies import get_backup_manager
from ..exceptions import (
    BackupNotFoundError,
    InvalidBackupError,
    StorageFailedError,
    to_envelope_error,
)
from ..models import ChunkResponse, ChunkUpload, CombineRequest, Envelope
from statevault.backup import BackupManager
from statevault.backup.exceptions import (
    ChecksumMismatchError,
    InvalidTimestampError,
    NotFoundError,
    ParseError,
    StatevaultError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/backup", tags=["backup"])


@router.post("/chunk", response_model=ChunkResponse, response_model_by_alias=True)
async def upload_chunk(
    upload: ChunkUpload,
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> ChunkResponse:
    """Store one chunk of a large backup."""
    try:
        chunk_id = await backup_manager.reassembler.receive_chunk(
            upload.chunk, upload.index, upload.total, upload.timestamp
        )
    except StatevaultError as e:
        logger.error(f"Error saving chunk: {e}")
        raise to_envelope_error(e, "Failed to save chunk")

    return ChunkResponse(chunk_id=chunk_id)


@router.post("/combine", response_model=Envelope, response_model_exclude_unset=True)
async def combine_chunks(
    request: CombineRequest,
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> Envelope:
    """Reassemble previously uploaded chunks into a backup.

    Chunks are joined in the order of ``chunkIds``.
    """
    try:
        filename = await backup_manager.reassembler.combine(
            request.chunk_ids, request.timestamp, checksum=request.checksum
        )
    except InvalidTimestampError as e:
        logger.error(f"Error combining chunks: {e}")
        raise InvalidBackupError("Invalid timestamp")
    except NotFoundError as e:
        logger.error(f"Error combining chunks: {e}")
        raise to_envelope_error(e, "One or more chunks not found")
    except ChecksumMismatchError as e:
        logger.error(f"Error combining chunks: {e}")
        raise to_envelope_error(e, "Combined data failed checksum verification")
    except ParseError as e:
        logger.error(f"Error combining chunks: {e}")
        raise to_envelope_error(e, "Combined data is not valid JSON")
    except StatevaultError as e:
        logger.error(f"Error combining chunks: {e}")
        raise to_envelope_error(e, "Failed to combine chunks")

    logger.info(f"Chunked backup saved: {filename}")
    return Envelope(success=True, message="Backup saved successfully")


@router.post("", response_model=Envelope, response_model_exclude_unset=True)
async def save_backup(
    document: Any = Body(...),
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> Envelope:
    """Save a full backup document in one request."""
    try:
        await backup_manager.save_backup(document)
    except StatevaultError as e:
        logger.error(f"Error saving backup: {e}")
        raise to_envelope_error(e, "Failed to save backup")

    return Envelope(success=True, message="Backup saved successfully")


@router.get("", response_model=Envelope, response_model_exclude_unset=True)
async def get_latest_backup(
    backup_manager: BackupManager = Depends(get_backup_manager)
) -> Envelope:
    """Return the most recent backup document."""
    try:
        document = await backup_manager.load_latest()
    except NotFoundError:
        raise BackupNotFoundError("No backups found")
    except StatevaultError as e:
        logger.error(f"Error loading backup: {e}")
        raise StorageFailedError("Failed to load backup")

    return Envelope(success=True, data=document)
