"""Filesystem stores for transient chunks and finalized backups."""

import os
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

from .._utils import logger
from .exceptions import NotFoundError, StorageIOError
from .utils import with_sequence

MAX_SEQUENCE = 999

# Chunks are fragments of a client-side string and may split a surrogate pair
TEXT_ERRORS = "surrogatepass"


def _safe_name(name: str) -> bool:
    return bool(name) and name not in (".", "..") and "/" not in name and "\\" not in name and "\x00" not in name


def _is_staging(name: str) -> bool:
    return name.startswith(".") and name.endswith(".tmp")


def write_file(directory: Path, name: str, payload: bytes, exclusive: bool = False) -> None:
    """Write ``payload`` to ``directory / name`` so the name never holds partial data.

    The payload goes to a hidden staging file first and is moved into place
    only after it has been written completely. With ``exclusive`` the move
    is a hard link, which fails with ``FileExistsError`` if the name is
    taken. The staging file is removed in every case.
    """
    fd, staging = tempfile.mkstemp(dir=directory, prefix=".", suffix=".tmp")
    os.close(fd)
    staging_path = Path(staging)
    try:
        with open(staging_path, "wb") as f:
            f.write(payload)
        if exclusive:
            os.link(staging_path, directory / name)
        else:
            os.replace(staging_path, directory / name)
    finally:
        try:
            staging_path.unlink()
        except FileNotFoundError:
            pass


class TempStore:
    """Directory of chunk files keyed by chunk id."""

    def __init__(self, temp_dir: str = "./temp"):
        self.temp_dir = Path(temp_dir)
        self.temp_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, chunk_id: str) -> Path:
        if not _safe_name(chunk_id) or _is_staging(chunk_id):
            raise NotFoundError(f"Invalid chunk id: {chunk_id!r}")
        return self.temp_dir / chunk_id

    async def put(self, chunk_id: str, data: str) -> None:
        """Write a chunk, replacing any previous content under the same id."""
        self._path(chunk_id)
        payload = data.encode("utf-8", TEXT_ERRORS)
        try:
            write_file(self.temp_dir, chunk_id, payload)
        except OSError as e:
            raise StorageIOError(f"Failed to write chunk {chunk_id}: {e}") from e

        logger.debug(f"Chunk stored: {chunk_id} ({len(data):,} chars)")

    async def get(self, chunk_id: str) -> str:
        """Read a chunk as text.

        Raises:
            NotFoundError: If the chunk does not exist
            StorageIOError: On any other read failure, including undecodable content
        """
        path = self._path(chunk_id)
        try:
            with open(path, "rb") as f:
                payload = f.read()
        except FileNotFoundError as e:
            raise NotFoundError(f"Chunk not found: {chunk_id}") from e
        except OSError as e:
            raise StorageIOError(f"Failed to read chunk {chunk_id}: {e}") from e

        try:
            return payload.decode("utf-8", TEXT_ERRORS)
        except UnicodeDecodeError as e:
            raise StorageIOError(f"Chunk {chunk_id} is not valid UTF-8: {e}") from e

    async def delete(self, chunk_id: str) -> None:
        """Delete a chunk. Deleting an absent chunk is a no-op."""
        path = self._path(chunk_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageIOError(f"Failed to delete chunk {chunk_id}: {e}") from e

    async def list_all(self) -> List[Tuple[str, float]]:
        """List chunks with their last-modified time (epoch seconds)."""
        entries = []
        try:
            for path in self.temp_dir.iterdir():
                if _is_staging(path.name):
                    continue
                try:
                    entries.append((path.name, path.stat().st_mtime))
                except FileNotFoundError:
                    # Removed between listing and stat
                    continue
        except OSError as e:
            raise StorageIOError(f"Failed to list {self.temp_dir}: {e}") from e
        return entries


class BackupStore:
    """Append-only directory of JSON backup snapshots."""

    def __init__(self, backup_dir: str = "./backups"):
        self.backup_dir = Path(backup_dir)
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    async def save(self, filename: str, serialized: str) -> str:
        """Create a new backup file.

        Existing files are never overwritten. If ``filename`` is taken, a
        sequence suffix is appended until a free name is found. A failed
        write leaves no file behind.

        Args:
            filename: Desired backup filename
            serialized: Serialized document

        Returns:
            Filename actually written
        """
        if not _safe_name(filename) or _is_staging(filename):
            raise StorageIOError(f"Invalid backup filename: {filename!r}")

        try:
            payload = serialized.encode("utf-8")
        except UnicodeEncodeError as e:
            raise StorageIOError(f"Backup {filename} cannot be encoded as UTF-8: {e}") from e

        candidate = filename
        for sequence in range(1, MAX_SEQUENCE + 2):
            try:
                write_file(self.backup_dir, candidate, payload, exclusive=True)
            except FileExistsError:
                logger.warning(f"Backup {candidate} already exists, retrying with sequence suffix")
                candidate = with_sequence(filename, sequence)
                continue
            except OSError as e:
                raise StorageIOError(f"Failed to write backup {candidate}: {e}") from e

            logger.info(f"Backup written: {candidate} ({len(payload):,} bytes)")
            return candidate

        raise StorageIOError(f"No free filename for backup {filename}")

    async def list_all(self) -> List[str]:
        try:
            return [
                path.name for path in self.backup_dir.iterdir()
                if path.is_file() and not _is_staging(path.name)
            ]
        except OSError as e:
            raise StorageIOError(f"Failed to list {self.backup_dir}: {e}") from e

    async def read(self, filename: str) -> str:
        if not _safe_name(filename):
            raise NotFoundError(f"Invalid backup filename: {filename!r}")
        try:
            with open(self.backup_dir / filename, "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError as e:
            raise NotFoundError(f"Backup not found: {filename}") from e
        except UnicodeDecodeError as e:
            raise StorageIOError(f"Backup {filename} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise StorageIOError(f"Failed to read backup {filename}: {e}") from e

    async def latest(self) -> Optional[str]:
        """Return the lexicographically greatest ``.json`` filename, if any."""
        names = [name for name in await self.list_all() if name.endswith(".json")]
        if not names:
            return None
        return max(names)
