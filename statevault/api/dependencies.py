"""Dependency injection for FastAPI."""

from fastapi import Request

from statevault.backup import BackupManager


async def get_backup_manager(request: Request) -> BackupManager:
    """Get BackupManager instance from app state."""
    return request.app.state.backup_manager
