"""API routers."""

from . import backup, frontend

__all__ = ["backup", "frontend"]
