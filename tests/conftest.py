"""Global pytest configuration and fixtures."""

import pytest
import sys
import tempfile
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from statevault.backup import BackupManager, BackupStore, TempStore


@pytest.fixture
def temp_root():
    """Create temporary root directory for stores."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_store(temp_root):
    return TempStore(str(temp_root / "temp"))


@pytest.fixture
def backup_store(temp_root):
    return BackupStore(str(temp_root / "backups"))


@pytest.fixture
def backup_manager(temp_store, backup_store):
    return BackupManager(temp_store, backup_store)
