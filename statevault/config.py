"""Configuration management for statevault."""

import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class StorageConfig:
    """Filesystem locations for chunk and backup storage."""
    temp_dir: str = "./temp"
    backup_dir: str = "./backups"

    @classmethod
    def from_env(cls) -> 'StorageConfig':
        """Create config from environment variables."""
        return cls(
            temp_dir=os.getenv("TEMP_DIR", "./temp"),
            backup_dir=os.getenv("BACKUP_DIR", "./backups"),
        )

    def __post_init__(self):
        """Validate configuration."""
        if not self.temp_dir:
            raise ValueError("temp_dir must not be empty")
        if not self.backup_dir:
            raise ValueError("backup_dir must not be empty")
        if os.path.abspath(self.temp_dir) == os.path.abspath(self.backup_dir):
            raise ValueError("temp_dir and backup_dir must be different directories")


@dataclass(frozen=True)
class SweeperConfig:
    """Retention sweeper configuration."""
    interval_seconds: float = 3600.0
    max_age_seconds: float = 3600.0

    @classmethod
    def from_env(cls) -> 'SweeperConfig':
        """Create config from environment variables."""
        return cls(
            interval_seconds=float(os.getenv("CLEANUP_INTERVAL_SECONDS", "3600")),
            max_age_seconds=float(os.getenv("TEMP_MAX_AGE_SECONDS", "3600")),
        )

    def __post_init__(self):
        """Validate configuration."""
        if self.interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {self.interval_seconds}")
        if self.max_age_seconds <= 0:
            raise ValueError(f"max_age_seconds must be positive, got {self.max_age_seconds}")


@dataclass(frozen=True)
class StatevaultConfig:
    """Complete statevault configuration."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    sweeper: SweeperConfig = field(default_factory=SweeperConfig)

    @classmethod
    def from_env(cls) -> 'StatevaultConfig':
        """Create complete config from environment variables."""
        return cls(
            storage=StorageConfig.from_env(),
            sweeper=SweeperConfig.from_env(),
        )
