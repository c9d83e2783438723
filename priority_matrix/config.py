"""
Application configuration.

Built from CLI arguments and validated on construction.
"""

from dataclasses import dataclass, field
from pathlib import Path

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class AppConfig:
    """Configuration for a CLI session."""

    data_dir: Path = field(default_factory=lambda: Path.home() / ".priority_matrix")
    ttl_days: int = 7  # tournament rankings expire after this many days
    log_level: str = "WARNING"
    debug: bool = False

    def __post_init__(self):
        """Validate configuration."""
        self.data_dir = Path(self.data_dir)
        if self.ttl_days <= 0:
            raise ValueError(f"ttl_days must be positive, got {self.ttl_days}")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level}")

    @property
    def store_path(self) -> Path:
        return self.data_dir / "store.json"

    @property
    def log_path(self) -> Path:
        return self.data_dir / "priority_matrix.log"
