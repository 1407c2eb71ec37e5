import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import (
    DEFAULT_IO_TIMEOUT,
    ENFORCE_SECTION_BOUNDS,
    GRID_SIZE,
    INCH_TO_PIXEL,
    SNAP_THRESHOLD_PX,
)
from .error_handler import ConfigurationError

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class LayoutSettings:
    """Tunable settings for the layout engine and persistence layer"""
    scale: float = INCH_TO_PIXEL  # pixels per inch
    grid_size: float = GRID_SIZE  # inches
    snap_threshold: float = SNAP_THRESHOLD_PX  # pixels
    enforce_bounds: bool = ENFORCE_SECTION_BOUNDS
    io_timeout: float = DEFAULT_IO_TIMEOUT  # seconds
    log_dir: Optional[str] = None
    console_level: str = "INFO"
    file_level: str = "DEBUG"

    def __post_init__(self):
        """Validate settings"""
        if self.scale <= 0:
            raise ConfigurationError(f"scale must be positive, got {self.scale}")
        if self.grid_size <= 0:
            raise ConfigurationError(f"grid_size must be positive, got {self.grid_size}")
        if self.snap_threshold < 0:
            raise ConfigurationError(f"snap_threshold cannot be negative, got {self.snap_threshold}")
        if self.io_timeout <= 0:
            raise ConfigurationError(f"io_timeout must be positive, got {self.io_timeout}")
        for level in (self.console_level, self.file_level):
            if level not in LOG_LEVELS:
                raise ConfigurationError(f"Unknown log level: {level}. Available: {list(LOG_LEVELS)}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LayoutSettings':
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown settings: {sorted(unknown)}")
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_settings(path: Optional[str] = None) -> LayoutSettings:
    """Load settings from a JSON file, falling back to defaults"""
    if path is None:
        return LayoutSettings()

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Settings file not found: {file_path}")

    try:
        with open(file_path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid settings file {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {file_path} must hold a JSON object")
    return LayoutSettings.from_dict(data)
