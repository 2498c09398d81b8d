"""
bwshutdown Configuration Module
===============================
Monitor settings with validation and YAML/JSON loading.

Settings are read-only from the monitor's point of view: they are loaded
once, validated, and handed to the engine at start.
"""

import json
import logging
import math
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional

import yaml

logger = logging.getLogger(__name__)


# ============================================================================
# CONFIG PATHS
# ============================================================================

CONFIG_DIR = Path(__file__).parent
DEFAULT_CONFIG_FILE = CONFIG_DIR / "config.yaml"
USER_CONFIG_FILE = Path.home() / ".bwshutdown" / "config.yaml"


# ============================================================================
# MONITOR DEFAULTS
# ============================================================================

DEFAULT_THRESHOLD_KBPS = 200.0
DEFAULT_INTERVAL_SECONDS = 2
DEFAULT_DELAY_SECONDS = 60


# ============================================================================
# LOGGING DEFAULTS
# ============================================================================

DEFAULT_LOG_DIR = Path("bwshutdown_logs")
EVENTS_LOG_FILENAME = "events.jsonl"
SAMPLES_LOG_FILENAME = "samples.csv"


class ConfigError(ValueError):
    """Raised for invalid settings or an unloadable explicit config file."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


# ============================================================================
# CONFIG DATACLASS
# ============================================================================

@dataclass
class MonitorConfig:
    """Monitoring session settings with validation."""

    # Detection
    threshold_kbps: float = DEFAULT_THRESHOLD_KBPS
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    delay_seconds: float = DEFAULT_DELAY_SECONDS

    # Forwarded untouched to whatever consumes the trigger
    testing_mode: bool = False

    # Logging
    log_dir: Path = field(default_factory=lambda: DEFAULT_LOG_DIR)
    log_enabled: bool = True

    # Action (None = platform default)
    shutdown_command: Optional[list] = None

    @property
    def samples_required(self) -> int:
        """Number of samples that cover the delay window."""
        return samples_required_for(self.interval_seconds, self.delay_seconds)

    def validate(self) -> list[str]:
        """
        Validates configuration. Returns list of errors.

        An empty list means the config may be used to start monitoring.
        """
        errors = []

        if not _is_positive(self.threshold_kbps):
            errors.append(f"threshold_kbps must be positive, got {self.threshold_kbps}")

        if not _is_positive(self.interval_seconds):
            errors.append(f"interval_seconds must be positive, got {self.interval_seconds}")

        if not _is_positive(self.delay_seconds):
            errors.append(f"delay_seconds must be positive, got {self.delay_seconds}")
        elif _is_positive(self.interval_seconds) and self.delay_seconds < self.interval_seconds:
            errors.append(
                f"delay_seconds must be >= interval_seconds "
                f"({self.delay_seconds} < {self.interval_seconds})"
            )

        if self.shutdown_command is not None:
            if not self.shutdown_command or not all(
                isinstance(part, str) for part in self.shutdown_command
            ):
                errors.append("shutdown_command must be a non-empty list of strings")

        return errors

    @classmethod
    def from_yaml(cls, path: Path) -> "MonitorConfig":
        """Load config from YAML file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        return cls._from_dict(data or {})

    @classmethod
    def from_json(cls, path: Path) -> "MonitorConfig":
        """Load config from JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "MonitorConfig":
        """Create config from dictionary."""
        if not isinstance(data, dict):
            raise ValueError(f"config root must be a mapping, got {type(data).__name__}")

        config = cls()

        monitor = _section(data, 'monitor')
        if 'threshold_kbps' in monitor:
            config.threshold_kbps = _as_float('monitor.threshold_kbps', monitor['threshold_kbps'])
        if 'interval_seconds' in monitor:
            config.interval_seconds = _as_float('monitor.interval_seconds', monitor['interval_seconds'])
        if 'delay_seconds' in monitor:
            config.delay_seconds = _as_float('monitor.delay_seconds', monitor['delay_seconds'])
        if 'testing_mode' in monitor:
            config.testing_mode = _as_bool('monitor.testing_mode', monitor['testing_mode'])

        logging_section = _section(data, 'logging')
        if 'directory' in logging_section:
            directory = logging_section['directory']
            if not isinstance(directory, str) or not directory:
                raise ValueError(f"logging.directory must be a path, got {directory!r}")
            config.log_dir = Path(directory)
        if 'enabled' in logging_section:
            config.log_enabled = _as_bool('logging.enabled', logging_section['enabled'])

        action = _section(data, 'action')
        command = action.get('shutdown_command')
        if isinstance(command, str):
            command = command.split()
        if command is not None and not isinstance(command, list):
            raise ValueError(
                f"action.shutdown_command must be a string or a list, "
                f"got {type(command).__name__}"
            )
        if command:
            config.shutdown_command = [str(part) for part in command]

        return config


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _section(data: dict, name: str) -> dict:
    # A bare "monitor:" line parses as None
    section = data.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' section must be a mapping, got {type(section).__name__}")
    return section


def _as_float(key: str, value) -> float:
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"{key} must be a number, got {value!r}")
    return float(value)


def _as_bool(key: str, value) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def _is_positive(value) -> bool:
    try:
        return math.isfinite(value) and value > 0
    except TypeError:
        return False


def samples_required_for(interval_seconds: float, delay_seconds: float) -> int:
    """ceil(delay / interval), never less than one sample."""
    # 1.1 / 0.1 == 11.000000000000002
    return max(1, math.ceil(round(delay_seconds / interval_seconds, 9)))


def load_config(config_path: Optional[Path] = None) -> MonitorConfig:
    """
    Load configuration with fallback chain:
    1. Explicit path
    2. User config (~/.bwshutdown/config.yaml)
    3. Packaged default config

    A missing or unreadable user/packaged file is logged and skipped.

    Raises:
        ConfigError: an explicit path is missing or cannot be loaded
    """
    if config_path:
        try:
            return _load_file(config_path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigError([f"cannot load config {config_path}: {e}"]) from e

    for path in (USER_CONFIG_FILE, DEFAULT_CONFIG_FILE):
        if path.exists():
            try:
                return _load_file(path)
            except (OSError, ValueError, yaml.YAMLError) as e:
                logger.warning(f"Skipping unreadable config {path}: {e}")
                continue

    # Return default config
    return MonitorConfig()


def _load_file(path: Path) -> MonitorConfig:
    if path.suffix in ('.yaml', '.yml'):
        return MonitorConfig.from_yaml(path)
    elif path.suffix == '.json':
        return MonitorConfig.from_json(path)
    raise ValueError(f"unsupported config format '{path.suffix}'")
