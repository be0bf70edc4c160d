"""
Typed Configuration Classes

Type-safe access to configuration values via dataclasses, parsed from the
merged YAML dictionary that ConfigManager produces.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .config_manager import ConfigManager
from .primes import DEFAULT_MAX_PRIMES
from .records import DEFAULT_V_RECALC_STEPS

DEFAULT_CONFIG_PATH = "zaremba.yaml"


@dataclass
class PrimesConfig:
    """Prime table configuration."""
    max_primes: Optional[int] = DEFAULT_MAX_PRIMES


@dataclass
class SearchConfig:
    """Search tuning."""
    # Batch width for the batched waterfall enumeration
    batch_step: int = 1_000_000
    v_recalc_steps: int = DEFAULT_V_RECALC_STEPS


@dataclass
class OutputConfig:
    """Where the records command writes by default (empty = don't write)."""
    records_file: str = ""
    checkpoint_file: str = ""


@dataclass
class LoggingConfig:
    """Logging configuration."""
    file: str = "data/logs/zaremba.log"
    level: str = "INFO"

    def ensure_log_dir_exists(self) -> None:
        """Create log directory if it doesn't exist."""
        Path(self.file).parent.mkdir(parents=True, exist_ok=True)


@dataclass
class AppConfig:
    """
    Root configuration object containing all settings.

    Usage:
        config = TypedConfigLoader().load("zaremba.yaml")
        print(config.search.batch_step)
    """
    primes: PrimesConfig = field(default_factory=PrimesConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def validate(self) -> None:
        """
        Raises:
            ValueError: on settings the search can't run with
        """
        if self.primes.max_primes is not None and self.primes.max_primes < 1:
            raise ValueError(f"primes.max_primes must be positive, got {self.primes.max_primes}")
        if self.search.batch_step < 1:
            raise ValueError(f"search.batch_step must be positive, got {self.search.batch_step}")
        if self.search.v_recalc_steps < 1:
            raise ValueError(f"search.v_recalc_steps must be positive, got {self.search.v_recalc_steps}")
        if getattr(logging, self.logging.level.upper(), None) is None:
            raise ValueError(f"Unknown logging.level: {self.logging.level}")


class TypedConfigLoader:
    """
    Load YAML configuration into typed dataclasses.

    Usage:
        loader = TypedConfigLoader()
        config = loader.load("zaremba.yaml")
    """

    def __init__(self):
        self.config_manager = ConfigManager()

    def load(self, config_path: str = DEFAULT_CONFIG_PATH, required: bool = False) -> AppConfig:
        """
        Load configuration from YAML file into typed AppConfig.

        Args:
            config_path: Path to base configuration file
            required: If False, a missing file yields the defaults

        Raises:
            FileNotFoundError: If required and the file doesn't exist
            ValueError: If a setting is invalid
        """
        if not required and not Path(config_path).exists():
            config = AppConfig()
        else:
            config = self.from_dict(self.config_manager.load_config(config_path))
        config.validate()
        return config

    def from_dict(self, raw: Dict[str, Any]) -> AppConfig:
        """Convert a raw config dictionary to typed AppConfig."""
        return AppConfig(
            primes=self._parse_primes(raw.get('primes') or {}),
            search=self._parse_search(raw.get('search') or {}),
            output=self._parse_output(raw.get('output') or {}),
            logging=self._parse_logging(raw.get('logging') or {}),
        )

    def _parse_primes(self, raw: Dict[str, Any]) -> PrimesConfig:
        return PrimesConfig(
            max_primes=raw.get('max_primes', DEFAULT_MAX_PRIMES),
        )

    def _parse_search(self, raw: Dict[str, Any]) -> SearchConfig:
        return SearchConfig(
            batch_step=int(raw.get('batch_step', 1_000_000)),
            v_recalc_steps=int(raw.get('v_recalc_steps', DEFAULT_V_RECALC_STEPS)),
        )

    def _parse_output(self, raw: Dict[str, Any]) -> OutputConfig:
        return OutputConfig(
            records_file=raw.get('records_file') or "",
            checkpoint_file=raw.get('checkpoint_file') or "",
        )

    def _parse_logging(self, raw: Dict[str, Any]) -> LoggingConfig:
        return LoggingConfig(
            file=raw.get('file', 'data/logs/zaremba.log'),
            level=raw.get('level', 'INFO'),
        )


def setup_logging(config: LoggingConfig, to_file: bool = True) -> None:
    """
    Set up logging: file plus stderr, same format for both.

    Records and other results go to stdout through UserOutput, so logs stay
    on stderr to keep piped output clean.
    """
    handlers = [logging.StreamHandler()]
    if to_file and config.file:
        config.ensure_log_dir_exists()
        handlers.insert(0, logging.FileHandler(config.file))

    logging.basicConfig(
        level=getattr(logging, config.level.upper()),
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )
