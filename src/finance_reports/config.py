"""Settings loading for finance_reports."""

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

import yaml

from finance_reports.errors import ConfigError
from finance_reports.processing.aggregator import (
    DEFAULT_EVOLUTION_MONTHS,
    DEFAULT_MAX_PATTERN_SIGNALS,
    DEFAULT_TOP_LIMIT,
    EVOLUTION_MONTHS_BOUNDS,
    TOP_LIMIT_BOUNDS,
)
from finance_reports.processing.patterns import DEFAULT_LARGE_TRANSACTION_THRESHOLD
from finance_reports.utils.logging_config import DEFAULT_LOG_FILE, get_logger

logger = get_logger(__name__)

DEFAULT_SETTINGS_PATH = Path("config") / "settings.yaml"

ENV_DATA_DIR = "FINANCE_REPORTS_DATA_DIR"
ENV_EXPORT_DIR = "FINANCE_REPORTS_EXPORT_DIR"


def _int_in_bounds(data: dict[str, object], key: str, default: int, bounds: tuple[int, int]) -> int:
    value = data.get(key, default)
    low, high = bounds
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise ConfigError(f"'{key}' must be an integer between {low} and {high}, got {value!r}")
    return value


@dataclass
class ReportSettings:
    """Defaults for report options.

    Attributes:
        evolution_months: Default trailing months for the evolution report.
        top_limit: Default K for the top report.
        max_pattern_signals: Upper bound on pattern signals.
        large_transaction_threshold: Amount at which a transaction counts as large.
    """

    evolution_months: int = DEFAULT_EVOLUTION_MONTHS
    top_limit: int = DEFAULT_TOP_LIMIT
    max_pattern_signals: int = DEFAULT_MAX_PATTERN_SIGNALS
    large_transaction_threshold: Decimal = field(
        default_factory=lambda: DEFAULT_LARGE_TRANSACTION_THRESHOLD
    )

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ReportSettings":
        """Create from dictionary."""
        threshold = DEFAULT_LARGE_TRANSACTION_THRESHOLD
        if "large_transaction_threshold" in data:
            try:
                threshold = Decimal(str(data["large_transaction_threshold"]))
            except InvalidOperation:
                raise ConfigError(
                    f"Invalid large_transaction_threshold: {data['large_transaction_threshold']!r}"
                ) from None

        return cls(
            evolution_months=_int_in_bounds(
                data, "evolution_months", DEFAULT_EVOLUTION_MONTHS, EVOLUTION_MONTHS_BOUNDS
            ),
            top_limit=_int_in_bounds(data, "top_limit", DEFAULT_TOP_LIMIT, TOP_LIMIT_BOUNDS),
            max_pattern_signals=_int_in_bounds(
                data, "max_pattern_signals", DEFAULT_MAX_PATTERN_SIGNALS, (1, 50)
            ),
            large_transaction_threshold=threshold,
        )


@dataclass
class OutputConfig:
    """Configuration for rendered documents.

    Attributes:
        export_dir: Directory artifacts are written to.
        currency_symbol: Currency symbol for display.
        date_format: strftime format for dates in documents.
    """

    export_dir: Path = field(default_factory=lambda: Path("exports"))
    currency_symbol: str = "$"
    date_format: str = "%d/%m/%Y"

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "OutputConfig":
        """Create from dictionary."""
        return cls(
            export_dir=Path(str(data.get("export_dir", "exports"))),
            currency_symbol=str(data.get("currency_symbol", "$")),
            date_format=str(data.get("date_format", "%d/%m/%Y")),
        )


@dataclass
class LedgerConfig:
    """Where CSV ledgers live."""

    data_dir: Path = field(default_factory=lambda: Path("data"))
    strict: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LedgerConfig":
        """Create from dictionary."""
        return cls(
            data_dir=Path(str(data.get("data_dir", "data"))),
            strict=bool(data.get("strict", False)),
        )


@dataclass
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Path to log file.
    """

    level: str = "INFO"
    file: str = DEFAULT_LOG_FILE

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LoggingConfig":
        """Create from dictionary."""
        return cls(
            level=str(data.get("level", "INFO")),
            file=str(data.get("file", DEFAULT_LOG_FILE)),
        )


@dataclass
class Config:
    """Main configuration container."""

    reports: ReportSettings = field(default_factory=ReportSettings)
    output: OutputConfig = field(default_factory=OutputConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML mapping ({} for an empty file).

    Raises:
        FileNotFoundError: If file doesn't exist.
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(content).__name__}")
    return content


def _section(data: dict[str, object], name: str) -> dict[str, object]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(section).__name__}")
    return section


def load_config(settings_path: Optional[Path] = None) -> Config:
    """Load settings, falling back to defaults when the file is missing.

    Environment variables FINANCE_REPORTS_DATA_DIR and
    FINANCE_REPORTS_EXPORT_DIR override the file.

    Args:
        settings_path: Path to settings.yaml (default: config/settings.yaml).

    Returns:
        Complete Config object.

    Raises:
        ConfigError: If the settings file is malformed.
    """
    path = settings_path or DEFAULT_SETTINGS_PATH
    config = Config()

    if path.exists():
        data = load_yaml_file(path)
        config.reports = ReportSettings.from_dict(_section(data, "reports"))
        config.output = OutputConfig.from_dict(_section(data, "output"))
        config.ledger = LedgerConfig.from_dict(_section(data, "ledger"))
        config.logging = LoggingConfig.from_dict(_section(data, "logging"))
        logger.info(f"Loaded settings from {path}")
    elif settings_path is not None:
        raise ConfigError(f"Settings file not found: {path}")
    else:
        logger.debug(f"Settings file not found: {path}, using defaults")

    if os.environ.get(ENV_DATA_DIR):
        config.ledger.data_dir = Path(os.environ[ENV_DATA_DIR])
    if os.environ.get(ENV_EXPORT_DIR):
        config.output.export_dir = Path(os.environ[ENV_EXPORT_DIR])

    return config
