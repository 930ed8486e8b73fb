"""Configuration system for brt."""

import os
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path

import tomlkit

LOG_LEVELS = ("off", "warn", "info", "debug", "trace")


@dataclass
class SamplerConfig:
    """Process sampling configuration."""

    interval: float = 2.0  # Seconds between sampling passes
    history_length: int = 10  # CPU readings kept per process for the sparkline
    # Upper bounds of sparkline levels 0-3, anything above the last is level 4
    thresholds: list[float] = field(default_factory=lambda: [0.1, 20.0, 50.0, 70.0])

    def validate(self) -> None:
        """Raise ValueError if the values can't drive a sampler."""
        if self.interval <= 0:
            raise ValueError(f"sampler.interval must be positive, got {self.interval}")
        if self.history_length < 1:
            raise ValueError(
                f"sampler.history_length must be at least 1, got {self.history_length}"
            )
        if len(self.thresholds) != 4:
            raise ValueError(f"sampler.thresholds needs 4 values, got {len(self.thresholds)}")
        if any(a >= b for a, b in zip(self.thresholds, self.thresholds[1:])):
            raise ValueError(f"sampler.thresholds must be increasing, got {self.thresholds}")


@dataclass
class UIConfig:
    """Presentation configuration."""

    frame_rate: float = 60.0  # Render ticks per second
    page_size: int = 20  # Rows per page jump until the table knows its height
    debug: bool = False  # Show ticks/frames per second in the footer

    def validate(self) -> None:
        """Raise ValueError on unusable values."""
        if self.frame_rate <= 0:
            raise ValueError(f"ui.frame_rate must be positive, got {self.frame_rate}")
        if self.page_size < 1:
            raise ValueError(f"ui.page_size must be at least 1, got {self.page_size}")


@dataclass
class LoggingConfig:
    """Log file configuration."""

    level: str = "info"
    max_bytes: int = 5 * 1024 * 1024  # Max log file size (5MB)
    backup_count: int = 3

    @property
    def effective_level(self) -> str:
        """Level after applying the BRT_LOG_LEVEL override."""
        level = os.environ.get("BRT_LOG_LEVEL", self.level).lower()
        return level if level in LOG_LEVELS else "info"


def _dataclass_to_table(obj: object) -> tomlkit.items.Table:
    """Convert a dataclass instance to a tomlkit Table recursively."""
    table = tomlkit.table()
    for f in fields(obj):  # type: ignore[arg-type]
        value = getattr(obj, f.name)
        if is_dataclass(value) and not isinstance(value, type):
            table.add(f.name, _dataclass_to_table(value))
        else:
            table.add(f.name, value)
    return table


def _section(data: dict, name: str, path: Path) -> dict:
    """Return the [name] table of a parsed config, empty when absent."""
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ValueError(f"Config file {path}: [{name}] must be a table")
    return section


@dataclass
class Config:
    """Main configuration container."""

    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def config_dir(self) -> Path:
        """Configuration directory."""
        return Path.home() / ".config" / "brt"

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return self.config_dir / "config.toml"

    @property
    def data_dir(self) -> Path:
        """Data directory, BRT_DATA when set."""
        override = os.environ.get("BRT_DATA")
        if override:
            return Path(override)
        return Path.home() / ".local" / "share" / "brt"

    @property
    def log_path(self) -> Path:
        """Log file path."""
        return self.data_dir / "brt.log"

    def validate(self) -> None:
        """Validate every section."""
        self.sampler.validate()
        self.ui.validate()

    def save(self, path: Path | None = None) -> None:
        """Save config to TOML file."""
        path = path or self.config_path
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        for name in ("sampler", "ui", "logging"):
            doc.add(name, _dataclass_to_table(getattr(self, name)))
            doc.add(tomlkit.nl())

        path.write_text(tomlkit.dumps(doc))

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from TOML file, returning defaults for missing values.

        All defaults come from the dataclass definitions, so Config() and
        Config.load() of an empty file are identical.
        """
        defaults = cls()
        path = path or defaults.config_path
        if not path.exists():
            return defaults

        try:
            with open(path) as f:
                data = tomlkit.load(f).unwrap()
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        sampler_data = _section(data, "sampler", path)
        ui_data = _section(data, "ui", path)
        logging_data = _section(data, "logging", path)

        s, u, lg = defaults.sampler, defaults.ui, defaults.logging
        thresholds = sampler_data.get("thresholds", s.thresholds)
        if not isinstance(thresholds, list):
            raise ValueError(f"Config file {path}: sampler.thresholds must be a list")
        try:
            config = cls(
                sampler=SamplerConfig(
                    interval=float(sampler_data.get("interval", s.interval)),
                    history_length=int(sampler_data.get("history_length", s.history_length)),
                    thresholds=[float(t) for t in thresholds],
                ),
                ui=UIConfig(
                    frame_rate=float(ui_data.get("frame_rate", u.frame_rate)),
                    page_size=int(ui_data.get("page_size", u.page_size)),
                    debug=bool(ui_data.get("debug", u.debug)),
                ),
                logging=LoggingConfig(
                    level=str(logging_data.get("level", lg.level)),
                    max_bytes=int(logging_data.get("max_bytes", lg.max_bytes)),
                    backup_count=int(logging_data.get("backup_count", lg.backup_count)),
                ),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid value in config file {path}: {e}") from e
        config.validate()
        return config
