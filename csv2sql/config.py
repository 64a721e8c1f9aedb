"""Configuration for a conversion run."""

import codecs
import re
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from shared.logger import get_logger

from .engines import Engine, SQLDialect, get_engine
from .errors import ConfigError

logger = get_logger(__name__)

CONFIG_SECTION = "csv2sql"

DEFAULTS: Dict[str, Any] = {
    "engine": SQLDialect.POSTGRESQL.value,
    "database": "test",
    "table": None,
    "batch_size": 1000,
    "sample_size": 1,
    "delimiter": ",",
    "encoding": "utf-8",
    "schema_only": False,
}


@dataclass(frozen=True)
class GeneratorConfig:
    """Validated settings for one conversion."""

    input_path: Path
    output_path: Optional[Path]
    engine: Engine
    database: str
    table: str
    batch_size: int = 1000
    sample_size: int = 1
    delimiter: str = ","
    encoding: str = "utf-8"
    schema_only: bool = False

    @property
    def dialect(self) -> SQLDialect:
        return self.engine.dialect


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Load settings from the [csv2sql] table of a TOML file.

    Keys may use dashes or underscores (batch-size or batch_size).

    Raises:
        ConfigError: If the file cannot be read or parsed, or has unknown keys
    """
    try:
        data = toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    section = data.get(CONFIG_SECTION, {})
    if not isinstance(section, dict):
        raise ConfigError(f"[{CONFIG_SECTION}] in {path} must be a table")

    settings = {key.replace("-", "_"): value for key, value in section.items()}

    unknown = sorted(set(settings) - set(DEFAULTS))
    if unknown:
        raise ConfigError(f"Unknown config key(s) in {path}: {', '.join(unknown)}")

    logger.debug(f"Loaded {len(settings)} setting(s) from {path}")
    return settings


def _positive_int(name: str, value: Any, allow_zero: bool = False) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None

    if isinstance(value, bool) or isinstance(value, float) or number < (0 if allow_zero else 1):
        minimum = "0 or more" if allow_zero else "a positive integer"
        raise ConfigError(f"{name} must be {minimum}, got {value!r}")

    return number


def sanitize_name(name: str) -> str:
    """
    Turn a file name into a bare SQL identifier.

    Lowercases it, replaces runs of other characters with one underscore and
    prefixes a leading digit with "t_", so the name reads the same quoted or
    unquoted in both dialects.
    """
    sanitized = re.sub(r"[^a-z0-9_]+", "_", name.lower())
    sanitized = re.sub(r"_+", "_", sanitized).strip("_")
    if sanitized and sanitized[0].isdigit():
        sanitized = f"t_{sanitized}"
    return sanitized or "data"


def _name(kind: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{kind} name must be a non-empty string, got {value!r}")
    return value


def build_config(
    input_path: Path,
    output_path: Optional[Path] = None,
    config_file: Optional[Path] = None,
    **options: Any,
) -> GeneratorConfig:
    """
    Merge and validate settings.

    Explicit options (from the command line or environment) override values
    from the config file, which override the defaults. Options set to None
    count as not given. The table name defaults to the input file's stem,
    sanitized into a bare identifier; explicit names are used as given.

    Raises:
        ConfigError: If a value is invalid
        UnsupportedEngine: If the engine is not supported
    """
    unknown = sorted(set(options) - set(DEFAULTS))
    if unknown:
        raise ConfigError(f"Unknown option(s): {', '.join(unknown)}")

    settings = dict(DEFAULTS)
    if config_file is not None:
        settings.update(load_config_file(config_file))
    settings.update({key: value for key, value in options.items() if value is not None})

    engine = get_engine(settings["engine"])

    table = settings["table"]
    if table is None:
        table = sanitize_name(Path(input_path).stem)
        logger.debug(f"Table name {table!r} derived from {input_path}")

    delimiter = settings["delimiter"]
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        raise ConfigError(f"delimiter must be a single character, got {delimiter!r}")

    encoding = settings["encoding"]
    try:
        codecs.lookup(encoding)
    except (LookupError, TypeError):
        raise ConfigError(f"Unknown encoding: {encoding!r}") from None

    config = GeneratorConfig(
        input_path=Path(input_path),
        output_path=Path(output_path) if output_path is not None else None,
        engine=engine,
        database=_name("Database", settings["database"]),
        table=_name("Table", table),
        batch_size=_positive_int("batch_size", settings["batch_size"]),
        sample_size=_positive_int("sample_size", settings["sample_size"], allow_zero=True),
        delimiter=delimiter,
        encoding=encoding,
        schema_only=bool(settings["schema_only"]),
    )

    logger.debug(
        "Config: "
        + ", ".join(f"{f.name}={getattr(config, f.name)!r}" for f in fields(config))
    )
    return config
