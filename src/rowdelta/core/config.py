"""Runtime configuration model for rowdelta.

This module owns all environment variable and YAML config parsing.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import os
from pathlib import Path
from typing import Literal, Mapping, cast

from rowdelta.core.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_STALE_SNAPSHOT_POLICY,
    ENV_PREFIX,
    FALSE_ENV_VALUES,
    SUPPORTED_STALE_SNAPSHOT_POLICIES,
    TRUE_ENV_VALUES,
)
from rowdelta.core.errors import DeltaConfigError, DeltaDependencyError

StaleSnapshotPolicy = Literal["keep", "discard"]

_LOGGING_SWITCHES = (
    "log_assertions",
    "log_assertion_errors",
    "log_queries",
    "log_snapshots",
    "log_setup",
    "log_database_exceptions",
)


@dataclass(frozen=True)
class DeltaConfig:
    """Validated runtime configuration.

    Attributes:
        log_assertions: Log every assertion, passed or failed.
        log_assertion_errors: Log failed assertions.
        log_queries: Log data fetched by explicit queries.
        log_snapshots: Log data recorded as snapshots.
        log_setup: Log populate, insert, delete and savepoint operations.
        log_database_exceptions: Log database errors before re-raising.
        batch_size: Maximum number of rows per insert batch.
        stale_snapshot_policy: Keep or discard a snapshot after a failed
            delta assertion.
    """

    log_assertions: bool = False
    log_assertion_errors: bool = True
    log_queries: bool = False
    log_snapshots: bool = False
    log_setup: bool = False
    log_database_exceptions: bool = True
    batch_size: int = DEFAULT_BATCH_SIZE
    stale_snapshot_policy: StaleSnapshotPolicy = cast(
        StaleSnapshotPolicy, DEFAULT_STALE_SNAPSHOT_POLICY
    )

    def __post_init__(self) -> None:
        if isinstance(self.batch_size, bool) or not isinstance(self.batch_size, int):
            raise DeltaConfigError(
                f"Invalid batch_size {self.batch_size!r}: expected a positive integer."
            )
        if self.batch_size < 1:
            raise DeltaConfigError(
                f"Invalid batch_size {self.batch_size}: expected a positive integer."
            )
        if self.stale_snapshot_policy not in SUPPORTED_STALE_SNAPSHOT_POLICIES:
            supported = ", ".join(SUPPORTED_STALE_SNAPSHOT_POLICIES)
            raise DeltaConfigError(
                f"Unsupported stale_snapshot_policy '{self.stale_snapshot_policy}'. "
                f"Use one of: {supported}."
            )

    @classmethod
    def from_env(cls) -> "DeltaConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            DeltaConfigError: If environment values are invalid.
        """
        defaults = cls()
        values: dict[str, object] = {}
        for name in _LOGGING_SWITCHES:
            raw_value = os.getenv(_env_name(name))
            values[name] = (
                getattr(defaults, name) if raw_value is None else _parse_bool(name, raw_value)
            )
        raw_batch_size = os.getenv(_env_name("batch_size"))
        values["batch_size"] = (
            defaults.batch_size if raw_batch_size is None else _parse_batch_size(raw_batch_size)
        )
        values["stale_snapshot_policy"] = os.getenv(
            _env_name("stale_snapshot_policy"), defaults.stale_snapshot_policy
        )
        return cls(**values)  # type: ignore[arg-type]

    @classmethod
    def from_yaml(cls, config_path: str) -> "DeltaConfig":
        """Build config from a YAML mapping on disk.

        Args:
            config_path: Path to a YAML file with config fields.

        Returns:
            A validated config object.

        Raises:
            DeltaDependencyError: If PyYAML is unavailable.
            DeltaConfigError: If the file is missing, invalid, or has unknown keys.
        """
        payload = _load_yaml_payload(config_path)
        if payload is None:
            return cls()
        if not isinstance(payload, Mapping):
            raise DeltaConfigError(
                f"Invalid config at {config_path}: expected a mapping, "
                f"got {type(payload).__name__}."
            )
        known_fields = {item.name for item in fields(cls)}
        unknown = sorted(str(key) for key in payload if key not in known_fields)
        if unknown:
            raise DeltaConfigError(
                f"Unknown config keys in {config_path}: {', '.join(unknown)}."
            )
        for name in _LOGGING_SWITCHES:
            if name in payload and not isinstance(payload[name], bool):
                raise DeltaConfigError(
                    f"Config field '{name}' must be a boolean, "
                    f"got {type(payload[name]).__name__}."
                )
        return cls(**dict(payload))

    def with_full_logging(self) -> "DeltaConfig":
        """Return a copy with every logging switch enabled."""
        return replace(self, **{name: True for name in _LOGGING_SWITCHES})


def _env_name(field_name: str) -> str:
    return f"{ENV_PREFIX}{field_name.upper()}"


def _parse_bool(field_name: str, raw_value: str) -> bool:
    """Parse a boolean environment value.

    Args:
        field_name: Config field the value belongs to.
        raw_value: Raw string from environment.

    Returns:
        Parsed boolean.

    Raises:
        DeltaConfigError: If value is not a recognized boolean literal.
    """
    normalized = raw_value.strip().lower()
    if normalized in TRUE_ENV_VALUES:
        return True
    if normalized in FALSE_ENV_VALUES:
        return False
    raise DeltaConfigError(
        f"Invalid {_env_name(field_name)} value: expected a boolean, got '{raw_value}'. "
        "Use one of true/false, yes/no, on/off, 1/0."
    )


def _parse_batch_size(raw_value: str) -> int:
    """Parse the batch size environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed integer batch size.

    Raises:
        DeltaConfigError: If value cannot be parsed into int.
    """
    try:
        return int(raw_value)
    except ValueError as error:
        raise DeltaConfigError(
            f"Invalid {_env_name('batch_size')} value: "
            f"expected integer, got '{raw_value}'. "
            "Set it to a positive numeric value."
        ) from error


def _load_yaml_payload(config_path: str) -> object:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise DeltaDependencyError(
            "YAML config support requires PyYAML. Install with 'pip install pyyaml'."
        ) from error
    config_file = Path(config_path).expanduser().resolve()
    if not config_file.exists():
        raise DeltaConfigError(
            f"Config file does not exist at {config_file}. Provide a valid YAML file path."
        )
    try:
        return cast(object, yaml.safe_load(config_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise DeltaConfigError(
            f"Failed to read config at {config_file}: {error}. Check file permissions."
        ) from error
    except yaml.YAMLError as error:
        raise DeltaConfigError(
            f"Failed to parse YAML config at {config_file}: {error}. Fix YAML syntax."
        ) from error
