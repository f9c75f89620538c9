"""Bootstrap configuration for the Cap desktop process.

Settings live in a YAML file in the platform config directory, with
environment variables layered on top and command-line flags applied last.
The Sentry endpoint is deliberately absent here: it is only ever read from
the environment (see :mod:`cap_desktop.telemetry.environment`).
"""

import os
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Literal

import yaml
from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError

# Linux: ~/.config/cap-desktop
# macOS: ~/Library/Application Support/cap-desktop
# Windows: C:\\Users\\<user>\\AppData\\Local\\cap-desktop
CONFIG_DIR = Path(user_config_dir("cap-desktop", appauthor=False))
CONFIG_FILE = CONFIG_DIR / "bootstrap.yaml"

BUILD_MODE_ENV = "CAP_DESKTOP_BUILD_MODE"
WORKER_THREADS_ENV = "CAP_DESKTOP_WORKER_THREADS"
ENTRY_ENV = "CAP_DESKTOP_ENTRY"


class BuildMode(str, Enum):
    """Debug vs production behavior, resolved once at startup."""

    DEBUG = "debug"
    RELEASE = "release"


class BuildSettings(BaseModel):
    """Build mode selection."""

    mode: BuildMode | None = Field(
        default=None,
        description="Force 'debug' or 'release' (default: detect from interpreter)",
    )


class TelemetrySettings(BaseModel):
    """Remote error reporting settings."""

    environment: str | None = Field(
        default=None,
        description="Sentry environment tag (default: 'development' or 'production')",
    )
    on_transport_error: Literal["abort", "degrade"] = Field(
        default="abort",
        description="What to do when the Sentry client cannot be built for a configured URL",
    )
    shutdown_timeout: float = Field(
        default=2.0, ge=0.0, description="Seconds to wait for buffered reports on exit"
    )


class RuntimeSettings(BaseModel):
    """Async runtime settings."""

    worker_threads: int | None = Field(
        default=None, ge=1, description="Worker pool size (default: CPU count)"
    )
    entry: str | None = Field(
        default=None, description="Application entry task as 'package.module:function'"
    )


class BootstrapConfig(BaseModel):
    """Complete bootstrap configuration."""

    build: BuildSettings = Field(default_factory=BuildSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)


def ensure_config_dir() -> None:
    """Create config directory if it doesn't exist."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def load_config() -> BootstrapConfig:
    """Load configuration from file."""
    if not CONFIG_FILE.exists():
        return BootstrapConfig()

    try:
        with open(CONFIG_FILE) as f:
            data = yaml.safe_load(f) or {}
            return BootstrapConfig(**data)
    except (yaml.YAMLError, ValueError):
        return BootstrapConfig()


def save_config(config: BootstrapConfig) -> None:
    """Save configuration to file."""
    ensure_config_dir()

    with open(CONFIG_FILE, "w") as f:
        yaml.dump(config.model_dump(mode="json"), f, default_flow_style=False)


def resolve_build_mode(config: BootstrapConfig | None = None) -> BuildMode:
    """Decide between debug and release behavior.

    An explicit mode wins. Otherwise a frozen executable or an interpreter
    started with ``-O`` counts as a release build; anything else is debug.

    Args:
        config: Effective configuration (None uses defaults)

    Returns:
        The resolved build mode
    """
    if config is not None and config.build.mode is not None:
        return config.build.mode

    if getattr(sys, "frozen", False) or not __debug__:
        return BuildMode.RELEASE
    return BuildMode.DEBUG


def get_effective_config(
    mode: str | None = None,
    worker_threads: int | None = None,
    entry: str | None = None,
    environ: dict[str, str] | None = None,
) -> BootstrapConfig:
    """Get effective config with environment and command-line overrides applied.

    Priority (highest first): explicit arguments, environment, config file.

    Args:
        mode: Override build mode ("debug" or "release")
        worker_threads: Override worker pool size
        entry: Override entry task spec
        environ: Environment mapping (default: os.environ)

    Returns:
        Effective configuration

    Raises:
        ValueError: If an override or environment value is invalid
    """
    env = os.environ if environ is None else environ
    config = load_config()

    env_mode = env.get(BUILD_MODE_ENV)
    if env_mode:
        config.build.mode = _parse_mode(env_mode)
    env_workers = env.get(WORKER_THREADS_ENV)
    if env_workers:
        config.runtime.worker_threads = _parse_workers(env_workers)
    env_entry = env.get(ENTRY_ENV)
    if env_entry:
        config.runtime.entry = env_entry

    if mode:
        config.build.mode = _parse_mode(mode)
    if worker_threads is not None:
        config.runtime.worker_threads = _parse_workers(str(worker_threads))
    if entry:
        config.runtime.entry = entry

    return config


def update_config(key: str, value: Any) -> None:
    """Update a specific config value.

    Args:
        key: Dot-notation key (e.g., "runtime.worker_threads", "build.mode")
        value: New value
    """
    config = load_config()

    parts = key.split(".")
    if len(parts) != 2:
        raise ValueError(f"Invalid config key format: {key}")

    section, field = parts
    if not hasattr(config, section):
        raise ValueError(f"Unknown section: {section}")
    section_obj = getattr(config, section)
    if field not in type(section_obj).model_fields:
        raise ValueError(f"Unknown field: {field} in {section}")

    # Re-validate the whole section so constraints (ge=1, Literal, enum) apply
    data = section_obj.model_dump()
    data[field] = None if str(value).lower() in ("none", "null", "") else value
    try:
        setattr(config, section, type(section_obj)(**data))
    except ValidationError as e:
        raise ValueError(f"Invalid value for {key}: {value}") from e

    save_config(config)


def get_config_paths() -> dict[str, Path]:
    """Get paths to config files for debugging."""
    return {
        "config_dir": CONFIG_DIR,
        "config_file": CONFIG_FILE,
    }


def _parse_mode(value: str) -> BuildMode:
    try:
        return BuildMode(value.strip().lower())
    except ValueError:
        raise ValueError(f"Invalid build mode: {value}. Must be 'debug' or 'release'") from None


def _parse_workers(value: str) -> int:
    try:
        workers = int(value)
    except ValueError:
        raise ValueError(f"Invalid worker thread count: {value}") from None
    if workers < 1:
        raise ValueError(f"Worker thread count must be at least 1, got {workers}")
    return workers
