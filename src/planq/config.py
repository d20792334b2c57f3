"""Configuration for planq.

Values come from (lowest to highest precedence): model defaults, a TOML
file, and PLANQ_<SECTION>_<FIELD> environment variables.
"""
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import tomli_w
from pydantic import BaseModel, Field, field_validator

from .tui.keys import parse_chord

logger = logging.getLogger(__name__)

ENV_PREFIX = "PLANQ"
CONFIG_FILE_ENV = "PLANQ_CONFIG_FILE"
DEFAULT_CONFIG_PATH = "~/.config/planq/config.toml"

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


class TuiConfig(BaseModel):
    """Dual-pane TUI behaviour."""

    tick_interval_ms: int = Field(33, gt=0, description="Liveness check / redraw interval")
    prefix_key: str = Field("ctrl+a", description="Meta-prefix chord")
    switch_key: str = Field("tab", description="Meta command: switch focused pane")
    quit_key: str = Field("q", description="Meta command: quit")

    @field_validator("prefix_key", "switch_key", "quit_key")
    @classmethod
    def check_chord(cls, value: str) -> str:
        parse_chord(value)
        return value


class PaneConfig(BaseModel):
    """Commands run in the two panes."""

    left_command: str = Field("claude", description="Command line for the left pane")
    right_command: str = Field("claude", description="Command line for the right pane")
    term: str = Field("xterm-256color", description="TERM for pane processes")


class LoggingConfig(BaseModel):
    """Logging settings. The TUI only ever logs to a file."""

    level: str = Field("INFO", description="Log level")
    log_file: Optional[str] = Field(None, description="Log file path; no logging if unset")


class Config(BaseModel):
    """Root configuration."""

    tui: TuiConfig = Field(default_factory=TuiConfig)
    panes: PaneConfig = Field(default_factory=PaneConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def generate_env_var_name(section: str, field: str) -> str:
    """Environment variable name for a config field."""
    return f"{ENV_PREFIX}_{section.upper()}_{field.upper()}"


def get_all_env_mappings() -> Dict[str, Tuple[str, str]]:
    """Map every environment variable name to its (section, field)."""
    mappings = {}
    for section, section_field in Config.model_fields.items():
        for field in section_field.annotation.model_fields:
            mappings[generate_env_var_name(section, field)] = (section, field)
    return mappings


def _convert_env_value(value: str, annotation: Any) -> Any:
    """Convert an environment string to the type of a config field."""
    if annotation is bool:
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"Invalid boolean value: {value!r}")
    if annotation is int:
        return int(value)
    if annotation is float:
        return float(value)
    if annotation == Optional[str]:
        return value or None
    return value


def load_all_env_overrides() -> Dict[str, Dict[str, Any]]:
    """Collect overrides from the environment, nested by section."""
    overrides: Dict[str, Dict[str, Any]] = {}
    for env_var, (section, field) in get_all_env_mappings().items():
        if env_var not in os.environ:
            continue
        annotation = Config.model_fields[section].annotation.model_fields[field].annotation
        overrides.setdefault(section, {})[field] = _convert_env_value(os.environ[env_var], annotation)
    return overrides


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from file and environment.

    Args:
        config_path: Explicit TOML path; defaults to $PLANQ_CONFIG_FILE,
            then ~/.config/planq/config.toml

    Returns:
        The merged Config
    """
    path = Path(config_path or os.environ.get(CONFIG_FILE_ENV) or DEFAULT_CONFIG_PATH).expanduser()

    data: Dict[str, Any] = {}
    if path.exists():
        logger.debug(f"Loading config from {path}")
        with open(path, "rb") as f:
            data = tomllib.load(f)

    for section, values in load_all_env_overrides().items():
        data.setdefault(section, {}).update(values)

    return Config(**data)


def dump_config_toml(config: Config) -> str:
    """Serialize a config as TOML. Unset optional values are omitted."""
    return tomli_w.dumps(config.model_dump(exclude_none=True))


def dump_config_env(config: Config) -> str:
    """Serialize a config as KEY=value lines."""
    lines = []
    dumped = config.model_dump()
    for env_var, (section, field) in get_all_env_mappings().items():
        value = dumped[section][field]
        if value is None:
            value = ""
        elif isinstance(value, bool):
            value = "true" if value else "false"
        lines.append(f"{env_var}={value}")
    return "\n".join(lines)


_config: Optional[Config] = None


def get_config() -> Config:
    """Process-wide config, loaded on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Optional[Config]) -> None:
    global _config
    _config = config
