"""Render configuration: template variables and file encoding.

Variables are layered (later wins):
1) Defaults (no variables, utf-8)
2) Config file (.toml preferred; .json accepted) with a [variables] table
3) Environment variables named STENCIL_VAR_<NAME> (opt-in)
4) Explicit overrides (e.g. --var NAME=VALUE on the command line)
"""

import codecs
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

# Conditional TOML import: stdlib tomllib (3.11+) or fallback tomli (<3.11)
try:
    import tomllib  # Python 3.11+
except ImportError:
    try:
        import tomli as tomllib  # type: ignore
    except ImportError:
        tomllib = None  # type: ignore

logger = logging.getLogger(__name__)

ENV_PREFIX = "STENCIL_VAR_"


class RenderConfig(BaseModel):
    """Validated render settings."""

    variables: Dict[str, str] = Field(default_factory=dict, description="Template variables")
    encoding: str = Field(default="utf-8", description="Template and output file encoding")

    model_config = ConfigDict(extra="forbid")

    @field_validator("variables", mode="before")
    @classmethod
    def _stringify_values(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k): _to_template_str(v) for k, v in value.items()}
        return value

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError:
            raise ValueError(f"unknown encoding: {value}")
        return value


def _to_template_str(value: Any) -> Any:
    # TOML booleans map onto the template truthiness convention
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (str, int, float)):
        return str(value)
    # Tables, arrays and dates are left for the str check to reject
    return value


def parse_assignment(text: str) -> Tuple[str, str]:
    """Parse ``NAME=VALUE`` into a pair; the value may itself contain ``=``."""
    name, sep, value = text.partition("=")
    name = name.strip()
    if not sep or not name:
        raise ConfigError(f"Expected NAME=VALUE, got {text!r}", detail=text)
    return name, value


class ConfigLoader:
    """Load and layer render configuration."""

    @staticmethod
    def _read_toml(path: Path) -> Dict[str, Any]:
        if tomllib is None:
            raise ConfigError(f"TOML support unavailable for {path}; install tomli")
        try:
            with open(path, "rb") as f:
                return tomllib.load(f)
        except Exception as e:
            raise ConfigError(f"Failed to load TOML from {path}: {e}")

    @staticmethod
    def _read_json(path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to load config from {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigError(f"Config JSON must be an object: {path}")
        return data

    @staticmethod
    def load(path: Path) -> RenderConfig:
        """Load a config file into a validated ``RenderConfig``."""
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}", detail=str(path))

        if path.suffix == ".json":
            data = ConfigLoader._read_json(path)
        else:
            data = ConfigLoader._read_toml(path)

        try:
            config = RenderConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid config in {path}: {e}")
        logger.debug(f"Loaded {len(config.variables)} variables from {path}")
        return config

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None, prefix: str = ENV_PREFIX) -> Dict[str, str]:
        """Collect variables from environment entries starting with ``prefix``."""
        environ = os.environ if environ is None else environ
        return {
            key[len(prefix):]: value
            for key, value in environ.items()
            if key.startswith(prefix) and len(key) > len(prefix)
        }

    @staticmethod
    def load_effective(
        path: Optional[Path] = None,
        overrides: Iterable[str] = (),
        *,
        use_env: bool = False,
        environ: Optional[Mapping[str, str]] = None,
    ) -> RenderConfig:
        """Build the effective config from all layers.

        Args:
            path: Optional config file.
            overrides: ``NAME=VALUE`` strings, applied last.
            use_env: Include ``STENCIL_VAR_*`` environment variables.
            environ: Environment mapping to read instead of ``os.environ``.
        """
        config = ConfigLoader.load(path) if path is not None else RenderConfig()
        variables = dict(config.variables)

        if use_env:
            env_vars = ConfigLoader.from_env(environ)
            if env_vars:
                logger.debug(f"Using {len(env_vars)} variables from environment")
            variables.update(env_vars)

        for item in overrides:
            name, value = parse_assignment(item)
            variables[name] = value

        return config.model_copy(update={"variables": variables})
