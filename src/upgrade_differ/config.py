"""Run configuration for the upgrade differ.

Values come from defaults, then UPGRADE_DIFFER_* environment variables,
then explicit overrides (usually CLI arguments).
"""

import os
import re
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from upgrade_differ.models.index_models import DEFAULT_SOURCE_ROOTS, SourceRoot

ENV_PREFIX = "UPGRADE_DIFFER_"

# Matches files inside an extension plugin, e.g. ".../ext/foo-ext/..."
DEFAULT_SCOPE_PATTERN = r".*ext/\w+-ext/.*"
DEFAULT_OUTPUT_DIR = "diffs"
DEFAULT_PATCH_SUFFIX = ".patch"

LINE_TERMINATORS = {
    "lf": "\n",
    "crlf": "\r\n",
    "cr": "\r",
    "native": os.linesep,
}

# Environment variable suffix -> DifferConfig field
_ENV_FIELDS = {
    "SCOPE_PATTERN": "scope_pattern",
    "OUTPUT_DIR": "output_dir",
    "PATCH_SUFFIX": "patch_suffix",
    "CONTEXT_LINES": "context_lines",
    "LINE_TERMINATOR": "line_terminator",
    "ENCODING": "encoding",
    "MAX_WORKERS": "max_workers",
    "FAIL_FAST": "fail_fast",
}


class ConfigError(Exception):
    """Raised when configuration values are invalid."""


class DifferConfig(BaseModel):
    """Settings shared by indexing, reconciliation and emission."""

    model_config = ConfigDict(frozen=True)

    source_roots: tuple[SourceRoot, ...] = DEFAULT_SOURCE_ROOTS
    scope_pattern: str = DEFAULT_SCOPE_PATTERN
    output_dir: str = DEFAULT_OUTPUT_DIR
    patch_suffix: str = DEFAULT_PATCH_SUFFIX
    context_lines: int = Field(default=3, ge=0)
    line_terminator: str = "\n"
    encoding: str = "utf-8"
    max_workers: int = Field(default=1, ge=1)
    fail_fast: bool = False

    @field_validator("scope_pattern")
    @classmethod
    def _compile_scope_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"invalid scope pattern {value!r}: {exc}") from exc
        return value

    @field_validator("line_terminator")
    @classmethod
    def _resolve_line_terminator(cls, value: str) -> str:
        resolved = LINE_TERMINATORS.get(value.lower(), value) if value else value
        if not resolved:
            raise ValueError("line terminator must not be empty")
        return resolved

    @field_validator("output_dir")
    @classmethod
    def _check_output_dir(cls, value: str) -> str:
        if not value or "/" in value or "\\" in value:
            raise ValueError("output_dir must be a single directory name")
        return value


def load_config(
    env: Mapping[str, str] | None = None,
    **overrides: Any,
) -> DifferConfig:
    """Build a DifferConfig from the environment and explicit overrides.

    Args:
        env: Environment mapping (defaults to os.environ).
        **overrides: Field values that win over the environment. None values
            are ignored so unset CLI options fall through.

    Returns:
        Validated DifferConfig.

    Raises:
        ConfigError: If any value fails validation.
    """
    env = os.environ if env is None else env
    values: dict[str, Any] = {}
    for suffix, field_name in _ENV_FIELDS.items():
        raw = env.get(f"{ENV_PREFIX}{suffix}")
        if raw is not None and raw != "":
            values[field_name] = raw
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return DifferConfig(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
