from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Literal

import yaml
from expandvars import expandvars
from pydantic import BaseModel, ConfigDict, Field, field_validator

SchemaType = Literal["object", "array", "string", "number", "boolean"]


class SchemaNode(BaseModel):
    """Recursive description of an expected JSON value.

    Constraint keys follow the JSON Schema spelling (``minLength``,
    ``maxLength``); the snake_case field names are accepted too.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    type: SchemaType
    properties: dict[str, SchemaNode] = {}
    required: list[str] = []
    items: SchemaNode | None = None
    pattern: str | None = None
    min_length: int | None = Field(default=None, alias="minLength")
    max_length: int | None = Field(default=None, alias="maxLength")
    enum: list[Any] | None = None
    minimum: float | None = None
    maximum: float | None = None

    @field_validator("pattern")
    @classmethod
    def check_pattern(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value)
            except re.error as exc:
                raise ValueError(f"Invalid pattern {value!r}: {exc}") from exc
        return value


class AssertionOptions(BaseModel):
    """Per-call settings. ``timeout`` is in milliseconds."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    message: str | None = None
    timeout: float | None = Field(default=None, ge=0)
    soft: bool = False
    screenshot: bool = False


class UIAssertionOptions(AssertionOptions):
    exact: bool = True
    case_sensitive: bool = False
    trim: bool = True


class ApiAssertionOptions(AssertionOptions):
    status_code: int | None = None
    content_type: str | None = None
    response_time: float | None = None
    expected_headers: dict[str, str] | None = None
    expected_schema: SchemaNode | None = None
    validate_json: bool = True


def merge_options(
    options_cls: type[AssertionOptions],
    defaults: dict[str, Any],
    overrides: AssertionOptions | None = None,
) -> AssertionOptions:
    """Build ``options_cls`` from defaults with explicitly set overrides on top.

    Override fields that ``options_cls`` does not define are dropped, so UI or
    API options can be passed to checks that only take the base fields.
    """
    merged = dict(defaults)
    if overrides is not None:
        merged.update(overrides.model_dump(exclude_unset=True))
    return options_cls(**{k: v for k, v in merged.items() if k in options_cls.model_fields})


class AssertionsConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    default_timeout: float = Field(default=10000, ge=0)
    default_soft: bool = False
    screenshot_on_failure: bool = True
    screenshot_dir: str = "test-results/screenshots"
    log_file: str | None = None


def load_config(path: Path) -> AssertionsConfig:
    """Load and validate an assertions config from a YAML file.

    ``${VAR}`` and ``${VAR:-default}`` references are expanded before
    parsing. Raises ValueError for unset variables without a default.
    """
    config_dir = path.parent.resolve()

    text = path.read_text()
    try:
        expanded = expandvars(text, nounset=True)
    except Exception as exc:
        raise ValueError(f"Config {path} references an unset variable: {exc}") from exc

    raw = yaml.safe_load(expanded) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Expected a mapping at the top level of {path}")

    config = AssertionsConfig(**raw)

    # Resolve relative output paths against the config file location
    screenshot_dir = Path(config.screenshot_dir)
    if not screenshot_dir.is_absolute():
        config.screenshot_dir = str((config_dir / screenshot_dir).resolve())
    if config.log_file is not None and not Path(config.log_file).is_absolute():
        config.log_file = str((config_dir / config.log_file).resolve())

    return config
