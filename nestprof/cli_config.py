"""Pydantic model for CLI options."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from nestprof.config import ProfilerConfig
from nestprof.constants import DEFAULT_STRICT, DEFAULT_THRESHOLD_MS, ENV_PREFIX
from nestprof.exceptions import ValidationError

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class CLIConfig(BaseModel):
    """Validated representation of `nestprof run` options."""

    model_config = ConfigDict(extra="forbid")

    script: Path = Field(..., description="Python script to run under the profiler")
    args: list[str] = Field(default_factory=list, description="Arguments passed to the script")
    label: str | None = Field(default=None, description="Root entry label (defaults to script name)")
    prefix: str = ""
    quiet: bool = False
    verbose: bool = False
    log_level: LogLevel | None = None

    # Profiler config fields (kept here to keep CLI defaults in sync with core)
    strict: bool = DEFAULT_STRICT
    threshold_ms: int = Field(default=DEFAULT_THRESHOLD_MS, ge=0)

    @field_validator("script")
    @classmethod
    def _validate_script(cls, value: Path) -> Path:
        if not str(value).strip():
            raise ValueError("script must be provided")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def _normalize_output_modes(self) -> CLIConfig:
        if self.quiet:
            object.__setattr__(self, "verbose", False)
        return self

    @property
    def root_label(self) -> str:
        return self.label or self.script.name

    def to_profiler_config(self) -> ProfilerConfig:
        """
        Convert to core ProfilerConfig and validate.

        Raises:
            ValidationError: if generated ProfilerConfig is invalid
        """
        config = ProfilerConfig(strict=self.strict, threshold_ms=self.threshold_ms)
        config.validate()
        return config

    @classmethod
    def from_cli(cls, **kwargs) -> CLIConfig:
        """
        Build from CLI args, normalizing validation errors to package ValidationError.
        """
        try:
            return cls(**kwargs)
        except PydanticValidationError as exc:
            raise ValidationError(str(exc)) from exc

    @classmethod
    def from_sources(
        cls,
        cli_args: Mapping[str, Any],
        config_path: str | Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> CLIConfig:
        """
        Merge config from YAML, environment, then CLI, respecting precedence.
        """
        merged: dict[str, Any] = {}

        if config_path:
            merged.update(cls._load_yaml_config(config_path))

        merged.update(cls._load_env_vars(environ or {}))

        cli_overrides = {key: value for key, value in cli_args.items() if value is not None}
        merged.update(cli_overrides)

        return cls.from_cli(**merged)

    @staticmethod
    def _parse_bool(value: str) -> bool:
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
        raise ValidationError(f"Invalid boolean value: {value!r}")

    @staticmethod
    def _parse_int(value: str) -> int:
        try:
            return int(value.strip())
        except ValueError as exc:
            raise ValidationError(f"Invalid integer value: {value!r}") from exc

    @classmethod
    def _load_env_vars(cls, environ: Mapping[str, str]) -> dict[str, Any]:
        bool_fields = {"quiet", "verbose", "strict"}
        int_fields = {"threshold_ms"}
        str_fields = {"label", "prefix", "log_level"}

        parsed: dict[str, Any] = {}
        for field_name in sorted(bool_fields | int_fields | str_fields):
            env_var = f"{ENV_PREFIX}{field_name.upper()}"
            if env_var not in environ:
                continue
            raw_value = environ[env_var]
            if field_name in bool_fields:
                parsed[field_name] = cls._parse_bool(raw_value)
            elif field_name in int_fields:
                parsed[field_name] = cls._parse_int(raw_value)
            else:
                parsed[field_name] = raw_value
        return parsed

    @staticmethod
    def _load_yaml_config(path: str | Path) -> dict[str, Any]:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        try:
            with config_path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ValidationError(f"Invalid YAML in config file: {exc}") from exc

        if not isinstance(data, dict):
            raise ValidationError("Config file must contain a top-level mapping")

        return data
