"""
Configuration handling for space_backup.

Defines the run configuration and resolves it from command-line arguments,
environment variables and an optional YAML file.
"""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


# Environment variable consulted for each required setting
ENV_VARS = {
    "space_url": "SPACE_URL",
    "bearer_token": "SPACE_BEARER_TOKEN",
    "clone_directory": "SPACE_CLONE_DIRECTORY",
    "email_for_pull": "SPACE_EMAIL_FOR_PULL",
}

REQUIRED_SETTINGS = tuple(ENV_VARS)

DEFAULT_TIMEOUT = 300.0


class MissingConfigError(ValueError):
    """Raised when one or more required settings could not be resolved."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        names = ", ".join(f"{name} ({ENV_VARS[name]})" for name in missing)
        super().__init__(f"Missing required settings: {names}")


class BackupConfig(BaseModel):
    """Immutable configuration for a single backup run."""

    model_config = ConfigDict(frozen=True)

    space_url: str = Field(
        ..., min_length=1, description="Base URL of the Space organization"
    )
    bearer_token: str = Field(
        ..., min_length=1,
        description="Bearer token for the API and git transport",
        repr=False,
    )
    clone_directory: Path = Field(
        ..., description="Backup root; each project gets a directory below it"
    )
    email_for_pull: str = Field(
        ..., min_length=1, description="Email used as author of pull merge commits"
    )

    # Hardening settings
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Seconds allowed for each HTTP request and git operation",
    )
    dry_run: bool = Field(
        default=False, description="If true, report clone/pull decisions only"
    )

    @field_validator("space_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_yaml(cls, path: Path) -> "BackupConfig":
        """Load a complete configuration from a YAML file."""
        return cls.model_validate(load_yaml_settings(path))

    def to_yaml(self, path: Path) -> None:
        """Save configuration to a YAML file, leaving out the bearer token."""
        with open(path, "w") as f:
            yaml.dump(
                self.model_dump(mode="json", exclude={"bearer_token", "dry_run"}),
                f,
                default_flow_style=False,
                sort_keys=False,
            )


def load_yaml_settings(path: Path) -> dict:
    """Read raw settings from a YAML file; an empty file yields no settings."""
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return data


def resolve_config(
    space_url: str | None = None,
    bearer_token: str | None = None,
    clone_directory: str | Path | None = None,
    email_for_pull: str | None = None,
    config_file: Path | None = None,
    timeout: float | None = None,
    dry_run: bool = False,
    environ: dict[str, str] | None = None,
) -> BackupConfig:
    """
    Build the run configuration.

    Each required value is taken from its argument, then its environment
    variable, then the YAML config file. Empty strings count as unset.

    Raises:
        MissingConfigError: if any required value is still unset
    """
    environ = os.environ if environ is None else environ
    file_settings = load_yaml_settings(config_file) if config_file else {}

    given = {
        "space_url": space_url,
        "bearer_token": bearer_token,
        "clone_directory": clone_directory,
        "email_for_pull": email_for_pull,
    }

    values: dict = {}
    missing: list[str] = []
    for name in REQUIRED_SETTINGS:
        value = given[name] or environ.get(ENV_VARS[name]) or file_settings.get(name)
        if value:
            values[name] = value
        else:
            missing.append(name)

    if missing:
        raise MissingConfigError(missing)

    if timeout is not None:
        values["timeout"] = timeout
    elif file_settings.get("timeout") is not None:
        values["timeout"] = file_settings["timeout"]

    return BackupConfig(**values, dry_run=dry_run)
