"""Action configuration using pydantic-settings."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file without clobbering values provided by the runner
load_dotenv(override=False)

BRANCH_PREFIX = "hypermod-transform"


class Settings(BaseSettings):
    """Action settings loaded from environment variables.

    Inputs declared in the workflow file arrive as ``INPUT_<NAME>`` variables,
    the rest come from the standard GitHub Actions runner environment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Credentials
    github_token: str = Field(default="", validation_alias="GITHUB_TOKEN")

    # Deployment inputs
    deployment_id: str = Field(
        default="",
        validation_alias=AliasChoices("INPUT_DEPLOYMENTID", "DEPLOYMENT_ID"),
    )
    deployment_key: str = Field(
        default="",
        validation_alias=AliasChoices("INPUT_DEPLOYMENTKEY", "DEPLOYMENT_KEY"),
    )

    # Triggering context
    github_repository: str = Field(default="", validation_alias="GITHUB_REPOSITORY")
    github_ref: str = Field(default="", validation_alias="GITHUB_REF")
    github_sha: str = Field(default="", validation_alias="GITHUB_SHA")
    github_output: str | None = Field(default=None, validation_alias="GITHUB_OUTPUT")
    workspace: Path = Field(
        default_factory=Path.cwd,
        validation_alias=AliasChoices("GITHUB_WORKSPACE", "WORKSPACE"),
    )

    # Remote endpoints
    github_api_url: str = Field(
        default="https://api.github.com", validation_alias="GITHUB_API_URL"
    )
    hypermod_api_url: str = Field(
        default="https://www.hypermod.io", validation_alias="HYPERMOD_API_URL"
    )
    http_timeout: float = 30.0

    # Execution
    staging_dir_name: str = ".hypermod"
    default_parser: str = "tsx"
    rate_limit_retries: int = Field(default=2, ge=0)
    install_tooling: bool = True
    format_changes: bool = True
    write_netrc: bool = True

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["console", "json"] = "console"

    @property
    def base_branch(self) -> str:
        """Branch that triggered the run, e.g. ``main``."""
        return self.github_ref.removeprefix("refs/heads/")

    @property
    def branch_name(self) -> str:
        """Deterministic branch that carries this deployment's changes."""
        return f"{BRANCH_PREFIX}/{self.deployment_id}"

    @property
    def staging_root(self) -> Path:
        """Directory transform sources are materialized into."""
        return self.workspace / self.staging_dir_name

    @property
    def repo_owner(self) -> str:
        return self.github_repository.partition("/")[0]

    @property
    def repo_name(self) -> str:
        return self.github_repository.partition("/")[2]

    @property
    def netrc_path(self) -> Path:
        return Path(os.environ.get("HOME", str(Path.home()))) / ".netrc"

    def missing_required(self) -> list[str]:
        """Names of required settings that are empty."""
        required = {
            "GITHUB_TOKEN": self.github_token,
            "deploymentId": self.deployment_id,
            "deploymentKey": self.deployment_key,
            "GITHUB_REPOSITORY": self.github_repository,
            "GITHUB_REF": self.github_ref,
            "GITHUB_SHA": self.github_sha,
        }
        return [name for name, value in required.items() if not value]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
