"""
ExecBrief configuration management.

Loads the account list and provider settings from a YAML or JSON file and
provider secrets from environment variables. Secrets are never read from
the file.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from execbrief.errors import ConfigInvalid
from execbrief.models.account import Account
from execbrief.models.record import DEFAULT_SECTIONS

DEFAULT_CONFIG_PATH = "./config/config.json"
DEFAULT_A2A_URL = "http://revenue-agents.query.prod.telnyx.io:8000/a2a/billing-account/rpc"

# Top-level keys a usable config must carry.
_REQUIRED_FIELDS = ("customers", "tableau", "zendesk")


class TableauConfig(BaseModel):
    """BI provider (Tableau REST API) connection."""

    server: str = Field(default="", description="Host name; a leading https:// is stripped")
    site: str = Field(default="", description="Site contentUrl")
    api_version: str = Field(default="3.24")
    pat_name: str | None = Field(default=None, description="Personal access token name")
    revenue_view_id: str | None = Field(default=None)
    reauth_every: int = Field(default=5, ge=1, description="Force re-auth after this many accounts")

    @field_validator("server")
    @classmethod
    def _strip_scheme(cls, value: str) -> str:
        return value.removeprefix("https://").removeprefix("http://").rstrip("/")


class ZendeskConfig(BaseModel):
    """Ticketing provider connection."""

    subdomain: str = ""
    email: str | None = None


class A2AConfig(BaseModel):
    """Financial RPC agent connection."""

    billing_url: str = Field(default=DEFAULT_A2A_URL)


class OutputConfig(BaseModel):
    """Brief defaults."""

    default_days: int = Field(default=90, ge=1)
    format: Literal["text", "markdown", "json"] = Field(default="text")
    sections: list[str] = Field(default_factory=lambda: list(DEFAULT_SECTIONS))


class SlackConfig(BaseModel):
    """Notification sink."""

    channel: str | None = None


class RetryConfig(BaseModel):
    """Backoff policy for every outbound call."""

    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=2.0, ge=0.0)
    backoff_multiplier: float = Field(default=2.0, ge=1.0)
    connect_timeout: float = Field(default=10.0, gt=0.0)
    total_timeout: float = Field(default=30.0, gt=0.0)


class RiskConfig(BaseModel):
    """Risk rule thresholds."""

    credit_utilization_threshold: float = Field(default=80.0, ge=0.0)
    ticket_volume_threshold: int = Field(default=10, ge=0)
    renewal_window_days: int | None = Field(default=None, ge=0)


class Secrets(BaseModel):
    """Provider secrets, sourced from the environment only."""

    tableau_pat_secret: str | None = None
    zendesk_api_token: str | None = None
    slack_bot_token: str | None = None

    @classmethod
    def from_env(cls) -> Secrets:
        return cls(
            tableau_pat_secret=os.environ.get("TABLEAU_PAT_SECRET") or None,
            zendesk_api_token=os.environ.get("ZENDESK_API_TOKEN") or None,
            slack_bot_token=os.environ.get("SLACK_BOT_TOKEN") or None,
        )


class ExecBriefConfig(BaseModel):
    """Root configuration for ExecBrief."""

    customers: list[Account]
    tableau: TableauConfig
    zendesk: ZendeskConfig
    a2a: A2AConfig = Field(default_factory=A2AConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    slack: SlackConfig = Field(default_factory=SlackConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    risks: RiskConfig = Field(default_factory=RiskConfig)

    @classmethod
    def load(cls, config_path: str | None = None, **overrides: Any) -> ExecBriefConfig:
        """Load and validate configuration.

        Path resolution: argument > ``CONFIG_PATH`` env var > ./config/config.json.
        Keyword overrides replace top-level keys after the file is read.

        Raises:
            ConfigInvalid: File missing, unparseable, or missing required fields.
        """
        path = Path(config_path or os.environ.get("CONFIG_PATH") or DEFAULT_CONFIG_PATH)
        if not path.is_file():
            raise ConfigInvalid(f"Config file not found at {path}")

        try:
            with open(path, encoding="utf-8") as f:
                if path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigInvalid(f"Config file {path} could not be read: {e}") from e
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigInvalid(f"{path} is not valid JSON or YAML: {e}") from e

        if not isinstance(data, dict):
            raise ConfigInvalid(f"{path} must contain a mapping at the top level")

        data.update(overrides)
        return cls.from_dict(data, source=str(path))

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, source: str = "config") -> ExecBriefConfig:
        """Validate an already-parsed config mapping."""
        missing = [key for key in _REQUIRED_FIELDS if key not in data]
        if "customers" in data and not isinstance(data["customers"], list):
            missing.append("customers (array)")
        if missing:
            raise ConfigInvalid(
                f"Config missing required fields: {', '.join(missing)}",
                missing=missing,
            )

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigInvalid(f"Invalid configuration in {source}: {e}") from e
