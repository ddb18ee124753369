"""Internal data models for master-sdk.

All models use Pydantic v2.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PRODUCT = "cubefs-sdk"


# =============================================================================
# Build Metadata
# =============================================================================


class BuildInfo(BaseModel):
    """Build-time metadata that identifies this client to the master service."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    product: str = Field(default=DEFAULT_PRODUCT, description="Product name in the User-Agent")
    version: str = Field(description="Client version, e.g., 3.3.0")
    commit_id: str = Field(default="unknown", description="Source commit the client was built from")

    def user_agent(self) -> str:
        """Render the identity header value: <product>/<version> (commit <commit_id>)."""
        return f"{self.product}/{self.version} (commit {self.commit_id})"


# =============================================================================
# Runtime Configuration Models
# =============================================================================


class MasterConfig(BaseModel):
    """Connection settings for one master endpoint."""

    model_config = ConfigDict(extra="forbid")

    address: str = Field(description="host:port of the master endpoint")
    scheme: str = Field(default="http", description="URL scheme (http or https)")
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers sent on every request (supports ${ENV_VAR} substitution)",
    )

    @field_validator("address")
    @classmethod
    def check_address(cls, v: str) -> str:
        if not v or "/" in v:
            raise ValueError("address must be host:port without scheme or path")
        return v

    @field_validator("scheme")
    @classmethod
    def check_scheme(cls, v: str) -> str:
        if v not in ("http", "https"):
            raise ValueError(f"unsupported scheme '{v}'")
        return v

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.address}"


class RuntimeConfig(BaseModel):
    """Top-level runtime configuration file structure."""

    model_config = ConfigDict(extra="forbid")

    master: MasterConfig = Field(description="Master endpoint settings")
    build: BuildInfo | None = Field(
        default=None, description="Override for the build metadata in the User-Agent"
    )


# =============================================================================
# Master Reply Envelope
# =============================================================================


class MasterReply(BaseModel):
    """JSON envelope returned by every master endpoint. code 0 means success."""

    model_config = ConfigDict(extra="ignore")

    code: int = Field(description="Service result code (0 = success)")
    msg: str = Field(default="", description="Human-readable result message")
    data: Any = Field(default=None, description="Endpoint-specific payload")

    @property
    def ok(self) -> bool:
        return self.code == 0
