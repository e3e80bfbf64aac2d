"""Data models for Hi-GCloud."""

from typing import Dict, List, Optional, Literal
from pydantic import BaseModel, ConfigDict, Field


OutputFormat = Literal["text", "json"]
SetupAction = Literal["status", "create", "update", "disable", "enable"]


class ProjectConfig(BaseModel):
    """Contents of a ``.hi-gcloud.json`` file."""

    model_config = ConfigDict(extra="ignore")

    enabled: Optional[bool] = Field(
        default=None,
        description="False marks the directory as disabled; absent means enabled"
    )
    project_id: Optional[str] = Field(default=None, description="GCP project ID")
    region: Optional[str] = Field(default=None, description="Default region")
    account: Optional[str] = Field(
        default=None,
        description="Account e-mail, informational only"
    )

    @property
    def is_disabled(self) -> bool:
        return self.enabled is False


class ConfigReadResult(BaseModel):
    """Outcome of reading the project config file."""

    exists: bool
    disabled: bool = False
    config: Optional[ProjectConfig] = None
    path: str
    error: Optional[str] = None


class ConfigWriteResult(BaseModel):
    """Outcome of writing the project config file."""

    success: bool
    path: str
    error: Optional[str] = None


class ExecResult(BaseModel):
    """Captured output of a successful gcloud invocation."""

    stdout: str = ""
    stderr: str = ""


class AuthStatus(BaseModel):
    """Result of the gcloud authentication check."""

    authenticated: bool
    account: Optional[str] = None
    project: Optional[str] = None
    error: Optional[Dict[str, str]] = Field(
        default=None,
        description="Error payload (kind/message/suggestion) when not authenticated"
    )


class AmbientDefaults(BaseModel):
    """Values already persisted in the gcloud CLI's own configuration."""

    project: Optional[str] = None
    region: Optional[str] = None
    account: Optional[str] = None


class LogEntry(BaseModel):
    """A single Cloud Logging entry reduced to what reports need."""

    timestamp: str = ""
    severity: str = "DEFAULT"
    message: str = ""
    resource: Optional[str] = None
    labels: Optional[Dict[str, str]] = None


class ErrorReport(BaseModel):
    """Summary of error-level entries in a batch of logs."""

    summary: str
    errors: List[LogEntry] = Field(default_factory=list)
    has_errors: bool = False


class TrafficTarget(BaseModel):
    """Share of Cloud Run traffic routed to one revision."""

    revision_name: str
    percent: int = 0


class RunServiceStatus(BaseModel):
    """Fields extracted from ``gcloud run services describe``."""

    name: str
    url: str = "N/A"
    region: str = "N/A"
    revision: str = "N/A"
    status: str = "Not Ready"
    traffic: List[TrafficTarget] = Field(default_factory=list)
    last_deployed: Optional[str] = None
    container_image: str = "N/A"


class ToolResponse(BaseModel):
    """Rendered result of a tool handler."""

    text: str
    is_error: bool = False
