"""Cloud Run service status."""

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult

from ..constants import RUN_DESCRIBE_TIMEOUT
from ..core.exceptions import ErrorKind, InputError
from ..core.models import OutputFormat, RunServiceStatus, TrafficTarget
from ..utils.formatters import format_run_status
from .base import READ_ONLY, ToolContext, dispatch, json_response, text_response, tool_handler


def parse_service(info: Dict[str, Any], service: str, region: Optional[str]) -> RunServiceStatus:
    """Extract the interesting fields of a ``run services describe`` document."""
    metadata = info.get("metadata") or {}
    status = info.get("status") or {}
    spec = info.get("spec") or {}

    ready = next(
        (c for c in status.get("conditions") or [] if c.get("type") == "Ready"),
        {},
    )

    traffic = []
    for target in status.get("traffic") or []:
        if target.get("revisionName"):
            revision_name = target["revisionName"]
        elif target.get("latestRevision"):
            revision_name = "latest"
        else:
            revision_name = "unknown"
        traffic.append(TrafficTarget(revision_name=revision_name, percent=target.get("percent") or 0))

    containers = ((spec.get("template") or {}).get("spec") or {}).get("containers") or [{}]

    return RunServiceStatus(
        name=metadata.get("name") or service,
        url=status.get("url") or "N/A",
        region=region or (metadata.get("labels") or {}).get("cloud.googleapis.com/location") or "N/A",
        revision=status.get("latestReadyRevisionName") or "N/A",
        status="Ready" if ready.get("status") == "True" else "Not Ready",
        traffic=traffic,
        last_deployed=metadata.get("creationTimestamp"),
        container_image=containers[0].get("image") or "N/A",
    )


@tool_handler
async def run_status(
    ctx: ToolContext,
    service: Optional[str] = None,
    region: Optional[str] = None,
    project_id: Optional[str] = None,
    output_format: OutputFormat = "text",
):
    """Describe a Cloud Run service."""
    if not service:
        raise InputError(ErrorKind.MISSING_ARGUMENT, "service is required.", "Pass the Cloud Run service name.")

    project = await ctx.resolver.resolve_project(project_id)
    region = await ctx.resolver.resolve_region(region)

    args = ["run", "services", "describe", service, f"--project={project}", "--format=json"]
    if region:
        args.append(f"--region={region}")

    ctx.logger.info(f"🏃 Describing Cloud Run service {service} in {project}")
    info = await ctx.client.execute_json(args, RUN_DESCRIBE_TIMEOUT, default={})
    if not isinstance(info, dict):
        info = {}

    status = parse_service(info, service, region)

    if output_format == "json":
        return json_response({"project": project, **status.model_dump(), "raw": info})

    return text_response(format_run_status(status))


def register_run_tools(mcp: FastMCP, ctx: ToolContext) -> None:
    """Register Cloud Run tools."""

    @mcp.tool(name="gcp_run_status", annotations=READ_ONLY)
    async def gcp_run_status(
        service: str,
        region: Optional[str] = None,
        project_id: Optional[str] = None,
        format: OutputFormat = "text",
    ) -> CallToolResult:
        """Show the status of a Cloud Run service: URL, revision, readiness, traffic split and image.

        Args:
            service: Cloud Run service name
            region: Region, e.g. asia-northeast3 (default: config file, then gcloud config)
            project_id: GCP project ID
            format: Output format, 'text' or 'json'
        """
        return await dispatch(
            ctx, "gcp_run_status", run_status,
            service=service, region=region, project_id=project_id, output_format=format,
        )
