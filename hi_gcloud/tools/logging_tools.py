"""Cloud Logging tools: project logs and Cloud Run service logs."""

import json
from typing import Any, Callable, Dict, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult

from ..constants import DEFAULT_LOG_LIMIT, DEFAULT_TIME_RANGE, LOGS_TIMEOUT, MAX_LOG_LIMIT
from ..core.exceptions import ErrorKind, InputError
from ..core.models import LogEntry, OutputFormat
from ..utils.formatters import create_detailed_error_report, create_error_report, format_log_entries
from ..utils.time_range import format_timestamp_for_filter, parse_time_range
from .base import READ_ONLY, ToolContext, dispatch, json_response, text_response, tool_handler


def clamp_limit(limit: Optional[int]) -> int:
    if not limit or limit < 1:
        return DEFAULT_LOG_LIMIT
    return min(limit, MAX_LOG_LIMIT)


def entry_message(raw: Dict[str, Any]) -> str:
    """textPayload, else jsonPayload.message, else the serialized jsonPayload."""
    if raw.get("textPayload"):
        return str(raw["textPayload"])

    payload = raw.get("jsonPayload") or {}
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return json.dumps(payload)


def parse_log_entry(raw: Dict[str, Any], resource: Optional[str]) -> LogEntry:
    labels = raw.get("labels")
    return LogEntry(
        timestamp=raw.get("timestamp") or raw.get("receiveTimestamp") or "",
        severity=raw.get("severity") or "DEFAULT",
        message=entry_message(raw),
        resource=resource,
        labels={k: str(v) for k, v in labels.items()} if isinstance(labels, dict) else None,
    )


async def read_log_entries(
    ctx: ToolContext,
    log_filter: str,
    project: str,
    limit: int,
    resource_of: Callable[[Dict[str, Any]], Optional[str]],
) -> List[LogEntry]:
    """Run ``gcloud logging read`` and convert the result."""
    args = [
        "logging", "read", log_filter,
        f"--project={project}",
        f"--limit={limit}",
        "--format=json",
    ]
    raw_entries = await ctx.client.execute_json(args, LOGS_TIMEOUT, default=[])
    if not isinstance(raw_entries, list):
        return []

    return [parse_log_entry(raw, resource_of(raw)) for raw in raw_entries if isinstance(raw, dict)]


def _report_payload(entries: List[LogEntry]) -> Dict[str, Any]:
    report = create_error_report(entries)
    return {
        "total_logs": len(entries),
        "summary": report.summary,
        "has_errors": report.has_errors,
        "errors": [e.model_dump(exclude_none=True) for e in report.errors],
        "logs": [e.model_dump(exclude_none=True) for e in entries],
    }


def _report_text(header_lines: List[str], entries: List[LogEntry]) -> str:
    report = create_error_report(entries)
    section = create_detailed_error_report(entries) if report.has_errors else report.summary
    header = "\n".join(header_lines + [f"Total: {len(entries)} log entries"])
    return f"{header}\n\n{section}\n\n{format_log_entries(entries)}"


@tool_handler
async def logs_read(
    ctx: ToolContext,
    filter: Optional[str] = None,
    project_id: Optional[str] = None,
    time_range: str = DEFAULT_TIME_RANGE,
    limit: int = DEFAULT_LOG_LIMIT,
    output_format: OutputFormat = "text",
):
    """Read Cloud Logging entries for a project."""
    project = await ctx.resolver.resolve_project(project_id)
    time_range = time_range or DEFAULT_TIME_RANGE
    limit = clamp_limit(limit)

    since = format_timestamp_for_filter(parse_time_range(time_range))
    log_filter = f'timestamp>="{since}"'
    if filter:
        log_filter += f" AND ({filter})"

    ctx.logger.info(f"📋 Reading logs for {project} ({time_range}, limit {limit})")
    entries = await read_log_entries(
        ctx, log_filter, project, limit,
        lambda raw: (raw.get("resource") or {}).get("type"),
    )

    if output_format == "json":
        return json_response({"project": project, "time_range": time_range, **_report_payload(entries)})

    return text_response(_report_text(
        ["📋 Cloud Logging results", f"Project: {project}", f"Time range: {time_range}"],
        entries,
    ))


@tool_handler
async def run_logs(
    ctx: ToolContext,
    service: Optional[str] = None,
    region: Optional[str] = None,
    project_id: Optional[str] = None,
    severity: str = "ALL",
    time_range: str = DEFAULT_TIME_RANGE,
    limit: int = DEFAULT_LOG_LIMIT,
    output_format: OutputFormat = "text",
):
    """Read logs of one Cloud Run service."""
    if not service:
        raise InputError(ErrorKind.MISSING_ARGUMENT, "service is required.", "Pass the Cloud Run service name.")

    project = await ctx.resolver.resolve_project(project_id)
    region = await ctx.resolver.resolve_region(region)
    time_range = time_range or DEFAULT_TIME_RANGE
    limit = clamp_limit(limit)

    since = format_timestamp_for_filter(parse_time_range(time_range))
    log_filter = (
        f'resource.type="cloud_run_revision" '
        f'AND resource.labels.service_name="{service}" '
        f'AND timestamp>="{since}"'
    )
    if severity and severity.upper() != "ALL":
        log_filter += f' AND severity="{severity.upper()}"'
    if region:
        log_filter += f' AND resource.labels.location="{region}"'

    ctx.logger.info(f"🏃 Reading Cloud Run logs for {service} in {project}")
    entries = await read_log_entries(
        ctx, log_filter, project, limit,
        lambda raw: ((raw.get("resource") or {}).get("labels") or {}).get("revision_name"),
    )

    if output_format == "json":
        return json_response({
            "project": project,
            "service": service,
            "region": region,
            "time_range": time_range,
            **_report_payload(entries),
        })

    header = [f"📋 Cloud Run logs: {service}", f"Project: {project}"]
    if region:
        header.append(f"Region: {region}")
    header.append(f"Time range: {time_range}")
    return text_response(_report_text(header, entries))


def register_logging_tools(mcp: FastMCP, ctx: ToolContext) -> None:
    """Register Cloud Logging tools."""

    @mcp.tool(name="gcp_logs_read", annotations=READ_ONLY)
    async def gcp_logs_read(
        filter: Optional[str] = None,
        project_id: Optional[str] = None,
        time_range: str = DEFAULT_TIME_RANGE,
        limit: int = DEFAULT_LOG_LIMIT,
        format: OutputFormat = "text",
    ) -> CallToolResult:
        """Read logs from GCP Cloud Logging and summarize errors.

        Args:
            filter: Logging query, e.g. 'severity=ERROR' or 'resource.type=cloud_run_revision'
            project_id: GCP project ID (default: .hi-gcloud.json, then gcloud config)
            time_range: How far back to look, e.g. '30m', '1h', '24h', '7d' (default: 1h)
            limit: Maximum number of entries (default: 50, max: 500)
            format: Output format, 'text' or 'json'
        """
        return await dispatch(
            ctx, "gcp_logs_read", logs_read,
            filter=filter, project_id=project_id, time_range=time_range,
            limit=limit, output_format=format,
        )

    @mcp.tool(name="gcp_run_logs", annotations=READ_ONLY)
    async def gcp_run_logs(
        service: str,
        region: Optional[str] = None,
        project_id: Optional[str] = None,
        severity: str = "ALL",
        time_range: str = DEFAULT_TIME_RANGE,
        limit: int = DEFAULT_LOG_LIMIT,
        format: OutputFormat = "text",
    ) -> CallToolResult:
        """Read logs of a Cloud Run service.

        Args:
            service: Cloud Run service name
            region: Region, e.g. asia-northeast3 (default: config file, then gcloud config)
            project_id: GCP project ID
            severity: ERROR, WARNING, INFO, DEBUG or ALL (default: ALL)
            time_range: How far back to look, e.g. '1h', '6h', '7d' (default: 1h)
            limit: Maximum number of entries (default: 50, max: 500)
            format: Output format, 'text' or 'json'
        """
        return await dispatch(
            ctx, "gcp_run_logs", run_logs,
            service=service, region=region, project_id=project_id, severity=severity,
            time_range=time_range, limit=limit, output_format=format,
        )
