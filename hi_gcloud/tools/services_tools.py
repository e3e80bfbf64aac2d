"""Enabled API services, grouped by category."""

from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult

from ..constants import SERVICES_TIMEOUT
from ..core.models import OutputFormat
from .base import READ_ONLY, ToolContext, dispatch, json_response, text_response, tool_handler


# Checked in order; a service lands in the first category with a matching keyword
SERVICE_CATEGORIES = (
    ("Compute", ("run", "compute", "functions", "appengine")),
    ("Storage", ("storage", "firestore")),
    ("Database", ("sql", "spanner", "bigtable", "redis")),
    ("AI/ML", ("ai", "ml", "vision", "speech", "translate", "vertex")),
    ("Networking", ("vpc", "dns", "loadbalancing", "network")),
    ("Security", ("iam", "secret", "kms", "security")),
)
OTHER_CATEGORY = "Other"


def categorize(name: str) -> str:
    name = (name or "").lower()
    for category, keywords in SERVICE_CATEGORIES:
        if any(keyword in name for keyword in keywords):
            return category
    return OTHER_CATEGORY


def short_service_name(name: Optional[str]) -> str:
    """``projects/123/services/run.googleapis.com`` -> ``run.googleapis.com``."""
    return name.rsplit("/", 1)[-1] if name else ""


def group_services(services: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """Group services by category, keeping category order and dropping empty groups."""
    groups: Dict[str, List[Dict[str, Any]]] = {c: [] for c, _ in SERVICE_CATEGORIES}
    groups[OTHER_CATEGORY] = []
    for service in services:
        groups[categorize(service["name"])].append(service)
    return {c: items for c, items in groups.items() if items}


@tool_handler
async def services_list(
    ctx: ToolContext,
    project_id: Optional[str] = None,
    filter: Optional[str] = None,
    output_format: OutputFormat = "text",
):
    """List enabled APIs of a project."""
    project = await ctx.resolver.resolve_project(project_id)

    ctx.logger.info(f"🔌 Listing enabled services in {project}")
    raw = await ctx.client.execute_json(
        ["services", "list", "--enabled", f"--project={project}", "--format=json"],
        SERVICES_TIMEOUT,
        default=[],
    )

    services = []
    for item in raw if isinstance(raw, list) else []:
        if not isinstance(item, dict):
            continue
        config = item.get("config") or {}
        services.append({
            "name": config.get("name") or short_service_name(item.get("name")),
            "title": config.get("title"),
            "state": item.get("state"),
        })

    if filter:
        needle = filter.lower()
        services = [
            s for s in services
            if needle in (s["name"] or "").lower() or needle in (s["title"] or "").lower()
        ]

    if output_format == "json":
        return json_response({
            "project": project,
            "filter": filter,
            "total_services": len(services),
            "services": services,
        })

    lines = ["🔌 Enabled API services", f"Project: {project}"]
    if filter:
        lines.append(f'Filter: "{filter}"')
    lines.extend([f"Total: {len(services)}", ""])

    if not services:
        lines.append("No enabled services found.")
    for category, items in group_services(services).items():
        lines.append(f"\n📂 {category}:")
        for s in items:
            lines.append(f"  ✅ {s['name']}")
            if s["title"]:
                lines.append(f"     └ {s['title']}")

    return text_response("\n".join(lines))


def register_services_tools(mcp: FastMCP, ctx: ToolContext) -> None:
    """Register service usage tools."""

    @mcp.tool(name="gcp_services_list", annotations=READ_ONLY)
    async def gcp_services_list(
        project_id: Optional[str] = None,
        filter: Optional[str] = None,
        format: OutputFormat = "text",
    ) -> CallToolResult:
        """List the API services enabled in a project, grouped by category.

        Args:
            project_id: GCP project ID
            filter: Substring to match against service name or title, e.g. 'run', 'sql'
            format: Output format, 'text' or 'json'
        """
        return await dispatch(
            ctx, "gcp_services_list", services_list,
            project_id=project_id, filter=filter, output_format=format,
        )
