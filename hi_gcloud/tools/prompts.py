"""Workflow prompts and the auth status resource."""

from typing import Optional

from mcp.server.fastmcp import FastMCP

from ..core.exceptions import HiGcloudError
from ..utils.formatters import format_json
from .auth_tools import collect_auth_status
from .base import ToolContext


def debug_deployment_prompt(service: str, region: Optional[str] = None) -> str:
    lines = [
        f'Debug the deployment of Cloud Run service "{service}".',
        "",
        "Steps:",
        "1. Check the service status with gcp_run_status",
        "2. Read recent error logs with gcp_run_logs (severity: ERROR)",
        "3. Propose fixes for the problems you find",
    ]
    if region:
        lines.extend(["", f"Region: {region}"])
    return "\n".join(lines)


def check_errors_prompt(time_range: str = "1h") -> str:
    return "\n".join([
        "Analyze the recent error logs of this GCP project.",
        "",
        "Steps:",
        f"1. Read error logs with gcp_logs_read (filter: severity=ERROR, time_range: {time_range or '1h'})",
        "2. Group the errors by pattern",
        "3. Explain the likely cause of each group and how to fix it",
        "4. List the actions in priority order",
    ])


def cost_review_prompt() -> str:
    return "\n".join([
        "Review the costs of this GCP project and suggest optimizations.",
        "",
        "Steps:",
        "1. Check billing information with gcp_billing_info",
        "2. Check enabled services with gcp_services_list",
        "3. Identify areas where costs can be reduced",
        "4. Give concrete optimization steps",
    ])


async def auth_status_resource(ctx: ToolContext) -> str:
    """JSON rendering of the auth status, errors included."""
    try:
        return format_json(await collect_auth_status(ctx))
    except HiGcloudError as e:
        return format_json({"authenticated": False, "error": e.to_dict()})


def register_prompts(mcp: FastMCP, ctx: ToolContext) -> None:
    """Register prompts and resources."""

    @mcp.prompt(name="debug-deployment")
    def debug_deployment(service: str, region: Optional[str] = None) -> str:
        """Debug a failing Cloud Run deployment."""
        return debug_deployment_prompt(service, region)

    @mcp.prompt(name="check-errors")
    def check_errors(time_range: str = "1h") -> str:
        """Analyze recent error logs and suggest fixes."""
        return check_errors_prompt(time_range)

    @mcp.prompt(name="cost-review")
    def cost_review() -> str:
        """Analyze GCP costs and suggest optimizations."""
        return cost_review_prompt()

    @mcp.resource("gcp://auth/status", name="GCP auth status", mime_type="application/json")
    async def auth_status() -> str:
        """Current gcloud authentication state and account."""
        ctx.logger.request_received("gcp://auth/status", {})
        return await auth_status_resource(ctx)
