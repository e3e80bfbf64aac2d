"""gcloud authentication status."""

from typing import Any, Dict, List

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult

from ..constants import AUTH_LIST_TIMEOUT, CONFIG_LIST_TIMEOUT
from ..core.exceptions import ErrorKind, GcloudError
from ..core.models import OutputFormat
from .base import READ_ONLY, ToolContext, dispatch, json_response, text_response, tool_handler


async def collect_auth_status(ctx: ToolContext, show_all_accounts: bool = False) -> Dict[str, Any]:
    """Gather auth state, raising ``GcloudError`` when not authenticated."""
    status = await ctx.auth.check_auth()
    if not status.authenticated:
        error = status.error or {}
        raise GcloudError(
            ErrorKind(error.get("kind", ErrorKind.UNKNOWN.value)),
            error.get("message", "Not authenticated."),
            error.get("suggestion"),
        )

    config = await ctx.client.execute_json(["config", "list", "--format=json"], CONFIG_LIST_TIMEOUT, default={})
    compute = (config.get("compute") or {}) if isinstance(config, dict) else {}

    all_accounts: List[str] = []
    if show_all_accounts:
        try:
            result = await ctx.client.execute(["auth", "list", "--format=value(account)"], AUTH_LIST_TIMEOUT)
            all_accounts = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        except GcloudError as e:
            ctx.logger.warning(f"Could not list accounts: {e.message}", "auth")

    payload = {
        "authenticated": True,
        "active_account": status.account,
        "project": status.project,
        "region": compute.get("region") or "not set",
        "zone": compute.get("zone") or "not set",
    }
    if show_all_accounts:
        payload["all_accounts"] = all_accounts
    return payload


@tool_handler
async def auth_status(ctx: ToolContext, show_all_accounts: bool = False, output_format: OutputFormat = "text"):
    """Report the active gcloud account and defaults."""
    ctx.logger.info("🔑 Checking gcloud authentication")
    payload = await collect_auth_status(ctx, show_all_accounts)

    if output_format == "json":
        return json_response(payload)

    lines = [
        "🔑 GCP authentication status",
        "",
        "✅ Authenticated",
        f"👤 Account: {payload['active_account']}",
        f"📁 Project: {payload['project'] or '(not set)'}",
        f"🌍 Region: {payload['region']}",
        f"📍 Zone: {payload['zone']}",
    ]

    accounts = payload.get("all_accounts") or []
    if len(accounts) > 1:
        lines.extend(["", "📋 All authenticated accounts:"])
        for account in accounts:
            if account == payload["active_account"]:
                lines.append(f"  → {account} (active)")
            else:
                lines.append(f"    {account}")

    return text_response("\n".join(lines))


def register_auth_tools(mcp: FastMCP, ctx: ToolContext) -> None:
    """Register authentication tools."""

    @mcp.tool(name="gcp_auth_status", annotations=READ_ONLY)
    async def gcp_auth_status(show_all_accounts: bool = False, format: OutputFormat = "text") -> CallToolResult:
        """Show gcloud authentication state: active account, project, region and zone.

        Args:
            show_all_accounts: Also list every credentialed account (default: false)
            format: Output format, 'text' or 'json'
        """
        return await dispatch(
            ctx, "gcp_auth_status", auth_status,
            show_all_accounts=show_all_accounts, output_format=format,
        )
