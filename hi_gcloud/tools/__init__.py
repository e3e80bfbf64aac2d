"""MCP tools registration for Hi-GCloud."""

from mcp.server.fastmcp import FastMCP

from .auth_tools import register_auth_tools
from .base import ToolContext
from .billing_tools import register_billing_tools
from .logging_tools import register_logging_tools
from .prompts import register_prompts
from .run_tools import register_run_tools
from .secret_tools import register_secret_tools
from .services_tools import register_services_tools
from .setup_tools import register_setup_tools
from .sql_tools import register_sql_tools
from .storage_tools import register_storage_tools


TOOL_NAMES = (
    "gcp_setup",
    "gcp_logs_read",
    "gcp_run_status",
    "gcp_run_logs",
    "gcp_sql_query",
    "gcp_storage_list",
    "gcp_secret_list",
    "gcp_auth_status",
    "gcp_services_list",
    "gcp_billing_info",
)


def register_all_tools(mcp: FastMCP, ctx: ToolContext) -> None:
    """Register every tool, prompt and resource."""
    register_setup_tools(mcp, ctx)
    register_logging_tools(mcp, ctx)
    register_run_tools(mcp, ctx)
    register_sql_tools(mcp, ctx)
    register_storage_tools(mcp, ctx)
    register_secret_tools(mcp, ctx)
    register_auth_tools(mcp, ctx)
    register_services_tools(mcp, ctx)
    register_billing_tools(mcp, ctx)
    register_prompts(mcp, ctx)

    ctx.logger.info(f"🛠️ Registered {len(TOOL_NAMES)} tools")


__all__ = ["ToolContext", "TOOL_NAMES", "register_all_tools"]
