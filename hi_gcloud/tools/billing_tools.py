"""Billing account and budget information."""

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult

from ..constants import BILLING_TIMEOUT
from ..core.exceptions import ErrorKind, GcloudError
from ..core.models import OutputFormat
from .base import READ_ONLY, ToolContext, dispatch, json_response, text_response, tool_handler


BILLING_CONSOLE_URL = "https://console.cloud.google.com/billing"

COST_TIPS = [
    "Cloud Run: set minimum instances to 0",
    "Cloud SQL: stop instances that are not in use",
    "Storage: configure lifecycle policies",
    "Review Committed Use Discounts",
]


def budget_amount(budget: Dict[str, Any]) -> Optional[str]:
    specified = (budget.get("amount") or {}).get("specifiedAmount") or {}
    if specified.get("currencyCode"):
        return f"{specified.get('units', '0')} {specified['currencyCode']}"
    return None


async def first_budget(ctx: ToolContext, billing_account: str) -> Optional[Dict[str, Any]]:
    """First budget of the billing account; lookup failures are not fatal."""
    account_id = billing_account.rsplit("/", 1)[-1]
    if not account_id or account_id == "N/A":
        return None

    try:
        budgets = await ctx.client.execute_json(
            ["billing", "budgets", "list", f"--billing-account={account_id}", "--format=json"],
            BILLING_TIMEOUT,
            default=[],
        )
    except GcloudError as e:
        ctx.logger.debug(f"Budget lookup skipped: {e.message}", "billing")
        return None

    if isinstance(budgets, list) and budgets and isinstance(budgets[0], dict):
        return budgets[0]
    return None


@tool_handler
async def billing_info(ctx: ToolContext, project_id: Optional[str] = None, output_format: OutputFormat = "text"):
    """Billing account linked to a project, plus its first budget."""
    project = await ctx.resolver.resolve_project(project_id)

    ctx.logger.info(f"💰 Reading billing info for {project}")
    try:
        info = await ctx.client.execute_json(
            ["billing", "projects", "describe", project, "--format=json"],
            BILLING_TIMEOUT,
            default={},
        )
    except GcloudError as e:
        if e.kind == ErrorKind.PERMISSION_DENIED:
            raise GcloudError(
                ErrorKind.PERMISSION_DENIED,
                "No permission to read billing information. Required role: roles/billing.viewer",
                f"Ask the project owner for access, or check the console directly: {BILLING_CONSOLE_URL}",
            )
        raise

    if not isinstance(info, dict):
        info = {}

    billing_enabled = info.get("billingEnabled") is True
    billing_account = info.get("billingAccountName") or "N/A"
    budget = await first_budget(ctx, billing_account)

    if output_format == "json":
        return json_response({
            "project": project,
            "billing_enabled": billing_enabled,
            "billing_account": billing_account,
            "budget": {
                "display_name": budget.get("displayName"),
                "amount": budget_amount(budget) or "N/A",
            } if budget else None,
        })

    lines = [
        "💰 GCP billing information",
        "",
        f"📁 Project: {project}",
        f"{'✅' if billing_enabled else '❌'} Billing enabled: {'yes' if billing_enabled else 'no'}",
        f"💳 Billing account: {billing_account}",
    ]

    if budget:
        lines.extend(["", "📊 Budget:", f"  Name: {budget.get('displayName') or 'N/A'}"])
        amount = budget_amount(budget)
        if amount:
            lines.append(f"  Amount: {amount}")

    lines.extend([
        "",
        "💡 Detailed costs:",
        f"  {BILLING_CONSOLE_URL}/linkedaccount?project={project}",
        "",
        "📈 Cost reports:",
        f"  {BILLING_CONSOLE_URL}/reports",
        "",
        "💡 Cost saving tips:",
    ])
    lines.extend(f"  - {tip}" for tip in COST_TIPS)

    return text_response("\n".join(lines))


def register_billing_tools(mcp: FastMCP, ctx: ToolContext) -> None:
    """Register billing tools."""

    @mcp.tool(name="gcp_billing_info", annotations=READ_ONLY)
    async def gcp_billing_info(project_id: Optional[str] = None, format: OutputFormat = "text") -> CallToolResult:
        """Show the billing account and budget linked to a GCP project, with links to cost reports.

        Args:
            project_id: GCP project ID
            format: Output format, 'text' or 'json'
        """
        return await dispatch(ctx, "gcp_billing_info", billing_info, project_id=project_id, output_format=format)
