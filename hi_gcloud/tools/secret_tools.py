"""Secret Manager tools."""

from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult

from ..constants import SECRETS_TIMEOUT
from ..core.models import OutputFormat
from .base import READ_ONLY, ToolContext, dispatch, json_response, text_response, tool_handler


STATE_EMOJI = {"ENABLED": "✅", "DISABLED": "⏸️"}


def short_name(resource_name: Optional[str]) -> Optional[str]:
    """``projects/p/secrets/s/versions/3`` -> ``3``."""
    return resource_name.rsplit("/", 1)[-1] if resource_name else resource_name


@tool_handler
async def secret_list(
    ctx: ToolContext,
    secret_name: Optional[str] = None,
    project_id: Optional[str] = None,
    show_value: bool = False,
    version: str = "latest",
    output_format: OutputFormat = "text",
):
    """List secrets, list versions of a secret, or access a secret value."""
    project = await ctx.resolver.resolve_project(project_id)

    if secret_name and show_value:
        version = version or "latest"
        ctx.logger.warning(f"Accessing value of secret {secret_name} (version {version})", "secrets")
        result = await ctx.client.execute(
            ["secrets", "versions", "access", version, f"--secret={secret_name}", f"--project={project}"],
            SECRETS_TIMEOUT,
        )
        value = result.stdout.strip()

        if output_format == "json":
            return json_response({"project": project, "secret": secret_name, "version": version, "value": value})
        return text_response(f"🔐 Secret: {secret_name}\nVersion: {version}\n\nValue:\n{value}")

    if secret_name:
        ctx.logger.info(f"🔐 Listing versions of secret {secret_name}")
        versions = await ctx.client.execute_json(
            ["secrets", "versions", "list", secret_name, f"--project={project}", "--format=json"],
            SECRETS_TIMEOUT,
            default=[],
        )
        version_list = [
            {"name": short_name(v.get("name")), "state": v.get("state"), "created": v.get("createTime")}
            for v in versions if isinstance(v, dict)
        ] if isinstance(versions, list) else []

        if output_format == "json":
            return json_response({"project": project, "secret": secret_name, "versions": version_list})

        lines = [f"🔐 Versions of secret: {secret_name}", ""]
        if not version_list:
            lines.append("No versions found.")
        for v in version_list:
            lines.append(f"  {STATE_EMOJI.get(v['state'], '❌')} {v['name']} - {v['state']}")
        return text_response("\n".join(lines))

    ctx.logger.info(f"🔐 Listing secrets in {project}")
    secrets = await ctx.client.execute_json(
        ["secrets", "list", f"--project={project}", "--format=json"],
        SECRETS_TIMEOUT,
        default=[],
    )
    secret_items = [
        {"name": short_name(s.get("name")), "created": s.get("createTime"), "labels": s.get("labels")}
        for s in secrets if isinstance(s, dict)
    ] if isinstance(secrets, list) else []

    if output_format == "json":
        return json_response({"project": project, "total_secrets": len(secret_items), "secrets": secret_items})

    lines = ["🔐 Secret Manager secrets", f"Project: {project}", ""]
    if not secret_items:
        lines.append("No secrets found.")
    for s in secret_items:
        lines.append(f"  🔑 {s['name']}")
    return text_response("\n".join(lines))


def register_secret_tools(mcp: FastMCP, ctx: ToolContext) -> None:
    """Register Secret Manager tools."""

    @mcp.tool(name="gcp_secret_list", annotations=READ_ONLY)
    async def gcp_secret_list(
        secret_name: Optional[str] = None,
        project_id: Optional[str] = None,
        show_value: bool = False,
        version: str = "latest",
        format: OutputFormat = "text",
    ) -> CallToolResult:
        """List Secret Manager secrets, the versions of one secret, or (with show_value) its value.

        Args:
            secret_name: Secret name; omit to list all secrets
            project_id: GCP project ID
            show_value: Print the secret value (default: false, handle with care)
            version: Version to access (default: latest)
            format: Output format, 'text' or 'json'
        """
        return await dispatch(
            ctx, "gcp_secret_list", secret_list,
            secret_name=secret_name, project_id=project_id, show_value=show_value,
            version=version, output_format=format,
        )
