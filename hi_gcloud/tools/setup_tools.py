"""The gcp_setup tool: manage the per-directory ``.hi-gcloud.json``."""

from typing import List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, ToolAnnotations

from ..core.exceptions import ErrorKind, InputError
from ..core.models import AmbientDefaults, ConfigReadResult, ProjectConfig, SetupAction
from .base import ToolContext, dispatch, text_response, tool_handler


SETUP_ANNOTATIONS = ToolAnnotations(
    readOnlyHint=False,
    destructiveHint=False,
    idempotentHint=True,
    openWorldHint=False,
)

GITIGNORE_HINT = "> ⚠️ Consider adding .hi-gcloud.json to .gitignore."


def _config_lines(result: ConfigReadResult) -> List[str]:
    """Describe the state of the config file."""
    if not result.exists:
        return [
            f"📋 {result.path} not found (GCP tools are enabled)",
            "",
            '💡 Create one: gcp_setup(action="create", project_id="...")',
        ]
    if result.error:
        return [
            f"❌ {result.path}: {result.error}",
            "",
            '💡 Fix the file by hand, or run gcp_setup(action="enable", project_id="...") to rewrite it.',
        ]
    if result.disabled:
        return [
            f"⏸️ {result.path}: disabled (GCP tools are hidden)",
            "",
            '💡 Re-enable: gcp_setup(action="enable")',
        ]

    config = result.config
    return [
        f"✅ {result.path}",
        f"- project_id: {config.project_id or '(not set)'}",
        f"- region: {config.region or '(not set)'}",
        f"- account: {config.account or '(not set)'}",
    ]


async def setup_status(ctx: ToolContext, project_path: Optional[str] = None):
    result = ctx.store.read(project_path)
    defaults = await ctx.auth.ambient_defaults()

    if not result.exists:
        ctx.logger.config_status("missing", result.path)
    elif result.error:
        ctx.logger.config_status("error", result.error)
    else:
        ctx.logger.config_status("disabled" if result.disabled else "enabled", result.path)

    lines = [
        "📋 GCP setup status",
        "",
        "## gcloud CLI defaults",
        f"- Project: {defaults.project or '(not set)'}",
        f"- Region: {defaults.region or '(not set)'}",
        f"- Account: {defaults.account or '(not set)'}",
        "",
        "## Project config file",
    ]
    lines.extend(_config_lines(result))
    return text_response("\n".join(lines))


async def write_new_config(
    ctx: ToolContext,
    project_id: Optional[str],
    region: Optional[str],
    account: Optional[str],
    project_path: Optional[str],
):
    """Write an enabled config, filling gaps from gcloud's own defaults."""
    defaults = AmbientDefaults()
    if not (project_id and region and account):
        defaults = await ctx.auth.ambient_defaults()

    project = project_id or defaults.project
    if not project:
        raise InputError(
            ErrorKind.MISSING_ARGUMENT,
            "project_id is required: gcloud has no default project.",
            'Pass it explicitly, e.g. gcp_setup(action="create", project_id="my-project").'
        )

    new_config = ProjectConfig(
        enabled=True,
        project_id=project,
        region=region or defaults.region,
        account=account or defaults.account,
    )
    return _save(ctx, new_config, project_path)


def _save(ctx: ToolContext, new_config: ProjectConfig, project_path: Optional[str]):
    written = ctx.store.write(new_config, project_path)
    if not written.success:
        raise InputError(
            ErrorKind.CONFIG_CONFLICT,
            f"Could not write {written.path}: {written.error}",
            "Check that the directory exists and is writable."
        )

    return text_response("\n".join([
        f"✅ Saved {written.path}",
        "",
        f"📁 Project: {new_config.project_id or '(gcloud default)'}",
        f"🌍 Region: {new_config.region or '(not set)'}",
        f"👤 Account: {new_config.account or '(not set)'}",
        "",
        GITIGNORE_HINT,
    ]))


async def setup_create(ctx: ToolContext, project_id, region, account, project_path):
    result = ctx.store.read(project_path)
    if result.exists and not result.disabled:
        if result.error:
            raise InputError(
                ErrorKind.CONFIG_CONFLICT,
                f"{result.path} exists but cannot be used: {result.error}",
                'Fix or delete the file, or rewrite it with gcp_setup(action="enable").'
            )
        raise InputError(
            ErrorKind.CONFIG_CONFLICT,
            f"{result.path} already exists.",
            'Use gcp_setup(action="update") to change it.'
        )
    return await write_new_config(ctx, project_id, region, account, project_path)


async def setup_enable(ctx: ToolContext, project_id, region, account, project_path):
    result = ctx.store.read(project_path)
    if result.exists and not result.disabled and not result.error:
        raise InputError(
            ErrorKind.CONFIG_CONFLICT,
            f"GCP tools are already enabled ({result.path}).",
            'Use gcp_setup(action="update") to change settings.'
        )
    return await write_new_config(ctx, project_id, region, account, project_path)


async def setup_update(ctx: ToolContext, project_id, region, account, project_path):
    result = ctx.store.read(project_path)
    if not result.exists:
        raise InputError(
            ErrorKind.CONFIG_CONFLICT,
            f"{result.path} does not exist.",
            'Use gcp_setup(action="create") first.'
        )
    if result.disabled:
        raise InputError(
            ErrorKind.CONFIG_CONFLICT,
            "GCP tools are disabled for this directory.",
            'Use gcp_setup(action="enable") first.'
        )
    if result.error:
        raise InputError(
            ErrorKind.CONFIG_CONFLICT,
            f"{result.path} cannot be updated: {result.error}",
            'Fix the file by hand, or rewrite it with gcp_setup(action="enable").'
        )

    changes = {
        key: value
        for key, value in (("project_id", project_id), ("region", region), ("account", account))
        if value
    }
    return _save(ctx, result.config.model_copy(update=changes), project_path)


async def setup_disable(ctx: ToolContext, project_path: Optional[str] = None):
    written = ctx.store.write_disabled(project_path)
    if not written.success:
        raise InputError(
            ErrorKind.CONFIG_CONFLICT,
            f"Could not write {written.path}: {written.error}",
            "Check that the directory exists and is writable."
        )

    ctx.logger.config_status("disabled", written.path)
    return text_response("\n".join([
        f"⏸️ GCP tools disabled for this directory ({written.path})",
        "",
        "The tool list stays empty until re-enabled.",
        '💡 Re-enable: gcp_setup(action="enable")',
    ]))


@tool_handler
async def setup(
    ctx: ToolContext,
    action: SetupAction = "status",
    project_id: Optional[str] = None,
    region: Optional[str] = None,
    account: Optional[str] = None,
    project_path: Optional[str] = None,
):
    """Dispatch a setup action."""
    action = action or "status"

    if action == "status":
        return await setup_status(ctx, project_path)
    if action == "disable":
        return await setup_disable(ctx, project_path)

    writers = {"create": setup_create, "enable": setup_enable, "update": setup_update}
    if action not in writers:
        raise InputError(
            ErrorKind.INVALID_ARGUMENT,
            f"Unknown action: {action}",
            "Use one of: status, create, update, disable, enable."
        )
    return await writers[action](ctx, project_id, region, account, project_path)


def register_setup_tools(mcp: FastMCP, ctx: ToolContext) -> None:
    """Register the setup tool."""

    @mcp.tool(name="gcp_setup", annotations=SETUP_ANNOTATIONS)
    async def gcp_setup(
        action: SetupAction = "status",
        project_id: Optional[str] = None,
        region: Optional[str] = None,
        account: Optional[str] = None,
        project_path: Optional[str] = None,
    ) -> CallToolResult:
        """Manage the per-directory GCP config file (.hi-gcloud.json).

        Actions: status (show config and gcloud defaults), create (new config),
        update (change fields), disable (hide all GCP tools here), enable (turn them back on).

        Args:
            action: status, create, update, disable or enable (default: status)
            project_id: GCP project ID (default: gcloud's configured project)
            region: Default region, e.g. asia-northeast3
            account: Account e-mail, for reference only
            project_path: Directory whose config to manage (default: the working directory)
        """
        return await dispatch(
            ctx, "gcp_setup", setup,
            action=action, project_id=project_id, region=region,
            account=account, project_path=project_path,
        )
