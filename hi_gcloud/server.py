"""
Hi-GCloud - GCP operations for MCP clients

An MCP server that exposes Cloud Logging, Cloud Run, Storage, Secret Manager,
service and billing information by shelling out to the gcloud CLI. A
per-directory ``.hi-gcloud.json`` pins the project/region and can hide the
whole tool surface for directories that have nothing to do with GCP.
"""

from typing import Dict, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import Tool as MCPTool
from rich.table import Table

from .core.config import Config
from .core.exceptions import HiGcloudError
from .core.logger import HiGcloudLogger, setup_logger
from .core.visibility import VisibilityGate
from .tools import ToolContext, register_all_tools


SERVER_NAME = "Hi-GCloud"


class GatedFastMCP(FastMCP):
    """FastMCP whose tool listing passes through a :class:`VisibilityGate`.

    Only advertisement is filtered; hidden tools can still be called by name
    so that ``gcp_setup`` can re-enable a disabled directory.
    """

    def __init__(self, name: str, gate: VisibilityGate, **settings):
        self.gate = gate
        super().__init__(name, **settings)

    async def list_tools(self) -> List[MCPTool]:
        tools = await super().list_tools()
        return self.gate.visible_tools(tools)


class HiGcloudServer:
    """Wires configuration, logging, gcloud access and the MCP tool surface."""

    def __init__(self, config: Optional[Config] = None, logger: Optional[HiGcloudLogger] = None):
        self.config = config or Config()
        self.logger = logger or setup_logger("hi_gcloud", self.config.log_level)
        self.ctx = ToolContext.create(self.config, self.logger)
        self.gate = VisibilityGate(self.ctx.store, self.logger)
        self.mcp = GatedFastMCP(SERVER_NAME, self.gate)
        register_all_tools(self.mcp, self.ctx)

    def run(self, transport: Optional[str] = None):
        """Run the server (blocking)."""
        transport = transport or self.config.mcp_transport
        self.logger.startup_banner(self.config.to_dict())
        self._log_config_state()
        self.logger.info(f"🚀 Starting {SERVER_NAME} with {transport} transport")
        self.mcp.run(transport=transport)

    def _log_config_state(self):
        result = self.ctx.store.read()
        if not result.exists:
            self.logger.config_status("missing", f"{result.path} (all tools enabled)")
        elif result.error:
            self.logger.config_status("error", result.error)
        elif result.disabled:
            self.logger.config_status("disabled", result.path)
        else:
            self.logger.config_status("enabled", f"project {result.config.project_id or '(gcloud default)'}")

    async def check(self) -> Dict:
        """Collect config file and gcloud auth state for the ``--check`` report."""
        result = self.ctx.store.read()
        auth = await self.ctx.auth.check_auth()

        if not result.exists:
            config_state = "missing (tools enabled)"
        elif result.error:
            config_state = f"error: {result.error}"
        elif result.disabled:
            config_state = "disabled (tools hidden)"
        else:
            config_state = "enabled"

        project = None
        try:
            project = await self.ctx.resolver.resolve_project()
        except HiGcloudError as e:
            self.logger.debug(f"Project not resolvable: {e.message}")

        return {
            "config_file": result.path,
            "config_state": config_state,
            "authenticated": auth.authenticated,
            "account": auth.account or (auth.error or {}).get("message", "-"),
            "project": project or "(not set)",
            "region": await self.ctx.resolver.resolve_region() or "(not set)",
        }

    def print_check(self, report: Dict):
        table = Table(title="☁️ Hi-GCloud status", show_header=True, header_style="bold magenta")
        table.add_column("Check", style="cyan")
        table.add_column("Result", style="green")
        for key, value in report.items():
            if isinstance(value, bool):
                value = "✅ yes" if value else "❌ no"
            table.add_row(key, str(value))
        self.logger.console.print(table)
