"""Enhanced logging system for Hi-GCloud."""

import logging
import sys
import os
from typing import Optional
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table


def is_mcp_mode() -> bool:
    """Detect if we're running in MCP mode where stdout is used for JSON communication."""
    # Explicit MCP mode flag
    if os.environ.get("HI_GCLOUD_MCP_MODE") == "true":
        return True

    # Check if we're running with stdio transport (default for MCP)
    transport = os.environ.get("MCP_TRANSPORT", "stdio")

    # If stdout is not a TTY and we're using stdio transport, likely MCP mode
    if transport == "stdio" and not sys.stdout.isatty():
        return True

    return False


class HiGcloudLogger:
    """Enhanced logger with emojis and rich formatting."""

    def __init__(self, name: str, level: str = "INFO"):
        # In MCP mode, use stderr to avoid polluting stdout JSON communication
        console_file = sys.stderr if is_mcp_mode() else sys.stdout
        self.console = Console(file=console_file)
        self.is_mcp_mode = is_mcp_mode()

        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))

        # Clear existing handlers; FastMCP configures the root logger too
        self.logger.handlers.clear()
        self.logger.propagate = False

        rich_handler = RichHandler(
            console=self.console,
            show_time=True,
            show_path=False,
            markup=True,
            rich_tracebacks=True
        )
        rich_handler.setFormatter(logging.Formatter("%(message)s"))
        self.logger.addHandler(rich_handler)

    def startup_banner(self, config_dict: dict):
        """Display startup banner with configuration."""
        # Skip rich banners in MCP mode to avoid JSON pollution
        if self.is_mcp_mode:
            self.logger.info("Hi-GCloud starting...")
            return

        banner = Panel.fit(
            "[bold blue]☁️ Hi-GCloud[/bold blue]\n"
            "[dim]GCP operations for MCP clients via the gcloud CLI[/dim]",
            border_style="blue"
        )
        self.console.print(banner)

        table = Table(title="🔧 Configuration", show_header=True, header_style="bold magenta")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        for key, value in config_dict.items():
            if isinstance(value, dict):
                for sub_key, sub_value in value.items():
                    table.add_row(f"{key}.{sub_key}", str(sub_value))
            else:
                table.add_row(key, str(value))

        self.console.print(table)

    def config_status(self, status: str, details: Optional[str] = None):
        """Log the project config state with an appropriate emoji."""
        emoji_map = {
            'enabled': '✅',
            'error': '❌',
            'missing': '📋',
            'disabled': '⏸️'
        }

        emoji = emoji_map.get(status, '📋')
        message = f"{emoji} Project config: {status}"
        if details:
            message += f" - {details}"

        if status == 'error':
            self.logger.error(message)
        else:
            self.logger.info(message)

    def request_received(self, tool_name: str, params: dict):
        """Log incoming MCP requests."""
        provided = [key for key, value in params.items() if value is not None]
        self.logger.info(
            f"📥 [bold cyan]{tool_name}[/bold cyan] request "
            f"with {len(provided)} parameters"
        )

    def request_completed(self, tool_name: str, duration: float, success: bool = True):
        """Log completed requests."""
        emoji = "✅" if success else "❌"
        status = "completed" if success else "failed"
        self.logger.info(
            f"{emoji} [bold cyan]{tool_name}[/bold cyan] {status} in {duration:.2f}s"
        )

    def command_executed(self, args: list, duration: float, returncode: Optional[int]):
        """Log a finished gcloud subprocess at debug level."""
        self.logger.debug(
            f"🔧 gcloud {' '.join(args[:3])}... exited {returncode} in {duration:.2f}s"
        )

    def error(self, message: str, context: Optional[str] = None):
        """Log errors with context."""
        prefix = f"[red]{context.upper()}[/red] " if context else ""
        self.logger.error(f"❌ {prefix}{message}")

    def warning(self, message: str, context: Optional[str] = None):
        """Log warnings with context."""
        prefix = f"[yellow]{context.upper()}[/yellow] " if context else ""
        self.logger.warning(f"⚠️ {prefix}{message}")

    def info(self, message: str, context: Optional[str] = None):
        """Log info messages with context."""
        prefix = f"[blue]{context.upper()}[/blue] " if context else ""
        self.logger.info(f"ℹ️ {prefix}{message}")

    def debug(self, message: str, context: Optional[str] = None):
        """Log debug messages with context."""
        prefix = f"[dim]{context.upper()}[/dim] " if context else ""
        self.logger.debug(f"🔍 {prefix}{message}")


def setup_logger(name: str = "hi_gcloud", level: str = "INFO") -> HiGcloudLogger:
    """Setup and return the enhanced logger."""
    return HiGcloudLogger(name, level)
