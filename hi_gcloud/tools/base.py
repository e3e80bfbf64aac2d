"""Shared plumbing for tool handlers."""

import functools
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from mcp.types import CallToolResult, TextContent, ToolAnnotations

from ..core.config import Config
from ..core.exceptions import ErrorKind, HiGcloudError
from ..core.logger import HiGcloudLogger
from ..core.models import ToolResponse
from ..core.project_config import ProjectConfigStore
from ..core.resolver import ParameterResolver
from ..providers.gcp.auth import GcloudAuth
from ..providers.gcp.client import GcloudClient
from ..utils.formatters import format_error, format_json


READ_ONLY = ToolAnnotations(
    readOnlyHint=True,
    destructiveHint=False,
    idempotentHint=True,
    openWorldHint=True,
)


@dataclass
class ToolContext:
    """Everything a handler needs: settings, logging, config file and gcloud."""

    config: Config
    logger: HiGcloudLogger
    store: ProjectConfigStore
    client: GcloudClient
    auth: GcloudAuth
    resolver: ParameterResolver

    @classmethod
    def create(cls, config: Config, logger: HiGcloudLogger) -> "ToolContext":
        store = ProjectConfigStore(config, logger)
        client = GcloudClient(config, logger)
        return cls(
            config=config,
            logger=logger,
            store=store,
            client=client,
            auth=GcloudAuth(client, logger),
            resolver=ParameterResolver(store, client, logger),
        )


def text_response(text: str) -> ToolResponse:
    return ToolResponse(text=text)


def json_response(payload: Any) -> ToolResponse:
    return ToolResponse(text=format_json(payload))


def error_response(error: HiGcloudError, output_format: str = "text") -> ToolResponse:
    """Render an error once, as ``❌ message`` text or a JSON ``error`` object."""
    if output_format == "json":
        return ToolResponse(text=format_json({"error": error.to_dict()}), is_error=True)
    return ToolResponse(text=format_error(error), is_error=True)


def tool_handler(func: Callable[..., Awaitable[ToolResponse]]) -> Callable[..., Awaitable[ToolResponse]]:
    """Turn errors raised inside a handler into an error :class:`ToolResponse`."""

    @functools.wraps(func)
    async def wrapper(ctx: ToolContext, *args, **kwargs) -> ToolResponse:
        output_format = kwargs.get("output_format", "text")
        try:
            return await func(ctx, *args, **kwargs)
        except HiGcloudError as e:
            ctx.logger.warning(f"{func.__name__}: {e.kind.value} - {e.message}", "tool")
            return error_response(e, output_format)
        except Exception as e:
            ctx.logger.error(f"{func.__name__} failed unexpectedly: {e}", "tool")
            ctx.logger.logger.exception("Unhandled error in tool handler")
            return error_response(HiGcloudError(ErrorKind.UNKNOWN, f"Error: {e}"), output_format)

    return wrapper


def to_call_result(response: ToolResponse) -> CallToolResult:
    return CallToolResult(
        content=[TextContent(type="text", text=response.text)],
        isError=response.is_error,
    )


async def dispatch(ctx: ToolContext, tool_name: str, handler, **params) -> CallToolResult:
    """Run ``handler`` for an MCP call, with request logging."""
    ctx.logger.request_received(tool_name, params)
    start_time = time.time()

    response = await handler(ctx, **params)

    ctx.logger.request_completed(tool_name, time.time() - start_time, success=not response.is_error)
    return to_call_result(response)
