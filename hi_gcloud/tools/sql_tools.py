"""Cloud SQL read-only query validation."""

import re
from typing import Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult

from ..constants import SQL_ROW_LIMIT
from ..core.exceptions import ErrorKind, InputError
from ..core.models import OutputFormat
from .base import READ_ONLY, ToolContext, dispatch, json_response, text_response, tool_handler


FORBIDDEN_KEYWORDS = ("insert", "update", "delete", "drop", "truncate", "alter", "create", "grant", "revoke")
FORBIDDEN_PATTERN = re.compile(r"\b(" + "|".join(FORBIDDEN_KEYWORDS) + r")\b")
LIMIT_PATTERN = re.compile(r"\blimit\b")


def validate_read_only_query(query: str) -> str:
    """Return ``query`` capped with a row limit, or raise ``InputError(QUERY_REJECTED)``."""
    normalized = query.strip().lower()

    if not normalized.startswith("select"):
        raise InputError(
            ErrorKind.QUERY_REJECTED,
            "Only SELECT queries are allowed.",
            "INSERT, UPDATE, DELETE, DROP and other modifying statements cannot be run."
        )

    match = FORBIDDEN_PATTERN.search(normalized)
    if match:
        raise InputError(
            ErrorKind.QUERY_REJECTED,
            f'Queries containing "{match.group(1).upper()}" are not allowed.',
            "Rewrite the query as a single read-only SELECT statement."
        )

    safe_query = query.strip().rstrip(";").rstrip()
    if not LIMIT_PATTERN.search(normalized):
        safe_query += f" LIMIT {SQL_ROW_LIMIT}"
    return safe_query


@tool_handler
async def sql_query(
    ctx: ToolContext,
    instance: Optional[str] = None,
    database: Optional[str] = None,
    query: Optional[str] = None,
    project_id: Optional[str] = None,
    output_format: OutputFormat = "text",
):
    """Validate a read-only query and explain how to run it."""
    missing = [name for name, value in (("instance", instance), ("database", database), ("query", query))
               if not value or not value.strip()]
    if missing:
        raise InputError(
            ErrorKind.MISSING_ARGUMENT,
            f"Missing required argument(s): {', '.join(missing)}.",
            "gcp_sql_query needs instance, database and query."
        )

    safe_query = validate_read_only_query(query)
    project = await ctx.resolver.resolve_project(project_id)
    connect_command = f"gcloud sql connect {instance} --database={database} --project={project}"

    alternatives = [
        "Use Cloud SQL Studio in the GCP Console",
        "Run the Cloud SQL Auth Proxy and connect locally",
        f"Run `{connect_command}` yourself",
    ]

    ctx.logger.info(f"🗄️ Validated query for {instance}/{database}")

    if output_format == "json":
        return json_response({
            "project": project,
            "instance": instance,
            "database": database,
            "query": safe_query,
            "executed": False,
            "alternatives": alternatives,
        })

    lines = [
        "⚠️ Direct Cloud SQL connections are not available",
        "",
        "Running the query needs the Cloud SQL Auth Proxy or a direct connection.",
        "",
        "Validated query:",
        safe_query,
        "",
        "Alternatives:",
    ]
    lines.extend(f"{idx}. {alt}" for idx, alt in enumerate(alternatives, 1))
    return text_response("\n".join(lines))


def register_sql_tools(mcp: FastMCP, ctx: ToolContext) -> None:
    """Register Cloud SQL tools."""

    @mcp.tool(name="gcp_sql_query", annotations=READ_ONLY)
    async def gcp_sql_query(
        instance: str,
        database: str,
        query: str,
        project_id: Optional[str] = None,
        format: OutputFormat = "text",
    ) -> CallToolResult:
        """Check a read-only SQL query against a Cloud SQL instance (SELECT only).

        Args:
            instance: Cloud SQL instance name
            database: Database name
            query: SELECT statement; a LIMIT 100 is added when no LIMIT is given
            project_id: GCP project ID
            format: Output format, 'text' or 'json'
        """
        return await dispatch(
            ctx, "gcp_sql_query", sql_query,
            instance=instance, database=database, query=query,
            project_id=project_id, output_format=format,
        )
