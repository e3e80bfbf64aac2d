"""Cloud Storage listing."""

import re
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult

from ..constants import DEFAULT_STORAGE_LIMIT, STORAGE_TIMEOUT
from ..core.models import OutputFormat
from ..utils.formatters import format_storage_list
from .base import READ_ONLY, ToolContext, dispatch, json_response, text_response, tool_handler


# "    SIZE  CREATED  gs://bucket/path"
LS_LINE_PATTERN = re.compile(r"^\s*(\d+)\s+(\S+)\s+gs://(.+)$")
PATH_PATTERN = re.compile(r"gs://(.+)")


def _strip_bucket(path: str, bucket: str) -> str:
    prefix = f"{bucket}/"
    return path[len(prefix):] if path.startswith(prefix) else path


def parse_ls_output(output: str, bucket: str) -> List[Dict[str, Any]]:
    """Parse ``gcloud storage ls -l`` output into object dicts."""
    objects = []
    for line in output.splitlines():
        if not line.strip():
            continue

        match = LS_LINE_PATTERN.match(line)
        if match:
            objects.append({
                "name": _strip_bucket(match.group(3), bucket),
                "size": int(match.group(1)),
                "created": match.group(2),
            })
            continue

        # prefixes ("directories") carry no size column
        path_match = PATH_PATTERN.search(line)
        if path_match:
            objects.append({
                "name": _strip_bucket(path_match.group(1).strip(), bucket),
                "size": 0,
                "is_directory": True,
            })

    return objects


@tool_handler
async def storage_list(
    ctx: ToolContext,
    bucket: Optional[str] = None,
    prefix: Optional[str] = None,
    project_id: Optional[str] = None,
    limit: int = DEFAULT_STORAGE_LIMIT,
    output_format: OutputFormat = "text",
):
    """List buckets, or objects inside one bucket."""
    project = await ctx.resolver.resolve_project(project_id)
    limit = limit if limit and limit > 0 else DEFAULT_STORAGE_LIMIT

    if bucket:
        path = f"gs://{bucket}"
        if prefix:
            path += f"/{prefix}"

        ctx.logger.info(f"🪣 Listing objects in {path}")
        result = await ctx.client.execute(["storage", "ls", "-l", path, f"--project={project}"], STORAGE_TIMEOUT)
        objects = parse_ls_output(result.stdout, bucket)[:limit]

        if output_format == "json":
            return json_response({
                "project": project,
                "bucket": bucket,
                "prefix": prefix,
                "total_objects": len(objects),
                "objects": objects,
            })

        header = f"📦 Bucket: {bucket}\n"
        if prefix:
            header += f"📂 Prefix: {prefix}\n"
        return text_response(f"{header}\n{format_storage_list(objects, is_bucket_list=False)}")

    ctx.logger.info(f"🪣 Listing buckets in {project}")
    buckets = await ctx.client.execute_json(
        ["storage", "buckets", "list", f"--project={project}", "--format=json"],
        STORAGE_TIMEOUT,
        default=[],
    )
    if not isinstance(buckets, list):
        buckets = []

    bucket_list = [
        {
            "name": b.get("name") or b.get("id"),
            "location": b.get("location"),
            "storage_class": b.get("storageClass") or b.get("default_storage_class"),
            "created": b.get("timeCreated") or b.get("creation_time"),
        }
        for b in buckets[:limit]
        if isinstance(b, dict)
    ]

    if output_format == "json":
        return json_response({"project": project, "total_buckets": len(bucket_list), "buckets": bucket_list})

    return text_response(f"Project: {project}\n\n{format_storage_list(bucket_list, is_bucket_list=True)}")


def register_storage_tools(mcp: FastMCP, ctx: ToolContext) -> None:
    """Register Cloud Storage tools."""

    @mcp.tool(name="gcp_storage_list", annotations=READ_ONLY)
    async def gcp_storage_list(
        bucket: Optional[str] = None,
        prefix: Optional[str] = None,
        project_id: Optional[str] = None,
        limit: int = DEFAULT_STORAGE_LIMIT,
        format: OutputFormat = "text",
    ) -> CallToolResult:
        """List Cloud Storage buckets, or the objects in a bucket when one is given.

        Args:
            bucket: Bucket name; omit to list buckets
            prefix: Object prefix filter, e.g. 'logs/'
            project_id: GCP project ID
            limit: Maximum number of items (default: 50)
            format: Output format, 'text' or 'json'
        """
        return await dispatch(
            ctx, "gcp_storage_list", storage_list,
            bucket=bucket, prefix=prefix, project_id=project_id, limit=limit, output_format=format,
        )
