"""Text rendering helpers for tool output."""

import json
import re
from datetime import datetime
from typing import Any, Dict, List

from ..constants import (
    ERROR_DETAIL_TRUNCATE,
    ERROR_SEVERITIES,
    MESSAGE_TRUNCATE,
    RECENT_ERRORS_SHOWN,
)
from ..core.exceptions import HiGcloudError
from ..core.models import ErrorReport, LogEntry, RunServiceStatus


TIMESTAMP_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(\.\d+)?(Z|[+-]\d{2}:?\d{2})?$")


def severity_emoji(severity: str) -> str:
    """Get emoji for a log severity."""
    severity = (severity or "").upper()
    if severity in ERROR_SEVERITIES:
        return "🔴"
    if severity == "WARNING":
        return "🟡"
    if severity in ("NOTICE", "INFO"):
        return "🔵"
    if severity == "DEBUG":
        return "⚪"
    return "⚫"


def format_timestamp(timestamp: str) -> str:
    """Shorten an RFC 3339 timestamp for display; unparseable input is returned as is."""
    match = TIMESTAMP_PATTERN.match(timestamp or "")
    if not match:
        return timestamp or ""
    try:
        parsed = datetime.strptime(match.group(1), "%Y-%m-%dT%H:%M:%S")
    except ValueError:
        return timestamp
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{value:.2f} {units[index]}"


def format_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


def format_error(error: HiGcloudError) -> str:
    """Render an error as text."""
    if error.suggestion:
        return f"❌ {error.message}\n\n💡 {error.suggestion}"
    return f"❌ {error.message}"


def format_log_entries(entries: List[LogEntry]) -> str:
    """One line per entry, messages truncated."""
    if not entries:
        return "No logs found."

    lines = []
    for entry in entries:
        emoji = severity_emoji(entry.severity)
        time = format_timestamp(entry.timestamp)
        lines.append(f"{emoji} [{time}] {entry.severity:<8} {entry.message[:MESSAGE_TRUNCATE]}")

    return "\n".join(lines)


def create_error_report(entries: List[LogEntry]) -> ErrorReport:
    """Pick out error-level entries and summarize them."""
    errors = [e for e in entries if e.severity.upper() in ERROR_SEVERITIES]

    if errors:
        summary = f"🔴 Found {len(errors)} error(s)."
    else:
        summary = "✅ No errors found."

    return ErrorReport(summary=summary, errors=errors, has_errors=bool(errors))


def create_detailed_error_report(entries: List[LogEntry]) -> str:
    """Summary plus per-severity counts and the most recent errors."""
    report = create_error_report(entries)
    if not report.has_errors:
        return report.summary

    lines = [report.summary, ""]

    # Group by severity, keeping first-seen order
    counts: Dict[str, int] = {}
    for error in report.errors:
        severity = error.severity.upper()
        counts[severity] = counts.get(severity, 0) + 1

    lines.append("📋 Error summary:")
    for severity, count in counts.items():
        lines.append(f"  {severity_emoji(severity)} {severity}: {count}")
    lines.append("")

    lines.append("🔍 Recent errors:")
    for idx, error in enumerate(report.errors[:RECENT_ERRORS_SHOWN], 1):
        lines.append(f"  {idx}. [{format_timestamp(error.timestamp)}] {error.message[:ERROR_DETAIL_TRUNCATE]}")
        if error.resource:
            lines.append(f"     └ Resource: {error.resource}")

    if len(report.errors) > RECENT_ERRORS_SHOWN:
        lines.append(f"  ... and {len(report.errors) - RECENT_ERRORS_SHOWN} more")

    return "\n".join(lines)


def format_run_status(status: RunServiceStatus) -> str:
    lines = [
        f"📦 Service: {status.name}",
        f"🌐 URL: {status.url}",
        f"📍 Region: {status.region}",
        f"🔄 Revision: {status.revision}",
        f"{'✅' if status.status == 'Ready' else '❌'} Status: {status.status}",
    ]

    if status.traffic:
        lines.append("\n📊 Traffic split:")
        for target in status.traffic:
            lines.append(f"  - {target.revision_name}: {target.percent}%")

    if status.last_deployed:
        lines.append(f"\n🕐 Last deployed: {format_timestamp(status.last_deployed)}")

    lines.append(f"🐳 Image: {status.container_image}")
    return "\n".join(lines)


def format_storage_list(items: List[Dict[str, Any]], is_bucket_list: bool) -> str:
    if not items:
        return "No buckets found." if is_bucket_list else "No objects found."

    if is_bucket_list:
        lines = ["📦 Buckets:"]
        for bucket in items:
            lines.append(f"  📁 {bucket['name']}")
            if bucket.get("location"):
                lines.append(f"     └ Location: {bucket['location']}")
    else:
        lines = ["📄 Objects:"]
        for obj in items:
            if obj.get("is_directory"):
                lines.append(f"  📂 {obj['name']}")
            else:
                lines.append(f"  📄 {obj['name']} ({format_file_size(obj.get('size', 0))})")

    return "\n".join(lines)
