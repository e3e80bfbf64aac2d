"""
Hi-GCloud - GCP operations for MCP clients

A Model Context Protocol (MCP) server that lets language-model clients read
Cloud Logging, Cloud Run, Storage, Secret Manager, service and billing data
through the gcloud CLI, with per-directory project configuration.
"""

__version__ = "0.2.0"

from .server import HiGcloudServer

__all__ = ["HiGcloudServer"]
