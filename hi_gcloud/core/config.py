"""Configuration management for Hi-GCloud."""

import os
from typing import Dict, Optional
from pathlib import Path
from dotenv import load_dotenv


DEFAULT_CONFIG_FILENAME = ".hi-gcloud.json"
DEFAULT_MAX_BUFFER = 10 * 1024 * 1024


class Config:
    """Process-level settings for the Hi-GCloud MCP server.

    These come from the environment (optionally a ``.env`` file). They are
    distinct from the per-directory ``.hi-gcloud.json`` project config, which
    is handled by :class:`~hi_gcloud.core.project_config.ProjectConfigStore`.
    """

    def __init__(self, workdir: Optional[str] = None) -> None:
        # Load environment variables from .env file if it exists
        env_file = Path(".env")
        if env_file.exists():
            load_dotenv(env_file)

        # Core MCP settings
        self.mcp_transport = os.environ.get('MCP_TRANSPORT', 'stdio')
        self.log_level = os.environ.get('LOG_LEVEL', 'INFO')

        # Working context for the project config file
        self.workdir = workdir or os.environ.get('HI_GCLOUD_WORKDIR')
        self.config_filename = os.environ.get('HI_GCLOUD_CONFIG_FILENAME', DEFAULT_CONFIG_FILENAME)

        # gcloud CLI settings
        self.gcloud_path = os.environ.get('HI_GCLOUD_GCLOUD_PATH')
        self.max_buffer = int(os.environ.get('HI_GCLOUD_MAX_BUFFER', str(DEFAULT_MAX_BUFFER)))

    def get_workdir(self) -> Path:
        """Return the working context, falling back to the current directory at call time."""
        if self.workdir:
            return Path(self.workdir).expanduser()
        return Path.cwd()

    def to_dict(self) -> Dict:
        """Convert config to dictionary for logging."""
        return {
            'mcp_transport': self.mcp_transport,
            'log_level': self.log_level,
            'workdir': str(self.get_workdir()),
            'config_filename': self.config_filename,
            'gcloud': {
                'path_override': self.gcloud_path or '(auto-detect)',
                'max_buffer_bytes': self.max_buffer,
            }
        }
