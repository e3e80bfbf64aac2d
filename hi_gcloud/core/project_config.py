"""Per-directory project configuration (``.hi-gcloud.json``)."""

import json
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from .config import Config
from .logger import HiGcloudLogger
from .models import ConfigReadResult, ConfigWriteResult, ProjectConfig


PathLike = Union[str, Path]


class ProjectConfigStore:
    """Reads and writes the project config file of a working directory.

    Nothing is cached: every call goes to disk, so a write (by this process
    or by hand) is observed by the next read.
    """

    def __init__(self, config: Config, logger: Optional[HiGcloudLogger] = None):
        self.config = config
        self.logger = logger

    def config_path(self, directory: Optional[PathLike] = None) -> Path:
        """Path of the config file for ``directory`` (default: the working context)."""
        base = Path(directory).expanduser() if directory else self.config.get_workdir()
        return base / self.config.config_filename

    def read(self, directory: Optional[PathLike] = None) -> ConfigReadResult:
        """Read and validate the config file."""
        path = self.config_path(directory)

        if not path.exists():
            return ConfigReadResult(exists=False, path=str(path))

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self._log_error(path, e)
            return ConfigReadResult(exists=True, path=str(path), error=f"Failed to parse config file: {e}")

        if not isinstance(data, dict):
            return ConfigReadResult(
                exists=True,
                path=str(path),
                error=f"Config file must contain a JSON object, got {type(data).__name__}"
            )

        try:
            project_config = ProjectConfig.model_validate(data, strict=True)
        except ValidationError as e:
            fields = ", ".join(".".join(str(loc) for loc in err["loc"]) for err in e.errors())
            return ConfigReadResult(exists=True, path=str(path), error=f"Invalid config field(s): {fields}")

        if project_config.is_disabled:
            return ConfigReadResult(exists=True, disabled=True, config=project_config, path=str(path))

        if project_config.enabled is True and not project_config.project_id:
            return ConfigReadResult(exists=True, path=str(path), error="project_id is not set")

        return ConfigReadResult(exists=True, disabled=False, config=project_config, path=str(path))

    def write(self, project_config: ProjectConfig, directory: Optional[PathLike] = None) -> ConfigWriteResult:
        """Overwrite the config file with ``project_config``."""
        path = self.config_path(directory)
        content = json.dumps(project_config.model_dump(exclude_none=True), indent=2) + "\n"

        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            if self.logger:
                self.logger.error(f"Failed to write {path}: {e}", "config")
            return ConfigWriteResult(success=False, path=str(path), error=str(e))

        if self.logger:
            self.logger.info(f"Wrote {path}", "config")
        return ConfigWriteResult(success=True, path=str(path))

    def write_disabled(self, directory: Optional[PathLike] = None) -> ConfigWriteResult:
        """Write the pure disabled marker ``{"enabled": false}``."""
        return self.write(ProjectConfig(enabled=False), directory)

    def is_disabled(self, directory: Optional[PathLike] = None) -> bool:
        result = self.read(directory)
        return result.exists and result.disabled

    def _log_error(self, path: Path, error: Exception):
        if self.logger:
            self.logger.warning(f"Unreadable config {path}: {error}", "config")
