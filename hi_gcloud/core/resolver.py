"""Resolution of project and region parameters."""

from enum import Enum
from typing import Optional

from .exceptions import ErrorKind, GcloudError
from .logger import HiGcloudLogger
from .project_config import ProjectConfigStore


class ParameterKind(str, Enum):
    PROJECT = "project"
    REGION = "region"


NO_PROJECT_SUGGESTION = (
    "Pass project_id, run the gcp_setup tool (or create .hi-gcloud.json) "
    "to pin a project for this directory, or run `gcloud config set project PROJECT_ID`."
)


class ParameterResolver:
    """Resolves a parameter as: explicit value, then config file, then gcloud default."""

    # config file field and gcloud property for each kind
    SOURCES = {
        ParameterKind.PROJECT: ("project_id", "project"),
        ParameterKind.REGION: ("region", "compute/region"),
    }

    def __init__(self, store: ProjectConfigStore, client, logger: HiGcloudLogger):
        self.store = store
        self.client = client
        self.logger = logger

    async def resolve(self, kind: ParameterKind, explicit: Optional[str] = None) -> Optional[str]:
        if kind == ParameterKind.PROJECT:
            return await self.resolve_project(explicit)
        return await self.resolve_region(explicit)

    async def resolve_project(self, explicit: Optional[str] = None) -> str:
        """Resolve the project ID or raise ``GcloudError(NO_PROJECT)``.

        A failing gcloud query propagates its own classified error.
        """
        value = self._from_explicit_or_file(ParameterKind.PROJECT, explicit)
        if value:
            return value

        value = await self.client.get_value(self.SOURCES[ParameterKind.PROJECT][1])
        if value:
            self.logger.debug(f"project from gcloud default: {value}", "resolver")
            return value

        raise GcloudError(ErrorKind.NO_PROJECT, "No GCP project is configured.", NO_PROJECT_SUGGESTION)

    async def resolve_region(self, explicit: Optional[str] = None) -> Optional[str]:
        """Resolve the region; ``None`` when no source supplies one."""
        value = self._from_explicit_or_file(ParameterKind.REGION, explicit)
        if value:
            return value

        try:
            value = await self.client.get_value(self.SOURCES[ParameterKind.REGION][1])
        except GcloudError as e:
            self.logger.debug(f"region lookup failed: {e.message}", "resolver")
            return None

        return value or None

    def _from_explicit_or_file(self, kind: ParameterKind, explicit: Optional[str]) -> Optional[str]:
        if explicit and explicit.strip():
            return explicit.strip()

        result = self.store.read()
        if result.exists and not result.disabled and not result.error and result.config:
            value = getattr(result.config, self.SOURCES[kind][0])
            if value:
                self.logger.debug(f"{kind.value} from {result.path}: {value}", "resolver")
                return value

        return None
