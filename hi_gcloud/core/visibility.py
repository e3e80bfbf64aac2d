"""Decides whether the tool list is advertised."""

from typing import List, TypeVar

from .logger import HiGcloudLogger
from .project_config import ProjectConfigStore


T = TypeVar("T")


class VisibilityGate:
    """Hides every tool when the working directory is marked disabled.

    The config file is read on each call, so an edit takes effect on the
    very next list request.
    """

    def __init__(self, store: ProjectConfigStore, logger: HiGcloudLogger):
        self.store = store
        self.logger = logger

    def visible_tools(self, tools: List[T]) -> List[T]:
        result = self.store.read()
        if result.exists and result.disabled:
            self.logger.config_status("disabled", f"hiding {len(tools)} tools ({result.path})")
            return []
        return list(tools)
