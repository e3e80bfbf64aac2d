"""Core functionality for Hi-GCloud."""

from .config import Config
from .exceptions import ErrorKind, GcloudError, HiGcloudError, InputError
from .logger import setup_logger
from .project_config import ProjectConfigStore
from .resolver import ParameterKind, ParameterResolver
from .visibility import VisibilityGate

__all__ = [
    "Config",
    "ErrorKind",
    "GcloudError",
    "HiGcloudError",
    "InputError",
    "setup_logger",
    "ProjectConfigStore",
    "ParameterKind",
    "ParameterResolver",
    "VisibilityGate",
]
