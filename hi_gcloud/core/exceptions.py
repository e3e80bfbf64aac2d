"""Exceptions raised by Hi-GCloud."""

from enum import Enum
from typing import Dict, Optional


class ErrorKind(str, Enum):
    """Error taxonomy shared by gcloud failures and local validation."""

    NOT_INSTALLED = "NOT_INSTALLED"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    NO_PROJECT = "NO_PROJECT"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    UNKNOWN = "UNKNOWN"
    MISSING_ARGUMENT = "MISSING_ARGUMENT"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    QUERY_REJECTED = "QUERY_REJECTED"
    CONFIG_CONFLICT = "CONFIG_CONFLICT"


class HiGcloudError(Exception):
    """Base error carrying a user-facing message and a remediation hint."""

    def __init__(self, kind: ErrorKind, message: str, suggestion: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.suggestion = suggestion or ""

    def to_dict(self) -> Dict[str, str]:
        """Convert error to the JSON error payload."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "suggestion": self.suggestion,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class GcloudError(HiGcloudError):
    """A classified failure of the gcloud CLI (or of locating it)."""


class InputError(HiGcloudError):
    """Local validation failure raised before any subprocess runs."""
