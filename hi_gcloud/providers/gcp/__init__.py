"""gcloud subprocess runner, error classification and auth checks."""

from .auth import GcloudAuth
from .client import GcloudClient
from .errors import classify_error

__all__ = ["GcloudAuth", "GcloudClient", "classify_error"]
