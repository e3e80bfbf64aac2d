"""Classification of gcloud failure output."""

from typing import NamedTuple, Tuple

from ...core.exceptions import ErrorKind, GcloudError


class ErrorRule(NamedTuple):
    """One row of the classification table.

    A rule matches when the lower-cased error text contains every string in
    ``all_of`` and at least one string in ``any_of``.
    """

    kind: ErrorKind
    all_of: Tuple[str, ...]
    any_of: Tuple[str, ...]
    message: str
    suggestion: str


INSTALL_SUGGESTION = "Install the Google Cloud SDK: https://cloud.google.com/sdk/docs/install"
LOGIN_SUGGESTION = "Run `gcloud auth login` to authenticate."

# First match wins; extend by adding a row.
ERROR_RULES: Tuple[ErrorRule, ...] = (
    ErrorRule(
        ErrorKind.NOT_INSTALLED,
        (),
        ("command not found", "not recognized"),
        "gcloud CLI is not installed.",
        INSTALL_SUGGESTION,
    ),
    ErrorRule(
        ErrorKind.NOT_AUTHENTICATED,
        (),
        ("not logged in", "authentication", "credentials"),
        "GCP authentication is required.",
        LOGIN_SUGGESTION,
    ),
    ErrorRule(
        ErrorKind.NO_PROJECT,
        ("project",),
        ("not set", "not specified"),
        "No GCP project is configured.",
        "Pass project_id or run `gcloud config set project PROJECT_ID`.",
    ),
    ErrorRule(
        ErrorKind.PERMISSION_DENIED,
        (),
        ("permission denied", "403", "access denied"),
        "Permission denied.",
        "Check that the required IAM roles are granted to the active account.",
    ),
)

UNKNOWN_SUGGESTION = "Check the error message above and try again."


def classify_error(text: str) -> GcloudError:
    """Build a :class:`GcloudError` from raw subprocess error text."""
    lowered = (text or "").lower()

    for rule in ERROR_RULES:
        if all(s in lowered for s in rule.all_of) and any(s in lowered for s in rule.any_of):
            return GcloudError(rule.kind, rule.message, rule.suggestion)

    return GcloudError(ErrorKind.UNKNOWN, (text or "").strip() or "gcloud command failed.", UNKNOWN_SUGGESTION)


def not_installed_error() -> GcloudError:
    return GcloudError(ErrorKind.NOT_INSTALLED, ERROR_RULES[0].message, INSTALL_SUGGESTION)


def not_authenticated_error() -> GcloudError:
    return GcloudError(ErrorKind.NOT_AUTHENTICATED, ERROR_RULES[1].message, LOGIN_SUGGESTION)
