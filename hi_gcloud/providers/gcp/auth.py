"""gcloud authentication checks."""

from typing import Optional

from ...constants import AUTH_LIST_TIMEOUT
from ...core.exceptions import GcloudError
from ...core.logger import HiGcloudLogger
from ...core.models import AmbientDefaults, AuthStatus
from .client import GcloudClient
from .errors import not_authenticated_error


ACTIVE_ACCOUNT_ARGS = ["auth", "list", "--filter=status:ACTIVE", "--format=value(account)"]


class GcloudAuth:
    """Handles gcloud authentication state and ambient defaults."""

    def __init__(self, client: GcloudClient, logger: HiGcloudLogger):
        self.client = client
        self.logger = logger

    async def check_auth(self) -> AuthStatus:
        """Check that gcloud is installed and has an active account."""
        try:
            await self.client.locate()
        except GcloudError as e:
            self.logger.warning(e.message, "auth")
            return AuthStatus(authenticated=False, error=e.to_dict())

        try:
            account = await self.active_account()
            if not account:
                return AuthStatus(authenticated=False, error=not_authenticated_error().to_dict())

            project = await self.client.get_value("project")
        except GcloudError as e:
            self.logger.warning(f"Auth check failed: {e.message}", "auth")
            return AuthStatus(authenticated=False, error=e.to_dict())

        self.logger.debug(f"Authenticated as {account}", "auth")
        return AuthStatus(authenticated=True, account=account, project=project)

    async def active_account(self) -> Optional[str]:
        result = await self.client.execute(ACTIVE_ACCOUNT_ARGS, AUTH_LIST_TIMEOUT)
        lines = [line.strip() for line in result.stdout.splitlines() if line.strip()]
        return lines[0] if lines else None

    async def ambient_defaults(self) -> AmbientDefaults:
        """Collect project, region and account from gcloud's own config.

        Each lookup is independent; a failing one leaves its field unset.
        """
        defaults = AmbientDefaults()

        for field, lookup in (
            ("project", lambda: self.client.get_value("project")),
            ("region", lambda: self.client.get_value("compute/region")),
            ("account", self.active_account),
        ):
            try:
                setattr(defaults, field, await lookup())
            except GcloudError as e:
                self.logger.debug(f"No ambient {field}: {e.message}", "auth")

        return defaults
