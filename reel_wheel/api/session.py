"""The signed-in administrator view over a client session.

The API does not expose a "who am I" endpoint, so the user record is
derived from the login email; a session restored from stored tokens only
knows that *someone* is signed in.
"""

from __future__ import annotations

from loguru import logger

from ..models.user import User
from .client import ReelWheelClient
from .errors import AuthError, InvalidCredentialsError

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials. Please contact your administrator."
DEFAULT_ROLE = "admin"


class AdminSession:
    """Tracks which administrator is signed in on a :class:`ReelWheelClient`."""

    def __init__(self, client: ReelWheelClient) -> None:
        self.client = client
        self.user: User | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def restore(self) -> User | None:
        """Rebuild the user from tokens hydrated at client start-up."""
        if self.client.is_authenticated:
            self.user = User(id="1", email="", role=DEFAULT_ROLE)
            logger.debug("Restored session from stored tokens")
        else:
            self.user = None
        return self.user

    async def login(self, email: str, password: str) -> User:
        """Sign in and record the user.

        Every authentication failure is reported with the same message so
        that the response does not reveal which part was wrong.
        """
        try:
            await self.client.login(email, password)
        except AuthError as exc:
            logger.error(f"Login failed for {email}: {exc}")
            raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE) from exc
        self.user = User(id="1", email=email, role=DEFAULT_ROLE)
        return self.user

    def logout(self) -> None:
        self.client.logout()
        self.user = None
        logger.debug("Logged out, cleared stored tokens")
