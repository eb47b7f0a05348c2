"""Authorization gate for privileged operations."""

import structlog

from .errors import AuthenticationRequired
from .session import SessionTokenStore

logger = structlog.get_logger()

AUTHENTICATION_HINT = (
    "Authenticate first with tusky_create_challenge and tusky_verify_challenge."
)


class AuthorizationGate:
    """Mandatory check run at the start of every privileged operation.

    The decision is never cached: each call re-reads the session store, so a
    lapsed token is rejected on the very next call.
    """

    def __init__(self, session: SessionTokenStore):
        self.session = session

    def check(self, action: str = "perform this operation") -> str:
        """Require a valid session.

        Args:
            action: What the caller is trying to do, used in the error message

        Returns:
            The bearer token to attach to the outbound call

        Raises:
            AuthenticationRequired: If no valid session exists
        """
        current = self.session.current()
        if current is None:
            logger.info("authorization_denied", action=action)
            raise AuthenticationRequired(f"Authentication required to {action}. {AUTHENTICATION_HINT}")
        return current.token

    def is_authorized(self) -> bool:
        return self.session.is_valid()
