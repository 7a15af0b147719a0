import logging
from typing import Mapping, Protocol
from .context import RequestContext
from .errors import AuthRequired, InvalidSession
from .metrics import AUTH_REJECTED

logger = logging.getLogger(__name__)

USER_ID_HEADER = "x-user-id"
SESSION_TOKEN_HEADER = "x-session-token"


class CredentialVerifier(Protocol):
    async def verify(self, user_id: str, session_token: str) -> bool:
        ...


class PresenceVerifier:
    """Accepts any non-empty pair. The gate has already checked presence."""

    async def verify(self, user_id: str, session_token: str) -> bool:
        return True


class AuthGate:
    def __init__(self, verifier: CredentialVerifier = None):
        self.verifier = verifier or PresenceVerifier()

    async def authenticate(
        self,
        headers: Mapping[str, str],
        context: RequestContext,
        route: str = "-",
    ) -> RequestContext:
        # starlette Headers are case-insensitive, plain dicts must use lowercase keys
        user_id = headers.get(USER_ID_HEADER) or ""
        session_token = headers.get(SESSION_TOKEN_HEADER) or ""

        if not user_id or not session_token:
            logger.warning(f"Unauthorized access attempt on {route}")
            AUTH_REJECTED.labels(route=route).inc()
            raise AuthRequired()

        if not await self.verifier.verify(user_id, session_token):
            logger.warning(f"Session rejected for user {user_id} on {route}")
            AUTH_REJECTED.labels(route=route).inc()
            raise InvalidSession()

        logger.info(f"Authenticated user: {user_id}")
        return context.authenticated(user_id, session_token)
