import logging
from redis.asyncio import Redis

logger = logging.getLogger(__name__)


class RedisSessionVerifier:
    """Checks that a session token was issued to the given user.

    Sessions are stored by the login flow as ``<prefix><token> -> user_id``.
    """

    def __init__(self, redis_client: Redis, key_prefix: str = "session:"):
        self.redis = redis_client
        self.key_prefix = key_prefix

    async def verify(self, user_id: str, session_token: str) -> bool:
        stored = await self.redis.get(f"{self.key_prefix}{session_token}")
        if stored is None:
            logger.info(f"Unknown session token for user {user_id}")
            return False
        if isinstance(stored, bytes):
            stored = stored.decode()
        return stored == user_id

    async def store(self, user_id: str, session_token: str, ttl_seconds: int = None) -> None:
        await self.redis.set(f"{self.key_prefix}{session_token}", user_id, ex=ttl_seconds)

    async def revoke(self, session_token: str) -> None:
        await self.redis.delete(f"{self.key_prefix}{session_token}")

    async def aclose(self) -> None:
        await self.redis.aclose()
