import logging
from typing import Optional
from uuid import UUID
import redis.asyncio as redis

from ..models.redis_models import UserSessionRedis

logger = logging.getLogger(__name__)

class RedisClient:
    """
    Redis client for signed-in user sessions.
    """

    def __init__(self, pool: redis.ConnectionPool):
        self._redis = redis.Redis(connection_pool=pool, decode_responses=True)

    @staticmethod
    def _session_key(user_id) -> str:
        return f"sessions:{user_id}"

    async def save_user_session(self, session: UserSessionRedis, ttl: int):
        """Stores the user's session with a TTL."""
        key = self._session_key(session.user_data.id)
        await self._redis.set(key, session.model_dump_json(), ex=ttl)

    async def get_user_session(self, user_id: UUID) -> Optional[UserSessionRedis]:
        key = self._session_key(user_id)
        session_json = await self._redis.get(key)
        return UserSessionRedis.model_validate_json(session_json) if session_json else None

    async def refresh_user_session(self, session: UserSessionRedis):
        """Rewrites the session payload while keeping the remaining TTL."""
        key = self._session_key(session.user_data.id)
        await self._redis.set(key, session.model_dump_json(), keepttl=True)

    async def delete_user_session(self, user_id: UUID) -> int:
        key = self._session_key(user_id)
        return await self._redis.delete(key)
