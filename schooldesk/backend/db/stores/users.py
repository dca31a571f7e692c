import logging
from typing import Optional

from ..db_client import AsyncPostgresClient
from ...models.db_models import User

logger = logging.getLogger(__name__)


class UsersStore(AsyncPostgresClient):
    table = "users"
    model = User

    async def get_all(self):
        return await self._select(order_by="name")

    async def get_by_email(self, email: str, connection=None) -> Optional[User]:
        return await self._select_one({"email": email}, connection=connection)

    async def verify_password(self, email: str, password: str) -> bool:
        """Passwords are stored as entered; the check is a plain comparison."""
        user = await self.get_by_email(email)
        return user is not None and user.password == password
