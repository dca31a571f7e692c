import logging
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

import asyncpg

from ..db_client import AsyncPostgresClient
from .users import UsersStore
from ...models.db_models import Teacher, User

logger = logging.getLogger(__name__)

_TEACHER_SELECT = """
    SELECT t.id, t.user_id, t.phone, t.signature_image,
           u.name, u.email, u.status,
           COALESCE(
               ARRAY(SELECT tc.class_id FROM teacher_classes tc WHERE tc.user_id = t.user_id),
               '{}'::uuid[]
           ) AS assigned_classes
    FROM teachers t
    JOIN users u ON u.id = t.user_id
"""

_PROFILE_FIELDS = ("phone", "signature_image")
_ACCOUNT_FIELDS = ("name", "email", "status")


class TeachersStore(AsyncPostgresClient):
    """
    Teacher profiles. A teacher is spread over three tables: the 'users'
    account (name, email, status), the 'teachers' profile, and the
    'teacher_classes' junction keyed by the account's user id.
    """
    table = "teachers"
    model = Teacher

    def __init__(self, pool: asyncpg.Pool):
        super().__init__(pool)
        self.users = UsersStore(pool)

    async def _fetch(self, where: str = "", args: Iterable[Any] = (), connection=None) -> List[Teacher]:
        query = f"{_TEACHER_SELECT} {where} ORDER BY u.name;"
        async with self._connection(connection) as conn:
            records = await conn.fetch(query, *args)
            return [self._to_model(record) for record in records]

    async def get_all(self) -> List[Teacher]:
        return await self._fetch()

    async def get_by_id(self, teacher_id, connection=None) -> Optional[Teacher]:
        teachers = await self._fetch("WHERE t.id = $1", [teacher_id], connection=connection)
        return teachers[0] if teachers else None

    async def get_by_user_id(self, user_id) -> Optional[Teacher]:
        teachers = await self._fetch("WHERE t.user_id = $1", [user_id])
        return teachers[0] if teachers else None

    async def _replace_classes(self, user_id: UUID, class_ids: List[UUID], connection):
        await connection.execute("DELETE FROM teacher_classes WHERE user_id = $1;", user_id)
        if class_ids:
            await connection.executemany(
                "INSERT INTO teacher_classes (user_id, class_id) VALUES ($1, $2) ON CONFLICT DO NOTHING;",
                [(user_id, class_id) for class_id in dict.fromkeys(class_ids)],
            )

    async def add_with_account(self, user: Dict[str, Any], profile: Dict[str, Any],
                               class_ids: List[UUID]) -> Teacher:
        """
        Creates the login account, the teacher profile and the class links in
        one transaction, so a failure leaves none of them behind.
        """
        async with self.transaction() as connection:
            account: User = await self.users._insert(
                {**user, "role": "teacher"}, connection=connection
            )
            profile_values = {key: profile.get(key) for key in _PROFILE_FIELDS}
            created = await self._insert_raw({**profile_values, "user_id": account.id}, connection)
            await self._replace_classes(account.id, class_ids, connection)
            logger.info(f"Teacher account {account.id} created with {len(class_ids)} class assignment(s).")
            return await self.get_by_id(created["id"], connection=connection)

    async def _insert_raw(self, values: Dict[str, Any], connection) -> asyncpg.Record:
        columns = list(values.keys())
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        query = f"INSERT INTO teachers ({', '.join(columns)}) VALUES ({placeholders}) RETURNING id;"
        return await connection.fetchrow(query, *values.values())

    async def update(self, teacher_id, updates: Dict[str, Any]) -> Optional[Teacher]:
        """
        Splits the update over the three tables: profile fields go to
        'teachers', name/email/status to the account, and `assigned_classes`
        (when given) rewrites the junction rows.
        """
        async with self.transaction() as connection:
            teacher = await self.get_by_id(teacher_id, connection=connection)
            if teacher is None:
                return None

            profile_updates = {key: updates[key] for key in _PROFILE_FIELDS if key in updates}
            if profile_updates:
                await self._update({"id": teacher_id}, profile_updates, connection=connection)

            account_updates = {key: updates[key] for key in _ACCOUNT_FIELDS if key in updates}
            if account_updates:
                await self.users._update({"id": teacher.user_id}, account_updates, connection=connection)

            if updates.get("assigned_classes") is not None:
                await self._replace_classes(teacher.user_id, updates["assigned_classes"], connection)

            return await self.get_by_id(teacher_id, connection=connection)

    async def archive(self, teacher_id) -> bool:
        teacher = await self.get_by_id(teacher_id)
        if teacher is None:
            return False
        await self.users._update({"id": teacher.user_id}, {"status": "archived"})
        return True

    async def delete(self, teacher_id) -> str:
        """Hard delete of the profile only; the account and its history stay."""
        return await self._delete({"id": teacher_id})
