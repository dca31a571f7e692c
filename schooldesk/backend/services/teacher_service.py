import logging
import secrets
import string
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import asyncpg

from ..db.db_client import affected_rows
from ..db.redis_client import RedisClient
from ..db.stores.users import UsersStore
from ..db.stores.teachers import TeachersStore
from ..models.db_models import Teacher
from .errors import ServiceError, NotFoundError, ConflictError

logger = logging.getLogger(__name__)

PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*"
PASSWORD_LENGTH = 12


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


class TeacherService:
    """
    Service layer for teacher accounts and their class assignments.
    """
    def __init__(self, users: UsersStore, teachers: TeachersStore, sessions: Optional[RedisClient] = None):
        self.users = users
        self.teachers = teachers
        self.sessions = sessions

    async def list_teachers(self, status: Optional[str] = None) -> List[Teacher]:
        teachers = await self.teachers.get_all()
        if status:
            teachers = [teacher for teacher in teachers if teacher.status == status]
        return teachers

    async def get_teacher(self, teacher_id: UUID) -> Teacher:
        teacher = await self.teachers.get_by_id(teacher_id)
        if teacher is None:
            raise NotFoundError("Teacher not found.")
        return teacher

    async def _check_email_free(self, email: str, exclude_user_id: Optional[UUID] = None):
        existing = await self.users.get_by_email(email)
        if existing is not None and existing.id != exclude_user_id:
            raise ConflictError("A user with this email already exists.")

    async def create_teacher(self, name: str, email: str, phone: Optional[str] = None,
                             signature_image: Optional[str] = None,
                             assigned_classes: Optional[List[UUID]] = None,
                             password: Optional[str] = None) -> Tuple[Teacher, str]:
        """
        Creates the login account and the teacher profile together. Returns the
        teacher and the initial password, which is only ever shown once.
        """
        email = email.strip().lower()
        await self._check_email_free(email)
        password = password or generate_password()
        try:
            teacher = await self.teachers.add_with_account(
                user={"name": name, "email": email, "password": password, "status": "active"},
                profile={"phone": phone, "signature_image": signature_image},
                class_ids=list(assigned_classes or []),
            )
        except asyncpg.UniqueViolationError as e:
            raise ConflictError("A user with this email already exists.") from e
        except asyncpg.ForeignKeyViolationError as e:
            raise NotFoundError("One of the assigned classes does not exist.") from e
        except Exception as e:
            logger.error(f"Error while creating teacher '{email}'.", exc_info=True)
            raise ServiceError("A database error occurred while creating the teacher.") from e
        logger.info(f"Teacher {teacher.id} created for '{email}'.")
        return teacher, password

    async def _end_session(self, user_id: UUID):
        """Signs the account out; a teacher who is no longer active keeps no access."""
        if self.sessions is None:
            return
        try:
            await self.sessions.delete_user_session(user_id)
        except Exception as e:
            logger.error(f"Could not end the session of user {user_id}.", exc_info=True)
            raise ServiceError("The account was updated but its session could not be ended. Please try again.") from e
        logger.info(f"Session of user {user_id} ended.")

    async def update_teacher(self, teacher_id: UUID, updates: Dict[str, Any]) -> Teacher:
        current = await self.get_teacher(teacher_id)
        if updates.get("email"):
            updates["email"] = updates["email"].strip().lower()
            await self._check_email_free(updates["email"], exclude_user_id=current.user_id)
        try:
            teacher = await self.teachers.update(teacher_id, updates)
        except asyncpg.ForeignKeyViolationError as e:
            raise NotFoundError("One of the assigned classes does not exist.") from e
        except Exception as e:
            logger.error(f"Error while updating teacher {teacher_id}.", exc_info=True)
            raise ServiceError("A database error occurred while updating the teacher.") from e
        if teacher is None:
            raise NotFoundError("Teacher not found.")
        if updates.get("status", "active") != "active":
            await self._end_session(current.user_id)
        return teacher

    async def archive_teacher(self, teacher_id: UUID):
        teacher = await self.get_teacher(teacher_id)
        if not await self.teachers.archive(teacher_id):
            raise NotFoundError("Teacher not found.")
        logger.info(f"Teacher {teacher_id} archived.")
        await self._end_session(teacher.user_id)

    async def delete_teacher(self, teacher_id: UUID):
        try:
            status = await self.teachers.delete(teacher_id)
        except asyncpg.ForeignKeyViolationError as e:
            raise ConflictError("This teacher still has records and cannot be deleted. Archive them instead.") from e
        except Exception as e:
            logger.error(f"Error while deleting teacher {teacher_id}.", exc_info=True)
            raise ServiceError("A database error occurred while deleting the teacher.") from e
        if not affected_rows(status):
            raise NotFoundError("Teacher not found.")
        logger.info(f"Teacher {teacher_id} deleted.")
