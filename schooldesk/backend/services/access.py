from typing import List, Optional, Set
from uuid import UUID

from ..db.stores.academics import ClassesStore
from ..models.db_models import User, SchoolClass
from .errors import AuthorizationError


async def visible_classes(classes: ClassesStore, user: User) -> List[SchoolClass]:
    """Admins see every class; teachers only the classes assigned to them."""
    if user.role == "admin":
        return await classes.get_all()
    return await classes.get_classes_for_teacher(user.id)


async def visible_class_ids(classes: ClassesStore, user: User) -> Optional[Set[UUID]]:
    """None means unrestricted."""
    if user.role == "admin":
        return None
    return {school_class.id for school_class in await classes.get_classes_for_teacher(user.id)}


async def ensure_class_access(classes: ClassesStore, user: User, class_id: Optional[UUID]):
    if user.role == "admin":
        return
    if class_id is None or not await classes.is_teacher_assigned(user.id, class_id):
        raise AuthorizationError("You are not assigned to this class.")
