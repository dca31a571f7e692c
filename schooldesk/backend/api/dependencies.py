#schooldesk/backend/api/dependencies.py
from fastapi import Request, Depends
import redis.asyncio as redis
import asyncpg

from ..db.redis_client import RedisClient
from ..db.stores.users import UsersStore
from ..db.stores.students import StudentsStore
from ..db.stores.teachers import TeachersStore
from ..db.stores.academics import ClassesStore, SubjectsStore, GradesStore, AcademicTermsStore
from ..db.stores.attendance import AttendanceStore
from ..db.stores.documents import TemplatesStore, ReportsStore, IndemnityStore, CertificatesStore
from ..services.student_service import StudentService
from ..services.teacher_service import TeacherService
from ..services.academic_service import AcademicService
from ..services.attendance_service import AttendanceService
from ..services.document_service import DocumentService
from ..services.dashboard_service import DashboardService
from ..services.import_service import ImportService


def get_redis_pool(request: Request) -> redis.ConnectionPool:
    """
    The Redis connection pool created in the application lifespan.
    """
    return request.app.state.redis_pool

def get_postgres_pool(request: Request) -> asyncpg.Pool:
    """
    The PostgreSQL connection pool created in the application lifespan.
    """
    return request.app.state.postgres_pool


def get_redis_client(redis_pool: redis.ConnectionPool = Depends(get_redis_pool)) -> RedisClient:
    return RedisClient(pool=redis_pool)

def get_users_store(postgres_pool: asyncpg.Pool = Depends(get_postgres_pool)) -> UsersStore:
    return UsersStore(postgres_pool)


def get_student_service(postgres_pool: asyncpg.Pool = Depends(get_postgres_pool)) -> StudentService:
    """
    Builds a fresh StudentService per request.

    Stores are thin wrappers over the shared pool, so creating them per
    request costs nothing and keeps every request independent.
    """
    return StudentService(
        students=StudentsStore(postgres_pool),
        classes=ClassesStore(postgres_pool),
        subjects=SubjectsStore(postgres_pool),
        grades=GradesStore(postgres_pool),
        attendance=AttendanceStore(postgres_pool),
        reports=ReportsStore(postgres_pool),
    )


def get_teacher_service(postgres_pool: asyncpg.Pool = Depends(get_postgres_pool),
                        redis_client: RedisClient = Depends(get_redis_client)) -> TeacherService:
    return TeacherService(users=UsersStore(postgres_pool), teachers=TeachersStore(postgres_pool),
                          sessions=redis_client)


def get_academic_service(postgres_pool: asyncpg.Pool = Depends(get_postgres_pool)) -> AcademicService:
    return AcademicService(
        classes=ClassesStore(postgres_pool),
        subjects=SubjectsStore(postgres_pool),
        grades=GradesStore(postgres_pool),
        terms=AcademicTermsStore(postgres_pool),
        students=StudentsStore(postgres_pool),
        teachers=TeachersStore(postgres_pool),
    )


def get_attendance_service(postgres_pool: asyncpg.Pool = Depends(get_postgres_pool)) -> AttendanceService:
    return AttendanceService(
        attendance=AttendanceStore(postgres_pool),
        students=StudentsStore(postgres_pool),
        classes=ClassesStore(postgres_pool),
    )


def get_document_service(postgres_pool: asyncpg.Pool = Depends(get_postgres_pool)) -> DocumentService:
    return DocumentService(
        templates=TemplatesStore(postgres_pool),
        reports=ReportsStore(postgres_pool),
        indemnity=IndemnityStore(postgres_pool),
        certificates=CertificatesStore(postgres_pool),
        students=StudentsStore(postgres_pool),
        classes=ClassesStore(postgres_pool),
        subjects=SubjectsStore(postgres_pool),
        grades=GradesStore(postgres_pool),
        attendance=AttendanceStore(postgres_pool),
        terms=AcademicTermsStore(postgres_pool),
    )


def get_dashboard_service(postgres_pool: asyncpg.Pool = Depends(get_postgres_pool)) -> DashboardService:
    return DashboardService(
        students=StudentsStore(postgres_pool),
        teachers=TeachersStore(postgres_pool),
        classes=ClassesStore(postgres_pool),
        grades=GradesStore(postgres_pool),
    )


def get_import_service(
    postgres_pool: asyncpg.Pool = Depends(get_postgres_pool),
    teacher_service: TeacherService = Depends(get_teacher_service),
) -> ImportService:
    return ImportService(
        students=StudentsStore(postgres_pool),
        classes=ClassesStore(postgres_pool),
        teacher_service=teacher_service,
    )
