import io
import uuid
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from openpyxl import Workbook

from schooldesk.backend.models.db_models import SchoolClass, Teacher
from schooldesk.backend.services.errors import ConflictError, ServiceError
from schooldesk.backend.services.import_service import ImportService, generate_student_number


def workbook_bytes(rows) -> bytes:
    workbook = Workbook()
    for row in rows:
        workbook.active.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest_asyncio.fixture
async def service_instance(class_id):
    students, classes, teacher_service = AsyncMock(), AsyncMock(), AsyncMock()
    classes.get_all.return_value = [SchoolClass(id=class_id, name="7A"), SchoolClass(id=uuid.uuid4(), name="Grade 8 B")]
    return ImportService(students, classes, teacher_service), students, classes, teacher_service


def test_generated_student_numbers():
    number = generate_student_number()
    assert number.startswith("STU-")
    assert len(number) == 12
    assert generate_student_number() != number


@pytest.mark.asyncio
class TestStudentImport:

    async def test_rows_are_created_and_matched_to_classes(self, service_instance, class_id):
        service, students, classes, _ = service_instance
        data = workbook_bytes([
            ["first_name", "last_name", "email", "gender", "date_of_birth", "grade", "section"],
            ["Lina", "Okafor", "parent@home.test", "Female", None, 7, "a"],
            ["Sam", "Reyes", None, None, None, 8, "B"],
            ["Ivy", "Chen", None, None, None, 9, "C"],
            ["Nope", None, None, None, None, None, None],
        ])

        result = await service.import_students(data)

        assert result.created == 3
        assert [e.row for e in result.errors] == [5]
        assert [w.row for w in result.warnings] == [4]
        saved = [c[0][0] for c in students.add.call_args_list]
        assert saved[0]["class_id"] == class_id
        assert saved[0]["parent_contact"]["email"] == "parent@home.test"
        assert saved[1]["class_id"] == classes.get_all.return_value[1].id
        assert saved[2]["class_id"] is None
        assert len({s["student_number"] for s in saved}) == 3

    async def test_store_failure_is_a_row_error(self, service_instance):
        service, students, _, _ = service_instance
        students.add.side_effect = [RuntimeError("db down"), None]
        data = workbook_bytes([["first_name", "last_name"], ["A", "One"], ["B", "Two"]])

        result = await service.import_students(data)

        assert result.created == 1
        assert result.errors[0].row == 2

    async def test_unreadable_file(self, service_instance):
        service, *_ = service_instance
        with pytest.raises(ServiceError):
            await service.import_students(b"not a workbook")


@pytest.mark.asyncio
class TestTeacherImport:

    async def test_credentials_are_returned_for_created_teachers(self, service_instance):
        service, _, _, teacher_service = service_instance
        tom = Teacher(id=uuid.uuid4(), user_id=uuid.uuid4(), name="Tom Hill", email="tom@school.test")
        teacher_service.create_teacher.side_effect = [
            (tom, "Pw123456789!"),
            ConflictError("A user with this email already exists."),
        ]
        data = workbook_bytes([
            ["first_name", "last_name", "email", "phone"],
            ["Tom", "Hill", "tom@school.test", "555"],
            ["Ada", "Byron", "admin@school.test", None],
        ])

        result = await service.import_teachers(data)

        assert result.created == 1
        assert result.credentials == [{"email": "tom@school.test", "password": "Pw123456789!"}]
        assert result.errors[0].row == 3
        assert "already exists" in result.errors[0].message
        teacher_service.create_teacher.assert_any_call(name="Tom Hill", email="tom@school.test", phone="555")
