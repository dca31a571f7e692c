import uuid
from datetime import date
from unittest.mock import AsyncMock

import asyncpg
import pytest
import pytest_asyncio

from schooldesk.backend.models.db_models import Attendance, Grade, SchoolClass, Subject
from schooldesk.backend.services.errors import ConflictError, NotFoundError, ServiceError
from schooldesk.backend.services.student_service import StudentService


@pytest_asyncio.fixture
async def service_instance():
    """Creates a StudentService with every store mocked."""
    students, classes, subjects = AsyncMock(), AsyncMock(), AsyncMock()
    grades, attendance, reports = AsyncMock(), AsyncMock(), AsyncMock()
    service = StudentService(students, classes, subjects, grades, attendance, reports)
    return service, students, classes, subjects, grades, attendance, reports


def make_grade(student_id, subject_id, marks, term="Term 1", year=2025) -> Grade:
    return Grade(id=uuid.uuid4(), student_id=student_id, subject_id=subject_id, marks=marks,
                 term=term, academic_year=year)


@pytest.mark.asyncio
class TestStudentService:

    async def test_list_filters_by_status_and_search(self, service_instance, sample_student):
        service, students, *_ = service_instance
        archived = sample_student.model_copy(update={"id": uuid.uuid4(), "first_name": "Omar",
                                                     "student_number": "S-002", "status": "archived"})
        students.get_all.return_value = [sample_student, archived]

        assert await service.list_students(status="archived") == [archived]
        assert await service.list_students(search="okaf") == [sample_student, archived]
        assert await service.list_students(search="s-002") == [archived]

    async def test_list_by_class_uses_the_class_query(self, service_instance, sample_student, class_id):
        service, students, *_ = service_instance
        students.get_by_class.return_value = [sample_student]

        assert await service.list_students(class_id=class_id) == [sample_student]
        students.get_by_class.assert_called_once_with(class_id)
        students.get_all.assert_not_called()

    async def test_get_missing_student(self, service_instance):
        service, students, *_ = service_instance
        students.get_by_id.return_value = None
        with pytest.raises(NotFoundError):
            await service.get_student(uuid.uuid4())

    async def test_create_rejects_unknown_class(self, service_instance):
        service, students, classes, *_ = service_instance
        classes.get_by_id.return_value = None
        with pytest.raises(NotFoundError, match="Class not found"):
            await service.create_student({"first_name": "A", "class_id": uuid.uuid4()})
        students.add.assert_not_called()

    async def test_duplicate_student_number_is_a_conflict(self, service_instance, sample_student):
        service, students, *_ = service_instance
        students.add.side_effect = asyncpg.UniqueViolationError("duplicate")
        with pytest.raises(ConflictError):
            await service.create_student({"student_number": sample_student.student_number})

    async def test_other_database_errors_are_wrapped(self, service_instance):
        service, students, *_ = service_instance
        students.add.side_effect = RuntimeError("connection lost")
        with pytest.raises(ServiceError, match="database error"):
            await service.create_student({"student_number": "S-9"})

    async def test_archive_and_delete_report_missing_rows(self, service_instance):
        service, students, *_ = service_instance
        students.archive.return_value = "UPDATE 0"
        students.delete.return_value = "DELETE 0"
        with pytest.raises(NotFoundError):
            await service.archive_student(uuid.uuid4())
        with pytest.raises(NotFoundError):
            await service.delete_student(uuid.uuid4())

    async def test_update_returns_the_fresh_record(self, service_instance, sample_student):
        service, students, *_ = service_instance
        updated = sample_student.model_copy(update={"address": "1 New Street"})
        students.get_by_id.side_effect = [sample_student, updated]
        students.update.return_value = "UPDATE 1"

        result = await service.update_student(sample_student.id, {"address": "1 New Street"})

        assert result.address == "1 New Street"
        students.update.assert_called_once_with(sample_student.id, {"address": "1 New Street"})

    async def test_detail_groups_grades_by_term(self, service_instance, sample_student, class_id):
        """Scenario: two terms of grades and a short attendance history."""
        service, students, classes, subjects, grades, attendance, reports = service_instance
        maths = Subject(id=uuid.uuid4(), name="Mathematics", class_id=class_id)
        students.get_by_id.return_value = sample_student
        classes.get_by_id.return_value = SchoolClass(id=class_id, name="7A")
        subjects.get_all.return_value = [maths]
        grades.get_by_student.return_value = [
            make_grade(sample_student.id, maths.id, 90, term="Term 2"),
            make_grade(sample_student.id, maths.id, 70),
            make_grade(sample_student.id, uuid.uuid4(), 75),
        ]
        attendance.get_by_student.return_value = [
            Attendance(id=uuid.uuid4(), student_id=sample_student.id, class_id=class_id,
                       date=date(2025, 1, day), status=status)
            for day, status in ((6, "present"), (7, "late"), (8, "absent"))
        ]
        reports.get_by_student.return_value = []

        detail = await service.get_student_detail(sample_student.id)

        assert detail["class_name"] == "7A"
        assert [(t["term"], t["average"]) for t in detail["grades_by_term"]] == [("Term 1", 72.5), ("Term 2", 90.0)]
        first_term = detail["grades_by_term"][0]["grades"]
        assert {g["subject_name"] for g in first_term} == {"Mathematics", "Unknown"}
        assert detail["attendance_summary"]["total"] == 3
        assert detail["attendance_rate"] == 67
