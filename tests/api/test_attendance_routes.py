import uuid
from datetime import date
from unittest.mock import AsyncMock

import pytest

from schooldesk.backend.main import app
from schooldesk.backend.api.dependencies import get_attendance_service
from schooldesk.backend.models.db_models import Attendance
from schooldesk.backend.services.errors import AuthorizationError, ConflictError


@pytest.fixture
def service(client, sign_in, teacher_user):
    mock_service = AsyncMock()
    app.dependency_overrides[get_attendance_service] = lambda: mock_service
    sign_in(teacher_user)
    return mock_service


def test_register_query_uses_camel_case_params(client, service, teacher_user, sample_student, class_id):
    service.get_register.return_value = {
        "class_id": class_id,
        "date": date(2025, 3, 10),
        "saved": False,
        "locked": False,
        "entries": [{"student_id": sample_student.id, "student_name": "Lina Okafor",
                     "student_number": "S-001", "status": "present", "comment": None}],
        "summary": {"total": 0, "present": 0, "absent": 0, "late": 0, "excused": 0},
    }

    response = client.get("/api/v1/attendance/register", params={"classId": str(class_id), "date": "2025-03-10"})

    assert response.status_code == 200
    assert response.json()["entries"][0]["studentName"] == "Lina Okafor"
    service.get_register.assert_called_once_with(teacher_user, class_id, date(2025, 3, 10))


def test_save_register(client, service, teacher_user, sample_student, class_id):
    service.save_register.return_value = [
        Attendance(id=uuid.uuid4(), student_id=sample_student.id, class_id=class_id,
                   date=date(2025, 3, 10), status="absent", comment="sick"),
    ]

    response = client.put("/api/v1/attendance/register", json={
        "classId": str(class_id),
        "date": "2025-03-10",
        "records": [{"studentId": str(sample_student.id), "status": "absent", "comment": "sick"}],
    })

    assert response.status_code == 200
    assert response.json()[0]["status"] == "absent"
    _, saved_class, saved_day, entries = service.save_register.call_args[0]
    assert (saved_class, saved_day) == (class_id, date(2025, 3, 10))
    assert entries == [{"student_id": sample_student.id, "status": "absent", "comment": "sick"}]


def test_missing_status_defaults_to_present(client, service, sample_student, class_id):
    service.save_register.return_value = []
    client.put("/api/v1/attendance/register", json={
        "classId": str(class_id), "date": "2025-03-10", "records": [{"studentId": str(sample_student.id)}],
    })
    assert service.save_register.call_args[0][3][0]["status"] == "present"


def test_unknown_status_is_rejected(client, service, sample_student, class_id):
    response = client.put("/api/v1/attendance/register", json={
        "classId": str(class_id), "date": "2025-03-10",
        "records": [{"studentId": str(sample_student.id), "status": "sleeping"}],
    })
    assert response.status_code == 422


@pytest.mark.parametrize("error, code", [
    (ConflictError("Attendance for this class and date has already been recorded."), 409),
    (AuthorizationError("You are not assigned to this class."), 403),
])
def test_service_errors_map_to_status_codes(client, service, class_id, error, code):
    service.save_register.side_effect = error
    response = client.put("/api/v1/attendance/register", json={
        "classId": str(class_id), "date": "2025-03-10", "records": [],
    })
    assert response.status_code == code
    assert response.json()["detail"] == str(error)


def test_unauthenticated_request_is_401(client):
    response = client.get("/api/v1/attendance/register", params={"classId": str(uuid.uuid4()), "date": "2025-03-10"})
    assert response.status_code == 401
