import uuid
from unittest.mock import AsyncMock

import pytest

from schooldesk.backend.main import app
from schooldesk.backend.api.dependencies import get_student_service
from schooldesk.backend.services.errors import ConflictError, NotFoundError

NEW_STUDENT = {
    "studentNumber": "S-010",
    "firstName": "Lina",
    "lastName": "Okafor",
    "gender": "Female",
    "parentContact": {"fullName": "Grace Okafor", "relationship": "Mother", "phone": "555-0101"},
}


@pytest.fixture
def service(client, sign_in, admin_user):
    """Signs in as admin and replaces the student service with a mock."""
    mock_service = AsyncMock()
    app.dependency_overrides[get_student_service] = lambda: mock_service
    sign_in(admin_user)
    return mock_service


def test_list_passes_filters_and_returns_camel_case(client, service, sample_student, class_id):
    service.list_students.return_value = [sample_student]

    response = client.get("/api/v1/students", params={"classId": str(class_id), "status": "active", "search": "lin"})

    assert response.status_code == 200
    body = response.json()[0]
    assert body["studentNumber"] == "S-001"
    assert body["parentContact"]["fullName"] == "Grace Okafor"
    service.list_students.assert_called_once_with(class_id=class_id, status="active", search="lin")


def test_create_student(client, service, sample_student):
    service.create_student.return_value = sample_student

    response = client.post("/api/v1/students", json=NEW_STUDENT)

    assert response.status_code == 201
    values = service.create_student.call_args[0][0]
    assert values["student_number"] == "S-010"
    assert values["parent_contact"]["full_name"] == "Grace Okafor"


def test_create_requires_a_parent_contact(client, service):
    body = {key: value for key, value in NEW_STUDENT.items() if key != "parentContact"}
    response = client.post("/api/v1/students", json=body)
    assert response.status_code == 422
    service.create_student.assert_not_called()


def test_duplicate_student_number_is_409(client, service):
    service.create_student.side_effect = ConflictError("A student with this student number already exists.")
    response = client.post("/api/v1/students", json=NEW_STUDENT)
    assert response.status_code == 409


def test_missing_student_is_404(client, service):
    service.get_student.side_effect = NotFoundError("Student not found.")
    response = client.get(f"/api/v1/students/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Student not found."


def test_empty_update_is_400(client, service):
    response = client.patch(f"/api/v1/students/{uuid.uuid4()}", json={})
    assert response.status_code == 400
    service.update_student.assert_not_called()


def test_update_sends_only_given_fields(client, service, sample_student):
    service.update_student.return_value = sample_student
    response = client.patch(f"/api/v1/students/{sample_student.id}", json={"address": "1 New Street"})
    assert response.status_code == 200
    service.update_student.assert_called_once_with(sample_student.id, {"address": "1 New Street"})


def test_archive_and_delete(client, service):
    student_id = uuid.uuid4()
    assert client.post(f"/api/v1/students/{student_id}/archive").status_code == 204
    assert client.delete(f"/api/v1/students/{student_id}").status_code == 204
    service.archive_student.assert_called_once_with(student_id)
    service.delete_student.assert_called_once_with(student_id)


def test_student_detail(client, service, sample_student):
    service.get_student_detail.return_value = {
        "student": sample_student,
        "class_name": "7A",
        "grades_by_term": [],
        "attendance_summary": {"total": 0, "present": 0, "absent": 0, "late": 0, "excused": 0},
        "attendance_rate": 0,
        "recent_attendance": [],
        "reports": [],
    }

    response = client.get(f"/api/v1/students/{sample_student.id}/detail")

    assert response.status_code == 200
    assert response.json()["className"] == "7A"
    assert response.json()["attendanceRate"] == 0


def test_teachers_cannot_manage_students(client, service, sign_in, teacher_user):
    sign_in(teacher_user)
    response = client.post("/api/v1/students", json=NEW_STUDENT)
    assert response.status_code == 403
