import uuid
from unittest.mock import AsyncMock

import pytest

from schooldesk.backend.main import app
from schooldesk.backend.api.dependencies import get_teacher_service
from schooldesk.backend.models.db_models import Teacher
from schooldesk.backend.services.errors import ConflictError


@pytest.fixture
def teacher(class_id) -> Teacher:
    return Teacher(id=uuid.uuid4(), user_id=uuid.uuid4(), name="Tom Teacher", email="tom@school.test",
                   phone="555-0199", assigned_classes=[class_id])


@pytest.fixture
def service(client, sign_in, admin_user):
    mock_service = AsyncMock()
    app.dependency_overrides[get_teacher_service] = lambda: mock_service
    sign_in(admin_user)
    return mock_service


def test_create_teacher_returns_the_generated_password_once(client, service, teacher, class_id):
    """
    Scenario: an admin creates a teacher with one class.
    Expectation: 201 with the teacher and the initial password.
    """
    service.create_teacher.return_value = (teacher, "Xy7!abcdEFGH")

    response = client.post("/api/v1/teachers", json={
        "name": "Tom Teacher", "email": "tom@school.test", "assignedClasses": [str(class_id)],
    })

    assert response.status_code == 201
    body = response.json()
    assert body["password"] == "Xy7!abcdEFGH"
    assert body["teacher"]["userId"] == str(teacher.user_id)
    assert body["teacher"]["assignedClasses"] == [str(class_id)]
    assert service.create_teacher.call_args.kwargs["assigned_classes"] == [class_id]


def test_existing_email_is_409(client, service):
    service.create_teacher.side_effect = ConflictError("A user with this email already exists.")
    response = client.post("/api/v1/teachers", json={"name": "Tom", "email": "tom@school.test"})
    assert response.status_code == 409
    assert response.json()["detail"] == "A user with this email already exists."


def test_list_by_status(client, service, teacher):
    service.list_teachers.return_value = [teacher]
    response = client.get("/api/v1/teachers", params={"status": "active"})
    assert response.status_code == 200
    assert response.json()[0]["phone"] == "555-0199"
    service.list_teachers.assert_called_once_with(status="active")


def test_update_assignments(client, service, teacher):
    service.update_teacher.return_value = teacher
    new_class = uuid.uuid4()

    response = client.patch(f"/api/v1/teachers/{teacher.id}", json={"assignedClasses": [str(new_class)]})

    assert response.status_code == 200
    service.update_teacher.assert_called_once_with(teacher.id, {"assigned_classes": [new_class]})


def test_archive_and_delete(client, service):
    teacher_id = uuid.uuid4()
    assert client.post(f"/api/v1/teachers/{teacher_id}/archive").status_code == 204
    assert client.delete(f"/api/v1/teachers/{teacher_id}").status_code == 204
