import uuid
from unittest.mock import AsyncMock

import pytest

from schooldesk.backend.main import app
from schooldesk.backend.api.dependencies import get_document_service
from schooldesk.backend.models.db_models import Template
from schooldesk.backend.modules.template_engine import NO_TEMPLATE_MESSAGES
from schooldesk.backend.services.document_service import GeneratedDocument
from schooldesk.backend.services.errors import NotFoundError


@pytest.fixture
def service(client, sign_in, admin_user):
    mock_service = AsyncMock()
    app.dependency_overrides[get_document_service] = lambda: mock_service
    sign_in(admin_user)
    return mock_service


def test_create_template(client, service, admin_user):
    created = Template(id=uuid.uuid4(), type="report", name="Default", content="{{StudentName}}",
                       created_by=admin_user.id)
    service.create_template.return_value = created

    response = client.post("/api/v1/templates", json={"type": "report", "name": "Default", "content": "{{StudentName}}"})

    assert response.status_code == 201
    assert response.json()["createdBy"] == str(admin_user.id)
    service.create_template.assert_called_once_with(
        admin_user, {"type": "report", "name": "Default", "content": "{{StudentName}}"}
    )


def test_template_type_must_be_known(client, service):
    response = client.post("/api/v1/templates", json={"type": "letter", "name": "X", "content": ""})
    assert response.status_code == 422


def test_teacher_can_read_but_not_write_templates(client, service, sign_in, teacher_user):
    sign_in(teacher_user)
    service.list_templates.return_value = []
    assert client.get("/api/v1/templates", params={"type": "report"}).status_code == 200
    service.list_templates.assert_called_once_with("report")
    assert client.post("/api/v1/templates", json={"type": "report", "name": "X", "content": ""}).status_code == 403


def test_report_without_template_is_a_message_not_an_error(client, service, sample_student):
    service.generate_report.return_value = GeneratedDocument(content=NO_TEMPLATE_MESSAGES["report"])

    response = client.post("/api/v1/documents/reports", json={"studentId": str(sample_student.id), "term": "Term 1"})

    assert response.status_code == 200
    assert response.json() == {"content": NO_TEMPLATE_MESSAGES["report"], "templateId": None,
                               "recordId": None, "persisted": False}


def test_report_request_is_passed_through(client, service, admin_user, sample_student):
    template_id = uuid.uuid4()
    service.generate_report.return_value = GeneratedDocument(content="ok", template_id=template_id,
                                                             record_id=uuid.uuid4(), persisted=True)

    client.post("/api/v1/documents/reports", json={
        "studentId": str(sample_student.id), "term": "Term 1", "academicYear": 2025,
        "templateId": str(template_id), "teacherComment": "Well done",
    })

    service.generate_report.assert_called_once_with(
        admin_user, student_id=sample_student.id, term="Term 1", class_id=None, academic_year=2025,
        template_id=template_id, teacher_comment="Well done",
    )


def test_wrong_template_id_is_404(client, service, sample_student):
    service.generate_certificate.side_effect = NotFoundError("No certificate template with this id.")
    response = client.post("/api/v1/documents/certificates",
                           json={"studentId": str(sample_student.id), "templateId": str(uuid.uuid4())})
    assert response.status_code == 404


def test_printable_page_is_html(client, service):
    service.render_printable.return_value = "<!DOCTYPE html>\n<html><body>Report</body></html>"
    record_id = uuid.uuid4()

    response = client.get(f"/api/v1/documents/reports/{record_id}/print")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Report" in response.text


def test_certificates_have_no_printable_page(client, service):
    response = client.get(f"/api/v1/documents/certificates/{uuid.uuid4()}/print")
    assert response.status_code == 422


@pytest.mark.parametrize("body", [{"content": None}, {"name": None}, {"type": None}])
def test_template_fields_cannot_be_nulled(client, service, body):
    response = client.patch(f"/api/v1/templates/{uuid.uuid4()}", json=body)
    assert response.status_code == 422
    service.update_template.assert_not_called()
