import html
import logging
from datetime import date
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from ..db.stores.academics import ClassesStore, SubjectsStore, GradesStore, AcademicTermsStore
from ..db.stores.attendance import AttendanceStore
from ..db.stores.documents import TemplatesStore, ReportsStore, IndemnityStore, CertificatesStore
from ..db.stores.students import StudentsStore
from ..models.db_models import Student, Template, User
from ..modules import metrics
from ..modules.template_engine import (
    NO_TEMPLATE_MESSAGES, render_template, grades_text, grades_table_html
)
from .access import ensure_class_access
from .errors import ServiceError, NotFoundError

logger = logging.getLogger(__name__)


class GeneratedDocument(BaseModel):
    """The outcome of a generation request."""
    content: str
    template_id: Optional[UUID] = None
    record_id: Optional[UUID] = None
    persisted: bool = False


class DocumentService:
    """
    Renders term reports, certificates and indemnity forms from stored
    templates and keeps the generated history.
    """
    def __init__(self, templates: TemplatesStore, reports: ReportsStore, indemnity: IndemnityStore,
                 certificates: CertificatesStore, students: StudentsStore, classes: ClassesStore,
                 subjects: SubjectsStore, grades: GradesStore, attendance: AttendanceStore,
                 terms: AcademicTermsStore):
        self.templates = templates
        self.reports = reports
        self.indemnity = indemnity
        self.certificates = certificates
        self.students = students
        self.classes = classes
        self.subjects = subjects
        self.grades = grades
        self.attendance = attendance
        self.terms = terms

    # ===== Templates =====

    async def list_templates(self, template_type: Optional[str] = None) -> List[Template]:
        if template_type:
            return await self.templates.get_by_type(template_type)
        return await self.templates.get_all()

    async def get_template(self, template_id: UUID) -> Template:
        template = await self.templates.get_by_id(template_id)
        if template is None:
            raise NotFoundError("Template not found.")
        return template

    async def create_template(self, user: User, values: Dict[str, Any]) -> Template:
        return await self.templates.add({**values, "created_by": user.id})

    async def update_template(self, template_id: UUID, updates: Dict[str, Any]) -> Template:
        await self.get_template(template_id)
        try:
            await self.templates.update(template_id, updates)
        except Exception as e:
            logger.error(f"Error while updating template {template_id}.", exc_info=True)
            raise ServiceError("A database error occurred while updating the template.") from e
        return await self.get_template(template_id)

    async def delete_template(self, template_id: UUID):
        await self.get_template(template_id)
        await self.templates.delete(template_id)

    async def _pick_template(self, template_type: str, template_id: Optional[UUID]) -> Optional[Template]:
        """
        An explicit id must name a template of the right type. Without one the
        first template of the type (by name) is used, or None if there is none.
        """
        if template_id:
            template = await self.templates.get_by_id(template_id)
            if template is None or template.type != template_type:
                raise NotFoundError(f"No {template_type} template with this id.")
            return template
        candidates = await self.templates.get_by_type(template_type)
        return candidates[0] if candidates else None

    async def _active_year(self) -> int:
        """A report covers one academic year; without an explicit one the active term decides."""
        active = await self.terms.get_active()
        if active is None:
            raise ServiceError("No active academic term. Please choose an academic year.")
        return active.year

    # ===== Rendering =====

    async def _load_student(self, user: User, student_id: UUID) -> Student:
        student = await self.students.get_by_id(student_id)
        if student is None:
            raise NotFoundError("Student not found.")
        await ensure_class_access(self.classes, user, student.class_id)
        return student

    async def _class_name(self, class_id: Optional[UUID]) -> Optional[str]:
        if not class_id:
            return None
        school_class = await self.classes.get_by_id(class_id)
        return school_class.name if school_class else None

    @staticmethod
    def _student_values(student: Student, class_name: Optional[str], author: User) -> Dict[str, Any]:
        guardian = student.guardian_contact
        today = date.today().isoformat()
        return {
            "StudentName": student.full_name,
            "StudentNumber": student.student_number,
            "Class": class_name,
            "DateOfBirth": student.dob.isoformat() if student.dob else None,
            "Gender": student.gender,
            "ParentName": student.parent_contact.full_name,
            "ParentPhone": student.parent_contact.phone,
            "GuardianName": guardian.full_name if guardian else None,
            "GuardianPhone": guardian.phone if guardian else None,
            "Allergies": student.allergies,
            "MedicalNotes": student.medical_notes,
            "TeacherName": author.name,
            "Date": today,
            "GeneratedDate": today,
        }

    async def _report_values(self, student: Student, term: str, academic_year: Optional[int]) -> Dict[str, Any]:
        grades = await self.grades.get_by_student_and_term(student.id, term, academic_year)
        subject_names = {subject.id: subject.name for subject in await self.subjects.get_all()}
        records = await self.attendance.get_by_student(student.id)
        summary = metrics.attendance_summary(records)
        average = metrics.average_marks(grades)
        return {
            "Term": term,
            "AcademicYear": academic_year,
            "Grades": grades_text(grades, subject_names),
            "GradesTable": grades_table_html(grades, subject_names),
            "Total": metrics.format_marks(metrics.marks_total(grades)) if grades else None,
            "Average": metrics.format_average(average, empty=""),
            "AverageMarks": metrics.format_average(average, empty=""),
            "AttendanceRate": f"{metrics.attendance_rate(records)}%",
            "TotalPresent": summary["present"],
            "TotalAbsent": summary["absent"],
            "TotalLate": summary["late"],
            "TotalExcused": summary["excused"],
        }

    async def generate_report(self, author: User, student_id: UUID, term: str,
                              class_id: Optional[UUID] = None, academic_year: Optional[int] = None,
                              template_id: Optional[UUID] = None,
                              teacher_comment: Optional[str] = None) -> GeneratedDocument:
        student = await self._load_student(author, student_id)
        template = await self._pick_template("report", template_id)
        if template is None:
            return GeneratedDocument(content=NO_TEMPLATE_MESSAGES["report"])

        academic_year = academic_year or await self._active_year()
        class_id = class_id or student.class_id
        values = self._student_values(student, await self._class_name(class_id), author)
        values.update(await self._report_values(student, term, academic_year))
        values["TeacherComment"] = teacher_comment
        content = render_template(template.content, values, escape=True)

        try:
            record = await self.reports.add({
                "student_id": student.id,
                "class_id": class_id,
                "term": term,
                "template_id": template.id,
                "generated_date": date.today(),
                "generated_by": author.name,
                "content": content,
                "comments": teacher_comment or "",
            })
        except Exception as e:
            logger.error(f"Error while saving the report of student {student_id}.", exc_info=True)
            raise ServiceError("A database error occurred while saving the report.") from e
        logger.info(f"Report {record.id} generated for student {student_id} ({term}).")
        return GeneratedDocument(content=content, template_id=template.id, record_id=record.id, persisted=True)

    async def generate_certificate(self, author: User, student_id: UUID, term: Optional[str] = None,
                                   class_id: Optional[UUID] = None, template_id: Optional[UUID] = None,
                                   subject: Optional[str] = None) -> GeneratedDocument:
        student = await self._load_student(author, student_id)
        template = await self._pick_template("certificate", template_id)
        if template is None:
            return GeneratedDocument(content=NO_TEMPLATE_MESSAGES["certificate"])

        values = self._student_values(student, await self._class_name(class_id or student.class_id), author)
        values.update({"Term": term, "Subject": subject})
        content = render_template(template.content, values, escape=True)

        try:
            record = await self.certificates.add({
                "student_id": student.id,
                "type": subject or "General Excellence",
                "template_id": template.id,
                "generated_date": date.today(),
            })
        except Exception as e:
            logger.error(f"Error while recording the certificate of student {student_id}.", exc_info=True)
            raise ServiceError("A database error occurred while saving the certificate.") from e
        return GeneratedDocument(content=content, template_id=template.id, record_id=record.id, persisted=True)

    async def generate_indemnity(self, author: User, student_id: UUID, class_id: Optional[UUID] = None,
                                 template_id: Optional[UUID] = None) -> GeneratedDocument:
        student = await self._load_student(author, student_id)
        template = await self._pick_template("indemnity", template_id)
        if template is None:
            return GeneratedDocument(content=NO_TEMPLATE_MESSAGES["indemnity"])

        values = self._student_values(student, await self._class_name(class_id or student.class_id), author)
        content = render_template(template.content, values, escape=True)

        try:
            record = await self.indemnity.add({
                "student_id": student.id,
                "template_id": template.id,
                "generated_date": date.today(),
                "content": content,
            })
        except Exception as e:
            logger.error(f"Error while saving the indemnity form of student {student_id}.", exc_info=True)
            raise ServiceError("A database error occurred while saving the indemnity form.") from e
        return GeneratedDocument(content=content, template_id=template.id, record_id=record.id, persisted=True)

    # ===== History & printing =====

    async def get_history(self, user: User, student_id: UUID) -> Dict[str, Any]:
        await self._load_student(user, student_id)
        return {
            "reports": await self.reports.get_by_student(student_id),
            "indemnity_forms": await self.indemnity.get_by_student(student_id),
            "certificates": await self.certificates.get_by_student(student_id),
        }

    async def render_printable(self, user: User, kind: str, record_id: UUID) -> str:
        """A standalone HTML page with a stored report or indemnity form, ready to print."""
        store = {"reports": self.reports, "indemnity": self.indemnity}.get(kind)
        if store is None:
            raise NotFoundError("Unknown document kind.")
        record = await store.get_by_id(record_id)
        if record is None:
            raise NotFoundError("Document not found.")
        student = await self._load_student(user, record.student_id)

        title = "Term Report" if kind == "reports" else "Indemnity Form"
        title = html.escape(f"{title} - {student.full_name}")
        return (
            "<!DOCTYPE html>\n"
            f"<html><head><meta charset=\"utf-8\"><title>{title}</title>"
            "<style>body{font-family:monospace;padding:20px;white-space:pre-wrap;}"
            "@media print{body{padding:0;}}</style></head>"
            f"<body>{record.content}</body></html>"
        )
