import logging
from typing import Any, Dict, List

from ..db.stores.academics import ClassesStore, GradesStore
from ..db.stores.students import StudentsStore
from ..db.stores.teachers import TeachersStore
from ..models.db_models import User
from ..modules import metrics

logger = logging.getLogger(__name__)

RECENT_STUDENTS = 8

NAV_ITEMS = [
    {"key": "dashboard", "label": "Dashboard", "admin_only": False},
    {"key": "students", "label": "Students", "admin_only": True},
    {"key": "teachers", "label": "Teachers", "admin_only": True},
    {"key": "classes", "label": "Classes & Subjects", "admin_only": True},
    {"key": "templates", "label": "Templates", "admin_only": True},
    {"key": "attendance", "label": "Attendance", "admin_only": False},
    {"key": "grades", "label": "Grades", "admin_only": False},
    {"key": "reports", "label": "Reports & Certs", "admin_only": False},
    {"key": "profile", "label": "Profile", "admin_only": False},
]


def navigation_for(user: User) -> List[Dict[str, str]]:
    return [
        {"key": item["key"], "label": item["label"]}
        for item in NAV_ITEMS
        if user.role == "admin" or not item["admin_only"]
    ]


class DashboardService:
    def __init__(self, students: StudentsStore, teachers: TeachersStore, classes: ClassesStore,
                 grades: GradesStore):
        self.students = students
        self.teachers = teachers
        self.classes = classes
        self.grades = grades

    async def get_dashboard(self, user: User) -> Dict[str, Any]:
        if user.role == "admin":
            return await self.admin_dashboard()
        return await self.teacher_dashboard(user)

    async def admin_dashboard(self) -> Dict[str, Any]:
        students = await self.students.get_all()
        teachers = await self.teachers.get_all()
        classes = await self.classes.get_all()
        averages = metrics.student_averages(await self.grades.get_all())
        class_names = {school_class.id: school_class.name for school_class in classes}

        return {
            "role": "admin",
            "counts": {
                "students": sum(1 for s in students if s.status == "active"),
                "teachers": sum(1 for t in teachers if t.status == "active"),
                "classes": len(classes),
            },
            "recent_students": [
                {
                    "id": student.id,
                    "student_number": student.student_number,
                    "name": student.full_name,
                    "class_name": class_names.get(student.class_id, "Unassigned"),
                    "parent_contact": student.parent_contact.phone,
                    "average": averages.get(student.id),
                    "status": student.status,
                }
                for student in students[:RECENT_STUDENTS]
            ],
            "classes": [
                {
                    "id": school_class.id,
                    "name": school_class.name,
                    "teacher_names": [t.name for t in teachers if school_class.id in t.assigned_classes],
                    "student_count": sum(1 for s in students if s.class_id == school_class.id),
                }
                for school_class in classes
            ],
        }

    async def teacher_dashboard(self, user: User) -> Dict[str, Any]:
        classes = await self.classes.get_classes_for_teacher(user.id)
        class_ids = {school_class.id for school_class in classes}
        students = [s for s in await self.students.get_all() if s.class_id in class_ids]
        averages = metrics.student_averages(await self.grades.get_by_students([s.id for s in students]))
        class_names = {school_class.id: school_class.name for school_class in classes}

        return {
            "role": "teacher",
            "classes": [
                {
                    "id": school_class.id,
                    "name": school_class.name,
                    "student_count": sum(1 for s in students if s.class_id == school_class.id),
                }
                for school_class in classes
            ],
            "students": [
                {
                    "id": student.id,
                    "student_number": student.student_number,
                    "name": student.full_name,
                    "class_name": class_names.get(student.class_id),
                    "average": averages.get(student.id),
                }
                for student in students
            ],
        }
