import random
import uuid
from datetime import date

import pytest

from schooldesk.backend.models.db_models import Attendance, Grade
from schooldesk.backend.modules import metrics


def grade(marks, student_id=None) -> Grade:
    return Grade(id=uuid.uuid4(), student_id=student_id or uuid.uuid4(), subject_id=uuid.uuid4(),
                 marks=marks, term="Term 1", academic_year=2025)


def record(status) -> Attendance:
    return Attendance(id=uuid.uuid4(), student_id=uuid.uuid4(), class_id=uuid.uuid4(),
                      date=date(2025, 1, 10), status=status)


class TestAverages:

    def test_average_rounds_to_one_decimal_half_up(self):
        assert metrics.average_marks([grade(70), grade(74.5)]) == 72.3
        assert metrics.average_marks([grade(80), grade(85)]) == 82.5
        assert metrics.average_marks([grade(66), grade(67), grade(67)]) == 66.7

    def test_average_of_nothing_is_none(self):
        assert metrics.average_marks([]) is None
        assert metrics.format_average(None) == "N/A"
        assert metrics.format_average(None, empty="-") == "-"

    def test_average_ignores_order(self):
        grades = [grade(m) for m in (12, 99, 47.5, 63, 81)]
        expected = metrics.average_marks(grades)
        for _ in range(5):
            random.shuffle(grades)
            assert metrics.average_marks(grades) == expected

    def test_total(self):
        assert metrics.marks_total([grade(40), grade(35.5)]) == 75.5
        assert metrics.marks_total([]) == 0

    def test_student_averages_groups_by_student(self):
        first, second = uuid.uuid4(), uuid.uuid4()
        averages = metrics.student_averages([grade(50, first), grade(70, first), grade(90, second)])
        assert averages == {first: 60.0, second: 90.0}


class TestAttendance:

    def test_rate_counts_late_as_attended(self):
        records = [record("present"), record("late"), record("absent"), record("excused")]
        assert metrics.attendance_rate(records) == 50

    def test_rate_rounds_half_up(self):
        # 5 of 8 attended -> 62.5%
        records = [record("present")] * 5 + [record("absent")] * 3
        assert metrics.attendance_rate(records) == 63

    def test_rate_of_empty_history_is_zero(self):
        assert metrics.attendance_rate([]) == 0

    def test_summary_counts_each_status(self):
        summary = metrics.attendance_summary([record("present"), record("present"), record("absent")])
        assert summary == {"total": 3, "present": 2, "absent": 1, "late": 0, "excused": 0}

    def test_rate_ignores_order(self):
        records = [record(s) for s in ("present", "absent", "late", "present", "excused", "absent")]
        expected = metrics.attendance_rate(records)
        random.shuffle(records)
        assert metrics.attendance_rate(records) == expected


@pytest.mark.parametrize("marks, letter", [(100, "A"), (80, "A"), (79.9, "B"), (60, "B"), (40, "C"), (39, "D"), (0, "D")])
def test_grade_letter(marks, letter):
    assert metrics.grade_letter(marks) == letter


def test_format_marks_drops_trailing_zero():
    assert metrics.format_marks(75.0) == "75"
    assert metrics.format_marks(72.5) == "72.5"
