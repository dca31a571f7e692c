from collections import Counter, defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, Optional


def _round_half_up(value: float, places: int = 0) -> Decimal:
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def format_marks(marks: float) -> str:
    """75.0 -> '75', 72.5 -> '72.5'."""
    return f"{marks:g}"


def grade_letter(marks: float) -> str:
    if marks >= 80:
        return "A"
    if marks >= 60:
        return "B"
    if marks >= 40:
        return "C"
    return "D"


def marks_total(grades: Iterable) -> float:
    return sum(grade.marks for grade in grades)


def average_marks(grades: Iterable) -> Optional[float]:
    """Mean of the marks to one decimal place, half-up. None when there are no grades."""
    marks = [grade.marks for grade in grades]
    if not marks:
        return None
    return float(_round_half_up(sum(marks) / len(marks), 1))


def format_average(average: Optional[float], empty: str = "N/A") -> str:
    return empty if average is None else f"{average:.1f}"


def attendance_summary(records: Iterable) -> Dict[str, int]:
    counts = Counter(record.status for record in records)
    return {
        "total": sum(counts.values()),
        "present": counts["present"],
        "absent": counts["absent"],
        "late": counts["late"],
        "excused": counts["excused"],
    }


def attendance_rate(records: Iterable) -> int:
    """(present + late) / total as a whole percentage, half-up; 0 for an empty history."""
    summary = attendance_summary(records)
    if not summary["total"]:
        return 0
    rate = (summary["present"] + summary["late"]) / summary["total"] * 100
    return int(_round_half_up(rate))


def student_averages(grades: Iterable) -> Dict:
    """Maps each student id to the average of that student's grades."""
    by_student = defaultdict(list)
    for grade in grades:
        by_student[grade.student_id].append(grade)
    return {student_id: average_marks(items) for student_id, items in by_student.items()}
