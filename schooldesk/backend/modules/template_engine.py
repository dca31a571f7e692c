"""
Placeholder substitution for document templates.

Templates are plain text (or HTML) with `{{Token}}` markers. Every supported
token is replaced by its value, or by the token's default when the value is
missing or empty. Unknown tokens are left as written. Substitution is a
single scan of the template, so text coming from a value is never rescanned.
"""
import html
import re
from typing import Dict, Iterable, Mapping, Optional

from .metrics import format_marks, grade_letter

NO_GRADES = "No grades recorded"
SIGNATURE_LINE = "______________________"

SUPPORTED_TOKENS: Dict[str, str] = {
    "StudentName": "N/A",
    "StudentNumber": "N/A",
    "Class": "Unassigned",
    "Term": "N/A",
    "DateOfBirth": "N/A",
    "Gender": "N/A",
    "Grades": NO_GRADES,
    "GradesTable": NO_GRADES,
    "Total": "0",
    "Average": "N/A",
    "AverageMarks": "N/A",
    "AttendanceRate": "N/A",
    "TotalPresent": "0",
    "TotalAbsent": "0",
    "TotalLate": "0",
    "TotalExcused": "0",
    "TeacherComment": "No comment",
    "ParentName": "N/A",
    "ParentPhone": "N/A",
    "GuardianName": "N/A",
    "GuardianPhone": "N/A",
    "Allergies": "None reported",
    "MedicalNotes": "N/A",
    "TeacherName": "Class Teacher",
    "TeacherSignature": SIGNATURE_LINE,
    "Subject": "General Excellence",
    "Date": "N/A",
    "GeneratedDate": "N/A",
    "AcademicYear": "N/A",
}

# Tokens whose values are markup already and are never escaped.
HTML_TOKENS = frozenset({"GradesTable"})

NO_TEMPLATE_MESSAGES = {
    "report": "No report template found. Please create one in Templates.",
    "certificate": "No certificate template found.",
    "indemnity": "No indemnity template found.",
}

_TOKEN_PATTERN = re.compile(r"\{\{(" + "|".join(re.escape(name) for name in SUPPORTED_TOKENS) + r")\}\}")


def resolve_values(values: Mapping[str, object], escape: bool = False) -> Dict[str, str]:
    """
    Every supported token mapped to its value as text, defaults filled in.
    With `escape`, values are HTML-escaped except for the tokens in HTML_TOKENS.
    """
    resolved = {}
    for name, default in SUPPORTED_TOKENS.items():
        value = values.get(name)
        if value is None or value == "":
            resolved[name] = default
        elif escape and name not in HTML_TOKENS:
            resolved[name] = html.escape(str(value), quote=False)
        else:
            resolved[name] = str(value)
    return resolved


def render_template(content: str, values: Mapping[str, object], escape: bool = False) -> str:
    resolved = resolve_values(values, escape)
    return _TOKEN_PATTERN.sub(lambda match: resolved[match.group(1)], content)


def find_tokens(content: str) -> Iterable[str]:
    """Supported tokens used by a template, in order of first appearance."""
    return list(dict.fromkeys(_TOKEN_PATTERN.findall(content)))


def grades_text(grades: Iterable, subject_names: Mapping) -> str:
    """'Mathematics: 85 (A)' per line."""
    lines = []
    for grade in grades:
        name = subject_names.get(grade.subject_id, "Unknown")
        lines.append(f"{name}: {format_marks(grade.marks)} ({grade_letter(grade.marks)})")
    return "\n".join(lines)


_CELL = "padding:6px 12px;border:1px solid #ddd"
_HEAD = _CELL + ";background:#f5f5f5"


def grades_table_html(grades: Iterable, subject_names: Mapping) -> Optional[str]:
    """HTML table of subject, marks and comment; None when there are no grades."""
    rows = []
    for grade in grades:
        name = html.escape(str(subject_names.get(grade.subject_id, "Unknown")))
        comment = html.escape(grade.comment) if grade.comment else "-"
        rows.append(
            f'<tr><td style="{_CELL}">{name}</td>'
            f'<td style="{_CELL};text-align:center">{format_marks(grade.marks)}</td>'
            f'<td style="{_CELL}">{comment}</td></tr>'
        )
    if not rows:
        return None
    return (
        '<table style="width:100%;border-collapse:collapse;margin:12px 0">'
        f'<thead><tr><th style="{_HEAD};text-align:left">Subject</th>'
        f'<th style="{_HEAD};text-align:center">Marks</th>'
        f'<th style="{_HEAD};text-align:left">Comment</th></tr></thead>'
        f'<tbody>{"".join(rows)}</tbody></table>'
    )
