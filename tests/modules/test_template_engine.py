import uuid

import pytest

from schooldesk.backend.models.db_models import Grade
from schooldesk.backend.modules.template_engine import (
    SUPPORTED_TOKENS,
    find_tokens,
    grades_table_html,
    grades_text,
    render_template,
)


@pytest.fixture
def subjects():
    return {uuid.uuid4(): "Mathematics", uuid.uuid4(): "History"}


def make_grade(subject_id, marks, comment=None) -> Grade:
    return Grade(id=uuid.uuid4(), student_id=uuid.uuid4(), subject_id=subject_id, marks=marks,
                 term="Term 1", academic_year=2025, comment=comment)


def test_every_supported_token_is_replaced_even_with_no_values():
    """No supported token survives rendering, whatever the record holds."""
    content = " ".join(f"{{{{{name}}}}}" for name in SUPPORTED_TOKENS)
    rendered = render_template(content, {})
    for name in SUPPORTED_TOKENS:
        assert f"{{{{{name}}}}}" not in rendered


def test_values_replace_every_occurrence():
    rendered = render_template("{{StudentName}} / {{StudentName}} in {{Class}}",
                               {"StudentName": "Lina Okafor", "Class": "7A"})
    assert rendered == "Lina Okafor / Lina Okafor in 7A"


@pytest.mark.parametrize("token, expected", [
    ("Class", "Unassigned"),
    ("Allergies", "None reported"),
    ("Grades", "No grades recorded"),
    ("TeacherComment", "No comment"),
    ("TeacherName", "Class Teacher"),
    ("Subject", "General Excellence"),
    ("Total", "0"),
    ("GuardianName", "N/A"),
])
def test_missing_or_empty_values_use_defaults(token, expected):
    assert render_template(f"{{{{{token}}}}}", {token: ""}) == expected
    assert render_template(f"{{{{{token}}}}}", {}) == expected


def test_unknown_tokens_are_left_alone():
    assert render_template("Dear {{Nickname}}, {{StudentName}}", {"StudentName": "Lina"}) == "Dear {{Nickname}}, Lina"


def test_substituted_values_are_not_rescanned():
    rendered = render_template("{{TeacherComment}} - {{StudentName}}",
                               {"TeacherComment": "Ask {{StudentName}}", "StudentName": "Lina"})
    assert rendered == "Ask {{StudentName}} - Lina"


def test_zero_is_a_value_not_a_missing_one():
    assert render_template("{{TotalAbsent}}", {"TotalAbsent": 0}) == "0"
    assert render_template("{{AcademicYear}}", {"AcademicYear": 2025}) == "2025"


def test_escaping_covers_values_but_not_the_grades_table():
    values = {"TeacherComment": "<b>bold</b> & co", "GradesTable": "<table></table>", "StudentName": ""}
    rendered = render_template("{{TeacherComment}}|{{GradesTable}}|{{StudentName}}", values, escape=True)
    assert rendered == "&lt;b&gt;bold&lt;/b&gt; &amp; co|<table></table>|N/A"
    assert render_template("{{TeacherComment}}", values) == "<b>bold</b> & co"


def test_grades_text_lists_subject_marks_and_letter(subjects):
    math_id, history_id = list(subjects)
    text = grades_text([make_grade(math_id, 85), make_grade(history_id, 39.5)], subjects)
    assert text == "Mathematics: 85 (A)\nHistory: 39.5 (D)"


def test_grades_text_names_unknown_subjects():
    assert grades_text([make_grade(uuid.uuid4(), 60)], {}) == "Unknown: 60 (B)"


def test_grades_table_html_has_a_row_per_grade(subjects):
    math_id, history_id = list(subjects)
    table = grades_table_html([make_grade(math_id, 72, "Solid work"), make_grade(history_id, 55)], subjects)
    assert table.startswith("<table")
    assert table.count("<tr>") == 3
    assert "Solid work" in table
    assert ">-</td>" in table


def test_grades_table_html_escapes_comments(subjects):
    math_id = list(subjects)[0]
    table = grades_table_html([make_grade(math_id, 72, "<b>bold</b>")], subjects)
    assert "&lt;b&gt;bold&lt;/b&gt;" in table


def test_grades_table_html_is_none_without_grades():
    assert grades_table_html([], {}) is None


def test_find_tokens_reports_supported_tokens_once():
    assert find_tokens("{{StudentName}} {{Foo}} {{Class}} {{StudentName}}") == ["StudentName", "Class"]
