from __future__ import annotations

from datetime import date

import pytest

from pagefolio.errors import InvalidContentError
from pagefolio.schemas import ProfileContent, ProjectContent
from pagefolio.services.content_validator import ContentKind, parse_content, serialize, validate

FULL_PROFILE = """
name: John Doe
bio: Software Engineer with 10 years of experience
contact_info:
  - label: Email
    value: john@example.com
  - label: GitHub
    value: github.com/johndoe
experience:
  - job_title: Senior Developer
    job_description: Led development of key features
  - job_title: Junior Developer
education:
  - school_title: MIT
    school_description: Computer Science Degree
skills:
  - name: JavaScript
  - name: TypeScript
"""

FULL_PROJECT = """
name: My Awesome Project
description: A comprehensive web application
tech_stack: React, Node.js, PostgreSQL
prod_link: https://myproject.com
start_date: 2024-01-15
end_date: 2024-12-31
"""


def _fields(result) -> list[str]:
    return [issue.field for issue in result.issues]


def test_full_profile_is_accepted() -> None:
    result = validate(ContentKind.PROFILE, FULL_PROFILE)
    assert result.ok
    assert result.issues == []
    record = result.record
    assert isinstance(record, ProfileContent)
    assert record.name == "John Doe"
    assert [c.label for c in record.contact_info] == ["Email", "GitHub"]
    assert record.experience[1].job_description is None
    assert [s.name for s in record.skills] == ["JavaScript", "TypeScript"]


def test_minimal_profile_leaves_optional_groups_absent() -> None:
    record = validate("profile", "name: Jane Smith\nbio: Designer and developer\n").record
    assert record.contact_info is None
    assert record.experience is None
    assert record.education is None
    assert record.skills is None


def test_unknown_top_level_fields_are_ignored() -> None:
    result = validate("profile", "name: Jane\nbio: Hi\nfavourite_color: blue\n")
    assert result.ok
    assert not hasattr(result.record, "favourite_color")


def test_malformed_yaml_yields_single_issue() -> None:
    result = validate("profile", "[invalid: yaml: structure:")
    assert not result.ok
    assert result.malformed
    assert result.record is None
    assert len(result.issues) == 1
    assert result.issues[0].issue.startswith("Failed to parse YAML")


def test_duplicate_keys_are_rejected() -> None:
    result = validate("profile", "name: John\nname: Jane\nbio: Test\n")
    assert result.malformed
    assert "duplicated mapping key" in result.issues[0].issue


@pytest.mark.parametrize("text", ["", "just a sentence", "- a\n- b\n"])
def test_non_mapping_document_is_rejected(text: str) -> None:
    result = validate("profile", text)
    assert not result.ok
    assert not result.malformed
    assert _fields(result) == [""]


def test_missing_required_field_reports_exactly_that_field() -> None:
    result = validate("profile", "bio: Just a bio\n")
    assert not result.ok
    assert [(i.field, i.issue) for i in result.issues] == [("name", "Required")]


def test_all_violations_are_reported_in_one_pass() -> None:
    text = f"""
contact_info:
  - label: {"x" * 51}
    value: ok
experience:
  - job_description: no title
skills:
  - skill: Wrong field name
"""
    result = validate("profile", text)
    fields = _fields(result)
    assert "name" in fields
    assert "bio" in fields
    assert "contact_info[0].label" in fields
    assert "experience[0].job_title" in fields
    assert "skills[0].name" in fields


def test_length_violation_names_the_rule() -> None:
    result = validate("profile", f"name: {'a' * 101}\nbio: ok\n")
    assert [(i.field, i.issue) for i in result.issues] == [
        ("name", "Name must not exceed 100 characters"),
    ]


def test_nested_length_violation_uses_nested_label() -> None:
    text = f"name: A\nbio: B\neducation:\n  - school_title: MIT\n    school_description: {'d' * 301}\n"
    result = validate("profile", text)
    assert [(i.field, i.issue) for i in result.issues] == [
        ("education[0].school_description", "School description must not exceed 300 characters"),
    ]


def test_wrong_type_is_reported() -> None:
    result = validate("profile", "name: 42\nbio: ok\nskills: python\n")
    issues = {i.field: i.issue for i in result.issues}
    assert issues["name"] == "Expected string"
    assert issues["skills"] == "Expected a list"


def test_empty_required_string_is_reported() -> None:
    result = validate("project", "name: ''\ndescription: ok\n")
    assert [(i.field, i.issue) for i in result.issues] == [("name", "Project name is required")]


def test_full_project_is_accepted() -> None:
    record = validate(ContentKind.PROJECT, FULL_PROJECT).record
    assert isinstance(record, ProjectContent)
    assert record.start_date == date(2024, 1, 15)
    assert record.end_date == date(2024, 12, 31)
    assert record.prod_link == "https://myproject.com"


def test_project_dates_out_of_order_fail_on_end_date() -> None:
    text = "name: P\ndescription: D\nstart_date: 2024-12-31\nend_date: 2024-01-01\n"
    result = validate("project", text)
    assert [(i.field, i.issue) for i in result.issues] == [
        ("end_date", "End date must be after or equal to start date"),
    ]

    swapped = "name: P\ndescription: D\nstart_date: 2024-01-01\nend_date: 2024-12-31\n"
    assert validate("project", swapped).ok


def test_equal_project_dates_are_accepted() -> None:
    text = "name: P\ndescription: D\nstart_date: 2024-06-15\nend_date: 2024-06-15\n"
    assert validate("project", text).ok


def test_date_order_is_checked_alongside_other_issues() -> None:
    text = "description: D\nstart_date: 2024-12-31\nend_date: 2024-01-01\n"
    assert set(_fields(validate("project", text))) == {"name", "end_date"}


def test_invalid_date_skips_order_check() -> None:
    text = "name: P\ndescription: D\nstart_date: not-a-date\nend_date: 2024-01-01\n"
    result = validate("project", text)
    assert _fields(result) == ["start_date"]


@pytest.mark.parametrize("field,value", [
    ("start_date", "2024-02-30"),
    ("end_date", "2024-13-01"),
    ("start_date", "2023-02-29"),
])
def test_impossible_calendar_date_is_a_field_issue(field: str, value: str) -> None:
    result = validate("project", f"name: P\ndescription: D\n{field}: {value}\n")
    assert not result.malformed
    assert [(i.field, i.issue) for i in result.issues] == [
        (field, "Invalid date, expected YYYY-MM-DD"),
    ]


def test_explicitly_tagged_impossible_date_is_malformed() -> None:
    result = validate("project", "name: P\ndescription: D\nstart_date: !!timestamp 2024-02-30\n")
    assert result.malformed
    assert _fields(result) == [""]


def test_leap_day_is_accepted() -> None:
    record = validate("project", "name: P\ndescription: D\nstart_date: 2024-02-29\n").record
    assert record.start_date == date(2024, 2, 29)


def test_deeply_nested_document_is_malformed() -> None:
    text = "name: N\nbio: B\nskills: " + "[" * 5000 + "]" * 5000 + "\n"
    result = validate("profile", text)
    assert result.malformed
    assert len(result.issues) == 1
    assert result.issues[0].field == ""
    assert result.issues[0].issue.startswith("Failed to parse YAML")


def test_parse_content_raises_with_issues() -> None:
    with pytest.raises(InvalidContentError) as excinfo:
        parse_content("project", "name: P\n")
    assert excinfo.value.message == "The provided data is invalid."
    assert [i.field for i in excinfo.value.issues] == ["description"]
    assert not excinfo.value.malformed


@pytest.mark.parametrize("kind,text", [
    ("profile", FULL_PROFILE),
    ("profile", "name: Jane Smith\nbio: Designer\n"),
    ("profile", "name: T\nbio: B\ncontact_info: []\nskills: []\n"),
    ("project", FULL_PROJECT),
    ("project", "name: Simple Project\ndescription: A simple description\n"),
])
def test_serialized_record_validates_to_the_same_record(kind: str, text: str) -> None:
    record = validate(kind, text).record
    again = validate(kind, serialize(record))
    assert again.ok
    assert again.record == record


def test_serialize_preserves_awkward_strings() -> None:
    record = ProfileContent(
        name='John "Johnny" O\'Brien: #1',
        bio="line one\nline two\n- not a list",
    )
    assert validate("profile", serialize(record)).record == record


def test_serialize_omits_absent_fields() -> None:
    text = serialize(ProjectContent(name="Basic Project", description="Basic description"))
    assert "name: Basic Project" in text
    assert "tech_stack" not in text
    assert "start_date" not in text
