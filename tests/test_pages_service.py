from __future__ import annotations

import time

import pytest

from conftest import OTHER_OWNER, OWNER
from pagefolio.errors import (
    ContentNotFoundError,
    InvalidThemeError,
    PageAlreadyExistsError,
    PageNotFoundError,
    ParentPageMissingError,
    ReservedUrlError,
    UrlAlreadyTakenError,
)
from pagefolio.models import Page, Project
from pagefolio.schemas import ProfileContent
from pagefolio.services import pages as pages_service
from pagefolio.services import projects as projects_service
from pagefolio.services.content_validator import parse_content


def _profile(name: str = "John Doe") -> ProfileContent:
    return parse_content("profile", f"name: {name}\nbio: Developer\nskills:\n  - name: Python\n")


def test_create_page_with_initial_content(db) -> None:
    page = pages_service.create_page(db, OWNER, "john-doe", "ocean", _profile())
    assert page.owner_id == OWNER
    assert page.url_slug == "john-doe"
    assert page.theme == "ocean"
    assert pages_service.get_page_content(db, OWNER) == _profile()


def test_one_page_per_owner(db, owner_page) -> None:
    with pytest.raises(PageAlreadyExistsError):
        pages_service.create_page(db, OWNER, "another-url", "earth")


def test_create_page_with_taken_url(db, owner_page) -> None:
    with pytest.raises(UrlAlreadyTakenError):
        pages_service.create_page(db, OTHER_OWNER, "john-doe", "earth")


def test_create_page_with_reserved_url(db) -> None:
    with pytest.raises(ReservedUrlError):
        pages_service.create_page(db, OWNER, "dashboard", "earth")
    assert pages_service.get_page_identity(db, OWNER) is None


def test_create_page_with_unknown_theme(db) -> None:
    with pytest.raises(InvalidThemeError):
        pages_service.create_page(db, OWNER, "john-doe", "neon")


def test_identity_read_does_not_require_content(db, owner_page) -> None:
    page = pages_service.get_page_identity(db, OWNER)
    assert page.url_slug == "john-doe"
    assert pages_service.get_page_identity(db, "nobody") is None


def test_content_absent_until_uploaded(db, owner_page) -> None:
    assert pages_service.get_page_content(db, OWNER) is None
    with pytest.raises(ContentNotFoundError):
        pages_service.export_page_content(db, OWNER)


def test_replace_content_is_full_replace(db, owner_page) -> None:
    pages_service.replace_page_content(db, OWNER, _profile())
    pages_service.replace_page_content(db, OWNER, parse_content("profile", "name: New\nbio: Other\n"))
    content = pages_service.get_page_content(db, OWNER)
    assert content.name == "New"
    assert content.skills is None


def test_export_round_trips(db, owner_page) -> None:
    pages_service.replace_page_content(db, OWNER, _profile())
    text = pages_service.export_page_content(db, OWNER)
    assert parse_content("profile", text) == _profile()


def test_mutations_require_a_page(db) -> None:
    with pytest.raises(PageNotFoundError):
        pages_service.replace_page_content(db, OWNER, _profile())
    with pytest.raises(PageNotFoundError):
        pages_service.update_page_theme(db, OWNER, "earth")
    with pytest.raises(PageNotFoundError):
        pages_service.get_page_content(db, OWNER)
    with pytest.raises(PageNotFoundError):
        pages_service.delete_page(db, OWNER)


def test_update_theme_advances_updated_at(db, owner_page) -> None:
    before = owner_page.updated_at
    time.sleep(0.01)
    page = pages_service.update_page_theme(db, OWNER, "earth")
    assert page.theme == "earth"
    assert page.updated_at > before


def test_delete_page_cascades_to_projects(db, owner_page) -> None:
    pages_service.create_page(db, OTHER_OWNER, "jane-doe", "earth")
    projects_service.create_project(db, OWNER, "Alpha")
    projects_service.create_project(db, OWNER, "Beta")
    projects_service.create_project(db, OTHER_OWNER, "Gamma")

    pages_service.delete_page(db, OWNER)
    db.expire_all()

    assert db.query(Page).filter(Page.owner_id == OWNER).first() is None
    assert db.query(Project).filter(Project.owner_id == OWNER).count() == 0
    assert db.query(Project).filter(Project.owner_id == OTHER_OWNER).count() == 1


def test_project_requires_parent_page(db) -> None:
    with pytest.raises(ParentPageMissingError):
        projects_service.create_project(db, OWNER, "Orphan")


def test_page_by_url(db, owner_page) -> None:
    assert pages_service.get_page_by_url(db, "john-doe").owner_id == OWNER
    assert pages_service.get_page_by_url(db, "missing") is None
