"""
Project store and reorder transactor.

Projects are addressed by the ``(owner_id, project_slug)`` composite key. The
slug is allocated once at creation and never changes; position only changes
through ``reorder_projects``.
"""

from datetime import datetime
from typing import Iterable, List, NamedTuple, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import (
    ContentNotFoundError,
    ProjectNotFoundError,
    ReorderValidationError,
    StorageError,
)
from ..logging_config import logger
from ..models.project import Project
from ..schemas import FieldIssue, ProjectContent
from .content_validator import ContentKind, from_storage, serialize, to_storage
from .slugs import insert_project_with_unique_slug
from .transactions import commit, storage_errors


class ProjectOrder(NamedTuple):
    project_slug: str
    position: int


def create_project(db: Session, owner_id: str, display_name: str, position: int = 0) -> Project:
    """
    Create a project with a slug derived from ``display_name``.

    Raises ParentPageMissingError if the owner has no page yet.
    """
    with storage_errors(db, "creating project"):
        project = insert_project_with_unique_slug(db, owner_id, display_name, position)
    commit(db, "creating project")
    db.refresh(project)
    return project


def list_projects(db: Session, owner_id: str) -> List[Project]:
    """Owner's projects by position; creation order and slug break ties."""
    with storage_errors(db, "fetching projects"):
        return (
            db.query(Project)
            .filter(Project.owner_id == owner_id)
            .order_by(Project.position.asc(), Project.created_at.asc(), Project.project_slug.asc())
            .all()
        )


def get_project(db: Session, owner_id: str, project_slug: str) -> Optional[Project]:
    with storage_errors(db, "fetching project"):
        return (
            db.query(Project)
            .filter(Project.owner_id == owner_id, Project.project_slug == project_slug)
            .first()
        )


def _require_project(db: Session, owner_id: str, project_slug: str) -> Project:
    project = get_project(db, owner_id, project_slug)
    if project is None:
        raise ProjectNotFoundError(slugs=[project_slug])
    return project


def rename_project(db: Session, owner_id: str, project_slug: str, display_name: str) -> Project:
    """Change the display name. The slug stays as allocated."""
    project = _require_project(db, owner_id, project_slug)
    project.display_name = display_name
    project.updated_at = datetime.utcnow()
    commit(db, "updating project")
    db.refresh(project)
    return project


def replace_project_content(db: Session, owner_id: str, project_slug: str, record: ProjectContent) -> Project:
    project = _require_project(db, owner_id, project_slug)
    project.content = to_storage(record)
    project.updated_at = datetime.utcnow()
    commit(db, "updating project data")
    db.refresh(project)
    logger.info(f"Replaced content of project '{project_slug}' for owner={owner_id}")
    return project


def get_project_content(db: Session, owner_id: str, project_slug: str) -> Optional[ProjectContent]:
    project = _require_project(db, owner_id, project_slug)
    return from_storage(ContentKind.PROJECT, project.content)


def export_project_content(db: Session, owner_id: str, project_slug: str) -> str:
    record = get_project_content(db, owner_id, project_slug)
    if record is None:
        raise ContentNotFoundError("No project data has been uploaded yet")
    return serialize(record)


def delete_project(db: Session, owner_id: str, project_slug: str) -> None:
    project = _require_project(db, owner_id, project_slug)
    db.delete(project)
    commit(db, "deleting project")
    logger.info(f"Deleted project '{project_slug}' for owner={owner_id}")


def _check_reorder_batch(entries: List[ProjectOrder]) -> None:
    issues = []
    if not entries:
        issues.append(FieldIssue(field="project_orders", issue="At least one project is required"))

    slugs = [entry.project_slug for entry in entries]
    if len(slugs) != len(set(slugs)):
        issues.append(FieldIssue(field="project_orders", issue="Duplicate project_id values are not allowed"))

    for i, entry in enumerate(entries):
        if entry.position < 0:
            issues.append(FieldIssue(
                field=f"project_orders[{i}].display_order",
                issue="Display order must be non-negative",
            ))

    if issues:
        raise ReorderValidationError(issues=issues)


def reorder_projects(db: Session, owner_id: str, entries: Iterable) -> None:
    """
    Apply a batch of ``(project_slug, position)`` updates atomically.

    Every slug must belong to ``owner_id``; otherwise nothing is written and
    ProjectNotFoundError lists the missing slugs. Projects left out of the
    batch keep their current position.
    """
    entries = [ProjectOrder(*entry) for entry in entries]
    _check_reorder_batch(entries)

    wanted = {entry.project_slug: entry.position for entry in entries}
    try:
        projects = (
            db.query(Project)
            .filter(Project.owner_id == owner_id, Project.project_slug.in_(list(wanted)))
            .with_for_update()
            .all()
        )
        found = {project.project_slug for project in projects}
        missing = [entry.project_slug for entry in entries if entry.project_slug not in found]
        if missing:
            db.rollback()
            raise ProjectNotFoundError(slugs=missing)

        now = datetime.utcnow()
        for project in projects:
            project.position = wanted[project.project_slug]
            project.updated_at = now
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Reorder failed for owner={owner_id}, rolled back")
        raise StorageError(f"Database error while reordering projects: {e}") from e

    logger.info(f"Reordered {len(entries)} projects for owner={owner_id}")
