"""
Project slug generation and per-owner uniqueness resolution.
"""

import re
from typing import Iterator, Optional, Set

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import SLUG_MAX_ATTEMPTS
from ..errors import ParentPageMissingError, SlugAllocationError
from ..logging_config import logger
from ..models.page import Page
from ..models.project import Project

# Used when a display name has no slug-able characters at all (e.g. only emoji)
FALLBACK_SLUG = "project"


def generate_project_slug(display_name: str) -> str:
    """Convert a display name to a URL-safe slug."""
    slug = display_name.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    return slug or FALLBACK_SLUG


def slug_candidates(base: str, max_attempts: Optional[int] = None) -> Iterator[str]:
    """base, base-2, base-3, ... up to ``max_attempts`` values."""
    if max_attempts is None:
        max_attempts = SLUG_MAX_ATTEMPTS
    yield base
    for n in range(2, max_attempts + 1):
        yield f"{base}-{n}"


def _taken_slugs(db: Session, owner_id: str, base: str) -> Set[str]:
    rows = (
        db.query(Project.project_slug)
        .filter(
            Project.owner_id == owner_id,
            (Project.project_slug == base) | Project.project_slug.like(f"{base}-%"),
        )
        .all()
    )
    return {row[0] for row in rows}


def _page_exists(db: Session, owner_id: str) -> bool:
    return db.query(Page.owner_id).filter(Page.owner_id == owner_id).first() is not None


def allocate_project_slug(db: Session, owner_id: str, display_name: str) -> str:
    """
    Return the first free slug for ``display_name`` in the owner's namespace.
    Read-only: the result may be taken by a concurrent insert before it is used,
    which ``insert_project_with_unique_slug`` accounts for.
    """
    base = generate_project_slug(display_name)
    taken = _taken_slugs(db, owner_id, base)
    for candidate in slug_candidates(base):
        if candidate not in taken:
            return candidate
    logger.error(f"Slug space exhausted for owner={owner_id} base='{base}'")
    raise SlugAllocationError()


def insert_project_with_unique_slug(db: Session, owner_id: str, display_name: str, position: int) -> Project:
    """
    Insert a new project under the first free slug.

    Every attempt runs in its own SAVEPOINT; a key violation means another
    request won the candidate, so the next one is tried. The caller commits.
    """
    if not _page_exists(db, owner_id):
        raise ParentPageMissingError()

    base = generate_project_slug(display_name)
    taken = _taken_slugs(db, owner_id, base)

    for candidate in slug_candidates(base):
        if candidate in taken:
            continue

        project = Project(
            owner_id=owner_id,
            project_slug=candidate,
            display_name=display_name,
            position=position,
        )
        try:
            with db.begin_nested():
                db.add(project)
                db.flush()
        except IntegrityError:
            if not _page_exists(db, owner_id):
                raise ParentPageMissingError()
            logger.info(f"Slug '{candidate}' taken concurrently for owner={owner_id}, trying next")
            continue

        logger.info(f"Allocated project slug '{candidate}' for owner={owner_id}")
        return project

    logger.error(f"Slug space exhausted for owner={owner_id} base='{base}'")
    raise SlugAllocationError()
