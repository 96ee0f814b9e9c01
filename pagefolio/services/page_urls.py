"""
Page URL allocation: format, reserved words, global uniqueness, and the swap.

Unlike project slugs, url candidates are never case-folded. An uppercase
candidate is a format error.
"""

import re
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import (
    InvalidUrlFormatError,
    PageNotFoundError,
    ReservedUrlError,
    StorageError,
    UrlAlreadyTakenError,
)
from ..logging_config import logger
from ..models.page import Page
from ..schemas import FieldIssue
from .transactions import storage_errors

URL_MIN_LENGTH = 3
URL_MAX_LENGTH = 30
URL_PATTERN = re.compile(r"[a-z0-9-]+")

# Identifiers that collide with application routes
RESERVED_URLS = frozenset({
    "api",
    "admin",
    "auth",
    "dashboard",
    "static",
    "assets",
    "public",
    "docs",
    "help",
    "terms",
    "privacy",
})


def check_url_format(url: str) -> None:
    issues = []
    if len(url) < URL_MIN_LENGTH:
        issues.append(FieldIssue(field="url", issue=f"URL must be at least {URL_MIN_LENGTH} characters"))
    if len(url) > URL_MAX_LENGTH:
        issues.append(FieldIssue(field="url", issue=f"URL must not exceed {URL_MAX_LENGTH} characters"))
    if not URL_PATTERN.fullmatch(url):
        issues.append(FieldIssue(
            field="url",
            issue="URL must contain only lowercase letters, numbers, and hyphens",
        ))
    if issues:
        raise InvalidUrlFormatError(issues=issues)


def check_reserved_url(url: str) -> None:
    if url.lower() in RESERVED_URLS:
        raise ReservedUrlError()


def check_url_availability(db: Session, url: str, owner_id: str) -> None:
    """Raise if another owner holds ``url``. The caller's own url counts as available."""
    with storage_errors(db, "checking url availability"):
        holder = db.query(Page.owner_id).filter(Page.url_slug == url).first()
    if holder is not None and holder[0] != owner_id:
        raise UrlAlreadyTakenError()


def validate_page_url(url: str) -> None:
    """Format then reserved-word checks, the storage-free part of allocation."""
    check_url_format(url)
    check_reserved_url(url)


def allocate_page_url(db: Session, owner_id: str, candidate: str) -> Page:
    """
    Replace the owner's url slug with ``candidate``.

    The unique index on ``pages.url_slug`` is the arbiter: a concurrent winner
    surfaces here as an IntegrityError and is reported as already taken.
    """
    validate_page_url(candidate)

    with storage_errors(db, "fetching page"):
        page = db.query(Page).filter(Page.owner_id == owner_id).first()
    if page is None:
        raise PageNotFoundError()

    if page.url_slug == candidate:
        return page

    check_url_availability(db, candidate, owner_id)

    previous = page.url_slug
    page.url_slug = candidate
    page.updated_at = datetime.utcnow()
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"URL '{candidate}' claimed concurrently, owner={owner_id} keeps '{previous}'")
        raise UrlAlreadyTakenError()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to update url for owner={owner_id}")
        raise StorageError(f"Database error while updating page url: {e}") from e

    db.refresh(page)
    logger.info(f"Page url changed owner={owner_id} '{previous}' -> '{candidate}'")
    return page
