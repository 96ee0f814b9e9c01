"""
Page store - one page per owner, identity and content updated separately.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, defer

from ..errors import (
    ContentNotFoundError,
    InvalidThemeError,
    PageAlreadyExistsError,
    PageNotFoundError,
    StorageError,
    UrlAlreadyTakenError,
)
from ..logging_config import logger
from ..models.page import Page, Theme
from ..schemas import ProfileContent
from .content_validator import ContentKind, from_storage, serialize, to_storage
from .page_urls import allocate_page_url, check_url_availability, validate_page_url
from .transactions import commit, storage_errors


def _theme_value(theme) -> str:
    try:
        return Theme(theme).value
    except ValueError:
        raise InvalidThemeError(f"Unknown theme '{theme}'")


def _get_page(db: Session, owner_id: str) -> Page:
    with storage_errors(db, "fetching page"):
        page = db.query(Page).filter(Page.owner_id == owner_id).first()
    if page is None:
        raise PageNotFoundError()
    return page


def create_page(db: Session, owner_id: str, url_slug: str, theme,
                content: Optional[ProfileContent] = None) -> Page:
    """
    Create the owner's page.

    Raises PageAlreadyExistsError if the owner already has one, and the url
    allocator errors if ``url_slug`` is malformed, reserved or taken.
    """
    theme_value = _theme_value(theme)
    validate_page_url(url_slug)

    with storage_errors(db, "creating page"):
        if db.query(Page.owner_id).filter(Page.owner_id == owner_id).first():
            raise PageAlreadyExistsError()
        check_url_availability(db, url_slug, owner_id)

    page = Page(
        owner_id=owner_id,
        url_slug=url_slug,
        theme=theme_value,
        content=to_storage(content) if content is not None else None,
    )
    db.add(page)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # Lost a race: either on the owner key or on the url index
        if db.query(Page.owner_id).filter(Page.owner_id == owner_id).first():
            raise PageAlreadyExistsError()
        raise UrlAlreadyTakenError()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to create page for owner={owner_id}")
        raise StorageError(f"Database error while creating page: {e}") from e

    db.refresh(page)
    logger.info(f"Created page '{page.url_slug}' for owner={owner_id}")
    return page


def get_page_identity(db: Session, owner_id: str) -> Optional[Page]:
    """Identity and metadata only; the content column is not loaded."""
    with storage_errors(db, "fetching page"):
        return (
            db.query(Page)
            .options(defer(Page.content))
            .filter(Page.owner_id == owner_id)
            .first()
        )


def get_page_by_url(db: Session, url_slug: str) -> Optional[Page]:
    with storage_errors(db, "fetching page"):
        return db.query(Page).filter(Page.url_slug == url_slug).first()


def get_page_content(db: Session, owner_id: str) -> Optional[ProfileContent]:
    """None when the page exists but nothing was uploaded yet."""
    page = _get_page(db, owner_id)
    return from_storage(ContentKind.PROFILE, page.content)


def export_page_content(db: Session, owner_id: str) -> str:
    """YAML text of the page content, for download."""
    record = get_page_content(db, owner_id)
    if record is None:
        raise ContentNotFoundError("No page data has been uploaded yet")
    return serialize(record)


def replace_page_content(db: Session, owner_id: str, record: ProfileContent) -> Page:
    """Full replace, not merge."""
    page = _get_page(db, owner_id)
    page.content = to_storage(record)
    page.updated_at = datetime.utcnow()
    commit(db, "updating page data")
    db.refresh(page)
    logger.info(f"Replaced page content for owner={owner_id}")
    return page


def update_page_theme(db: Session, owner_id: str, theme) -> Page:
    theme_value = _theme_value(theme)
    page = _get_page(db, owner_id)
    page.theme = theme_value
    page.updated_at = datetime.utcnow()
    commit(db, "updating page theme")
    db.refresh(page)
    return page


def update_page_url(db: Session, owner_id: str, url_slug: str) -> Page:
    return allocate_page_url(db, owner_id, url_slug)


def delete_page(db: Session, owner_id: str) -> None:
    """Delete the page; the database cascades to all of the owner's projects."""
    page = _get_page(db, owner_id)
    db.delete(page)
    commit(db, "deleting page")
    logger.info(f"Deleted page for owner={owner_id}")
