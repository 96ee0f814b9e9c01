"""
Pages API - the authenticated owner's single page.
"""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from ..auth import get_current_owner
from ..database import get_db
from ..schemas import ContentUpload, PageCreate, PageOut, PageThemeUpdate, PageUrlUpdate, PublicPageOut, ProjectOut
from ..services import pages as pages_service
from ..services import projects as projects_service
from ..services.content_validator import ContentKind, from_storage, parse_content


router = APIRouter(prefix="/pages", tags=["pages"])


# === API Endpoints ===

@router.post("", response_model=PageOut, status_code=201)
def create_page(payload: PageCreate, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    """Create the owner's page, optionally with initial profile YAML."""
    content = parse_content(ContentKind.PROFILE, payload.data) if payload.data else None
    return pages_service.create_page(db, owner_id, payload.url, payload.theme, content)


@router.get("", response_model=PageOut)
def get_page(owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    """Page identity and metadata (no content)."""
    page = pages_service.get_page_identity(db, owner_id)
    if not page:
        raise HTTPException(status_code=404, detail={"code": "PAGE_NOT_FOUND", "message": "No page found for this user"})
    return page


@router.put("", response_model=PageOut)
def update_theme(update: PageThemeUpdate, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    return pages_service.update_page_theme(db, owner_id, update.theme)


@router.delete("", status_code=204)
def delete_page(owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    """Delete the page and, with it, every project."""
    pages_service.delete_page(db, owner_id)
    return Response(status_code=204)


@router.post("/url")
def update_url(update: PageUrlUpdate, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    page = pages_service.update_page_url(db, owner_id, update.url)
    return {"message": "Page URL updated successfully", "url": page.url_slug}


@router.post("/data")
def upload_data(upload: ContentUpload, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    """Replace the page content with an uploaded profile YAML document."""
    record = parse_content(ContentKind.PROFILE, upload.data)
    pages_service.replace_page_content(db, owner_id, record)
    return {"message": "Page data updated successfully"}


@router.get("/data")
def download_data(owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    yaml_content = pages_service.export_page_content(db, owner_id)
    return Response(
        content=yaml_content,
        media_type="text/yaml",
        headers={"Content-Disposition": 'attachment; filename="page.yaml"'},
    )


@router.get("/public/{url_slug}", response_model=PublicPageOut)
def get_public_page(url_slug: str, db: Session = Depends(get_db)):
    """A page by its url slug, with its projects in display order (for public viewing)."""
    page = pages_service.get_page_by_url(db, url_slug)
    if not page:
        raise HTTPException(status_code=404, detail={"code": "PAGE_NOT_FOUND", "message": "Page not found"})

    projects = projects_service.list_projects(db, page.owner_id)
    return PublicPageOut(
        url_slug=page.url_slug,
        theme=page.theme,
        content=from_storage(ContentKind.PROFILE, page.content),
        projects=[ProjectOut.model_validate(p) for p in projects],
    )
