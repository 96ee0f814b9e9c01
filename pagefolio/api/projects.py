"""
Projects API - the authenticated owner's project sub-pages.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from ..auth import get_current_owner
from ..database import get_db
from ..schemas import ContentUpload, ProjectCreate, ProjectOut, ProjectRename, ProjectsReorder
from ..services import projects as projects_service
from ..services.content_validator import ContentKind, parse_content


router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=ProjectOut, status_code=201)
def create_project(payload: ProjectCreate, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    """Create a project; its slug is generated from the name."""
    return projects_service.create_project(db, owner_id, payload.project_name, payload.display_order)


@router.get("", response_model=List[ProjectOut])
def list_projects(owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    return projects_service.list_projects(db, owner_id)


# Declared before /{project_id} so "reorder" is not taken for a slug
@router.put("/reorder")
def reorder_projects(payload: ProjectsReorder, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    entries = [(order.project_id, order.display_order) for order in payload.project_orders]
    projects_service.reorder_projects(db, owner_id, entries)
    return {}


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(project_id: str, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    project = projects_service.get_project(db, owner_id, project_id)
    if project is None:
        raise HTTPException(status_code=404, detail={"code": "PROJECT_NOT_FOUND", "message": "Project not found"})
    return project


@router.put("/{project_id}", response_model=ProjectOut)
def rename_project(project_id: str, update: ProjectRename,
                   owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    return projects_service.rename_project(db, owner_id, project_id, update.project_name)


@router.delete("/{project_id}", status_code=204)
def delete_project(project_id: str, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    projects_service.delete_project(db, owner_id, project_id)
    return Response(status_code=204)


@router.post("/{project_id}/data")
def upload_data(project_id: str, upload: ContentUpload,
                owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    record = parse_content(ContentKind.PROJECT, upload.data)
    projects_service.replace_project_content(db, owner_id, project_id, record)
    return {"message": "Project data updated successfully"}


@router.get("/{project_id}/data")
def download_data(project_id: str, owner_id: str = Depends(get_current_owner), db: Session = Depends(get_db)):
    yaml_content = projects_service.export_project_content(db, owner_id, project_id)
    return Response(
        content=yaml_content,
        media_type="text/yaml",
        headers={"Content-Disposition": f'attachment; filename="{project_id}.yaml"'},
    )
