"""
PhaseBoard Project Routes
Project CRUD plus the per-project phase listing
"""

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from phaseboard.cache.view_cache import ENTITY_TAGS, TAG_PROJECTS, BaseCacheManager
from phaseboard.core.exceptions import NotFoundError
from phaseboard.routes.dependencies import dump, get_cache, get_storage
from phaseboard.schemas.entities import ProjectCreate, ProjectUpdate
from phaseboard.services.storage import PhaseBoardStorage

router = APIRouter(prefix="/api/projects", tags=["projects"])


def _project_not_found(project_id: str) -> NotFoundError:
    return NotFoundError("Project not found", resource="project", resource_id=project_id)


@router.get("")
async def list_projects(
    storage: PhaseBoardStorage = Depends(get_storage),
    cache: BaseCacheManager = Depends(get_cache),
):
    """All projects with their phases and assignees"""

    async def load():
        return dump(await storage.get_projects())

    return JSONResponse(await cache.get_or_load("projects", load, tags=(TAG_PROJECTS,)))


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    storage: PhaseBoardStorage = Depends(get_storage),
    cache: BaseCacheManager = Depends(get_cache),
):
    async def load():
        project = await storage.get_project(project_id)
        if project is None:
            raise _project_not_found(project_id)
        return dump(project)

    return JSONResponse(await cache.get_or_load(f"project:{project_id}", load, tags=(TAG_PROJECTS,)))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    storage: PhaseBoardStorage = Depends(get_storage),
    cache: BaseCacheManager = Depends(get_cache),
):
    """Create a project; phases sent along are created with it"""
    try:
        if project_data.phases:
            return await storage.create_project_with_phases(project_data)
        return await storage.create_project(project_data)
    finally:
        # The project row persists even when one of its phases fails
        await cache.invalidate_views(*ENTITY_TAGS)


@router.patch("/{project_id}")
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    storage: PhaseBoardStorage = Depends(get_storage),
    cache: BaseCacheManager = Depends(get_cache),
):
    project = await storage.update_project(project_id, project_data)
    if project is None:
        raise _project_not_found(project_id)
    await cache.invalidate_views(*ENTITY_TAGS)
    return project


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: str,
    storage: PhaseBoardStorage = Depends(get_storage),
    cache: BaseCacheManager = Depends(get_cache),
):
    """Delete a project together with its phases"""
    if not await storage.delete_project(project_id):
        raise _project_not_found(project_id)
    await cache.invalidate_views(*ENTITY_TAGS)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{project_id}/phases")
async def list_project_phases(
    project_id: str,
    storage: PhaseBoardStorage = Depends(get_storage),
    cache: BaseCacheManager = Depends(get_cache),
):
    async def load():
        return dump(await storage.get_phases_by_project(project_id))

    return JSONResponse(await cache.get_or_load(f"phases:{project_id}", load, tags=(TAG_PROJECTS,)))
