"""
PhaseBoard Phase Routes
Phase creation, lookup, partial update and deletion
"""

from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse

from phaseboard.cache.view_cache import ENTITY_TAGS, TAG_PROJECTS, BaseCacheManager
from phaseboard.core.exceptions import NotFoundError
from phaseboard.routes.dependencies import dump, get_cache, get_storage
from phaseboard.schemas.entities import PhaseCreate, PhaseUpdate
from phaseboard.services.storage import PhaseBoardStorage

router = APIRouter(prefix="/api/phases", tags=["phases"])


def _phase_not_found(phase_id: str) -> NotFoundError:
    return NotFoundError("Phase not found", resource="phase", resource_id=phase_id)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_phase(
    phase_data: PhaseCreate,
    storage: PhaseBoardStorage = Depends(get_storage),
    cache: BaseCacheManager = Depends(get_cache),
):
    phase = await storage.create_phase(phase_data)
    await cache.invalidate_views(*ENTITY_TAGS)
    return phase


@router.get("/{phase_id}")
async def get_phase(
    phase_id: str,
    storage: PhaseBoardStorage = Depends(get_storage),
    cache: BaseCacheManager = Depends(get_cache),
):
    """Single phase with its project and assignee"""

    async def load():
        phase = await storage.get_phase(phase_id)
        if phase is None:
            raise _phase_not_found(phase_id)
        return dump(phase)

    return JSONResponse(await cache.get_or_load(f"phase:{phase_id}", load, tags=(TAG_PROJECTS,)))


@router.patch("/{phase_id}")
async def update_phase(
    phase_id: str,
    phase_data: PhaseUpdate,
    storage: PhaseBoardStorage = Depends(get_storage),
    cache: BaseCacheManager = Depends(get_cache),
):
    phase = await storage.update_phase(phase_id, phase_data)
    if phase is None:
        raise _phase_not_found(phase_id)
    await cache.invalidate_views(*ENTITY_TAGS)
    return phase


@router.delete("/{phase_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_phase(
    phase_id: str,
    storage: PhaseBoardStorage = Depends(get_storage),
    cache: BaseCacheManager = Depends(get_cache),
):
    if not await storage.delete_phase(phase_id):
        raise _phase_not_found(phase_id)
    await cache.invalidate_views(*ENTITY_TAGS)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
