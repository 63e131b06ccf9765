"""
PhaseBoard User Routes
Team member listing and creation
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from phaseboard.cache.view_cache import TAG_USERS, USER_TAGS, BaseCacheManager
from phaseboard.routes.dependencies import dump, get_cache, get_storage
from phaseboard.schemas.entities import UserCreate
from phaseboard.services.storage import PhaseBoardStorage

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
async def list_users(
    storage: PhaseBoardStorage = Depends(get_storage),
    cache: BaseCacheManager = Depends(get_cache),
):
    async def load():
        return dump(await storage.get_users())

    return JSONResponse(await cache.get_or_load("users", load, tags=(TAG_USERS,)))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    storage: PhaseBoardStorage = Depends(get_storage),
    cache: BaseCacheManager = Depends(get_cache),
):
    user = await storage.create_user(user_data)
    await cache.invalidate_views(*USER_TAGS)
    return user
