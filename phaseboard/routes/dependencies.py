"""Request-scoped access to the storage facade and view cache."""

from typing import Any, Iterable, Union

from fastapi import Request
from pydantic import BaseModel

from phaseboard.cache.view_cache import BaseCacheManager
from phaseboard.services.storage import PhaseBoardStorage


def get_storage(request: Request) -> PhaseBoardStorage:
    return request.app.state.storage


def get_cache(request: Request) -> BaseCacheManager:
    return request.app.state.cache


def dump(value: Union[BaseModel, Iterable[BaseModel]]) -> Any:
    """JSON-compatible camelCase payload for a model or a list of models."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    return [item.model_dump(mode="json", by_alias=True) for item in value]
