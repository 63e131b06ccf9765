"""
PhaseBoard Dashboard Routes
Stats snapshot, raw timeline collection and the computed timeline layout
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from phaseboard.cache.view_cache import TAG_STATS, TAG_TIMELINE, BaseCacheManager
from phaseboard.core.exceptions import ValidationError
from phaseboard.routes.dependencies import dump, get_cache, get_storage
from phaseboard.schemas.dashboard import ActiveFiltersSchema, TimelineLayoutResponse
from phaseboard.schemas.enums import Granularity, PhaseStatus
from phaseboard.services.storage import PhaseBoardStorage
from phaseboard.timeline.date_utils import utc_now
from phaseboard.timeline.filters import FilterState
from phaseboard.timeline.layout import DEFAULT_PADDING_UNITS, RENDERER_PADDING
from phaseboard.timeline.view_state import BASE_WIDTH, TimelineViewState, ZoomState

logger = structlog.get_logger("phaseboard.routes.dashboard")

router = APIRouter(prefix="/api", tags=["dashboard"])

RENDERER_PADDING_KEYWORD = "renderer"
MAX_PADDING_UNITS = 52


def resolve_padding(padding: Optional[str], granularity: Granularity) -> int:
    """``None`` is one unit; ``renderer`` picks the per-granularity padding."""
    if padding is None or padding == "":
        return DEFAULT_PADDING_UNITS
    if padding == RENDERER_PADDING_KEYWORD:
        return RENDERER_PADDING[granularity]
    try:
        units = int(padding)
    except ValueError:
        units = -1
    if not 0 <= units <= MAX_PADDING_UNITS:
        raise ValidationError.for_field(
            "padding",
            f"Padding must be '{RENDERER_PADDING_KEYWORD}' or an integer between 0 and {MAX_PADDING_UNITS}",
        )
    return units


@router.get("/stats")
async def get_stats(
    storage: PhaseBoardStorage = Depends(get_storage),
    cache: BaseCacheManager = Depends(get_cache),
):
    async def load():
        return dump(await storage.get_stats())

    return JSONResponse(await cache.get_or_load("stats", load, tags=(TAG_STATS,)))


@router.get("/timeline")
async def get_timeline(
    storage: PhaseBoardStorage = Depends(get_storage),
    cache: BaseCacheManager = Depends(get_cache),
):
    async def load():
        return dump(await storage.get_timeline_data())

    return JSONResponse(await cache.get_or_load("timeline", load, tags=(TAG_TIMELINE,)))


@router.get("/timeline/layout")
async def get_timeline_layout(
    width: float = Query(BASE_WIDTH, gt=0, le=20000),
    height: Optional[float] = Query(None, gt=0, le=100000),
    granularity: Granularity = Query(Granularity.MONTH),
    zoom: float = Query(1.0, gt=0),
    q: str = Query("", max_length=200),
    status: Optional[PhaseStatus] = Query(None),
    assignee: str = Query(""),
    project: str = Query(""),
    padding: Optional[str] = Query(None),
    storage: PhaseBoardStorage = Depends(get_storage),
    cache: BaseCacheManager = Depends(get_cache),
):
    """Filtered timeline laid out in screen space"""
    padding_units = resolve_padding(padding, granularity)
    state = TimelineViewState(
        zoom=ZoomState(zoom),
        granularity=granularity,
        filters=FilterState(text_query=q, status=status, assignee_id=assignee, project_id=project),
        base_width=width,
    )
    plot_margin = state.margin.left + state.margin.right
    if width * state.zoom.factor <= plot_margin:
        raise ValidationError.for_field(
            "width",
            f"Zoomed width must exceed the {plot_margin:g} units reserved for margins",
        )

    # Time-derived fields (overdue, suggested status) are computed for this
    # minute, which is also part of the cache key
    now = utc_now().replace(second=0, microsecond=0)

    async def load():
        layout = state.render(await storage.get_timeline_data(), padding_units=padding_units, height=height, now=now)
        filters = state.filters
        response = TimelineLayoutResponse.model_validate(layout).model_copy(update={
            "filters": ActiveFiltersSchema(
                text_query=filters.text_query,
                status=filters.status or None,
                assignee_id=filters.assignee_id,
                project_id=filters.project_id,
                active_count=filters.active_count,
            ),
        })
        logger.debug(
            "Timeline layout computed",
            projects=layout.project_count,
            phases=layout.phase_count,
            active_filters=filters.active_count,
        )
        return dump(response)

    key = "layout:{}:{}:{}:{}:{}:{}:{}".format(
        now.isoformat(), width, height, granularity.value, state.zoom.factor, padding_units,
        "|".join(state.filters.as_dict().values()),
    )
    return JSONResponse(await cache.get_or_load(key, load, tags=(TAG_TIMELINE,)))
