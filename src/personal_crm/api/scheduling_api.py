"""
Scheduling API

Follow-up rankings and upcoming occasions for the calling user. `today`
defaults to the current UTC date when the caller leaves it out.
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query

from personal_crm.core.config import get_settings
from personal_crm.core.dependencies import (
    get_current_user,
    get_priority_cache_dep,
    get_scheduler_service,
    utc_today,
)
from personal_crm.models.user import User
from personal_crm.schemas.scheduling import (
    PriorityListResponse,
    UpcomingOccasionListResponse,
    UpcomingOccasionResponse,
)
from personal_crm.services.ranking_service import get_ranking
from personal_crm.services.scheduler_service import SchedulerService


scheduling_api_router = APIRouter(prefix="/scheduling", tags=["Scheduling"])


@scheduling_api_router.get("/priorities", response_model=PriorityListResponse)
async def list_priorities(
    today: Optional[date] = None,
    refresh: bool = False,
    user: User = Depends(get_current_user),
    scheduler: SchedulerService = Depends(get_scheduler_service),
    cache=Depends(get_priority_cache_dep),
):
    return get_ranking(scheduler, user.id, today or utc_today(), cache=cache, refresh=refresh)


@scheduling_api_router.get("/upcoming", response_model=UpcomingOccasionListResponse)
async def list_upcoming_occasions(
    today: Optional[date] = None,
    window_days: Optional[int] = Query(None, ge=0, description="Days after today to include"),
    user: User = Depends(get_current_user),
    scheduler: SchedulerService = Depends(get_scheduler_service),
):
    today = today or utc_today()
    if window_days is None:
        window_days = get_settings().upcoming_window_default_days

    upcoming = scheduler.upcoming_occasions(user.id, today, window_days)
    return UpcomingOccasionListResponse(
        today=today,
        window_days=window_days,
        occasions=[UpcomingOccasionResponse.from_upcoming(u) for u in upcoming],
        total_count=len(upcoming),
    )
