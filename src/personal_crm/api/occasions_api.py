"""
Occasions API

Recurrence settings are validated on create by the request schema and on
update against the merged row, so a stored occasion always recurs cleanly.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from personal_crm.core.dependencies import get_current_user, get_priority_cache_dep, get_uow
from personal_crm.models.enums import RecurrenceKind
from personal_crm.models.occasion import Occasion
from personal_crm.models.user import User
from personal_crm.repositories import UnitOfWork
from personal_crm.schemas.occasion import (
    CreateOccasionRequest,
    OccasionResponse,
    UpdateOccasionRequest,
    check_recurrence,
)
from personal_crm.services.ranking_service import invalidate_ranking


occasions_api_router = APIRouter(prefix="/occasions", tags=["Occasions"])


@occasions_api_router.post("", response_model=OccasionResponse, status_code=status.HTTP_201_CREATED)
async def create_occasion(
    request: CreateOccasionRequest,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
    cache=Depends(get_priority_cache_dep),
):
    uow.contacts.get_owned_or_fail(request.contact_id, user.id)
    occasion = uow.occasions.create(Occasion(user_id=user.id, **request.model_dump()))
    invalidate_ranking(cache, user.id)
    return OccasionResponse.model_validate(occasion)


@occasions_api_router.patch("/{occasion_id}", response_model=OccasionResponse)
async def update_occasion(
    occasion_id: int,
    request: UpdateOccasionRequest,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
    cache=Depends(get_priority_cache_dep),
):
    updates = request.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")
    for required in ("name", "date", "recurring"):
        if required in updates and updates[required] is None:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"{required} cannot be null")

    occasion = uow.occasions.get_owned_or_fail(occasion_id, user.id)
    merged = {
        "date": occasion.date,
        "recurring": occasion.recurring,
        "recurrence_kind": occasion.recurrence_kind,
        "recurring_interval": occasion.recurring_interval,
        **updates,
    }
    check_recurrence(merged["date"], merged["recurring"], merged["recurrence_kind"], merged["recurring_interval"])
    if merged["recurring"] and merged["recurrence_kind"] is None:
        updates["recurrence_kind"] = RecurrenceKind.EVERY_N_DAYS

    occasion = uow.occasions.apply_updates(occasion, updates)
    invalidate_ranking(cache, user.id)
    return OccasionResponse.model_validate(occasion)


@occasions_api_router.delete("/{occasion_id}")
async def delete_occasion(
    occasion_id: int,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
    cache=Depends(get_priority_cache_dep),
):
    occasion = uow.occasions.get_owned_or_fail(occasion_id, user.id)
    uow.occasions.delete(occasion)
    invalidate_ranking(cache, user.id)
    return {"message": "Occasion deleted", "occasion_id": occasion_id}
