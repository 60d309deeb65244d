"""
Interactions API

Logging an interaction changes the caller's ranking, so every write drops
their cached rankings.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from personal_crm.core.dependencies import get_current_user, get_priority_cache_dep, get_uow
from personal_crm.models.interaction import Interaction
from personal_crm.models.user import User
from personal_crm.repositories import UnitOfWork
from personal_crm.schemas.interaction import (
    CreateInteractionRequest,
    InteractionResponse,
    UpdateInteractionRequest,
)
from personal_crm.services.ranking_service import invalidate_ranking


interactions_api_router = APIRouter(prefix="/interactions", tags=["Interactions"])


@interactions_api_router.post("", response_model=InteractionResponse, status_code=status.HTTP_201_CREATED)
async def create_interaction(
    request: CreateInteractionRequest,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
    cache=Depends(get_priority_cache_dep),
):
    uow.contacts.get_owned_or_fail(request.contact_id, user.id)
    interaction = uow.interactions.create(Interaction(user_id=user.id, **request.model_dump()))
    invalidate_ranking(cache, user.id)
    return InteractionResponse.model_validate(interaction)


@interactions_api_router.patch("/{interaction_id}", response_model=InteractionResponse)
async def update_interaction(
    interaction_id: int,
    request: UpdateInteractionRequest,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
    cache=Depends(get_priority_cache_dep),
):
    updates = request.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")
    if "interaction_date" in updates and updates["interaction_date"] is None:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="interaction_date cannot be null")

    interaction = uow.interactions.get_owned_or_fail(interaction_id, user.id)
    interaction = uow.interactions.apply_updates(interaction, updates)
    invalidate_ranking(cache, user.id)
    return InteractionResponse.model_validate(interaction)


@interactions_api_router.delete("/{interaction_id}")
async def delete_interaction(
    interaction_id: int,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
    cache=Depends(get_priority_cache_dep),
):
    interaction = uow.interactions.get_owned_or_fail(interaction_id, user.id)
    uow.interactions.delete(interaction)
    invalidate_ranking(cache, user.id)
    return {"message": "Interaction deleted", "interaction_id": interaction_id}
