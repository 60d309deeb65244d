"""
Account API

Deleting the account removes the user row; cascading foreign keys erase
every contact, tag, interaction and occasion it owned.
"""

from fastapi import APIRouter, Depends, Response, status
import logging

from personal_crm.core.dependencies import get_current_user, get_priority_cache_dep, get_uow
from personal_crm.models.user import User
from personal_crm.repositories import UnitOfWork
from personal_crm.services.ranking_service import invalidate_ranking

logger = logging.getLogger("ACCOUNT_API")

account_api_router = APIRouter(prefix="/account", tags=["Account"])


@account_api_router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
    cache=Depends(get_priority_cache_dep),
):
    user_id = user.id
    uow.users.delete(user)
    invalidate_ranking(cache, user_id)
    logger.info(f"Deleted account {user_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
