"""
Contacts API

Contact CRUD, bulk operations and tag links. Every lookup is scoped to the
calling user; another user's contact ids answer 404.
"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
import logging

from personal_crm.core.dependencies import (
    get_current_user,
    get_priority_cache_dep,
    get_scheduler_service,
    get_uow,
    utc_today,
)
from personal_crm.core.exceptions import DuplicateException
from personal_crm.models.user import User
from personal_crm.repositories import UnitOfWork
from personal_crm.schemas.common import BulkItemError, BulkOperationResponse
from personal_crm.schemas.contact import (
    BulkCreateContactsRequest,
    BulkCreateContactsResponse,
    BulkDeleteContactsRequest,
    ContactListResponse,
    ContactResponse,
    CreateContactRequest,
    UpdateContactRequest,
)
from personal_crm.schemas.scheduling import ContactDetailResponse
from personal_crm.services.ranking_service import invalidate_ranking
from personal_crm.services.scheduler_service import SchedulerService

logger = logging.getLogger("CONTACTS_API")

contacts_api_router = APIRouter(prefix="/contacts", tags=["Contacts"])


@contacts_api_router.get("", response_model=ContactListResponse)
async def list_contacts(
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
):
    contacts = uow.contacts.list_for_user(user.id)
    return ContactListResponse(
        contacts=[ContactResponse.model_validate(c) for c in contacts],
        total_count=len(contacts),
    )


@contacts_api_router.get("/{contact_id}", response_model=ContactDetailResponse)
async def get_contact(
    contact_id: int,
    today: Optional[date] = None,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
    scheduler: SchedulerService = Depends(get_scheduler_service),
):
    contact = uow.contacts.get_owned_or_fail(contact_id, user.id)
    overview = scheduler.contact_overview(user.id, contact_id, today or utc_today())
    return ContactDetailResponse.build(contact, overview)


@contacts_api_router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
async def create_contact(
    request: CreateContactRequest,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
    cache=Depends(get_priority_cache_dep),
):
    contact = uow.contacts.create_contact(user.id, request.model_dump())
    invalidate_ranking(cache, user.id)
    return ContactResponse.model_validate(contact)


@contacts_api_router.post("/bulk", response_model=BulkCreateContactsResponse, status_code=status.HTTP_201_CREATED)
async def create_contacts_bulk(
    request: BulkCreateContactsRequest,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
    cache=Depends(get_priority_cache_dep),
):
    created_ids = []
    errors = []
    for index, item in enumerate(request.contacts):
        try:
            created_ids.append(uow.contacts.create_contact(user.id, item.model_dump()).id)
        except DuplicateException as e:
            errors.append({"index": index, "error": e.message})

    if created_ids:
        invalidate_ranking(cache, user.id)
    return BulkCreateContactsResponse(
        contact_ids=created_ids,
        errors=errors,
        message=f"Created {len(created_ids)} contacts",
    )


@contacts_api_router.patch("/{contact_id}", response_model=ContactResponse)
async def update_contact(
    contact_id: int,
    request: UpdateContactRequest,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
    cache=Depends(get_priority_cache_dep),
):
    updates = request.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    contact = uow.contacts.get_owned_or_fail(contact_id, user.id)
    contact = uow.contacts.update_contact(contact, updates)
    invalidate_ranking(cache, user.id)
    return ContactResponse.model_validate(contact)


@contacts_api_router.delete("/{contact_id}")
async def delete_contact(
    contact_id: int,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
    cache=Depends(get_priority_cache_dep),
):
    contact = uow.contacts.get_owned_or_fail(contact_id, user.id)
    uow.contacts.delete(contact)
    invalidate_ranking(cache, user.id)
    logger.info(f"Deleted contact {contact_id} for user {user.id}")
    return {"message": "Contact deleted", "contact_id": contact_id}


@contacts_api_router.post("/bulk-delete", response_model=BulkOperationResponse)
async def bulk_delete_contacts(
    request: BulkDeleteContactsRequest,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
    cache=Depends(get_priority_cache_dep),
):
    deleted = 0
    errors = []
    for contact_id in request.contact_ids:
        contact = uow.contacts.get_owned(contact_id, user.id)
        if contact is None:
            errors.append(BulkItemError(contact_id=contact_id, error="Contact not found"))
            continue
        uow.contacts.delete(contact)
        deleted += 1

    if deleted:
        invalidate_ranking(cache, user.id)
    return BulkOperationResponse(
        success_count=deleted,
        errors=errors,
        message=f"Deleted {deleted} contacts",
    )


@contacts_api_router.post("/{contact_id}/tags/{tag_id}", response_model=ContactResponse)
async def add_tag_to_contact(
    contact_id: int,
    tag_id: int,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
):
    contact = uow.contacts.get_owned_or_fail(contact_id, user.id)
    tag = uow.tags.get_owned_or_fail(tag_id, user.id)
    uow.contacts.add_tag(contact, tag)
    return ContactResponse.model_validate(contact)


@contacts_api_router.delete("/{contact_id}/tags/{tag_id}", response_model=ContactResponse)
async def remove_tag_from_contact(
    contact_id: int,
    tag_id: int,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
):
    contact = uow.contacts.get_owned_or_fail(contact_id, user.id)
    tag = uow.tags.get_owned_or_fail(tag_id, user.id)
    if not uow.contacts.remove_tag(contact, tag):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tag is not attached to this contact")
    return ContactResponse.model_validate(contact)
