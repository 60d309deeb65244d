"""
Tags API
"""

from fastapi import APIRouter, Depends, HTTPException, status

from personal_crm.core.dependencies import get_current_user, get_uow
from personal_crm.models.user import User
from personal_crm.repositories import UnitOfWork
from personal_crm.schemas.common import BulkItemError, BulkOperationResponse
from personal_crm.schemas.tag import (
    BulkTagAssignRequest,
    CreateTagRequest,
    TagListResponse,
    TagResponse,
    UpdateTagRequest,
)


tags_api_router = APIRouter(prefix="/tags", tags=["Tags"])


@tags_api_router.get("", response_model=TagListResponse)
async def list_tags(
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
):
    tags = uow.tags.list_owned(user.id, order_by="name")
    return TagListResponse(
        tags=[TagResponse.model_validate(tag) for tag in tags],
        total_count=len(tags),
    )


@tags_api_router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(
    request: CreateTagRequest,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
):
    tag = uow.tags.create_tag(user.id, request.model_dump())
    return TagResponse.model_validate(tag)


@tags_api_router.patch("/{tag_id}", response_model=TagResponse)
async def update_tag(
    tag_id: int,
    request: UpdateTagRequest,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
):
    updates = request.model_dump(exclude_unset=True)
    if not updates:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    tag = uow.tags.get_owned_or_fail(tag_id, user.id)
    return TagResponse.model_validate(uow.tags.update_tag(tag, updates))


@tags_api_router.delete("/{tag_id}")
async def delete_tag(
    tag_id: int,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
):
    tag = uow.tags.get_owned_or_fail(tag_id, user.id)
    uow.tags.delete(tag)
    return {"message": "Tag deleted", "tag_id": tag_id}


@tags_api_router.post("/{tag_id}/contacts/bulk", response_model=BulkOperationResponse)
async def bulk_add_tag_to_contacts(
    tag_id: int,
    request: BulkTagAssignRequest,
    user: User = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_uow),
):
    tag = uow.tags.get_owned_or_fail(tag_id, user.id)

    tagged = 0
    errors = []
    for contact_id in request.contact_ids:
        contact = uow.contacts.get_owned(contact_id, user.id)
        if contact is None:
            errors.append(BulkItemError(contact_id=contact_id, error="Contact not found"))
            continue
        uow.contacts.add_tag(contact, tag)
        tagged += 1

    return BulkOperationResponse(
        success_count=tagged,
        errors=errors,
        message=f"Added tag to {tagged} contacts",
    )
