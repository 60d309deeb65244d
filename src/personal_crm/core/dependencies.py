from datetime import datetime, timezone, date
from typing import Optional
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from personal_crm.core.database import get_db
from personal_crm.core.config import get_settings, Settings
from personal_crm.models.user import User
import logging

logger = logging.getLogger('CORE_DEPENDENCIES')


def utc_today() -> date:
    """The current UTC date. Only the HTTP and task edges read the clock."""
    return datetime.now(timezone.utc).date()


# ============================================================================
# Configuration Dependencies
# ============================================================================

def get_settings_dep() -> Settings:
    """
    Get cached application settings.

    Example:
        @router.get("/config")
        def get_config(settings: Settings = Depends(get_settings_dep)):
            return {"horizon": settings.imminent_occasion_horizon_days}
    """
    return get_settings()


# ============================================================================
# Identity Dependencies
# ============================================================================

def get_current_user(
    x_auth_subject: Optional[str] = Header(None),
    x_auth_email: Optional[str] = Header(None),
    x_auth_name: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the caller from headers set by the identity gateway.

    Token validation happens upstream; this only maps the verified subject
    onto a user row, creating it the first time the subject is seen.

    Raises:
        HTTPException: 401 if the subject header is missing
    """
    if not x_auth_subject:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-Auth-Subject header")

    from personal_crm.repositories import UserRepository
    return UserRepository(db).get_or_create(x_auth_subject, email=x_auth_email, name=x_auth_name)


# ============================================================================
# Unit of Work Dependencies
# ============================================================================

def get_uow(db: Session = Depends(get_db)):
    """
    Get Unit of Work instance for coordinating repositories.

    Example:
        @router.get("/contacts/{contact_id}")
        def get_contact(contact_id: int, uow: UnitOfWork = Depends(get_uow)):
            return uow.contacts.get_owned_or_fail(contact_id, user.id)
    """
    from personal_crm.repositories import UnitOfWork
    return UnitOfWork(db)


# ============================================================================
# Service Dependencies
# ============================================================================

def get_scheduler_service(db: Session = Depends(get_db), settings: Settings = Depends(get_settings_dep)):
    """
    Get SchedulerService bound to the request's session.

    Example:
        @router.get("/priorities")
        def priorities(scheduler: SchedulerService = Depends(get_scheduler_service)):
            return scheduler.recompute_priorities(user.id, utc_today())
    """
    from personal_crm.services.scheduler_service import SchedulerService
    return SchedulerService(db=db, settings=settings)


# ============================================================================
# External Service Dependencies
# ============================================================================

def get_priority_cache_dep():
    """
    Get the ranking cache, or None when caching is disabled or unreachable.
    """
    from personal_crm.integrations import get_priority_cache
    return get_priority_cache()
