"""
API routers package for the FastAPI application.

This package contains all API endpoint routers organized by domain:
- contacts_api: Contact CRUD, bulk operations and tag links
- tags_api: Tag CRUD and bulk tagging
- interactions_api: Interaction logging
- occasions_api: Occasion management
- scheduling_api: Follow-up priorities and upcoming occasions
- account_api: Account deletion
- health_api: Health check endpoints
"""

from .contacts_api import contacts_api_router
from .tags_api import tags_api_router
from .interactions_api import interactions_api_router
from .occasions_api import occasions_api_router
from .scheduling_api import scheduling_api_router
from .account_api import account_api_router
from .health_api import health_api_router

__all__ = [
    "contacts_api_router",
    "tags_api_router",
    "interactions_api_router",
    "occasions_api_router",
    "scheduling_api_router",
    "account_api_router",
    "health_api_router",
]
