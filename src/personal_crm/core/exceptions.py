"""
Custom exceptions for the application.

This module defines domain-specific exceptions for better error handling
and more meaningful error messages throughout the application.
"""

from typing import Optional, Any, Dict


class ApplicationException(Exception):
    """Base exception for all application-specific exceptions."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class DatabaseException(ApplicationException):
    """Exception raised for database-related errors."""
    pass


class ValidationException(ApplicationException):
    """Exception raised for validation errors."""
    pass


class NotFoundException(ApplicationException):
    """Exception raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: Any):
        message = f"{resource} not found: {identifier}"
        super().__init__(message, {"resource": resource, "identifier": identifier})


class DuplicateException(ApplicationException):
    """Exception raised when attempting to create a duplicate resource."""

    def __init__(self, resource: str, field: str, value: Any):
        message = f"{resource} already exists with {field}: {value}"
        super().__init__(message, {"resource": resource, "field": field, "value": value})


class DataInconsistencyException(ApplicationException):
    """
    Raised when fetched rows reference a contact outside the fetched set.

    This points at a scoping bug upstream of the scheduler. It aborts the
    computation it was raised in and nothing else.
    """

    def __init__(self, resource: str, identifier: Any, contact_id: Any, user_id: Any):
        message = (
            f"{resource} {identifier} references contact {contact_id} "
            f"which is not owned by user {user_id}"
        )
        super().__init__(message, {
            "resource": resource,
            "identifier": identifier,
            "contact_id": contact_id,
            "user_id": user_id,
        })


class ConfigurationException(ApplicationException):
    """Exception raised for configuration-related errors."""
    pass


class ExternalServiceException(ApplicationException):
    """Exception raised when an external service (Redis, Celery broker) fails."""

    def __init__(self, service: str, message: str, details: Optional[Dict[str, Any]] = None):
        full_message = f"{service} error: {message}"
        details = details or {}
        details["service"] = service
        super().__init__(full_message, details)


class RedisException(ExternalServiceException):
    """Exception raised for Redis-specific errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("Redis", message, details)
