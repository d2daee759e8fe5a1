"""
Project exception system.

Usage:
    from kisanai.core.exceptions import ProjectError, EntityExtractionError, exception_factory

    # Built-in types
    raise EntityExtractionError("I couldn't detect the quantity.", details={"field": "quantity"})

    # Add new type on demand
    CapacityError = exception_factory("CapacityError", code="CAPACITY_EXCEEDED", http_status=409)
    raise CapacityError("Warehouse is full", cause=original_error)
"""
from kisanai.core.exceptions.base import ProjectError, exception_factory
from kisanai.core.exceptions.errors import (
    ConfigurationError,
    ConflictError,
    DisambiguationError,
    EntityExtractionError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "ProjectError",
    "exception_factory",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ExternalServiceError",
    "EntityExtractionError",
    "DisambiguationError",
]
