"""
Built-in exception types. Add new ones here or via exception_factory().
"""
from __future__ import annotations

from kisanai.core.exceptions.base import ProjectError


class ConfigurationError(ProjectError):
    """Invalid or missing configuration."""

    default_code = "CONFIGURATION_ERROR"
    default_http_status = 500


class ValidationError(ProjectError):
    """Request or input validation failed."""

    default_code = "VALIDATION_ERROR"
    default_http_status = 400


class NotFoundError(ProjectError):
    """Referenced warehouse or lot does not exist or is not owned by the user."""

    default_code = "NOT_FOUND"
    default_http_status = 404


class ConflictError(ProjectError):
    """Resource state conflict (e.g. duplicate lot code)."""

    default_code = "CONFLICT"
    default_http_status = 409


class ExternalServiceError(ProjectError):
    """External service (database, weather API) failed."""

    default_code = "EXTERNAL_SERVICE_ERROR"
    default_http_status = 502


class EntityExtractionError(ProjectError):
    """A field required by the requested action is missing from the message."""

    default_code = "ENTITY_EXTRACTION_ERROR"
    default_http_status = 422


class DisambiguationError(ProjectError):
    """More than one candidate matches and the message does not say which."""

    default_code = "DISAMBIGUATION_REQUIRED"
    default_http_status = 409
