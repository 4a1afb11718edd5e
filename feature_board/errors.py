# feature_board/errors.py
"""Domain exceptions shared by the stores, services, jobs and API layer."""

from typing import Dict, Optional


class FeatureBoardError(Exception):
    """Base class for all feature board errors."""

    code = "feature_board_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FeatureBoardError):
    """Malformed or missing input. Never retried."""

    code = "validation_error"

    def __init__(self, field_errors: Dict[str, str], message: str = "Validation failed"):
        super().__init__(message)
        self.field_errors = dict(field_errors)


class NotFoundError(FeatureBoardError):
    """Referenced entity does not exist."""

    code = "not_found"

    def __init__(self, message: str = "Feedback not found", entity_id: Optional[str] = None):
        super().__init__(message)
        self.entity_id = entity_id


class ConflictError(FeatureBoardError):
    code = "conflict"


class BackendUnavailableError(FeatureBoardError):
    """Storage backend or external collaborator could not be reached."""

    code = "backend_unavailable"


class StoreBusyError(FeatureBoardError):
    """Every pooled connection stayed in use past the acquisition timeout."""

    code = "busy"


class JobTimeoutError(FeatureBoardError, TimeoutError):
    """An automation run exceeded its wall-clock deadline."""

    code = "timeout"


class UnauthorizedError(FeatureBoardError):
    code = "unauthorized"


class MisconfigurationError(FeatureBoardError):
    """Required server-side configuration is missing."""

    code = "misconfigured"
