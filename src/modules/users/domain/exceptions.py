"""User record exceptions."""

from fastapi import status

from src.core.domain.exceptions import DomainException, ValidationError


class SyncDisabledError(DomainException):
    """Remote sync is switched off on this deployment."""

    http_status_code = status.HTTP_506_VARIANT_ALSO_NEGOTIATES
    error_code = "SYNC_NOT_PROVISIONED"

    def __init__(self, message: str = "Remote sync is not provisioned"):
        super().__init__(message)


class InvalidSyncPayloadError(ValidationError):
    """Push body does not match the configuration record shape."""

    error_code = "INVALID_SYNC_PAYLOAD"

    def __init__(self, message: str = "Invalid data format"):
        super().__init__(message)
