"""Standard API response models."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error body: ``{"error": {"code", "message"}}``."""

    error: dict

    @classmethod
    def create(
        cls,
        code: str,
        message: str,
        details: dict | None = None,
    ) -> "ErrorResponse":
        error_dict = {"code": code, "message": message}
        if details:
            error_dict["details"] = details
        return cls(error=error_dict)


class MutationResponse[T](BaseModel):
    """Result envelope for create/update/delete endpoints."""

    success: bool = True
    message: str | None = None
    config: T | None = None
