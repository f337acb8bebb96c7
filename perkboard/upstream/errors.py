from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ServiceError:
    """The only error shape allowed to cross the service boundary."""

    code: str
    message: str
    status: int

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "status": self.status}


class GetProvenError(Exception):
    code = "GETPROVEN_ERROR"
    status = 500

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        self.details = details or {}

    def to_api_error(self) -> ServiceError:
        return ServiceError(code=self.code, message=self.message, status=self.status)


class ConfigurationError(GetProvenError):
    code = "MISSING_API_TOKEN"
    status = 500


class UpstreamHttpError(GetProvenError):
    code = "API_ERROR"


class NotFoundError(GetProvenError):
    code = "NOT_FOUND"
    status = 404


class TransportError(GetProvenError):
    code = "TRANSPORT_ERROR"
    status = 503


class InvalidCursorError(GetProvenError):
    code = "INVALID_CURSOR"
    status = 400
