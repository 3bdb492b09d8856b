"""Error types raised by the gateway, resolver and client."""

from __future__ import annotations

from typing import Any, Optional

NETWORK_ERROR_MESSAGE = "Network error. Please try again."


class CrmError(RuntimeError):
    """Base error that carries the HTTP status to surface and the upstream body."""

    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Any = None,
        resource: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.body = body
        self.resource = resource

    def to_payload(self) -> dict:
        return {"error": self.message}


class UpstreamUnavailable(CrmError):
    """Airtable did not answer a read with a success status."""

    @classmethod
    def for_resource(cls, resource: str, body: Any = None) -> "UpstreamUnavailable":
        return cls(f"Failed to fetch {resource}", body=body, resource=resource)


class UpstreamRejected(CrmError):
    """Airtable refused a write; ``message`` is its own explanation when it gave one."""


class ContactResolutionError(UpstreamRejected):
    """Contact lookup or creation failed while linking a property (strict mode only)."""


class ValidationError(CrmError):
    """Required input missing; raised before Airtable is contacted."""

    status_code = 400


class NetworkError(CrmError):
    """The call to the gateway itself could not complete."""

    def __init__(self, message: str = NETWORK_ERROR_MESSAGE, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


def extract_error_message(body: Any, fallback: str) -> str:
    """
    Pull the human message out of an Airtable error body.

    Airtable answers either ``{"error": {"type": ..., "message": ...}}`` or,
    for routing errors, ``{"error": "NOT_FOUND"}``.
    """
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict):
            message = err.get("message")
            if message:
                return str(message)
        elif isinstance(err, str) and err.strip():
            return err.strip()
    return fallback
