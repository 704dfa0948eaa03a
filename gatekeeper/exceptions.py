"""Custom exceptions and error handling."""

from typing import Any


class GatekeeperError(Exception):
    """Base exception for Doc Gatekeeper."""

    def __init__(
        self,
        message: str,
        code: str = "error",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"code": self.code, "message": self.message, "details": self.details}


class InvalidInputError(GatekeeperError):
    """User input rejected before any network activity."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message=message, code="validation_error", details=details)


class UnknownProviderError(GatekeeperError):
    """No scoring provider is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(
            message=f"Unknown AI provider: {name}",
            code="unknown_provider",
            details={"provider": name},
        )


class ExternalServiceError(GatekeeperError):
    """External service error."""

    def __init__(self, service: str, message: str, code: str = "external_service_error"):
        super().__init__(
            message=f"{service}: {message}",
            code=code,
            details={"service": service},
        )
        self.service = service


class ProviderRequestError(ExternalServiceError):
    """Transport failure or non-2xx answer from an AI provider."""

    def __init__(self, service: str, message: str, status_code: int | None = None):
        super().__init__(service, message, code="provider_request_error")
        self.status_code = status_code
        if status_code is not None:
            self.details["status_code"] = status_code


class EmptyProviderResponseError(ExternalServiceError):
    """Provider answered 2xx but the envelope carried no text."""

    def __init__(self, service: str):
        super().__init__(
            service,
            f"Empty response from {service}",
            code="empty_provider_response",
        )


class NoPagesFoundError(GatekeeperError):
    """Discovery finished without a single page."""

    def __init__(self, base_url: str):
        super().__init__(
            message="No URLs found. Check the base URL.",
            code="no_pages_found",
            details={"base_url": base_url},
        )


class InvalidTransitionError(GatekeeperError):
    """Analysis session asked to move to a state it cannot reach."""

    def __init__(self, current: str, target: str):
        super().__init__(
            message=f"Cannot transition from {current} to {target}",
            code="invalid_transition",
            details={"from": current, "to": target},
        )


class AnalysisCancelledError(GatekeeperError):
    """Cooperative abort reached a checkpoint."""

    def __init__(self, message: str = "Analysis cancelled"):
        super().__init__(message=message, code="cancelled")
