"""Request-terminal error taxonomy shared by the API and the webhook."""

from __future__ import annotations


class ServiceError(Exception):
    """Base error carrying a stable machine-readable code and HTTP status."""

    status_code = 400
    code = "ERROR"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)


class ValidationError(ServiceError):
    status_code = 400
    code = "INVALID_PAYLOAD"


class PayloadTooLarge(ValidationError):
    status_code = 413
    code = "PAYLOAD_TOO_LARGE"


class InvalidPayload(ValidationError):
    code = "INVALID_PAYLOAD"


class InvalidPhone(ValidationError):
    code = "INVALID_PHONE"


class InvalidEmail(ValidationError):
    code = "INVALID_EMAIL"


class AuthenticationError(ServiceError):
    status_code = 401
    code = "UNAUTHORIZED"


class MissingSignature(AuthenticationError):
    code = "INVALID_SIGNATURE"


class InvalidSignature(AuthenticationError):
    code = "INVALID_SIGNATURE"


class AuthorizationError(ServiceError):
    status_code = 403
    code = "FORBIDDEN"


Forbidden = AuthorizationError


class NotFoundError(ServiceError):
    status_code = 404
    code = "NOT_FOUND"


class CampaignNotFound(NotFoundError):
    code = "CAMPAIGN_NOT_FOUND"


class ConflictError(ServiceError):
    status_code = 409
    code = "CONFLICT"


class RateLimitError(ServiceError):
    status_code = 429
    code = "RATE_LIMITED"


RateLimited = RateLimitError


class ConfigurationError(ServiceError):
    status_code = 500
    code = "CONFIGURATION_ERROR"
