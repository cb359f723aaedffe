"""Custom exception classes for the signup friction services.

Handlers answer every failure with status 400, so the exceptions carry a
message and optional detail only.

Terminal verification decisions (attempts exhausted, blocked) are not
exceptions; they are returned as normal decisions by the services.
"""

from __future__ import annotations

from typing import Optional


class AppError(Exception):
    """Base exception for application errors.

    Attributes:
        message: Human-readable error message.
        detail: Optional additional context, logged but never returned.
    """

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(AppError):
    """Raised when request validation fails.

    Always user-correctable, e.g. a missing email in the request body.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        detail = f"Field: {field}" if field else None
        super().__init__(message, detail=detail)
        self.field = field


class NotFoundError(AppError):
    """Raised when an expected signup record is missing.

    A missing record means the signup flow did not complete as expected,
    so handlers surface it as a generic retry-later failure.
    """

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}")
        self.resource = resource
        self.identifier = identifier


class ConfigurationError(AppError):
    """Raised when required configuration is missing or malformed."""

    def __init__(self, config_name: str, detail: Optional[str] = None):
        super().__init__(
            f"Missing required configuration: {config_name}",
            detail=detail,
        )
        self.config_name = config_name


class ScoringError(AppError):
    """Raised when the fraud scoring service call fails.

    Covers client errors from the service as well as responses that do
    not contain the expected rule outcome or model score.
    """


class StoreError(AppError):
    """Raised when a signup record store operation fails."""


class VerificationError(AppError):
    """Raised when pre-signup scoring rejects a candidate.

    Cognito surfaces the message to the client and halts the signup.
    """

    def __init__(
        self,
        message: str = "unable to verify identity",
        outcome: Optional[str] = None,
    ):
        super().__init__(message)
        self.outcome = outcome
