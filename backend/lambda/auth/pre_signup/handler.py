"""Lambda entrypoint for the Cognito Pre Sign-up trigger."""

from __future__ import annotations

from typing import Any

from signup_friction.api.presignup import lambda_handler as _handler


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Delegate to the pre-signup scoring handler."""
    return _handler(event, context)
