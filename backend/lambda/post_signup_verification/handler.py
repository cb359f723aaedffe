"""Lambda entrypoint for the post-signup re-verification endpoint."""

from __future__ import annotations

from typing import Any
from typing import Mapping

from signup_friction.api.reverification import lambda_handler as _handler


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Delegate to the re-verification handler."""
    return _handler(event, context)
