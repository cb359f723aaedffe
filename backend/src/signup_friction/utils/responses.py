"""API Gateway response builders.

Every response is built fresh per invocation; no response template is
shared between invocations.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

GENERIC_FAILURE_MESSAGE = (
    "Unable to process request at this time. Please try again later."
)


def get_cors_headers() -> dict[str, str]:
    """Get CORS headers permitting all origins, methods and headers."""
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": "*",
        "Access-Control-Allow-Methods": "*",
    }


def get_security_headers() -> dict[str, str]:
    """Get headers that keep verification responses out of caches."""
    return {
        "X-Content-Type-Options": "nosniff",
        "Cache-Control": "no-store, no-cache, must-revalidate",
        "Pragma": "no-cache",
    }


def json_response(status_code: int, body: Any) -> dict[str, Any]:
    """Create a JSON API Gateway proxy response.

    Args:
        status_code: HTTP status code.
        body: Response body (dict or Pydantic model).

    Returns:
        API Gateway response dictionary.
    """
    response_headers = {"Content-Type": "application/json"}
    response_headers.update(get_security_headers())
    response_headers.update(get_cors_headers())

    return {
        "statusCode": status_code,
        "isBase64Encoded": False,
        "headers": response_headers,
        "body": json.dumps(_serialize_body(body), default=str),
    }


def _serialize_body(body: Any) -> Any:
    if isinstance(body, BaseModel):
        return body.model_dump(by_alias=True)
    return body


def error_response(status_code: int, message: str) -> dict[str, Any]:
    """Create an error response with an ``{"error": message}`` body."""
    return json_response(status_code, {"error": message})


def preflight_response() -> dict[str, Any]:
    """Create an empty 200 response answering a CORS preflight request."""
    return {
        "statusCode": 200,
        "isBase64Encoded": False,
        "headers": get_cors_headers(),
        "body": "",
    }
