"""Shared parsing utilities for request handling."""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any
from typing import Mapping
from typing import Optional

from signup_friction.exceptions import ValidationError


def parse_json_body(event: Mapping[str, Any]) -> dict[str, Any]:
    """Parse the JSON object body of an API Gateway event.

    An absent body parses as an empty object so that required-field
    checks can report the missing field.

    Raises:
        ValidationError: If the body is not valid JSON or not an object.
    """
    raw = event.get("body") or ""
    if event.get("isBase64Encoded") and raw:
        try:
            raw = base64.b64decode(raw).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ValidationError("Invalid request body.", field="body") from exc
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError("Invalid request body.", field="body") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Invalid request body.", field="body")
    return payload


def source_identity(event: Mapping[str, Any]) -> tuple[Optional[str], Optional[str]]:
    """Return the caller's source IP and user agent from the request context."""
    identity = (event.get("requestContext") or {}).get("identity") or {}
    return identity.get("sourceIp"), identity.get("userAgent")


def request_id_of(event: Mapping[str, Any], context: Any = None) -> str:
    """Return the API Gateway request id, else the Lambda request id."""
    req_id = (event.get("requestContext") or {}).get("requestId")
    if req_id:
        return req_id
    return getattr(context, "aws_request_id", "") or ""
