"""Lambda handler for the post-signup re-verification endpoint.

Every decision (ok, blocked, attempts exhausted) is answered with status
200 and a ``{code, message, userData}`` body. Validation and operational
failures are answered with status 400 and an ``{error}`` body; failures
are never re-raised to API Gateway.
"""

from __future__ import annotations

import time
from typing import Any
from typing import Mapping
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from signup_friction.api.schemas import VerificationRequestSchema
from signup_friction.api.schemas import VerificationResponseSchema
from signup_friction.config import FrictionConfig
from signup_friction.db.store import DynamoRecordStore
from signup_friction.exceptions import AppError
from signup_friction.exceptions import NotFoundError
from signup_friction.exceptions import ValidationError
from signup_friction.services.reverification import ReverificationService
from signup_friction.services.reverification import VerificationRequest
from signup_friction.services.scoring import FraudDetectorScorer
from signup_friction.utils.logging import clear_request_context
from signup_friction.utils.logging import configure_logging
from signup_friction.utils.logging import get_logger
from signup_friction.utils.logging import hash_for_correlation
from signup_friction.utils.logging import log_response
from signup_friction.utils.logging import set_request_context
from signup_friction.utils.parsers import parse_json_body
from signup_friction.utils.parsers import request_id_of
from signup_friction.utils.parsers import source_identity
from signup_friction.utils.responses import GENERIC_FAILURE_MESSAGE
from signup_friction.utils.responses import error_response
from signup_friction.utils.responses import json_response
from signup_friction.utils.responses import preflight_response

configure_logging()
logger = get_logger(__name__)

_SERVICE: Optional[ReverificationService] = None


def get_service() -> ReverificationService:
    """Return the service wired to Fraud Detector and DynamoDB."""
    global _SERVICE
    if _SERVICE is None:
        config = FrictionConfig.from_env()
        _SERVICE = ReverificationService(
            config,
            scorer=FraudDetectorScorer(config),
            store=DynamoRecordStore(config.table_name),
        )
    return _SERVICE


def lambda_handler(event: Mapping[str, Any], context: Any) -> dict[str, Any]:
    """Handle an API Gateway re-verification request."""
    start_time = time.perf_counter()
    set_request_context(req_id=request_id_of(event, context))
    try:
        response = handle_request(event)
        log_response(
            logger,
            response["statusCode"],
            duration_ms=(time.perf_counter() - start_time) * 1000,
        )
        return response
    finally:
        clear_request_context()


def handle_request(event: Mapping[str, Any]) -> dict[str, Any]:
    """Parse the request, run the decision procedure and build the response."""
    if event.get("httpMethod") == "OPTIONS":
        return preflight_response()

    try:
        body = VerificationRequestSchema.model_validate(parse_json_body(event))
    except ValidationError as exc:
        logger.warning(f"Validation error: {exc.message}")
        return error_response(400, exc.message)
    except PydanticValidationError as exc:
        logger.warning(f"Invalid request body: {exc.error_count()} errors")
        return error_response(400, "Invalid request body.")

    # Rejected before get_service(), which reads configuration.
    if not body.email:
        logger.warning("Validation error: Email is required.")
        return error_response(400, "Email is required.")
    set_request_context(corr_id=hash_for_correlation(body.email))

    fallback_ip, fallback_user_agent = source_identity(event)
    request = VerificationRequest(
        email=body.email,
        ip=body.ip,
        user_agent=body.user_agent,
    )

    try:
        decision = get_service().verify(request, fallback_ip, fallback_user_agent)
    except ValidationError as exc:
        logger.warning(f"Validation error: {exc.message}")
        return error_response(400, exc.message)
    except NotFoundError:
        logger.error("Signup record missing for verification request")
        return error_response(400, GENERIC_FAILURE_MESSAGE)
    except AppError as exc:
        logger.error(f"Verification failed: {exc.message}", extra={"detail": exc.detail})
        return error_response(400, GENERIC_FAILURE_MESSAGE)
    except Exception:
        logger.exception("Unexpected error in re-verification")
        return error_response(400, GENERIC_FAILURE_MESSAGE)

    logger.info(
        f"Verification decision: {decision.decision.value}",
        extra={"code": decision.code},
    )
    return json_response(200, VerificationResponseSchema(**decision.to_body()))
