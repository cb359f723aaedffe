"""Cognito Pre Sign-up trigger with fraud scoring.

Scores the candidate, stores the signup record and sets autoConfirmUser
from the outcome. Raising from the handler makes Cognito halt the signup
and show the error message to the client.

SECURITY NOTES:
- Email addresses are masked in logs to comply with privacy regulations
- Never log passwords or raw user attributes
"""

from __future__ import annotations

from typing import Any
from typing import Optional

from signup_friction.config import FrictionConfig
from signup_friction.db.store import DynamoRecordStore
from signup_friction.exceptions import VerificationError
from signup_friction.services.presignup import PreSignupService
from signup_friction.services.scoring import FraudDetectorScorer
from signup_friction.services.scoring import SignupAttributes
from signup_friction.utils.logging import clear_request_context
from signup_friction.utils.logging import configure_logging
from signup_friction.utils.logging import get_logger
from signup_friction.utils.logging import hash_for_correlation
from signup_friction.utils.logging import mask_email
from signup_friction.utils.logging import set_request_context

configure_logging()
logger = get_logger(__name__)

_SERVICE: Optional[PreSignupService] = None


def get_service() -> PreSignupService:
    """Return the service wired to Fraud Detector and DynamoDB."""
    global _SERVICE
    if _SERVICE is None:
        config = FrictionConfig.from_env()
        _SERVICE = PreSignupService(
            config,
            scorer=FraudDetectorScorer(config),
            store=DynamoRecordStore(config.table_name),
        )
    return _SERVICE


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle the pre-signup trigger."""

    request = event.get("request", {})
    response = event.setdefault("response", {})
    response["autoConfirmUser"] = False

    attributes = SignupAttributes.from_cognito(request.get("userAttributes") or {})
    set_request_context(
        req_id=getattr(context, "aws_request_id", None),
        corr_id=hash_for_correlation(attributes.email) if attributes.email else None,
    )

    # SECURITY: Mask email in logs to protect PII
    logger.info(f"Pre-signup scoring for {mask_email(attributes.email)}")

    try:
        response["autoConfirmUser"] = get_service().register(attributes)
    except VerificationError as exc:
        logger.warning(f"Pre-signup rejected: outcome {exc.outcome}")
        raise
    except Exception as exc:
        # SECURITY: Log error type only; details may contain PII
        logger.error(f"Pre-signup scoring failed: {type(exc).__name__}")
        raise
    finally:
        clear_request_context()

    logger.info(f"Pre-signup auto-confirm: {response['autoConfirmUser']}")
    return event
