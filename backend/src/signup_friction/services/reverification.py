"""Post-signup re-verification decision procedure.

A subject who signed up may ask to be re-verified, for example while going
through a medium-risk friction flow. Each request consumes one attempt of
the record's quota. When the client's IP address or user agent differs
from the one captured at signup, the event is scored again and the stored
outcome is reconciled.

The steps are separate store calls with no surrounding transaction, so
concurrent requests for one email can overrun the attempt quota.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any
from typing import Optional

from signup_friction.config import FrictionConfig
from signup_friction.db.models import SignupRecord
from signup_friction.db.store import RecordStore
from signup_friction.exceptions import NotFoundError
from signup_friction.exceptions import ValidationError
from signup_friction.services.scoring import FraudScorer
from signup_friction.services.scoring import SignupAttributes
from signup_friction.utils.logging import get_logger
from signup_friction.utils.logging import mask_email
from signup_friction.utils.logging import mask_pii

logger = get_logger(__name__)

OUTCOME_REVIEW_CUSTOMER = "review_customer"
OK_MESSAGE = "OK"


class Decision(str, enum.Enum):
    """Result of a re-verification request."""

    OK = "ok"
    BLOCKED = "blocked"
    ATTEMPTS_EXHAUSTED = "attempts-exhausted"

    @property
    def code(self) -> int:
        return 1 if self is Decision.OK else 0


@dataclass(frozen=True)
class VerificationRequest:
    """Re-verification input; ip and user_agent override the caller's."""

    email: Optional[str]
    ip: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class VerificationDecision:
    decision: Decision
    message: str
    record: SignupRecord

    @property
    def code(self) -> int:
        return self.decision.code

    def to_body(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "userData": self.record.to_user_data(),
        }


class ReverificationService:
    """Decides re-verification requests against the stored signup record."""

    def __init__(
        self,
        config: FrictionConfig,
        scorer: FraudScorer,
        store: RecordStore,
    ):
        self._config = config
        self._scorer = scorer
        self._store = store

    def verify(
        self,
        request: VerificationRequest,
        fallback_ip: Optional[str] = None,
        fallback_user_agent: Optional[str] = None,
    ) -> VerificationDecision:
        """Run the re-verification procedure for one request.

        Args:
            request: The verification request.
            fallback_ip: Caller source IP, used when the request has none.
            fallback_user_agent: Caller user agent, used likewise.

        Returns:
            The decision with the record as merged after this request.

        Raises:
            ValidationError: If the email is missing.
            NotFoundError: If no signup record exists for the email.
            ScoringError: If re-scoring fails.
            StoreError: If a store operation fails.
        """
        email = request.email
        if not email:
            raise ValidationError("Email is required.", field="email")

        record = self._store.get(email)
        if record is None:
            raise NotFoundError("Signup record", mask_email(email))

        if record.attempts_exhausted:
            logger.info(
                f"Verification attempts exhausted for {mask_email(email)}",
                extra={"attempt_count": record.attempt_count},
            )
            return VerificationDecision(
                decision=Decision.ATTEMPTS_EXHAUSTED,
                message=self._exhausted_message(),
                record=record,
            )

        record = record.model_copy(update=self._store.increment_attempt(email))

        ip = request.ip or fallback_ip
        user_agent = request.user_agent or fallback_user_agent

        if ip == record.ip_address and user_agent == record.user_agent:
            return VerificationDecision(Decision.OK, OK_MESSAGE, record)

        logger.info(
            "Client signals changed, rescoring",
            extra={"ip": mask_pii(ip), "user_agent": mask_pii(user_agent)},
        )
        result = self._scorer.score_event(
            SignupAttributes(
                email=record.email,
                ip_address=ip,
                user_agent=user_agent,
                billing_postal=record.billing_postal,
                phone_number=record.phone_number,
                billing_address=record.billing_address,
                billing_state=record.billing_state,
            )
        )

        if result.outcome != record.outcome or result.score != record.insight_score:
            updated = self._store.update_outcome(email, result.outcome, result.score)
            record = record.model_copy(update=updated)

        if result.outcome == OUTCOME_REVIEW_CUSTOMER:
            return VerificationDecision(
                decision=Decision.BLOCKED,
                message=self._blocked_message(),
                record=record,
            )
        return VerificationDecision(Decision.OK, OK_MESSAGE, record)

    def _exhausted_message(self) -> str:
        return (
            "Oops! you've run out of allowed attempts to confirm your identity. "
            f"Please contact us at {self._config.support_email}."
        )

    def _blocked_message(self) -> str:
        return (
            "We are unable to verify your identity at this time. "
            f"Please contact us at {self._config.support_email}, "
            "so we can get this sorted out for you."
        )
