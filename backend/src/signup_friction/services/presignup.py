"""Pre-signup scoring: score the candidate and create the signup record."""

from __future__ import annotations

from signup_friction.config import FrictionConfig
from signup_friction.db.models import SignupRecord
from signup_friction.db.store import RecordStore
from signup_friction.exceptions import VerificationError
from signup_friction.services.scoring import FraudScorer
from signup_friction.services.scoring import SignupAttributes
from signup_friction.utils.logging import get_logger
from signup_friction.utils.logging import mask_email
from signup_friction.utils.timestamps import Clock
from signup_friction.utils.timestamps import now_ms

logger = get_logger(__name__)

OUTCOME_APPROVE = "approve"
OUTCOME_REVIEW = "review"


class PreSignupService:
    """Scores new signups and decides whether Cognito auto-confirms them."""

    def __init__(
        self,
        config: FrictionConfig,
        scorer: FraudScorer,
        store: RecordStore,
        clock: Clock = now_ms,
    ):
        self._config = config
        self._scorer = scorer
        self._store = store
        self._clock = clock

    def register(self, attributes: SignupAttributes) -> bool:
        """Score a signup candidate and persist its record.

        The record is written before the outcome is interpreted, so it
        exists even when the candidate is rejected.

        Args:
            attributes: Candidate attributes from the signup form.

        Returns:
            True if the user should be auto-confirmed.

        Raises:
            VerificationError: If the outcome is neither approve nor review.
            ScoringError: If the fraud prediction fails.
            StoreError: If the record cannot be written.
        """
        result = self._scorer.score_event(attributes)

        record = SignupRecord(
            email=attributes.email,
            ip_address=attributes.ip_address,
            user_agent=attributes.user_agent,
            billing_address=attributes.billing_address,
            billing_state=attributes.billing_state,
            billing_postal=attributes.billing_postal,
            phone_number=attributes.phone_number,
            outcome=result.outcome,
            insight_score=result.score,
            verification_attempts_allowed=self._config.attempts_allowed,
            attempt_count=0,
            created_at=self._clock(),
            last_updated_at=0,
        )
        self._store.create(record)

        if result.outcome == OUTCOME_APPROVE:
            return True
        if result.outcome == OUTCOME_REVIEW:
            return False

        logger.warning(
            f"Signup rejected for {mask_email(attributes.email)}",
            extra={"outcome": result.outcome},
        )
        raise VerificationError(outcome=result.outcome)
