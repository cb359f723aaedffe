"""Fraud scoring client backed by Amazon Fraud Detector.

The services depend on the FraudScorer protocol; FraudDetectorScorer is
the production implementation calling GetEventPrediction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from typing import Mapping
from typing import Optional
from typing import Protocol
from uuid import uuid4

from botocore.exceptions import BotoCoreError
from botocore.exceptions import ClientError

from signup_friction.config import FrictionConfig
from signup_friction.exceptions import ScoringError
from signup_friction.services.aws_clients import get_frauddetector_client
from signup_friction.utils.logging import get_logger
from signup_friction.utils.timestamps import Clock
from signup_friction.utils.timestamps import iso_timestamp
from signup_friction.utils.timestamps import now_ms

logger = get_logger(__name__)


@dataclass(frozen=True)
class SignupAttributes:
    """Client signals and billing details evaluated by the fraud model."""

    email: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    billing_postal: Optional[str] = None
    phone_number: Optional[str] = None
    billing_address: Optional[str] = None
    billing_state: Optional[str] = None

    @classmethod
    def from_cognito(cls, user_attributes: Mapping[str, Any]) -> "SignupAttributes":
        """Build attributes from Cognito pre-signup user attributes."""
        return cls(
            email=user_attributes.get("email", ""),
            ip_address=user_attributes.get("custom:registration_ip"),
            user_agent=user_attributes.get("custom:reg_user_agent"),
            billing_postal=user_attributes.get("custom:billing_postal"),
            phone_number=user_attributes.get("phone_number"),
            billing_address=user_attributes.get("address"),
            billing_state=user_attributes.get("locale"),
        )

    def to_event_variables(self) -> dict[str, str]:
        """Return the detector event variables, skipping empty values."""
        variables = {
            "email_address": self.email,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "billing_postal": self.billing_postal,
            "phone_number": self.phone_number,
            "billing_address": self.billing_address,
            "billing_state": self.billing_state,
        }
        return {name: value for name, value in variables.items() if value}


@dataclass(frozen=True)
class ScoreResult:
    """Outcome label and insight score of one prediction."""

    outcome: str
    score: float


class FraudScorer(Protocol):
    """Capability to score a signup event."""

    def score_event(self, attributes: SignupAttributes) -> ScoreResult:
        ...


def new_event_id(clock: Clock = now_ms) -> str:
    """Return a timestamp-derived identifier that is unique per call."""
    return f"{clock()}-{uuid4().hex[:12]}"


class FraudDetectorScorer:
    """FraudScorer calling Amazon Fraud Detector GetEventPrediction."""

    def __init__(
        self,
        config: FrictionConfig,
        client: Any = None,
        clock: Clock = now_ms,
    ):
        self._config = config
        self._client = client or get_frauddetector_client()
        self._clock = clock

    def build_request(self, attributes: SignupAttributes) -> dict[str, Any]:
        """Build GetEventPrediction parameters with a fresh event identity."""
        return {
            "detectorId": self._config.detector_id,
            "detectorVersionId": self._config.detector_version,
            "eventTypeName": self._config.event_type,
            "eventId": new_event_id(self._clock),
            "eventTimestamp": iso_timestamp(self._clock()),
            "entities": [
                {
                    "entityId": new_event_id(self._clock),
                    "entityType": self._config.entity_type,
                }
            ],
            "eventVariables": attributes.to_event_variables(),
        }

    def score_event(self, attributes: SignupAttributes) -> ScoreResult:
        """Score the event and return the first outcome and model score.

        Raises:
            ScoringError: If the call fails or the response is missing the
                rule outcome or the configured model score.
        """
        params = self.build_request(attributes)
        try:
            response = self._client.get_event_prediction(**params)
        except (ClientError, BotoCoreError) as exc:
            logger.error(f"Fraud prediction failed: {type(exc).__name__}")
            raise ScoringError(
                "Fraud prediction failed", detail=type(exc).__name__
            ) from exc

        result = parse_prediction(response, self._config.model_score_key)
        logger.info(
            f"Fraud prediction outcome: {result.outcome}",
            extra={"event_id": params["eventId"], "score": result.score},
        )
        return result


def parse_prediction(response: Mapping[str, Any], score_key: str) -> ScoreResult:
    """Extract the first rule outcome and the named model score.

    Args:
        response: GetEventPrediction response.
        score_key: Name of the model insight score.

    Returns:
        The parsed ScoreResult.

    Raises:
        ScoringError: If either value is missing.
    """
    try:
        outcome = response["ruleResults"][0]["outcomes"][0]
        score = float(response["modelScores"][0]["scores"][score_key])
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise ScoringError(
            "Unexpected fraud prediction response", detail=repr(exc)
        ) from exc
    return ScoreResult(outcome=outcome, score=score)
