"""Runtime configuration for the signup friction services.

Configuration is read once from the Lambda environment into an immutable
FrictionConfig that is passed to each service at construction time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping
from typing import Optional

from signup_friction.exceptions import ConfigurationError

DEFAULT_MODEL_SCORE_KEY = "sample_fraud_detection_model_insightscore"
DEFAULT_ATTEMPTS_ALLOWED = 3
DEFAULT_SUPPORT_EMAIL = "support@example.com"


@dataclass(frozen=True)
class FrictionConfig:
    """Fraud detector and record store settings.

    Attributes:
        detector_id: Fraud Detector detector identifier.
        detector_version: Detector version to evaluate against.
        entity_type: Entity type registered for the signup event.
        event_type: Event type name registered for the signup event.
        table_name: DynamoDB table holding signup records.
        model_score_key: Name of the model insight score in the prediction.
        attempts_allowed: Verification attempt quota for new records.
        support_email: Contact address used in customer-facing messages.
    """

    detector_id: str
    detector_version: str
    entity_type: str
    event_type: str
    table_name: str
    model_score_key: str = DEFAULT_MODEL_SCORE_KEY
    attempts_allowed: int = DEFAULT_ATTEMPTS_ALLOWED
    support_email: str = DEFAULT_SUPPORT_EMAIL

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "FrictionConfig":
        """Build configuration from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            The parsed configuration.

        Raises:
            ConfigurationError: If a required variable is missing or a
                value cannot be parsed.
        """
        env = os.environ if environ is None else environ

        return cls(
            detector_id=_require(env, "AFD_DETECTOR"),
            detector_version=_require(env, "AFD_DETECTOR_VERSION"),
            entity_type=_require(env, "AFD_ENTITY_TYPE"),
            event_type=_require(env, "AFD_EVENT_TYPE"),
            table_name=_require(env, "USER_TABLE"),
            model_score_key=env.get("AFD_MODEL_SCORE_KEY")
            or DEFAULT_MODEL_SCORE_KEY,
            attempts_allowed=_parse_attempts(env.get("VERIFICATION_ATTEMPTS")),
            support_email=env.get("SUPPORT_EMAIL") or DEFAULT_SUPPORT_EMAIL,
        )


def _require(env: Mapping[str, str], name: str) -> str:
    value = (env.get(name) or "").strip()
    if not value:
        raise ConfigurationError(name)
    return value


def _parse_attempts(value: Optional[str]) -> int:
    if value is None or value.strip() == "":
        return DEFAULT_ATTEMPTS_ALLOWED
    try:
        attempts = int(value)
    except ValueError as exc:
        raise ConfigurationError(
            "VERIFICATION_ATTEMPTS", detail="must be an integer"
        ) from exc
    if attempts < 1:
        raise ConfigurationError(
            "VERIFICATION_ATTEMPTS", detail="must be a positive integer"
        )
    return attempts
