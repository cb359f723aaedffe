"""Signup record model and its DynamoDB attribute mapping."""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from typing import Mapping
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

# Record field name -> DynamoDB attribute name.
ATTRIBUTE_NAMES: dict[str, str] = {
    "email": "EMAIL",
    "ip_address": "IP_ADDRESS",
    "user_agent": "USER_AGENT",
    "billing_address": "BILLING_ADDRESS",
    "billing_state": "BILLING_STATE",
    "billing_postal": "BILLING_POSTAL",
    "phone_number": "PHONE_NUMBER",
    "outcome": "AFD_OUTCOME",
    "insight_score": "AFD_INSIGHT_SCORE",
    "verification_attempts_allowed": "VERIFICATION_ATTEMPTS",
    "attempt_count": "ATTEMPT_COUNT",
    "created_at": "CREATED_AT",
    "last_updated_at": "LAST_UPDATE_TIMESTAMP",
}

FIELD_NAMES: dict[str, str] = {attr: name for name, attr in ATTRIBUTE_NAMES.items()}

PARTITION_KEY = ATTRIBUTE_NAMES["email"]


class SignupRecord(BaseModel):
    """Signup scoring record, one per email address.

    Serializes with camelCase keys (``ipAddress``, ``attemptCount``...) for
    API responses.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    billing_address: Optional[str] = None
    billing_state: Optional[str] = None
    billing_postal: Optional[str] = None
    phone_number: Optional[str] = None
    outcome: Optional[str] = None
    insight_score: Optional[float] = None
    verification_attempts_allowed: int = 3
    attempt_count: int = 0
    created_at: int = 0
    last_updated_at: int = 0

    @property
    def attempts_exhausted(self) -> bool:
        """Return True once the attempt quota has been used up.

        Concurrent requests can push ``attempt_count`` past the quota; such
        records still count as exhausted.
        """
        return self.attempt_count >= self.verification_attempts_allowed

    def to_user_data(self) -> dict[str, Any]:
        """Serialize the record for API responses."""
        return self.model_dump(by_alias=True)


def record_to_item(record: SignupRecord) -> dict[str, Any]:
    """Convert a record to a DynamoDB item, dropping unset optional values."""
    item: dict[str, Any] = {}
    for name, value in record.model_dump().items():
        if value is None:
            continue
        item[ATTRIBUTE_NAMES[name]] = to_dynamo_value(value)
    return item


def item_to_record(item: Mapping[str, Any]) -> SignupRecord:
    """Convert a DynamoDB item to a record, ignoring unknown attributes."""
    return SignupRecord(**attributes_to_fields(item))


def attributes_to_fields(attributes: Mapping[str, Any]) -> dict[str, Any]:
    """Map DynamoDB attribute names and values back to record fields."""
    return {
        FIELD_NAMES[attr]: from_dynamo_value(value)
        for attr, value in attributes.items()
        if attr in FIELD_NAMES
    }


def to_dynamo_value(value: Any) -> Any:
    """Convert floats to Decimal, which DynamoDB requires for numbers."""
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def from_dynamo_value(value: Any) -> Any:
    """Convert DynamoDB Decimal numbers to int or float."""
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    return value
