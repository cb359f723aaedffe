"""Signup record store backed by a DynamoDB table keyed by email.

Each mutation is a single atomic UpdateItem call. The services do not wrap
their multi-step procedures in a transaction.
"""

from __future__ import annotations

from typing import Any
from typing import Optional
from typing import Protocol

from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError
from botocore.exceptions import ClientError

from signup_friction.db.models import ATTRIBUTE_NAMES
from signup_friction.db.models import PARTITION_KEY
from signup_friction.db.models import SignupRecord
from signup_friction.db.models import attributes_to_fields
from signup_friction.db.models import item_to_record
from signup_friction.db.models import record_to_item
from signup_friction.db.models import to_dynamo_value
from signup_friction.exceptions import StoreError
from signup_friction.services.aws_clients import get_dynamodb_resource
from signup_friction.utils.logging import get_logger
from signup_friction.utils.logging import mask_email
from signup_friction.utils.timestamps import Clock
from signup_friction.utils.timestamps import now_ms

logger = get_logger(__name__)


class RecordStore(Protocol):
    """Capabilities the services need from the record store.

    Update methods return only the changed fields, keyed by record field
    name, so callers can merge them into the record they already hold.
    """

    def get(self, email: str) -> Optional[SignupRecord]:
        ...

    def create(self, record: SignupRecord) -> None:
        ...

    def increment_attempt(self, email: str) -> dict[str, Any]:
        ...

    def update_outcome(
        self,
        email: str,
        outcome: str,
        score: float,
    ) -> dict[str, Any]:
        ...


class DynamoRecordStore:
    """RecordStore implementation on a DynamoDB table."""

    def __init__(
        self,
        table_name: str,
        resource: Any = None,
        clock: Clock = now_ms,
    ):
        dynamodb = resource or get_dynamodb_resource()
        self._table = dynamodb.Table(table_name)
        self._clock = clock

    def get(self, email: str) -> Optional[SignupRecord]:
        """Look up the record for an email, or None if there is none."""
        try:
            response = self._table.query(
                KeyConditionExpression=Key(PARTITION_KEY).eq(email),
            )
        except (ClientError, BotoCoreError) as exc:
            raise _store_error("query", exc) from exc

        items = response.get("Items") or []
        if not items:
            return None
        return item_to_record(items[0])

    def create(self, record: SignupRecord) -> None:
        """Write a new record, replacing any previous one for the email."""
        try:
            self._table.put_item(Item=record_to_item(record))
        except (ClientError, BotoCoreError) as exc:
            raise _store_error("put", exc) from exc
        logger.info(f"Signup record stored for {mask_email(record.email)}")

    def increment_attempt(self, email: str) -> dict[str, Any]:
        """Add one to the attempt count and stamp the update time."""
        return self._update(
            email,
            "SET #count = #count + :one, #updated = :now",
            names={
                "#count": ATTRIBUTE_NAMES["attempt_count"],
                "#updated": ATTRIBUTE_NAMES["last_updated_at"],
            },
            values={":one": 1, ":now": self._clock()},
        )

    def update_outcome(
        self,
        email: str,
        outcome: str,
        score: float,
    ) -> dict[str, Any]:
        """Overwrite the stored outcome and insight score."""
        return self._update(
            email,
            "SET #outcome = :outcome, #score = :score, #updated = :now",
            names={
                "#outcome": ATTRIBUTE_NAMES["outcome"],
                "#score": ATTRIBUTE_NAMES["insight_score"],
                "#updated": ATTRIBUTE_NAMES["last_updated_at"],
            },
            values={
                ":outcome": outcome,
                ":score": to_dynamo_value(float(score)),
                ":now": self._clock(),
            },
        )

    def _update(
        self,
        email: str,
        expression: str,
        names: dict[str, str],
        values: dict[str, Any],
    ) -> dict[str, Any]:
        try:
            response = self._table.update_item(
                Key={PARTITION_KEY: email},
                UpdateExpression=expression,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="UPDATED_NEW",
            )
        except (ClientError, BotoCoreError) as exc:
            raise _store_error("update", exc) from exc
        return attributes_to_fields(response.get("Attributes") or {})


def _store_error(operation: str, exc: Exception) -> StoreError:
    logger.error(f"Signup record {operation} failed: {type(exc).__name__}")
    return StoreError(
        f"Signup record {operation} failed", detail=type(exc).__name__
    )
