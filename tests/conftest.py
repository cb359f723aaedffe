"""Pytest configuration and fixtures for backend tests.

This module provides in-memory fakes of the fraud scorer and the record
store, sample signup records, and API Gateway / Cognito event fixtures.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any
from typing import Optional
from uuid import uuid4

import pytest

# Add backend source to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / 'backend' / 'src'))

# boto3 needs a region and credentials even when every call is mocked
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-east-1')
os.environ.setdefault('AWS_ACCESS_KEY_ID', 'testing')
os.environ.setdefault('AWS_SECRET_ACCESS_KEY', 'testing')

from signup_friction.config import FrictionConfig  # noqa: E402
from signup_friction.db.models import SignupRecord  # noqa: E402
from signup_friction.services.scoring import ScoreResult  # noqa: E402
from signup_friction.services.scoring import SignupAttributes  # noqa: E402

FIXED_NOW_MS = 1_700_000_000_000


# --- Fakes ---


class FakeScorer:
    """FraudScorer returning a configurable result and recording calls."""

    def __init__(self, outcome: str = 'approve', score: float = 120.0):
        self.result = ScoreResult(outcome=outcome, score=score)
        self.error: Optional[Exception] = None
        self.calls: list[SignupAttributes] = []

    def score_event(self, attributes: SignupAttributes) -> ScoreResult:
        self.calls.append(attributes)
        if self.error is not None:
            raise self.error
        return self.result


class FakeRecordStore:
    """Dict-backed RecordStore recording every operation."""

    def __init__(self, clock=lambda: FIXED_NOW_MS):
        self.records: dict[str, SignupRecord] = {}
        self.calls: list[tuple[str, str]] = []
        self.error: Optional[Exception] = None
        self._clock = clock

    def _record_call(self, operation: str, email: str) -> None:
        self.calls.append((operation, email))
        if self.error is not None:
            raise self.error

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]

    def get(self, email: str) -> Optional[SignupRecord]:
        self._record_call('get', email)
        return self.records.get(email)

    def create(self, record: SignupRecord) -> None:
        self._record_call('create', record.email)
        self.records[record.email] = record

    def increment_attempt(self, email: str) -> dict[str, Any]:
        self._record_call('increment_attempt', email)
        record = self.records[email]
        updated = {
            'attempt_count': record.attempt_count + 1,
            'last_updated_at': self._clock(),
        }
        self.records[email] = record.model_copy(update=updated)
        return updated

    def update_outcome(self, email: str, outcome: str, score: float) -> dict[str, Any]:
        self._record_call('update_outcome', email)
        updated = {
            'outcome': outcome,
            'insight_score': score,
            'last_updated_at': self._clock(),
        }
        self.records[email] = self.records[email].model_copy(update=updated)
        return updated


# --- Configuration and fakes ---


@pytest.fixture
def config() -> FrictionConfig:
    return FrictionConfig(
        detector_id='signup_detector',
        detector_version='1',
        entity_type='customer',
        event_type='signup_event',
        table_name='signup-scores',
        support_email='support@example.com',
    )


@pytest.fixture
def scorer() -> FakeScorer:
    return FakeScorer()


@pytest.fixture
def store() -> FakeRecordStore:
    return FakeRecordStore()


# --- Sample Data Factories ---


@pytest.fixture
def sample_attributes() -> SignupAttributes:
    return SignupAttributes(
        email='jane.doe@example.com',
        ip_address='203.0.113.10',
        user_agent='Mozilla/5.0 (X11; Linux x86_64)',
        billing_postal='98101',
        phone_number='+12065550100',
        billing_address='123 Pike Street',
        billing_state='WA',
    )


@pytest.fixture
def sample_record(sample_attributes) -> SignupRecord:
    return SignupRecord(
        email=sample_attributes.email,
        ip_address=sample_attributes.ip_address,
        user_agent=sample_attributes.user_agent,
        billing_address=sample_attributes.billing_address,
        billing_state=sample_attributes.billing_state,
        billing_postal=sample_attributes.billing_postal,
        phone_number=sample_attributes.phone_number,
        outcome='review',
        insight_score=640.0,
        verification_attempts_allowed=3,
        attempt_count=0,
        created_at=FIXED_NOW_MS - 60_000,
        last_updated_at=0,
    )


@pytest.fixture
def stored_record(store, sample_record) -> SignupRecord:
    """Place the sample record in the fake store without recording a call."""
    store.records[sample_record.email] = sample_record
    return sample_record


# --- Event Fixtures ---


@pytest.fixture
def api_gateway_event(sample_attributes) -> dict:
    """API Gateway proxy event whose caller matches the sample record."""
    return {
        'httpMethod': 'POST',
        'path': '/verify',
        'headers': {'Content-Type': 'application/json'},
        'queryStringParameters': None,
        'requestContext': {
            'requestId': str(uuid4()),
            'identity': {
                'sourceIp': sample_attributes.ip_address,
                'userAgent': sample_attributes.user_agent,
            },
        },
        'body': None,
        'isBase64Encoded': False,
    }


@pytest.fixture
def cognito_pre_signup_event(sample_attributes) -> dict:
    """Cognito Pre Sign-up trigger event."""
    return {
        'version': '1',
        'triggerSource': 'PreSignUp_SignUp',
        'region': 'us-east-1',
        'userPoolId': 'us-east-1_example',
        'userName': 'jane',
        'callerContext': {'clientId': 'client-id'},
        'request': {
            'userAttributes': {
                'email': sample_attributes.email,
                'custom:registration_ip': sample_attributes.ip_address,
                'custom:reg_user_agent': sample_attributes.user_agent,
                'custom:billing_postal': sample_attributes.billing_postal,
                'phone_number': sample_attributes.phone_number,
                'address': sample_attributes.billing_address,
                'locale': sample_attributes.billing_state,
            },
        },
        'response': {},
    }


# --- Mock Fixtures ---


@pytest.fixture
def mock_boto3_client(mocker):
    """Mock boto3 client and resource factories, clearing the cache around the test."""
    from signup_friction.services.aws_clients import clear_client_cache

    clear_client_cache()
    client = mocker.patch('boto3.client')
    resource = mocker.patch('boto3.resource')
    yield client, resource
    clear_client_cache()
