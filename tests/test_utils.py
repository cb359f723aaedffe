"""Tests for logging, parsing and response utilities."""

from __future__ import annotations

import base64
import json
import logging

import pytest

from signup_friction.api.schemas import VerificationResponseSchema
from signup_friction.exceptions import ValidationError
from signup_friction.utils.logging import StructuredLogFormatter
from signup_friction.utils.logging import clear_request_context
from signup_friction.utils.logging import hash_for_correlation
from signup_friction.utils.logging import mask_email
from signup_friction.utils.logging import mask_pii
from signup_friction.utils.logging import set_request_context
from signup_friction.utils.parsers import parse_json_body
from signup_friction.utils.parsers import request_id_of
from signup_friction.utils.parsers import source_identity
from signup_friction.utils.responses import json_response
from signup_friction.utils.timestamps import iso_timestamp


class TestMasking:
    def test_mask_email(self) -> None:
        assert mask_email('john.doe@example.com') == 'jo***@***.com'
        assert mask_email('a@b.co') == 'a***@***.co'
        assert mask_email('') == '***'

    def test_mask_pii(self) -> None:
        assert mask_pii('203.0.113.10') == '203.***'
        assert mask_pii(None) == '***'

    def test_correlation_hash_is_stable(self) -> None:
        assert hash_for_correlation('a@example.com') == hash_for_correlation('a@example.com')
        assert len(hash_for_correlation('a@example.com')) == 12


class TestStructuredLogFormatter:
    def test_includes_context_and_extra(self) -> None:
        record = logging.LogRecord('test', logging.INFO, __file__, 1, 'hello', (), None)
        record.outcome = 'review'
        set_request_context(req_id='req-1', corr_id='abc')
        try:
            payload = json.loads(StructuredLogFormatter().format(record))
        finally:
            clear_request_context()

        assert payload['message'] == 'hello'
        assert payload['request_id'] == 'req-1'
        assert payload['correlation_id'] == 'abc'
        assert payload['extra'] == {'outcome': 'review'}


class TestParsers:
    def test_parse_json_body(self) -> None:
        assert parse_json_body({'body': '{"email": "a@example.com"}'}) == {
            'email': 'a@example.com'
        }

    def test_parse_base64_body(self) -> None:
        raw = base64.b64encode(b'{"ip": "1.2.3.4"}').decode()
        assert parse_json_body({'body': raw, 'isBase64Encoded': True}) == {'ip': '1.2.3.4'}

    def test_empty_body_is_empty_object(self) -> None:
        assert parse_json_body({'body': None}) == {}

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(ValidationError):
            parse_json_body({'body': '{'})

    def test_source_identity(self, api_gateway_event) -> None:
        assert source_identity(api_gateway_event) == (
            '203.0.113.10',
            'Mozilla/5.0 (X11; Linux x86_64)',
        )
        assert source_identity({}) == (None, None)

    def test_request_id_falls_back_to_lambda_context(self) -> None:
        class Context:
            aws_request_id = 'lambda-req'

        assert request_id_of({'requestContext': {'requestId': 'api-req'}}) == 'api-req'
        assert request_id_of({}, Context()) == 'lambda-req'


def test_json_response_serializes_schema_aliases() -> None:
    schema = VerificationResponseSchema(code=1, message='OK', userData={'email': 'a@example.com'})

    response = json_response(200, schema)

    assert json.loads(response['body']) == {
        'code': 1,
        'message': 'OK',
        'userData': {'email': 'a@example.com'},
    }
    assert response['headers']['Content-Type'] == 'application/json'


def test_iso_timestamp() -> None:
    assert iso_timestamp(0) == '1970-01-01T00:00:00.000Z'
    assert iso_timestamp(1_700_000_000_123) == '2023-11-14T22:13:20.123Z'
