"""Tests for the cached boto3 factory."""

from __future__ import annotations

from signup_friction.services.aws_clients import get_dynamodb_resource
from signup_friction.services.aws_clients import get_frauddetector_client


def test_frauddetector_client_is_cached(mock_boto3_client) -> None:
    client_factory, _ = mock_boto3_client

    first = get_frauddetector_client()
    second = get_frauddetector_client()

    assert first is second
    client_factory.assert_called_once_with('frauddetector', region_name=None)


def test_dynamodb_resource_is_cached_per_region(mock_boto3_client) -> None:
    _, resource_factory = mock_boto3_client

    get_dynamodb_resource('us-east-1')
    get_dynamodb_resource('us-east-1')
    get_dynamodb_resource('eu-west-1')

    assert resource_factory.call_count == 2
