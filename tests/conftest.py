"""Shared fixtures: boto3 client stand-ins and a ready Settings value."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from site_guard.config import Settings

INSTANCE_ID = "i-0123456789abcdef0"
WEBSITE_URL = "https://example.test/"


def describe_response(state):
    """DescribeInstances payload for a single instance in ``state``."""
    return {
        "Reservations": [
            {"Instances": [{"InstanceId": INSTANCE_ID, "State": {"Code": 0, "Name": state}}]}
        ]
    }


def client_error(code, operation="TestOperation"):
    return ClientError({"Error": {"Code": code, "Message": "test error"}}, operation)


@pytest.fixture
def ec2() -> MagicMock:
    """EC2 client whose instance_stopped waiter returns immediately."""
    client = MagicMock()
    client.get_waiter.return_value.wait.return_value = None
    return client


@pytest.fixture
def cloudwatch() -> MagicMock:
    return MagicMock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        website_url=WEBSITE_URL,
        instance_id=INSTANCE_ID,
        stop_wait_seconds=20.0,
        stop_poll_seconds=5.0,
    )
