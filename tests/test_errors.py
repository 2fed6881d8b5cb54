"""Tests for failure classification."""

import pytest

from videofactory.errors import (
    AUTH_FAILURE_MESSAGE,
    AuthenticationError,
    InvalidTransitionError,
    is_authentication_failure,
    is_quota_or_billing,
)


@pytest.mark.parametrize("message", [
    "404 NOT_FOUND. Requested entity was not found.",
    "400 INVALID_ARGUMENT. API key not valid. Please pass a valid API key.",
])
def test_auth_failures(message):
    assert is_authentication_failure(RuntimeError(message))
    assert not is_quota_or_billing(RuntimeError(message))


@pytest.mark.parametrize("message", [
    "429 RESOURCE_EXHAUSTED. You exceeded your current quota.",
    "This API method requires billing to be enabled.",
    "QUOTA exceeded",
])
def test_quota_failures(message):
    assert is_quota_or_billing(RuntimeError(message))
    assert not is_authentication_failure(RuntimeError(message))


def test_authentication_error_carries_fixed_message():
    assert str(AuthenticationError()) == AUTH_FAILURE_MESSAGE
    assert is_authentication_failure(AuthenticationError())


def test_invalid_transition_is_a_value_error():
    assert issubclass(InvalidTransitionError, ValueError)
