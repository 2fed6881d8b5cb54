"""Error taxonomy for the generation pipeline.

Only two kinds of failure message are meant to be matched by consumers: the
authentication message (``AUTH_FAILURE_MESSAGE``) and the quota/billing
substrings checked by ``is_quota_or_billing``. Every other message is shown
to the user verbatim.
"""

AUTH_FAILURE_MESSAGE = "API key not found or invalid. Please re-select your API key."

_AUTH_MARKERS = ("requested entity was not found", "api key not valid")
_RECOVERABLE_MARKERS = ("quota", "billing")


class VideoFactoryError(Exception):
    """Base class for pipeline errors."""


class AuthenticationError(VideoFactoryError):
    """The access credential for the media service is missing or invalid."""

    def __init__(self, message: str = AUTH_FAILURE_MESSAGE) -> None:
        super().__init__(message)


class GenerationError(VideoFactoryError):
    """The media service finished an operation with an error."""


class GenerationTimeoutError(GenerationError):
    """An operation did not complete within the configured poll window."""


class TransportError(VideoFactoryError):
    """A non-success HTTP response while fetching an asset."""


class MalformedResponseError(VideoFactoryError):
    """An external service returned a structurally invalid response."""


class ProviderLookupError(VideoFactoryError):
    """A stock footage provider failed; always recovered by the resolver."""


class FallbackError(VideoFactoryError):
    """The substitute path could not even be attempted."""


class InvalidTransitionError(VideoFactoryError, ValueError):
    """A task status change that the state machine does not allow."""


def is_authentication_failure(error: BaseException) -> bool:
    """Return True if the failure means the API key must be reselected."""
    if isinstance(error, AuthenticationError):
        return True
    message = str(error).lower()
    return any(marker in message for marker in _AUTH_MARKERS)


def is_quota_or_billing(error: BaseException) -> bool:
    """Return True if the failure message mentions quota or billing."""
    message = str(error).lower()
    return any(marker in message for marker in _RECOVERABLE_MARKERS)
