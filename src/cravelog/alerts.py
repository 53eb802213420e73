"""Mapping from collaborator failures to user-facing alerts."""

import sqlite3
from collections.abc import Callable

import httpx

from cravelog.errors import CravelogError, MissingAPIKeyError, RecordNotFoundError
from cravelog.models import AlertInfo
from cravelog.providers import InvalidEndpointError, UnexpectedStatusCodeError
from cravelog.speech import (
    AudioSessionFailedError,
    RecognitionFailedError,
    RecognizerUnavailableError,
    SpeechNotAuthorizedError,
)

DEFAULT_TITLE = "Error"

# Failures the view-models turn into alerts. Anything else propagates.
COLLABORATOR_ERRORS: tuple[type[Exception], ...] = (
    CravelogError, sqlite3.Error, OSError, httpx.HTTPError,
)

# First matching entry wins, so subclasses come before their bases.
_MESSAGES: list[tuple[type[Exception], Callable[[Exception], str]]] = [
    (SpeechNotAuthorizedError, str),
    (RecognizerUnavailableError, str),
    (AudioSessionFailedError, str),
    (RecognitionFailedError, str),
    (InvalidEndpointError, str),
    (UnexpectedStatusCodeError, str),
    (MissingAPIKeyError, str),
    (RecordNotFoundError, lambda e: "This craving no longer exists."),
    (httpx.HTTPError, lambda e: f"Network request failed: {e}"),
    (sqlite3.Error, lambda e: f"Could not access saved cravings: {e}"),
    (OSError, lambda e: f"Could not access saved cravings: {e}"),
    (CravelogError, str),
]


def alert_for_error(error: Exception, title: str = DEFAULT_TITLE) -> AlertInfo:
    """Build the single alert shown for a failed action."""
    for error_type, message in _MESSAGES:
        if isinstance(error, error_type):
            return AlertInfo(title=title, message=message(error))
    return AlertInfo(title=title, message=str(error) or type(error).__name__)
