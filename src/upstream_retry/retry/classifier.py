"""
Failure classification for upstream attempts.

Maps a raw status code and error payload onto a FailureClass. The mapping is
total: every input yields a class, and anything that cannot be understood
degrades to OTHER_RETRYABLE (retry with rotation) rather than dropping the
request.
"""

import json
from typing import Any, Sequence

import structlog

from upstream_retry.models.enums import FailureClass

logger = structlog.get_logger(__name__)

# Status recorded for attempts that never got an HTTP response
TRANSPORT_FAILURE_STATUS = 0

OVERLOAD_STATUS = 529
OVERLOAD_ERROR_TYPE = "overloaded_error"
SIGNATURE_FAILURE_STATUS = 400

# 4xx statuses that are transient rather than a property of the request
RETRYABLE_CLIENT_STATUSES = frozenset({408, 429})


def _body_text(error_body: Any) -> str:
    """Render an error payload as text for pattern matching."""
    if error_body is None:
        return ""
    if isinstance(error_body, str):
        return error_body
    if isinstance(error_body, (bytes, bytearray)):
        return bytes(error_body).decode("utf-8")
    if isinstance(error_body, (dict, list)):
        return json.dumps(error_body, ensure_ascii=False)
    raise TypeError(f"Unsupported error body type: {type(error_body).__name__}")


def matches_signature_failure(text: str, signature_patterns: Sequence[str]) -> bool:
    """Case-insensitive substring match of any configured pattern."""
    lowered = text.lower()
    return any(p and p.lower() in lowered for p in signature_patterns)


def classify(
    raw_status_code: int,
    error_body: Any,
    signature_patterns: Sequence[str] = (),
) -> FailureClass:
    """
    Classify one attempt outcome.

    Args:
        raw_status_code: HTTP status (TRANSPORT_FAILURE_STATUS when no response)
        error_body: Parsed error payload (dict/list), raw text or bytes, or None
        signature_patterns: Substrings identifying a signature/verification failure

    Returns:
        FailureClass for the attempt
    """
    if 200 <= raw_status_code < 300:
        return FailureClass.SUCCESS

    if raw_status_code == OVERLOAD_STATUS:
        return FailureClass.SERVER_OVERLOAD

    try:
        text = _body_text(error_body)
    except (TypeError, ValueError) as e:
        # UnicodeDecodeError is a ValueError
        logger.warning(
            "Unparseable error body, treating as retryable",
            status_code=raw_status_code,
            error=str(e),
        )
        return FailureClass.OTHER_RETRYABLE

    if raw_status_code >= 500 and OVERLOAD_ERROR_TYPE in text.lower():
        return FailureClass.SERVER_OVERLOAD

    if raw_status_code == SIGNATURE_FAILURE_STATUS and matches_signature_failure(
        text, signature_patterns
    ):
        return FailureClass.CLIENT_SIGNATURE_FAILURE

    if raw_status_code in RETRYABLE_CLIENT_STATUSES:
        return FailureClass.OTHER_RETRYABLE

    if 400 <= raw_status_code < 500:
        return FailureClass.NON_RETRYABLE

    # 5xx, transport failures and unknown codes
    return FailureClass.OTHER_RETRYABLE


def classify_exception(exc: BaseException) -> FailureClass:
    """
    Classify an attempt that raised instead of returning a response.

    Timeouts and connection errors are transient from the caller's point
    of view, so every transport failure is OTHER_RETRYABLE.
    """
    logger.debug(
        "Classifying transport failure",
        error_type=type(exc).__name__,
    )
    return FailureClass.OTHER_RETRYABLE
