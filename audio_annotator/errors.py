"""Typed error kinds for the annotation workspace.

WHY: Callers (CLI, HTTP API, tests) need to tell a stale index apart from
a bad upload or a failed AI call, and upstream failures need a short,
user-facing message instead of a raw HTTP body.

HOW: AnnotatorError is the common base. InvalidInputError and
IndexOutOfRangeError also inherit from the matching builtin so generic
``except ValueError`` / ``except IndexError`` handlers still work.
classify_upstream_error() turns any exception raised by the AI
collaborator into one of the three UpstreamError kinds by keyword.

RULES:
- Upstream failures never change annotation history
- Classification is keyword based on the lowercased exception text:
  "unauthenticated", "401", "api key not valid" -> auth; "quota" -> quota
- Anything else is UpstreamUnknownError
"""

from __future__ import annotations


class AnnotatorError(Exception):
    """Base class for all annotation workspace errors."""


class InvalidInputError(AnnotatorError, ValueError):
    """Raised for unusable input: a non-audio upload, an unknown field,
    tag type or export format."""


class IndexOutOfRangeError(AnnotatorError, IndexError):
    """Raised when a mutation targets an annotation index that does not exist.

    The collection and its history are left unchanged.
    """

    def __init__(self, index: int, size: int) -> None:
        self.index = index
        self.size = size
        super().__init__(
            "Annotation index {} out of range (collection has {} item(s))".format(
                index, size
            )
        )


class UpstreamError(AnnotatorError):
    """A failed call to the AI annotation collaborator.

    Attributes:
        message: User-facing explanation, safe to show as-is.
        cause: The original exception raised by the collaborator.
    """

    default_message = "Failed to generate annotations."

    def __init__(self, message: str | None = None, cause: BaseException | None = None) -> None:
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(self.message)


class UpstreamAuthError(UpstreamError):
    default_message = (
        "Authentication Error: The API key is invalid or missing. "
        "Please ensure it is correctly configured in your environment settings."
    )


class UpstreamQuotaError(UpstreamError):
    default_message = (
        "Quota Exceeded: You have exceeded your API usage limit. "
        "Please check your Google AI Platform console."
    )


class UpstreamUnknownError(UpstreamError):
    default_message = (
        "Failed to generate annotations. Please check the logs for details."
    )


_AUTH_KEYWORDS = ("unauthenticated", "401", "api key not valid")
_QUOTA_KEYWORDS = ("quota",)


def classify_upstream_error(exc: BaseException) -> UpstreamError:
    """Map a collaborator failure to an UpstreamError kind.

    Already-classified errors are returned unchanged.
    """
    if isinstance(exc, UpstreamError):
        return exc

    text = str(exc).lower()
    if any(keyword in text for keyword in _AUTH_KEYWORDS):
        return UpstreamAuthError(cause=exc)
    if any(keyword in text for keyword in _QUOTA_KEYWORDS):
        return UpstreamQuotaError(cause=exc)
    return UpstreamUnknownError(cause=exc)
