"""Custom exception hierarchy for the PowerMax client."""
from __future__ import annotations

from collections.abc import Mapping
from http import HTTPStatus
from typing import Any


class PowerMaxError(RuntimeError):
    """Base error for PowerMax failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class ConfigurationError(PowerMaxError, ValueError):
    """Raised when the client is constructed with unusable input."""


class TrustStoreError(PowerMaxError):
    """Raised when the platform trust store cannot be loaded."""


class CertificateLoadError(PowerMaxError):
    """Raised when the extra CA certificate file cannot be read."""


class CertificateAppendError(PowerMaxError):
    """Raised when the extra CA certificate cannot be added to the trust pool."""


class MalformedURLError(PowerMaxError):
    """Raised when host and path do not form a valid URL."""


class SerializationError(PowerMaxError):
    """Raised when a request body cannot be encoded as JSON."""


class TransportError(PowerMaxError):
    """Raised when no HTTP response could be obtained."""


class DecodeError(PowerMaxError):
    """Raised when a successful response cannot be decoded into the destination."""


class HTTPError(PowerMaxError):
    """Structured error for any non-2xx response.

    ``http_status_code`` always holds the status observed on the wire and
    ``message`` is never empty. Vendor fields that are not modelled explicitly
    end up in ``details``.
    """

    def __init__(
        self,
        http_status_code: int,
        message: str,
        *,
        error_code: int | None = None,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status_code=http_status_code, details=dict(details or {}))
        self.http_status_code = http_status_code
        self.message = message
        self.error_code = error_code

    def __str__(self) -> str:
        return f"{self.message} (HTTP {self.http_status_code})"

    def __repr__(self) -> str:
        return f"HTTPError(http_status_code={self.http_status_code!r}, message={self.message!r})"

    @classmethod
    def from_payload(cls, status_code: int, payload: Mapping[str, Any], status_line: str) -> HTTPError:
        """Build an error from a decoded JSON error body.

        The observed ``status_code`` wins over any ``httpStatusCode`` in the body,
        and ``status_line`` (e.g. ``"403 Forbidden"``) stands in for an empty message.
        """

        extra = {
            key: value
            for key, value in payload.items()
            if key not in {"message", "httpStatusCode", "errorCode"}
        }
        message = payload.get("message")
        if not isinstance(message, str) or not message:
            message = status_line
        error_code = payload.get("errorCode")
        if not isinstance(error_code, int) or isinstance(error_code, bool):
            error_code = None
        return cls(status_code, message, error_code=error_code, details=extra)

    @classmethod
    def from_status(cls, status_code: int, reason: str | None = None) -> HTTPError:
        return cls(status_code, reason or status_text(status_code))


def status_text(status_code: int) -> str:
    """Return the reason phrase for ``status_code``."""

    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return f"HTTP status {status_code}"
