"""Configuration helpers for the PowerMax client."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

HEADER_KEY_ACCEPT = "Accept"
HEADER_KEY_CONTENT_TYPE = "Content-Type"
HEADER_VAL_CONTENT_TYPE_JSON = "application/json"
HEADER_VAL_CONTENT_TYPE_BINARY_OCTET_STREAM = "binary/octet-stream"

API_MOUNT_SEGMENT = "/api"


@dataclass(frozen=True, slots=True)
class ClientOptions:
    """Typed configuration for `PowerMaxClient`."""

    insecure: bool = False
    # The system trust store is loaded whenever ``insecure`` is off; kept for
    # callers that still pass it.
    use_certs: bool = False
    timeout: float = 0.0
    show_http: bool = False
    cert_file: str | Path | None = None
    debug: bool = False

    def resolved_timeout(self) -> float | None:
        return self.timeout if self.timeout and self.timeout > 0 else None

    def resolved_headers(self) -> dict[str, str]:
        return {HEADER_KEY_ACCEPT: HEADER_VAL_CONTENT_TYPE_JSON}


def normalize_host(host: str) -> str:
    """Drop the first ``/api`` mount segment so either endpoint form is accepted."""

    return host.replace(API_MOUNT_SEGMENT, "", 1)
