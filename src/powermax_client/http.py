"""HTTP utilities for PowerMax API access."""

from __future__ import annotations

import dataclasses
import json
import logging
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any

from requests import RequestException, Response
from requests.structures import CaseInsensitiveDict
from urllib3.exceptions import LocationParseError
from urllib3.util import parse_url

from .config import (
    HEADER_KEY_CONTENT_TYPE,
    HEADER_VAL_CONTENT_TYPE_BINARY_OCTET_STREAM,
    HEADER_VAL_CONTENT_TYPE_JSON,
)
from .exceptions import DecodeError, HTTPError, MalformedURLError, SerializationError, status_text
from .types.base import HeaderProvider, Payload, RawStream

logger = logging.getLogger(__name__)

_MASKED_HEADERS = {"authorization"}


@dataclass(slots=True)
class PreparedBody:
    """Outcome of the single body-encoding decision for a request."""

    data: bytes | RawStream | None = None
    content_type: str | None = None

    @property
    def is_stream(self) -> bool:
        return self.data is not None and not isinstance(self.data, bytes)


def build_url(host: str, path: str) -> str:
    """Join ``host`` and ``path`` with exactly one slash at the seam."""

    url = host
    if path:
        if not host.endswith("/"):
            url += "/"
        url += path[1:] if path.startswith("/") else path
    try:
        parsed = parse_url(url)
    except LocationParseError as exc:
        raise MalformedURLError(f"Invalid request URL: {url}", details=str(exc)) from exc
    if not parsed.scheme or not parsed.host:
        raise MalformedURLError(f"Invalid request URL: {url}", details="missing scheme or host")
    return url


def is_raw_stream(body: Any) -> bool:
    return body is not None and isinstance(body, RawStream)


def encode_json(body: Any) -> bytes:
    """Serialize ``body`` as compact JSON, raising `SerializationError` on failure."""

    try:
        text = json.dumps(body, separators=(",", ":"), allow_nan=False, default=_json_default)
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            f"Unable to encode request body of type {type(body).__name__} as JSON",
            details=str(exc),
        ) from exc
    return text.encode("utf-8")


def _json_default(value: Any) -> Any:
    if isinstance(value, Payload):
        return value.to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def content_type_override(headers: Mapping[str, str] | None) -> str | None:
    """Return the caller's ``Content-Type`` override, if any."""

    if not headers:
        return None
    return CaseInsensitiveDict(headers).get(HEADER_KEY_CONTENT_TYPE)


def prepare_body(body: Any, headers: Mapping[str, str] | None = None) -> PreparedBody:
    """Pick exactly one encoding for ``body``.

    Raw streams go out untouched, any other non-``None`` value is JSON encoded,
    and ``None`` means no payload at all.
    """

    override = content_type_override(headers)
    if is_raw_stream(body):
        return PreparedBody(body, override or HEADER_VAL_CONTENT_TYPE_BINARY_OCTET_STREAM)
    if body is not None:
        return PreparedBody(encode_json(body), override or HEADER_VAL_CONTENT_TYPE_JSON)
    return PreparedBody()


def merge_headers(
    prepared: PreparedBody,
    body: Any,
    headers: Mapping[str, str] | None = None,
) -> CaseInsensitiveDict:
    """Assemble request headers without mutating the caller's mapping."""

    merged: CaseInsensitiveDict = CaseInsensitiveDict()
    content_type_set = prepared.content_type is not None
    if content_type_set:
        merged[HEADER_KEY_CONTENT_TYPE] = prepared.content_type
    if body is not None and isinstance(body, HeaderProvider):
        for key, value in body.metadata().items():
            if key not in merged:
                merged[key] = value
    for key, value in (headers or {}).items():
        if content_type_set and key.lower() == HEADER_KEY_CONTENT_TYPE.lower():
            continue
        merged[key] = value
    return merged


def close_stream(body: Any) -> None:
    if is_raw_stream(body):
        body.close()


def decode_into(destination: Any, data: Any) -> Any:
    """Store decoded JSON ``data`` in ``destination`` and return the result.

    ``destination`` is either a type (``Payload`` subclass, ``dict`` or
    ``list``, or ``object`` for any JSON value) or an instance updated in place.
    """

    if isinstance(destination, type):
        if destination is object:
            return data
        if issubclass(destination, Payload):
            return destination.from_dict(data)
        if destination in (dict, list):
            if not isinstance(data, destination):
                raise TypeError(f"expected {destination.__name__}, got {type(data).__name__}")
            return data
        raise TypeError(f"unsupported decode destination {destination!r}")
    if isinstance(destination, Payload):
        destination.update_from_dict(data)
        return destination
    if isinstance(destination, MutableMapping):
        if not isinstance(data, Mapping):
            raise TypeError(f"expected a JSON object, got {type(data).__name__}")
        destination.update(data)
        return destination
    if isinstance(destination, list):
        if not isinstance(data, list):
            raise TypeError(f"expected a JSON array, got {type(data).__name__}")
        destination[:] = data
        return destination
    raise TypeError(f"unsupported decode destination {type(destination).__name__}")


def decode_body(content: bytes, destination: Any, *, status_code: int | None = None) -> Any:
    """Decode a successful response body; an empty body leaves ``destination`` as is."""

    if not content or not content.strip():
        return None if isinstance(destination, type) else destination
    try:
        data = json.loads(content)
    except ValueError as exc:
        raise DecodeError(
            "Response did not contain valid JSON",
            status_code=status_code,
            details=str(exc),
        ) from exc
    try:
        return decode_into(destination, data)
    except (TypeError, ValueError) as exc:
        raise DecodeError(
            f"Unable to decode response into {destination!r}",
            status_code=status_code,
            details=str(exc),
        ) from exc


def parse_error(response: Response) -> HTTPError:
    """Translate a non-2xx response into an `HTTPError`; never raises."""

    reason = response.reason or status_text(response.status_code)
    try:
        payload = response.json()
    except (ValueError, RequestException):
        return HTTPError.from_status(response.status_code, reason)
    if not isinstance(payload, Mapping):
        return HTTPError.from_status(response.status_code, reason)
    return HTTPError.from_payload(response.status_code, payload, f"{response.status_code} {reason}")


def log_request(method: str, url: str, headers: Mapping[str, str], prepared: PreparedBody) -> None:
    if prepared.data is None:
        body = ""
    elif prepared.is_stream:
        body = "<binary stream>"
    else:
        body = prepared.data.decode("utf-8", errors="replace")
    logger.info(
        "HTTP request:\n%s %s\n%s\n\n%s",
        method.upper(),
        url,
        _format_headers(headers),
        body,
    )


def log_response(response: Response) -> None:
    logger.info(
        "HTTP response:\n%s %s\n%s",
        response.status_code,
        response.reason or "",
        _format_headers(response.headers),
    )


def _format_headers(headers: Mapping[str, str]) -> str:
    lines = []
    for key, value in headers.items():
        shown = "******" if key.lower() in _MASKED_HEADERS else value
        lines.append(f"{key}: {shown}")
    return "\n".join(lines)
