"""PowerMax REST transport client."""

from __future__ import annotations

import logging
import socket
from collections.abc import Mapping
from typing import Any

import requests

from . import http
from .auth.token import TokenAuth
from .config import ClientOptions, normalize_host
from .context import RequestContext, call_deadline, run_bounded
from .exceptions import ConfigurationError, DecodeError, HTTPError, TransportError
from .tls import configure_session

logger = logging.getLogger(__name__)


class PowerMaxClient:
    """Send requests to a PowerMax management endpoint.

    Each call is a single HTTP exchange: no retries and no caching. The
    client may be shared between threads; the auth token and the session's
    connection pool are the only state calls have in common.
    """

    def __init__(
        self,
        host: str,
        options: ClientOptions | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        if not host:
            raise ConfigurationError("missing endpoint")
        self.options = options or ClientOptions()
        self._host = normalize_host(host)
        self._auth = TokenAuth()
        self._session = session or requests.Session()
        self._session.headers.update(self.options.resolved_headers())
        configure_session(self._session, self.options)

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> PowerMaxClient:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Public API --------------------------------------------------------------
    @property
    def host(self) -> str:
        return self._host

    @property
    def http_session(self) -> requests.Session:
        return self._session

    def get_token(self) -> str:
        return self._auth.get()

    def set_token(self, token: str) -> None:
        self._auth.set(token)

    def get(
        self,
        path: str,
        headers: Mapping[str, str] | None = None,
        resp: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> Any:
        return self.do_with_headers("GET", path, headers, None, resp, context=context)

    def post(
        self,
        path: str,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        resp: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> Any:
        return self.do_with_headers("POST", path, headers, body, resp, context=context)

    def put(
        self,
        path: str,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        resp: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> Any:
        return self.do_with_headers("PUT", path, headers, body, resp, context=context)

    def delete(
        self,
        path: str,
        headers: Mapping[str, str] | None = None,
        resp: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> Any:
        return self.do_with_headers("DELETE", path, headers, None, resp, context=context)

    def do(
        self,
        method: str,
        path: str,
        body: Any = None,
        resp: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> Any:
        return self.do_with_headers(method, path, None, body, resp, context=context)

    def do_with_headers(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        resp: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> Any:
        """Send a request and decode a 2xx body into ``resp``.

        ``resp`` may be ``None`` (nothing is decoded), a ``Payload`` subclass,
        ``dict``/``list``, or an instance that is filled in place. Returns the
        decoded value, or ``None`` when nothing was decoded into a type.

        Raises `HTTPError` for any non-2xx status.
        """

        deadline = call_deadline(context, self.options.resolved_timeout())
        response = self._send(method, path, headers, body, context, deadline)
        with response:
            if 200 <= response.status_code <= 299:
                if resp is None:
                    return None
                return self._decode(response, resp, context, deadline)
            raise self.parse_json_error(response)

    def do_and_get_response_body(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        *,
        context: RequestContext | None = None,
    ) -> requests.Response:
        """Send a request and return the raw, still-open response.

        The caller owns the response and must close it. A stream ``body`` is
        closed once the exchange has been attempted. The client timeout and
        ``context`` bound the wait for the response headers only.
        """

        deadline = call_deadline(context, self.options.resolved_timeout())
        return self._send(method, path, headers, body, context, deadline)

    def parse_json_error(self, response: requests.Response) -> HTTPError:
        """Build the structured error for a non-2xx ``response``."""

        return http.parse_error(response)

    def close(self) -> None:
        self._session.close()

    # Internal helpers -------------------------------------------------------
    def _send(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str] | None,
        body: Any,
        context: RequestContext | None,
        deadline: float | None,
    ) -> requests.Response:
        try:
            url = http.build_url(self._host, path)
            prepared = http.prepare_body(body, headers)
            request_headers = http.merge_headers(prepared, body, headers)
            self._auth.apply(request_headers)
            self._log_request(method, url)
            if self.options.show_http:
                http.log_request(method, url, request_headers, prepared)
            response = self._perform_request(
                method,
                url,
                headers=request_headers,
                data=prepared.data,
                context=context,
                deadline=deadline,
            )
        finally:
            http.close_stream(body)

        if self.options.show_http:
            http.log_response(response)
        return response

    def _perform_request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        data: Any,
        context: RequestContext | None,
        deadline: float | None,
    ) -> requests.Response:
        timeout = self.options.resolved_timeout()
        if context is not None:
            context.raise_if_done()
            timeout = context.bound_timeout(timeout)

        def send() -> requests.Response:
            return self._session.request(
                method=method.upper(),
                url=url,
                headers=headers,
                data=data,
                timeout=timeout,
                stream=True,
            )

        try:
            response = run_bounded(
                send, context=context, deadline=deadline, discard=lambda late: late.close()
            )
        except requests.RequestException as exc:
            reason = str(exc).strip() or exc.__class__.__name__
            self._debug_log("Failed to communicate with PowerMax API: %s", reason)
            raise TransportError(
                f"Failed to communicate with PowerMax API: {reason}", details=reason
            ) from exc
        if context is not None and (context.cancelled or context.expired()):
            response.close()
            context.raise_if_done()
        return response

    def _decode(
        self,
        response: requests.Response,
        destination: Any,
        context: RequestContext | None,
        deadline: float | None,
    ) -> Any:
        if context is not None:
            context.raise_if_done()
        try:
            content = run_bounded(
                lambda: response.content,
                context=context,
                deadline=deadline,
                interrupt=lambda: _shutdown_connection(response),
            )
        except (requests.RequestException, OSError) as exc:
            if context is not None:
                context.raise_if_done()
            reason = str(exc).strip() or exc.__class__.__name__
            raise TransportError(
                f"Failed to read PowerMax API response: {reason}", details=reason
            ) from exc
        if context is not None:
            context.raise_if_done()
        try:
            return http.decode_body(content, destination, status_code=response.status_code)
        except DecodeError:
            self._debug_log("Unable to decode response into %r", destination)
            raise

    def _log_request(self, method: str, url: str) -> None:
        logger.info("PowerMax request %s %s", method.upper(), url)

    def _debug_log(self, message: str, *args: Any) -> None:
        if self.options.debug:
            logger.error(message, *args)


def _shutdown_connection(response: requests.Response) -> None:
    """Shut down the socket under ``response`` so a blocked read returns."""

    connection = getattr(response.raw, "connection", None)
    sock = getattr(connection, "sock", None)
    if sock is None:
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        # Already closed by the peer or the pool.
        return
