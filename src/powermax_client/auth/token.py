"""Token authentication sent as an HTTP Basic credential."""

from __future__ import annotations

import threading
from collections.abc import MutableMapping

from requests.auth import _basic_auth_str

from .base import AuthStrategy

AUTHORIZATION_HEADER = "Authorization"


class TokenAuth(AuthStrategy):
    """Hold a rotatable token shared by every call of a client.

    The token goes on the wire as the password half of a Basic credential
    with an empty username.
    """

    def __init__(self, token: str = "") -> None:
        self._token = token
        self._lock = threading.Lock()

    def get(self) -> str:
        with self._lock:
            return self._token

    def set(self, token: str) -> None:
        with self._lock:
            self._token = token or ""

    def apply(self, headers: MutableMapping[str, str]) -> None:
        token = self.get()
        if not token:
            return
        for key in [key for key in headers if key.lower() == AUTHORIZATION_HEADER.lower()]:
            del headers[key]
        headers[AUTHORIZATION_HEADER] = _basic_auth_str("", token)
