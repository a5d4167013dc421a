"""Trust policy setup for the client's requests session."""

from __future__ import annotations

import logging
import re
import ssl
from pathlib import Path

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.exceptions import InsecureRequestWarning

from .config import ClientOptions
from .exceptions import CertificateAppendError, CertificateLoadError, TrustStoreError

logger = logging.getLogger(__name__)

PEM_CERT_BLOCK = re.compile(
    r"-----BEGIN CERTIFICATE-----.+?-----END CERTIFICATE-----", re.DOTALL
)


class TrustPoolAdapter(HTTPAdapter):
    """Transport adapter that verifies peers against a prepared SSL context."""

    def __init__(self, ssl_context: ssl.SSLContext, **kwargs) -> None:
        self.ssl_context = ssl_context
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs) -> None:
        kwargs["ssl_context"] = self.ssl_context
        super().init_poolmanager(*args, **kwargs)

    def proxy_manager_for(self, *args, **kwargs):
        kwargs["ssl_context"] = self.ssl_context
        return super().proxy_manager_for(*args, **kwargs)


def configure_session(session: requests.Session, options: ClientOptions) -> None:
    """Apply the trust policy described by ``options`` to ``session``."""

    if options.insecure:
        logger.warning("TLS certificate verification is disabled for this client")
        urllib3.disable_warnings(InsecureRequestWarning)
        session.verify = False
        return

    context = build_trust_context(options.cert_file, debug=options.debug)
    session.verify = True
    session.mount("https://", TrustPoolAdapter(context))


def build_trust_context(cert_file: str | Path | None, *, debug: bool = False) -> ssl.SSLContext:
    """Return an SSL context backed by the system store plus ``cert_file``."""

    try:
        context = ssl.create_default_context()
    except (ssl.SSLError, OSError) as exc:
        raise TrustStoreError("Unable to initialize cert pool from system") from exc

    if not cert_file:
        return context

    try:
        raw = Path(cert_file).expanduser().read_bytes()
    except OSError as exc:
        if debug:
            logger.error("Unable to read certificate file %s: %s", cert_file, exc)
        raise CertificateLoadError(
            f"Unable to read certificate file {cert_file}", details=str(exc)
        ) from exc

    # Bundles often carry non-ASCII comments between blocks; only the blocks matter.
    blocks = PEM_CERT_BLOCK.findall(raw.decode("latin-1"))
    if not blocks:
        if debug:
            logger.error("Failed to append reverse proxy certificate to pool")
        raise CertificateAppendError(
            "failed to append reverse proxy certificate to pool",
            details=f"{cert_file} holds no PEM certificate",
        )
    try:
        context.load_verify_locations(cadata="\n".join(blocks))
    except (ssl.SSLError, ValueError) as exc:
        if debug:
            logger.error("Failed to append reverse proxy certificate to pool: %s", exc)
        raise CertificateAppendError(
            "failed to append reverse proxy certificate to pool", details=str(exc)
        ) from exc
    return context
