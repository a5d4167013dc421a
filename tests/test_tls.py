import ssl
from pathlib import Path

import certifi
import pytest
from urllib3.exceptions import InsecureRequestWarning

from powermax_client import ClientOptions, PowerMaxClient
from powermax_client.exceptions import (
    CertificateAppendError,
    CertificateLoadError,
    TrustStoreError,
)
from powermax_client.tls import TrustPoolAdapter

HOST = "https://unisphere:8443"


def test_default_client_verifies_with_trust_pool():
    client = PowerMaxClient(HOST)

    assert client.http_session.verify is True
    adapter = client.http_session.get_adapter(f"{HOST}/univmax")
    assert isinstance(adapter, TrustPoolAdapter)
    assert adapter.ssl_context.verify_mode == ssl.CERT_REQUIRED


def test_extra_certificate_is_appended(tmp_path):
    bundle = tmp_path / "proxy-ca.pem"
    bundle.write_bytes(Path(certifi.where()).read_bytes())

    client = PowerMaxClient(HOST, ClientOptions(cert_file=bundle))

    adapter = client.http_session.get_adapter(HOST)
    assert adapter.ssl_context.cert_store_stats()["x509_ca"] > 0


def test_missing_certificate_file_fails(tmp_path):
    with pytest.raises(CertificateLoadError):
        PowerMaxClient(HOST, ClientOptions(cert_file=tmp_path / "missing.pem"))


def test_file_without_pem_fails(tmp_path):
    cert = tmp_path / "ca.pem"
    cert.write_text("dummy", encoding="utf-8")

    with pytest.raises(CertificateAppendError):
        PowerMaxClient(HOST, ClientOptions(cert_file=cert))


def test_malformed_pem_fails(tmp_path, caplog):
    cert = tmp_path / "ca.pem"
    cert.write_text(
        "-----BEGIN CERTIFICATE-----\nbm90IGEgY2VydA==\n-----END CERTIFICATE-----\n",
        encoding="utf-8",
    )

    with caplog.at_level("ERROR", logger="powermax_client.tls"):
        with pytest.raises(CertificateAppendError):
            PowerMaxClient(HOST, ClientOptions(cert_file=cert, debug=True))

    assert "Failed to append reverse proxy certificate" in caplog.text


def test_trust_store_failure(monkeypatch):
    def broken_context(*args, **kwargs):
        raise ssl.SSLError("no system store")

    monkeypatch.setattr("powermax_client.tls.ssl.create_default_context", broken_context)

    with pytest.raises(TrustStoreError):
        PowerMaxClient(HOST)


def test_insecure_disables_verification(monkeypatch, caplog):
    captured: list[object] = []

    def fake_disable(warning):
        captured.append(warning)

    monkeypatch.setattr("powermax_client.tls.urllib3.disable_warnings", fake_disable)

    with caplog.at_level("WARNING", logger="powermax_client.tls"):
        client = PowerMaxClient(HOST, ClientOptions(insecure=True, cert_file="/does/not/matter"))

    assert client.http_session.verify is False
    assert captured and captured[0] is InsecureRequestWarning
    assert "verification is disabled" in caplog.text
    assert not isinstance(client.http_session.get_adapter(HOST), TrustPoolAdapter)
