from typer.testing import CliRunner

from powermax_client.cli import app

runner = CliRunner()


def _capture_client(monkeypatch) -> dict[str, object]:
    captured: dict[str, object] = {}

    class DummyClient:
        def __init__(self, host, options):
            captured["host"] = host
            captured["options"] = options

        def set_token(self, token):  # pragma: no cover - helper
            captured["token"] = token

        def do_with_headers(self, method, path, headers, body, resp):
            return []

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            return False

    monkeypatch.setattr("powermax_client.cli.PowerMaxClient", DummyClient)
    return captured


def test_cli_respects_env_cert_and_verify_true(monkeypatch, tmp_path):
    cert = tmp_path / "ca.pem"
    cert.write_text("dummy", encoding="utf-8")
    captured = _capture_client(monkeypatch)

    result = runner.invoke(
        app,
        ["get", "/items"],
        env={
            "POWERMAX_ENDPOINT": "https://unisphere:8443",
            "POWERMAX_CA_CERT": str(cert),
            "POWERMAX_VERIFY_SSL": "1",
        },
    )

    assert result.exit_code == 0
    assert captured["host"] == "https://unisphere:8443"
    assert captured["options"].cert_file == str(cert)
    assert captured["options"].insecure is False


def test_cli_env_cert_with_no_verify_rejected(tmp_path):
    cert = tmp_path / "ca.pem"
    cert.write_text("dummy", encoding="utf-8")

    result = runner.invoke(
        app,
        ["get", "/items", "--endpoint", "https://unisphere:8443"],
        env={"POWERMAX_CA_CERT": str(cert), "POWERMAX_VERIFY_SSL": "0"},
    )

    assert result.exit_code != 0
    assert "Cannot combine --cert with --no-verify" in result.output


def test_cli_requires_endpoint():
    result = runner.invoke(app, ["get", "/items"], env={"POWERMAX_ENDPOINT": ""})

    assert result.exit_code != 0
