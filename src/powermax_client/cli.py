"""Command-line interface for raw PowerMax REST calls."""
from __future__ import annotations

import json
import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import typer

try:  # pragma: no cover - exercised in runtime environments
    from rich import box
    from rich.console import Console
    from rich.table import Table
except ImportError as exc:  # pragma: no cover - optional dependency guard
    raise RuntimeError(
        "The CLI requires Rich for table rendering. Install the CLI extras via "
        "'pip install powermax-python[cli]' to enable this command."
    ) from exc

from . import PowerMaxClient
from .cli_schema import CLI_TABLE_VIEWS, TableView
from .config import ClientOptions
from .exceptions import PowerMaxError

app = typer.Typer(help="PowerMax REST transport CLI.", no_args_is_help=True)


def _build_client(
    endpoint: str,
    token: str | None,
    verify_ssl: bool,
    cert_path: Path | None,
    timeout: float,
    show_http: bool,
    debug: bool,
) -> PowerMaxClient:
    cert_file: str | None = None
    if cert_path:
        expanded_cert = cert_path.expanduser()
        if not expanded_cert.exists():
            raise typer.BadParameter("Certificate file not found for --cert option.")
        if not verify_ssl:
            raise typer.BadParameter("Cannot combine --cert with --no-verify.")
        cert_file = str(expanded_cert)

    options = ClientOptions(
        insecure=not verify_ssl,
        timeout=timeout,
        show_http=show_http,
        cert_file=cert_file,
        debug=debug,
    )
    try:
        client = PowerMaxClient(endpoint, options)
    except PowerMaxError as exc:
        typer.secho(f"Unable to create client: {exc}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    if token:
        client.set_token(token)
    return client


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2))


console = Console(force_terminal=False, color_system=None)


def _render_rich_table(view: TableView, rows: Sequence[Mapping[str, Any]]) -> None:
    table = Table(
        title=view.title,
        box=box.SIMPLE,
        show_lines=False,
        header_style="bold cyan",
    )
    for column in view.columns:
        table.add_column(column.header, justify=column.justify)
    ordered_rows = list(rows)
    if view.sort_key:
        ordered_rows.sort(key=view.sort_key)
    for row in ordered_rows:
        table.add_row(*(column.render(row) for column in view.columns))
    console.print(table)


def _table_rows(payload: Any) -> list[Mapping[str, Any]]:
    # List endpoints wrap their items in a single-key envelope, e.g. {"devicePair": [...]}.
    if isinstance(payload, Mapping):
        lists = [value for value in payload.values() if isinstance(value, list)]
        if len(lists) != 1:
            return [payload]
        payload = lists[0]
    if not isinstance(payload, Sequence) or isinstance(payload, (str, bytes)):
        return []
    return [item for item in payload if isinstance(item, Mapping)]


def _present_output(payload: Any, *, view_id: str | None, json_output: bool) -> None:
    if json_output or view_id is None or payload is None:
        _echo_json(payload)
        return
    view = CLI_TABLE_VIEWS.get(view_id)
    if not view:
        typer.secho(f"Unknown view '{view_id}'.", err=True, fg=typer.colors.YELLOW)
        _echo_json(payload)
        return
    rows = _table_rows(payload)
    if not rows:
        _echo_json(payload)
        return
    _render_rich_table(view, rows)


def _handle_request_error(exc: PowerMaxError) -> None:
    message = f"Request failed (status {exc.status_code}): {exc}"
    if exc.details:
        message += f"\nDetails: {exc.details}"
    typer.secho(message, err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def parse_headers(values: Sequence[str]) -> dict[str, str]:
    """Parse repeated ``KEY=VALUE`` (or ``KEY: VALUE``) header options."""
    headers: dict[str, str] = {}
    for value in values:
        positions = [index for index in (value.find("="), value.find(":")) if index >= 0]
        if not positions:
            raise typer.BadParameter(f"Header '{value}' must look like KEY=VALUE.")
        split_at = min(positions)
        key, val = value[:split_at], value[split_at + 1 :]
        if not key.strip():
            raise typer.BadParameter(f"Header '{value}' has an empty name.")
        headers[key.strip()] = val.strip()
    return headers


def parse_data(value: str | None) -> Any:
    """Load a JSON body from literal text or ``@path``."""
    if value is None:
        return None
    text = value
    if value.startswith("@"):
        path = Path(value[1:]).expanduser()
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise typer.BadParameter(f"Unable to read payload file {path}: {exc}") from exc
    try:
        return json.loads(text)
    except ValueError as exc:
        raise typer.BadParameter(f"--data is not valid JSON: {exc}") from exc


def _shared_options() -> dict[str, Any]:
    # Respect POWERMAX_VERIFY_SSL environment variable when present.
    # Accept common truthy/falsey representations (1/0, true/false, yes/no).
    env_verify = os.getenv("POWERMAX_VERIFY_SSL")
    if env_verify is None:
        default_verify = True
    else:
        low = env_verify.strip().lower()
        if low in {"0", "false", "no", "off"}:
            default_verify = False
        else:
            default_verify = True

    return {
        "endpoint": typer.Option(
            ...,
            "--endpoint",
            "-e",
            envvar="POWERMAX_ENDPOINT",
            help="Unisphere endpoint, e.g. https://unisphere:8443 (a trailing /api is accepted).",
        ),
        "token": typer.Option(
            None,
            "--token",
            envvar="POWERMAX_TOKEN",
            help="Auth token sent as the Basic credential password.",
        ),
        "verify_ssl": typer.Option(
            default_verify,
            "--verify/--no-verify",
            envvar="POWERMAX_VERIFY_SSL",
            help="Enable or disable TLS certificate verification.",
            show_default=True,
        ),
        "cert_path": typer.Option(
            None,
            "--cert",
            envvar="POWERMAX_CA_CERT",
            help="PEM CA certificate appended to the system trust store.",
        ),
        "timeout": typer.Option(
            0.0, help="Request timeout in seconds (0 disables it).", show_default=True
        ),
        "show_http": typer.Option(
            False, "--show-http", help="Log raw HTTP requests and responses."
        ),
        "debug": typer.Option(False, "--debug", help="Log failure diagnostics."),
        "header": typer.Option(
            [],
            "--header",
            "-H",
            help="Extra request header in KEY=VALUE form (repeatable).",
            show_default=False,
        ),
        "output_json": typer.Option(
            False,
            "--json",
            "-j",
            help="Return raw JSON instead of rendering a table.",
        ),
        "view": typer.Option(
            None,
            "--view",
            help=f"Render list output as a table ({', '.join(sorted(CLI_TABLE_VIEWS))}).",
        ),
        "data": typer.Option(
            None,
            "--data",
            "-d",
            help="JSON request body, or @path to read it from a file.",
        ),
    }


_SHARED_OPTIONS = _shared_options()


def _run(
    method: str,
    path: str,
    *,
    endpoint: str,
    token: str | None,
    verify_ssl: bool,
    cert_path: Path | None,
    timeout: float,
    show_http: bool,
    debug: bool,
    header: Sequence[str],
    body: Any = None,
) -> Any:
    headers = parse_headers(header)
    with _build_client(
        endpoint=endpoint,
        token=token,
        verify_ssl=verify_ssl,
        cert_path=cert_path,
        timeout=timeout,
        show_http=show_http,
        debug=debug,
    ) as client:
        try:
            return client.do_with_headers(method, path, headers, body, object)
        except PowerMaxError as exc:
            _handle_request_error(exc)
            return None


@app.command("get")
def get_command(
    path: str = typer.Argument(..., help="Path relative to the endpoint."),
    endpoint: str = _SHARED_OPTIONS["endpoint"],
    token: str | None = _SHARED_OPTIONS["token"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    show_http: bool = _SHARED_OPTIONS["show_http"],
    debug: bool = _SHARED_OPTIONS["debug"],
    header: list[str] = _SHARED_OPTIONS["header"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
    view: str | None = _SHARED_OPTIONS["view"],
) -> None:
    """Send a GET request and print the decoded response."""

    result = _run(
        "GET",
        path,
        endpoint=endpoint,
        token=token,
        verify_ssl=verify_ssl,
        cert_path=cert_path,
        timeout=timeout,
        show_http=show_http,
        debug=debug,
        header=header,
    )
    _present_output(result, view_id=view, json_output=output_json)


@app.command("delete")
def delete_command(
    path: str = typer.Argument(..., help="Path relative to the endpoint."),
    endpoint: str = _SHARED_OPTIONS["endpoint"],
    token: str | None = _SHARED_OPTIONS["token"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    show_http: bool = _SHARED_OPTIONS["show_http"],
    debug: bool = _SHARED_OPTIONS["debug"],
    header: list[str] = _SHARED_OPTIONS["header"],
) -> None:
    """Send a DELETE request."""

    result = _run(
        "DELETE",
        path,
        endpoint=endpoint,
        token=token,
        verify_ssl=verify_ssl,
        cert_path=cert_path,
        timeout=timeout,
        show_http=show_http,
        debug=debug,
        header=header,
    )
    if result is not None:
        _echo_json(result)


@app.command("post")
def post_command(
    path: str = typer.Argument(..., help="Path relative to the endpoint."),
    endpoint: str = _SHARED_OPTIONS["endpoint"],
    token: str | None = _SHARED_OPTIONS["token"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    show_http: bool = _SHARED_OPTIONS["show_http"],
    debug: bool = _SHARED_OPTIONS["debug"],
    header: list[str] = _SHARED_OPTIONS["header"],
    data: str | None = _SHARED_OPTIONS["data"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
    view: str | None = _SHARED_OPTIONS["view"],
) -> None:
    """Send a POST request with a JSON body."""

    result = _run(
        "POST",
        path,
        endpoint=endpoint,
        token=token,
        verify_ssl=verify_ssl,
        cert_path=cert_path,
        timeout=timeout,
        show_http=show_http,
        debug=debug,
        header=header,
        body=parse_data(data),
    )
    _present_output(result, view_id=view, json_output=output_json)


@app.command("put")
def put_command(
    path: str = typer.Argument(..., help="Path relative to the endpoint."),
    endpoint: str = _SHARED_OPTIONS["endpoint"],
    token: str | None = _SHARED_OPTIONS["token"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    show_http: bool = _SHARED_OPTIONS["show_http"],
    debug: bool = _SHARED_OPTIONS["debug"],
    header: list[str] = _SHARED_OPTIONS["header"],
    data: str | None = _SHARED_OPTIONS["data"],
    output_json: bool = _SHARED_OPTIONS["output_json"],
    view: str | None = _SHARED_OPTIONS["view"],
) -> None:
    """Send a PUT request with a JSON body."""

    result = _run(
        "PUT",
        path,
        endpoint=endpoint,
        token=token,
        verify_ssl=verify_ssl,
        cert_path=cert_path,
        timeout=timeout,
        show_http=show_http,
        debug=debug,
        header=header,
        body=parse_data(data),
    )
    _present_output(result, view_id=view, json_output=output_json)


@app.command("upload")
def upload_command(
    path: str = typer.Argument(..., help="Path relative to the endpoint."),
    file: Path = typer.Argument(..., help="File streamed as the request body."),
    endpoint: str = _SHARED_OPTIONS["endpoint"],
    token: str | None = _SHARED_OPTIONS["token"],
    verify_ssl: bool = _SHARED_OPTIONS["verify_ssl"],
    cert_path: Path | None = _SHARED_OPTIONS["cert_path"],
    timeout: float = _SHARED_OPTIONS["timeout"],
    show_http: bool = _SHARED_OPTIONS["show_http"],
    debug: bool = _SHARED_OPTIONS["debug"],
    header: list[str] = _SHARED_OPTIONS["header"],
    content_type: str | None = typer.Option(
        None, "--content-type", help="Override the binary/octet-stream content type."
    ),
    method: str = typer.Option("POST", "--method", "-X", help="HTTP method to use."),
) -> None:
    """Stream a file to the array without JSON encoding."""

    headers = list(header)
    if content_type:
        headers.append(f"Content-Type={content_type}")
    try:
        stream = file.expanduser().open("rb")
    except OSError as exc:
        raise typer.BadParameter(f"Unable to open {file}: {exc}") from exc
    with stream:
        result = _run(
            method.upper(),
            path,
            endpoint=endpoint,
            token=token,
            verify_ssl=verify_ssl,
            cert_path=cert_path,
            timeout=timeout,
            show_http=show_http,
            debug=debug,
            header=headers,
            body=stream,
        )
    if result is not None:
        _echo_json(result)


def main() -> None:  # pragma: no cover - console entry point
    app()
