import io

import pytest
import requests

from powermax_client import ClientOptions, PowerMaxClient
from powermax_client.exceptions import MalformedURLError, TransportError

HOST = "https://unisphere:8443"
UPLOAD_URL = f"{HOST}/univmax/restapi/100/system/symmetrix/000197900123/file"


class CountingStream(io.BytesIO):
    def __init__(self, data: bytes) -> None:
        super().__init__(data)
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1
        super().close()


def _capture_body(sink: list[bytes]):
    def _matcher(request) -> bool:
        body = request.body
        sink.append(body if isinstance(body, bytes) else body.read())
        return True

    return _matcher


def test_stream_body_is_sent_verbatim_and_closed_once(requests_mock):
    client = PowerMaxClient(HOST)
    payload = bytes(range(256)) * 4
    stream = CountingStream(payload)
    sent: list[bytes] = []
    matcher = requests_mock.post(UPLOAD_URL, status_code=201, additional_matcher=_capture_body(sent))

    client.post("/univmax/restapi/100/system/symmetrix/000197900123/file", body=stream)

    assert sent == [payload]
    assert matcher.last_request.headers["Content-Type"] == "binary/octet-stream"
    assert stream.close_calls == 1


def test_stream_content_type_override(requests_mock):
    client = PowerMaxClient(HOST)
    stream = CountingStream(b"firmware")
    matcher = requests_mock.put(UPLOAD_URL, status_code=200, additional_matcher=_capture_body([]))

    client.put(
        "/univmax/restapi/100/system/symmetrix/000197900123/file",
        headers={"Content-Type": "application/zip"},
        body=stream,
    )

    assert matcher.last_request.headers["Content-Type"] == "application/zip"
    assert stream.close_calls == 1


def test_stream_closed_when_send_fails(requests_mock):
    client = PowerMaxClient(HOST)
    stream = CountingStream(b"data")
    requests_mock.post(UPLOAD_URL, exc=requests.exceptions.ConnectionError("reset"))

    with pytest.raises(TransportError):
        client.post("/univmax/restapi/100/system/symmetrix/000197900123/file", body=stream)

    assert stream.close_calls == 1


def test_stream_closed_when_url_is_invalid():
    client = PowerMaxClient("unisphere-without-scheme", ClientOptions())
    stream = CountingStream(b"data")

    with pytest.raises(MalformedURLError):
        client.post("/file", body=stream)

    assert stream.close_calls == 1


def test_file_objects_are_streamed(tmp_path, requests_mock):
    client = PowerMaxClient(HOST)
    source = tmp_path / "bundle.bin"
    source.write_bytes(b"\x89PNG-ish")
    sent: list[bytes] = []
    requests_mock.post(UPLOAD_URL, status_code=201, additional_matcher=_capture_body(sent))
    handle = source.open("rb")

    client.post("/univmax/restapi/100/system/symmetrix/000197900123/file", body=handle)

    assert sent == [b"\x89PNG-ish"]
    assert handle.closed
