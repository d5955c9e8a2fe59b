import hashlib

import httpx
import pytest

from iocost_bot.core.errors import FetchError
from iocost_bot.services.downloader import Downloader


def make_downloader(tmp_path, routes):
    """Downloader whose client serves bytes from routes (url -> bytes | int status)."""
    requested = []

    def handler(request):
        url = str(request.url)
        requested.append(url)
        body = routes.get(url, 404)
        if isinstance(body, int):
            return httpx.Response(body)
        return httpx.Response(200, content=body)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    return Downloader(tmp_path, client=client), requested


def test_writes_body_under_content_hash_name(tmp_path):
    body = b"\x1f\x8b fake gzip bytes"
    downloader, _ = make_downloader(tmp_path, {"https://h.example/a": body})

    result = downloader.fetch("https://h.example/a")

    digest = hashlib.md5(body).hexdigest()
    assert result.content_hash == digest
    assert result.filename == f"result-{digest}.json.gz"
    assert result.path == tmp_path / result.filename
    assert result.path.read_bytes() == body
    assert result.size == len(body)
    assert result.url == "https://h.example/a"


def test_identical_content_from_different_urls_collides(tmp_path):
    body = b"same bytes"
    downloader, _ = make_downloader(
        tmp_path, {"https://h.example/a": body, "https://other.example/b": body}
    )

    first = downloader.fetch("https://h.example/a")
    second = downloader.fetch("https://other.example/b")

    assert first.filename == second.filename
    assert len(list(tmp_path.iterdir())) == 1


def test_different_content_gets_different_names(tmp_path):
    downloader, _ = make_downloader(
        tmp_path, {"https://h.example/a": b"one", "https://h.example/b": b"two"}
    )
    assert downloader.fetch("https://h.example/a").filename != downloader.fetch("https://h.example/b").filename


def test_existing_file_is_overwritten(tmp_path):
    body = b"payload"
    downloader, _ = make_downloader(tmp_path, {"https://h.example/a": body})
    stale = tmp_path / f"result-{hashlib.md5(body).hexdigest()}.json.gz"
    stale.write_bytes(b"partial")

    downloader.fetch("https://h.example/a")

    assert stale.read_bytes() == body


@pytest.mark.parametrize("status", [403, 404, 500])
def test_http_error_status_raises_fetch_error(tmp_path, status):
    downloader, _ = make_downloader(tmp_path, {"https://h.example/a": status})

    with pytest.raises(FetchError) as exc:
        downloader.fetch("https://h.example/a")

    assert exc.value.url == "https://h.example/a"
    assert str(status) in exc.value.cause
    assert list(tmp_path.iterdir()) == []


def test_transport_error_raises_fetch_error(tmp_path):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    downloader = Downloader(tmp_path, client=httpx.Client(transport=httpx.MockTransport(handler)))

    with pytest.raises(FetchError) as exc:
        downloader.fetch("https://h.example/a")
    assert "ConnectError" in exc.value.cause


def test_redirects_are_followed(tmp_path):
    def handler(request):
        if request.url.path == "/files/1":
            return httpx.Response(302, headers={"Location": "https://cdn.example/blob"})
        return httpx.Response(200, content=b"blob")

    downloader = Downloader(tmp_path, client=httpx.Client(transport=httpx.MockTransport(handler)))

    result = downloader.fetch("https://h.example/files/1")
    assert result.path.read_bytes() == b"blob"


def test_injected_client_is_not_closed(tmp_path):
    downloader, _ = make_downloader(tmp_path, {})
    client = downloader.client
    downloader.close()
    assert client.is_closed is False
