import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from dist2land.download import DownloadError, DownloadResult, http_download_to

BODY = b"zip archive bytes"


class _Handler(BaseHTTPRequestHandler):
    agents = []

    def do_GET(self):
        type(self).agents.append(self.headers.get("User-Agent"))
        if self.path == "/data.zip":
            self.send_response(200)
            self.send_header("Content-Length", str(len(BODY)))
            self.end_headers()
            self.wfile.write(BODY)
        elif self.path == "/moved":
            self.send_response(302)
            self.send_header("Location", "/data.zip")
            self.send_header("Content-Length", "0")
            self.end_headers()
        else:
            self.send_response(404)
            self.send_header("Content-Length", "0")
            self.end_headers()

    def log_message(self, *args):
        pass


@pytest.fixture
def server():
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{httpd.server_address[1]}"
    finally:
        httpd.shutdown()
        httpd.server_close()


def test_http_download_success(server, tmp_path):
    out = tmp_path / "downloads" / "osm.zip"
    result = http_download_to(f"{server}/data.zip", out)
    assert result == DownloadResult(file_path=out, http_code=200)
    assert out.read_bytes() == BODY
    assert not (tmp_path / "downloads" / "osm.zip.part").exists()
    assert _Handler.agents[-1] == "dist2land"


def test_http_download_follows_redirect(server, tmp_path):
    out = tmp_path / "r.zip"
    result = http_download_to(f"{server}/moved", out)
    assert result.http_code == 200
    assert out.read_bytes() == BODY


def test_http_error_status_raises_and_cleans_up(server, tmp_path):
    out = tmp_path / "missing.zip"
    with pytest.raises(DownloadError, match="HTTP error code: 404"):
        http_download_to(f"{server}/nothing", out)
    assert not out.exists()
    assert not (tmp_path / "missing.zip.part").exists()


def test_file_url_round_trip_and_overwrite(tmp_path):
    source = tmp_path / "source.bin"
    source.write_bytes(b"\x00payload\xff")
    out = tmp_path / "copy.bin"
    out.write_bytes(b"stale")
    result = http_download_to(source.as_uri(), out)
    assert result.http_code == 0
    assert out.read_bytes() == source.read_bytes()


def test_unreachable_source_raises(tmp_path):
    out = tmp_path / "x.zip"
    with pytest.raises(DownloadError, match="Download failed"):
        http_download_to((tmp_path / "absent.bin").as_uri(), out)
    assert not out.exists()
    assert not (tmp_path / "x.zip.part").exists()


def test_unsupported_url_raises(tmp_path):
    with pytest.raises(DownloadError, match="Download failed"):
        http_download_to("not a url", tmp_path / "y.zip")


def test_unwritable_target_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.mkdir()
    (blocker / "z.zip.part").mkdir()
    with pytest.raises(DownloadError, match="Failed to open for write"):
        http_download_to("http://127.0.0.1:9/", blocker / "z.zip")