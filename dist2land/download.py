"""Downloading files over HTTP(S) into the cache."""

from __future__ import annotations

import http.client
import os
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

USER_AGENT = "dist2land"
CONNECT_TIMEOUT_S = 30
LOW_SPEED_TIME_S = 60
LOW_SPEED_LIMIT_BPS = 64
_CHUNK = 64 * 1024


class DownloadError(RuntimeError):
    """A download failed or returned an HTTP error status."""


@dataclass(frozen=True)
class DownloadResult:
    """Where a download was stored and the HTTP status it ended with."""

    file_path: Path
    http_code: int = 0


def _fetch(url: str, sink: BinaryIO) -> int:
    request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urllib.request.urlopen(request, timeout=CONNECT_TIMEOUT_S) as response:
            code = getattr(response, "status", None) or 0
            window_start = time.monotonic()
            window_bytes = 0
            while chunk := response.read(_CHUNK):
                sink.write(chunk)
                window_bytes += len(chunk)
                now = time.monotonic()
                if now - window_start >= LOW_SPEED_TIME_S:
                    if window_bytes < LOW_SPEED_LIMIT_BPS * LOW_SPEED_TIME_S:
                        raise DownloadError("Download failed: transfer too slow")
                    window_start, window_bytes = now, 0
    except urllib.error.HTTPError as exc:
        raise DownloadError(f"HTTP error code: {exc.code}") from exc
    except urllib.error.URLError as exc:
        raise DownloadError(f"Download failed: {exc.reason}") from exc
    except (OSError, ValueError, http.client.HTTPException) as exc:
        raise DownloadError(f"Download failed: {exc}") from exc
    if code >= 400:
        raise DownloadError(f"HTTP error code: {code}")
    return code


def http_download_to(url: str, out_file: str | os.PathLike[str]) -> DownloadResult:
    """Download ``url`` into ``out_file`` via a ``.part`` file, following redirects."""
    out_file = Path(out_file)
    if out_file.parent != Path():
        out_file.parent.mkdir(parents=True, exist_ok=True)

    partial = out_file.with_name(out_file.name + ".part")
    try:
        sink = open(partial, "wb")
    except OSError as exc:
        raise DownloadError(f"Failed to open for write: {partial}") from exc

    try:
        with sink:
            code = _fetch(url, sink)
    except BaseException:
        partial.unlink(missing_ok=True)
        raise

    os.replace(partial, out_file)
    return DownloadResult(file_path=out_file, http_code=code)