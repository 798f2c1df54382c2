import sys
import tempfile
from pathlib import Path

from dist2land.paths import cache_root_dir, downloads_dir, provider_dir


def test_linux_uses_xdg_cache_home(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
    assert cache_root_dir() == tmp_path / "dist2land"


def test_linux_falls_back_to_home(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_CACHE_HOME", "")
    monkeypatch.setenv("HOME", str(tmp_path))
    assert cache_root_dir() == tmp_path / ".cache" / "dist2land"


def test_linux_without_home_uses_temp_dir(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.delenv("XDG_CACHE_HOME", raising=False)
    monkeypatch.delenv("HOME", raising=False)
    assert cache_root_dir() == Path(tempfile.gettempdir()) / ".cache" / "dist2land"


def test_darwin_uses_library_caches(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "darwin")
    monkeypatch.setenv("HOME", str(tmp_path))
    assert cache_root_dir() == tmp_path / "Library" / "Caches" / "dist2land"


def test_windows_uses_local_app_data(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    assert cache_root_dir() == tmp_path / "dist2land"


def test_provider_and_download_dirs_are_under_root(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))
    root = tmp_path / "dist2land"
    assert provider_dir("osm") == root / "providers" / "osm"
    assert downloads_dir() == root / "downloads"