"""Extraction of downloaded dataset archives."""

from __future__ import annotations

import os
import time
import zipfile
import zlib
from pathlib import Path

_UNIX_SYSTEM = 3


class ArchiveError(RuntimeError):
    """An archive could not be opened or read."""


def _restore_metadata(target: Path, info: zipfile.ZipInfo) -> None:
    if info.create_system == _UNIX_SYSTEM:
        mode = (info.external_attr >> 16) & 0o7777
        if mode:
            try:
                os.chmod(target, mode)
            except OSError:
                pass
    try:
        stamp = time.mktime(info.date_time + (0, 0, -1))
        os.utime(target, (stamp, stamp))
    except (OSError, OverflowError, ValueError):
        pass


def extract_zip(zip_file: str | os.PathLike[str], out_dir: str | os.PathLike[str]) -> None:
    """Extract every entry of ``zip_file`` into ``out_dir``, keeping times and modes.

    Entries that cannot be written are skipped; unreadable archive data raises
    ArchiveError.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    try:
        archive = zipfile.ZipFile(zip_file)
    except (OSError, zipfile.BadZipFile) as exc:
        raise ArchiveError(f"cannot open archive {zip_file}: {exc}") from exc

    directories: list[tuple[Path, zipfile.ZipInfo]] = []
    with archive:
        for info in archive.infolist():
            try:
                target = Path(archive.extract(info, out_dir))
            except (zipfile.BadZipFile, zlib.error, EOFError, RuntimeError, NotImplementedError) as exc:
                raise ArchiveError(f"cannot read {info.filename}: {exc}") from exc
            except OSError:
                continue
            if info.is_dir():
                directories.append((target, info))
            else:
                _restore_metadata(target, info)

    # Directory times are set last so that extracting their contents does not reset them.
    for target, info in reversed(directories):
        _restore_metadata(target, info)