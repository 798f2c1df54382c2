"""Command-line argument lookup helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_HEX_FLOAT = re.compile(r"[+-]?0[xX]")


def _parse_c_double(text: str, key: str) -> float:
    """Parse ``text`` the way ``strtod`` does, requiring the whole string to be consumed."""
    candidate = text.lstrip()
    if (
        not candidate
        or not candidate.isascii()
        or candidate != candidate.rstrip()
        or "_" in candidate
    ):
        raise ValueError(f"Bad number for {key}")
    try:
        return float(candidate)
    except ValueError:
        pass
    if _HEX_FLOAT.match(candidate):
        try:
            return float.fromhex(candidate)
        except ValueError:
            pass
    raise ValueError(f"Bad number for {key}")


@dataclass
class ArgView:
    """A read-only view over a command line, looked up by option name."""

    args: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.args = list(self.args)

    def has(self, key: str) -> bool:
        """Return True if ``key`` appears anywhere in the arguments."""
        return key in self.args

    def get(self, key: str, default: str = "") -> str:
        """Return the argument following the first occurrence of ``key``."""
        for current, following in zip(self.args, self.args[1:]):
            if current == key:
                return following
        return default

    def get_double(self, key: str, default: float = 0.0) -> float:
        """Return the value after ``key`` as a float; ``default`` if absent or empty."""
        text = self.get(key, "")
        if not text:
            return default
        return _parse_c_double(text, key)