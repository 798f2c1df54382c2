"""Dataset providers: configuration loading and installed-data lookup."""

from __future__ import annotations

import functools
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from .paths import provider_dir

CONFIG_ENV = "DIST2LAND_PROVIDERS"
CONFIG_NAME = "providers.ini"


class ProviderConfigError(RuntimeError):
    """The providers configuration is missing or malformed."""


@dataclass(frozen=True)
class Provider:
    """A downloadable land-polygon dataset.

    If ``explicit_shp`` is set, the shapefile is matched by that exact file
    name; otherwise the first ``*.shp`` whose name contains any of
    ``shp_name_contains`` is used.
    """

    id: str
    display_name: str = ""
    url_zip: str = ""
    license_hint: str = ""
    explicit_shp: str = ""
    shp_name_contains: tuple[str, ...] = ()


def _split_csv(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


def provider_config_candidates() -> list[Path]:
    """Return the locations searched for the providers file, in order."""
    candidates: list[Path] = []
    env = os.environ.get(CONFIG_ENV)
    if env:
        candidates.append(Path(env))
    package_dir = Path(__file__).resolve().parent
    candidates.append(package_dir / CONFIG_NAME)
    candidates.append(Path(sys.prefix) / "share" / "dist2land" / CONFIG_NAME)
    if sys.platform != "win32":
        candidates.append(Path("/usr/local/share/dist2land") / CONFIG_NAME)
        candidates.append(Path("/usr/share/dist2land") / CONFIG_NAME)
    return candidates


def find_provider_config() -> Path:
    """Return the first existing providers file, or raise ProviderConfigError."""
    candidates = provider_config_candidates()
    for candidate in candidates:
        try:
            if candidate.exists():
                return candidate
        except OSError:
            continue
    lines = ["Providers config not found.", "Expected one of:"]
    lines += [f"  {candidate}" for candidate in candidates]
    lines.append(
        f"You should ship share/dist2land/{CONFIG_NAME} with the release, "
        f"or set {CONFIG_ENV}."
    )
    raise ProviderConfigError("\n".join(lines) + "\n")


def _build_provider(fields: dict[str, object]) -> Provider:
    provider_id = str(fields.get("id", "")).lower()
    if not provider_id:
        raise ProviderConfigError("providers.ini: missing section id")
    for required in ("display_name", "url_zip", "license_hint"):
        if not fields.get(required):
            raise ProviderConfigError(
                f"providers.ini: provider '{provider_id}' missing {required}"
            )
    if not fields.get("shp_name_contains") and not fields.get("explicit_shp"):
        raise ProviderConfigError(
            f"providers.ini: provider '{provider_id}' missing shp_name_contains "
            "(or explicit_shp)"
        )
    return Provider(
        id=provider_id,
        display_name=str(fields["display_name"]),
        url_zip=str(fields["url_zip"]),
        license_hint=str(fields["license_hint"]),
        explicit_shp=str(fields.get("explicit_shp", "")),
        shp_name_contains=tuple(fields.get("shp_name_contains", ())),  # type: ignore[arg-type]
    )


def parse_providers_ini(path: str | os.PathLike[str]) -> list[Provider]:
    """Parse a providers file into a list of providers, in file order."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as handle:
            lines = handle.read().splitlines()
    except OSError as exc:
        raise ProviderConfigError(f"Failed to open providers config: {path}") from exc

    providers: list[Provider] = []
    current: dict[str, object] | None = None

    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith(("#", ";")):
            continue

        if len(line) >= 3 and line.startswith("[") and line.endswith("]"):
            if current is not None:
                providers.append(_build_provider(current))
            current = {"id": line[1:-1].strip()}
            continue

        key, sep, value = line.partition("=")
        if not sep:
            raise ProviderConfigError(
                f"providers.ini parse error at {path}:{lineno} (expected key=value)"
            )
        if current is None:
            raise ProviderConfigError(
                f"providers.ini parse error at {path}:{lineno} "
                "(key=value outside any [section])"
            )

        key = key.strip().lower()
        value = value.strip()
        if key in ("display_name", "url_zip", "license_hint", "explicit_shp"):
            current[key] = value
        elif key == "shp_name_contains":
            current[key] = _split_csv(value)
        # Unknown keys are ignored for forward compatibility.

    if current is not None:
        providers.append(_build_provider(current))

    if not providers:
        raise ProviderConfigError(f"providers.ini: no providers found in {path}")
    return providers


@functools.lru_cache(maxsize=None)
def _load_providers(path: Path) -> tuple[Provider, ...]:
    return tuple(parse_providers_ini(path))


def all_providers() -> list[Provider]:
    """Return all configured providers, in preference order."""
    return list(_load_providers(find_provider_config()))


def provider_by_id(provider_id: str) -> Provider:
    """Look up a provider by id, case-insensitively; ``auto`` is a placeholder."""
    wanted = provider_id.lower()
    if wanted == "auto":
        return Provider(id="auto")
    for provider in all_providers():
        if provider.id == wanted:
            return provider
    raise ValueError(f"Unknown provider: {provider_id}")


def provider_extract_root(provider: Provider) -> Path:
    """Return the directory a provider's archive is extracted into."""
    return provider_dir(provider.id) / "extracted"


def find_shapefile(root: str | os.PathLike[str], provider: Provider) -> Path | None:
    """Return the first shapefile under ``root`` matching the provider's rules."""
    root = Path(root)
    if not root.exists():
        return None
    for entry in sorted(root.rglob("*")):
        if not entry.is_file() or entry.suffix.lower() != ".shp":
            continue
        name = entry.name.lower()
        if provider.explicit_shp:
            if name == provider.explicit_shp.lower():
                return entry
            continue
        if any(pattern.lower() in name for pattern in provider.shp_name_contains):
            return entry
    return None


def provider_installed(provider: Provider) -> bool:
    """Return True if the provider's shapefile has been extracted."""
    if provider.id == "auto":
        return False
    return find_shapefile(provider_extract_root(provider), provider) is not None


def provider_shapefile_path(provider: Provider) -> Path:
    """Return the path of the provider's shapefile, or raise if not installed."""
    if provider.id == "auto":
        raise ValueError("auto has no direct shapefile")
    shapefile = find_shapefile(provider_extract_root(provider), provider)
    if shapefile is None:
        raise FileNotFoundError(
            f"Provider not installed or shapefile not found: {provider.id}\n"
            f"Run: dist2land setup --provider {provider.id}"
        )
    return shapefile


def best_available_provider_id() -> str | None:
    """Return the first installed provider in configuration order, if any."""
    for provider in all_providers():
        if provider_installed(provider):
            return provider.id
    return None