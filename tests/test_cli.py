import json
import struct
from pathlib import Path

import pytest

from dist2land.cli import (
    format_json_result,
    format_text_result,
    json_escape,
    main,
    usage_text,
)
from dist2land.distance import DistanceQueryResult
from dist2land.providers import provider_by_id, provider_extract_root

INI = """\
[osm]
display_name = Test land
url_zip = https://example.com/land.zip
license_hint = test data
shp_name_contains = land_polygons
"""


def _write_square_shp(path: Path) -> None:
    ring = [(0.0, 0.0), (0.0, 1.0), (1.0, 1.0), (1.0, 0.0), (0.0, 0.0)]
    content = (
        struct.pack("<i4d2i", 5, 0.0, 0.0, 1.0, 1.0, 1, len(ring))
        + struct.pack("<i", 0)
        + b"".join(struct.pack("<2d", *p) for p in ring)
    )
    record = struct.pack(">2i", 1, len(content) // 2) + content
    header = struct.pack(">7i", 9994, 0, 0, 0, 0, 0, (100 + len(record)) // 2)
    header += struct.pack("<2i4d4d", 1000, 5, 0.0, 0.0, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(header + record)


@pytest.fixture
def config_only(tmp_path, monkeypatch):
    ini = tmp_path / "providers.ini"
    ini.write_text(INI, encoding="utf-8")
    monkeypatch.setenv("DIST2LAND_PROVIDERS", str(ini))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "local"))
    return tmp_path


@pytest.fixture
def installed(config_only):
    root = provider_extract_root(provider_by_id("osm"))
    shp = root / "data" / "land_polygons.shp"
    _write_square_shp(shp)
    return shp


def _result(**overrides):
    values = dict(
        provider_id="osm",
        shp_path=Path("land.shp"),
        geodesic_m=1234.5,
        land_lat_deg=1.0,
        land_lon_deg=2.0,
        in_land=False,
    )
    values.update(overrides)
    return DistanceQueryResult(**values)


def test_json_escape_specials():
    assert json_escape('a"b') == 'a\\"b'
    assert json_escape("a\\b") == "a\\\\b"
    assert json_escape("line\nnext\ttab") == "line\\nnext\\ttab"
    assert json_escape("\x01") == "\\u0001"
    assert json_escape("plain") == "plain"


def test_json_escape_roundtrips_through_json():
    text = 'C:\\data\\"x"\n\x02\r'
    assert json.loads('"' + json_escape(text) + '"') == text


def test_format_text_result():
    line = format_text_result(1234.5, "KM", _result())
    assert line == "1234.500 km 1.00000000 2.00000000"


def test_format_json_result_parses():
    doc = json.loads(
        format_json_result(10.0, 20.0, 1.2345, "KM", "chord", _result(in_land=True), 1234.5)
    )
    assert doc["query"] == {"lat_deg": 10.0, "lon_deg": 20.0}
    assert doc["result"]["distance"] == 1.234 or doc["result"]["distance"] == 1.235
    assert doc["result"]["units"] == "km"
    assert doc["result"]["metric"] == "chord"
    assert doc["result"]["provider"] == "osm"
    assert doc["result"]["in_land"] is True
    assert doc["result"]["shp"] == "land.shp"
    assert doc["result"]["geodesic_m"] == 1234.5


def test_help_prints_usage(capsys):
    assert main(["help"]) == 0
    out = capsys.readouterr().out
    assert out == usage_text()
    assert "Commands:" in out


def test_no_arguments_prints_usage(capsys):
    assert main([]) == 2
    assert "Commands:" in capsys.readouterr().out


def test_unknown_command(capsys):
    assert main(["frobnicate"]) == 2
    assert "Commands:" in capsys.readouterr().out


def test_setup_requires_provider(capsys):
    assert main(["setup"]) == 1
    assert "Error: setup requires --provider" in capsys.readouterr().err


def test_setup_unknown_provider(config_only, capsys):
    assert main(["setup", "--provider", "xyz"]) == 1
    assert "Unknown provider: xyz" in capsys.readouterr().err


def test_distance_requires_coordinates(capsys):
    assert main(["distance", "--lat", "10"]) == 1
    assert "distance requires --lat and --lon" in capsys.readouterr().err


def test_distance_bad_number(capsys):
    assert main(["distance", "--lat", "abc", "--lon", "0"]) == 1
    assert "Bad number for --lat" in capsys.readouterr().err


@pytest.mark.parametrize(
    "lat, lon, message",
    [
        ("91", "0", "--lat must be in [-90, 90] degrees"),
        ("0", "-181", "--lon must be in [-180, 180] degrees"),
    ],
)
def test_distance_out_of_range(lat, lon, message, capsys):
    assert main(["distance", "--lat", lat, "--lon", lon]) == 1
    assert message in capsys.readouterr().err


def test_distance_without_installed_provider(config_only, capsys):
    assert main(["distance", "--lat", "0", "--lon", "0"]) == 1
    assert "No providers installed" in capsys.readouterr().err


def test_distance_named_provider_not_installed(config_only, capsys):
    assert main(["distance", "--lat", "0", "--lon", "0", "--provider", "OSM"]) == 1
    assert "Provider 'osm' not installed" in capsys.readouterr().err


def test_providers_lists_state(installed, capsys):
    assert main(["providers"]) == 0
    out = capsys.readouterr().out
    assert "  osm  [installed]  Test land" in out


def test_distance_inside_land(installed, capsys):
    assert main(["distance", "--lat", "0.5", "--lon", "0.5", "--provider", "osm"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "0.000 m 0.50000000 0.50000000\n"
    assert "provider=osm" in captured.err
    assert f"shp={installed}" in captured.err


def test_distance_json_inside_land(installed, capsys):
    assert main(["distance", "--lat", "0.5", "--lon", "0.5", "--json"]) == 0
    doc = json.loads(capsys.readouterr().out)
    assert doc["result"]["in_land"] is True
    assert doc["result"]["distance"] == 0.0
    assert doc["result"]["provider"] == "osm"
    assert doc["result"]["metric"] == "geodesic"


def test_distance_outside_land(installed, capsys):
    assert main(["distance", "--lat", "0.5", "--lon", "1.5", "--json"]) == 0
    doc = json.loads(capsys.readouterr().out)["result"]
    assert doc["in_land"] is False
    assert doc["land_lon_deg"] == pytest.approx(1.0, abs=1e-3)
    assert doc["land_lat_deg"] == pytest.approx(0.5, abs=1e-2)
    assert doc["distance"] == pytest.approx(doc["geodesic_m"], abs=1e-3)


def test_distance_units_scale(installed, capsys):
    assert main(["distance", "--lat", "0.5", "--lon", "1.5", "--units", "KM", "--json"]) == 0
    doc = json.loads(capsys.readouterr().out)["result"]
    assert doc["units"] == "km"
    assert doc["distance"] == pytest.approx(doc["distance_m"] / 1000.0, abs=1e-3)


def test_distance_unknown_metric(installed, capsys):
    assert main(["distance", "--lat", "0.5", "--lon", "1.5", "--metric", "taxi"]) == 1
    assert "Unknown --metric: taxi" in capsys.readouterr().err