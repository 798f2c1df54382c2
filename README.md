# dist2land

Compute the distance from a point (typically at sea) to the nearest land,
using land-polygon shapefiles that are downloaded once and cached locally.

## Installation

```
pip install dist2land
```

The only runtime dependency is `shapely`.

## Providers

Datasets ("providers") are described in a `providers.ini` file. No such file
is installed with the package; you supply it. It is looked up in this order,
and the first one that exists is used:

1. the path in the `DIST2LAND_PROVIDERS` environment variable;
2. `providers.ini` inside the installed `dist2land` package directory;
3. `<sys.prefix>/share/dist2land/providers.ini`;
4. `/usr/local/share/dist2land/providers.ini` (not on Windows);
5. `/usr/share/dist2land/providers.ini` (not on Windows).

Each section describes one provider:

```ini
# comments start with # or ;
[osm]
display_name = Land polygons
url_zip = https://download.example.com/land-polygons.zip
license_hint = Check the dataset's licence before redistribution.
shp_name_contains = land_polygons
```

`display_name`, `url_zip` and `license_hint` are required, as is either
`shp_name_contains` (a comma-separated list of substrings matched against
`.shp` file names, case-insensitively) or `explicit_shp` (an exact file name,
also case-insensitive). Section ids are lower-cased; unknown keys are
ignored. A line that is not `key=value`, or a key outside a section, is an
error. The order of sections is the preference order used by
`--provider auto`.

Downloaded archives and extracted data are cached under
`$XDG_CACHE_HOME/dist2land` (or `~/.cache/dist2land`;
`~/Library/Caches/dist2land` on macOS; `%LOCALAPPDATA%\dist2land` on
Windows). Archives go to `downloads/<id>.zip` and are extracted to
`providers/<id>/extracted/`.

## Usage

List providers and whether they are installed:

```
dist2land providers
```

Download and extract a dataset (the extraction directory is cleared first):

```
dist2land setup --provider osm
dist2land setup --provider all
```

Query a distance:

```
dist2land distance --lat 36.84 --lon -122.42 --provider auto
dist2land distance --lat 0 --lon -30 --metric rhumb --units nm
dist2land distance --lat 36.84 --lon -122.42 --json
```

Options for `distance`:

- `--lat`, `--lon` — required, in degrees; latitude in [-90, 90], longitude
  in [-180, 180];
- `--provider auto|<id>` — dataset to use (default `auto`: the first
  installed provider in config order);
- `--units m|km|nm` — output units (default `m`);
- `--metric geodesic|chord|rhumb` — how to measure the distance to the
  nearest land point, which is always found by geodesic search (default
  `geodesic`). `chord` is the straight-line distance through the WGS84
  ellipsoid; `rhumb` is a rhumb line on the mean-radius sphere;
- `--json` — emit a JSON object instead of plain text.

Plain output is:

```
<distance> <units> <land_lat_deg> <land_lon_deg>
```

If the point lies on land, the distance is 0 and the reported land point is
the query point itself. A trace line with the provider, metric, shapefile
path and geodesic distance is written to standard error.

Errors are printed as `Error: ...` on standard error with exit status 1;
running without a command or with an unknown one prints the usage text and
exits with status 2. Run `dist2land help` for the full usage text.

## How the search works

The query point is the centre of an azimuthal equidistant projection on
WGS84 (`dist2land.geodesy.AzimuthalEquidistant`), so distances measured in
the projection are geodesic distances from the query. Land geometries are
read from the shapefile (`dist2land.shapefile.ShapefileReader`) within a
latitude/longitude window starting at a 10 km radius and doubling up to
20,000 km, split in two where it crosses the antimeridian. The search stops
once the point is found inside a polygon or the nearest boundary point lies
within 1.2 times the current radius.

## Library use

```python
from dist2land.providers import provider_by_id, provider_shapefile_path
from dist2land.distance import distance_query_geodesic
from dist2land.metrics import convert_units

provider = provider_by_id("osm")
result = distance_query_geodesic(36.84, -122.42, provider.id, provider_shapefile_path(provider))
print(convert_units(result.geodesic_m, "km"), result.land_lat_deg, result.land_lon_deg, result.in_land)
```

Other useful pieces: `dist2land.geodesy.geodesic_inverse` and
`geodesic_direct`, `dist2land.metrics.chord_distance_wgs84_m` and
`rhumb_distance_sphere_m`, `dist2land.download.http_download_to` and
`dist2land.archive.extract_zip`.

## Limitations

- No `providers.ini` and no dataset ship with the package; both must be
  provided before `setup` or `distance` can work.
- Shapefiles are read sequentially from the `.shp` file alone. Records whose
  bounding boxes fall outside the search window are skipped, but spatial
  index files (`.qix`, `.sbn`) are not used, so queries on large datasets
  are slow. Attribute (`.dbf`) and projection (`.prj`) files are ignored;
  coordinates are taken to be longitude/latitude on WGS84.
- `setup` only extracts ZIP archives.