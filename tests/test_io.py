# -*- coding: utf-8 -*-
"""Tests for loading and writing raster, vector and point-table files."""

import numpy as np
import pandas as pd
import pytest
import rasterio

from soilspatial import (
    layer_to_raster,
    layer_to_vector,
    load_raster_layer,
    load_vector_layer,
    read_points,
    read_raster,
    write_raster,
)
from soilspatial.config import PROJECT_ROOT, resolve_path
from soilspatial.core.layer import same_crs


def test_raster_round_trip_keeps_band_names(tmp_path, raster_factory):
    """Band names are stored as descriptions and picked up again on load."""
    data = np.stack([np.full((10, 10), 1.0), np.full((10, 10), 2.0)]).astype(np.float32)
    layer = raster_factory(data, names=["clay", "sand"], nodata=-9999.0)
    path = tmp_path / "stack.tif"

    layer_to_raster(layer, str(path))
    loaded = load_raster_layer(str(path))

    assert loaded.band_names == ["clay", "sand"]
    assert loaded.nodata == -9999.0
    assert loaded.grid_matches(layer)
    np.testing.assert_array_equal(loaded.raster, data)


def test_single_band_named_after_file(tmp_path, raster_factory):
    """A single band without description takes the file stem as its name."""
    layer = raster_factory()
    path = tmp_path / "elevation.tif"
    write_raster(str(path), layer.raster, layer.transform, layer.crs)

    loaded = load_raster_layer(str(path))

    assert loaded.name == "elevation"
    assert loaded.band_names == ["elevation"]

    data, transform, crs = read_raster(str(path))
    assert data.shape == (1, 10, 10)
    assert transform == layer.transform
    assert crs is not None


def test_missing_crs_is_assigned(tmp_path, raster_factory):
    """A declared CRS is assigned to rasters that lack one."""
    layer = raster_factory()
    path = tmp_path / "nocrs.tif"
    write_raster(str(path), layer.raster, layer.transform, None)

    assert load_raster_layer(str(path)).crs is None
    assigned = load_raster_layer(str(path), crs="EPSG:32633")
    assert same_crs(assigned.crs, "EPSG:32633")

    with pytest.raises(ValueError):
        load_raster_layer(str(path), target_crs="EPSG:4326")


def test_raster_reprojected_on_load(tmp_path, raster_factory):
    """A differing target CRS triggers reprojection."""
    layer = raster_factory()
    path = tmp_path / "utm.tif"
    layer_to_raster(layer, str(path))

    loaded = load_raster_layer(str(path), target_crs="EPSG:4326")

    assert same_crs(loaded.crs, "EPSG:4326")
    assert loaded.band_names == ["raster"]
    assert np.isfinite(loaded.raster).any()


def test_missing_raster_file_raises(tmp_path):
    """Missing files surface rasterio's error."""
    with pytest.raises(rasterio.errors.RasterioIOError):
        load_raster_layer(str(tmp_path / "missing.tif"))


def test_read_points_from_table(tmp_path):
    """Delimited tables with coordinate columns become point features."""
    path = tmp_path / "samples.csv"
    pd.DataFrame({"site": ["a", "b"], "lon": [10.0, 11.0], "lat": [45.0, 46.0]}).to_csv(path, index=False)

    gdf = read_points(str(path), x="lon", y="lat", crs="EPSG:4326")

    assert list(gdf.geometry.x) == [10.0, 11.0]
    assert list(gdf["site"]) == ["a", "b"]
    assert gdf.crs.to_epsg() == 4326

    with pytest.raises(ValueError):
        read_points(str(path), x="easting", y="northing")


def test_load_vector_layer_from_table(tmp_path):
    """Tables load through load_vector_layer with CRS assignment and reprojection."""
    path = tmp_path / "samples.csv"
    pd.DataFrame({"x": [500015.0, 500095.0], "y": [4649985.0, 4649905.0]}).to_csv(path, index=False)

    layer = load_vector_layer(str(path), crs="EPSG:32633")
    assert layer.type == "vector"
    assert layer.objects.crs.to_epsg() == 32633

    projected = load_vector_layer(str(path), crs="EPSG:32633", target_crs="EPSG:4326")
    assert projected.objects.crs.to_epsg() == 4326
    assert len(projected.objects) == 2

    with pytest.raises(ValueError):
        load_vector_layer(str(path), target_crs="EPSG:4326")


def test_vector_file_round_trip(tmp_path, points_factory):
    """GeoJSON written from a layer loads back with the same features."""
    layer = points_factory([(500015.0, 4649985.0), (500055.0, 4649945.0)], site=["a", "b"])
    path = tmp_path / "points.geojson"

    layer_to_vector(layer, str(path))
    loaded = load_vector_layer(str(path))

    assert list(loaded.objects["site"]) == ["a", "b"]
    assert loaded.objects.crs.to_epsg() == 32633

    with pytest.raises(ValueError):
        layer_to_vector(layer, str(tmp_path / "points.xyz"))


def test_resolve_path():
    """Relative paths resolve against the project root."""
    assert resolve_path("data/a.tif") == PROJECT_ROOT / "data" / "a.tif"
    assert resolve_path("/tmp/a.tif").is_absolute()
