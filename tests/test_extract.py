# -*- coding: utf-8 -*-
"""Tests for sampling raster values at points."""

import geopandas as gpd
import numpy as np
import pytest
from shapely.geometry import Polygon

from soilspatial import LayerManager, attach_raster_values, extract_values, reproject_vector, stack_layers


@pytest.fixture
def stack(raster_factory):
    """Fixture providing a two-band stack where band b is ten times band a."""
    a = raster_factory(np.arange(100, dtype=np.float64).reshape(10, 10), name="a")
    b = raster_factory(np.arange(100, dtype=np.float64).reshape(10, 10) * 10, name="b")
    return stack_layers([a, b])


def test_values_match_cells(stack, points_factory, cell_centre):
    """Each point takes the values of the cell that contains it."""
    points = points_factory([cell_centre(1, 1), cell_centre(9, 0), cell_centre(0, 9)])

    values = extract_values(stack, points)

    assert list(values.columns) == ["a", "b"]
    assert list(values["a"]) == [11.0, 90.0, 9.0]
    assert list(values["b"]) == [110.0, 900.0, 90.0]


def test_order_and_count_preserved(stack, points_factory, cell_centre):
    """The Nth row belongs to the Nth point, whatever the point order."""
    rng = np.random.default_rng(3)
    cells = [(int(r), int(c)) for r, c in rng.integers(0, 10, size=(25, 2))]
    points = points_factory([cell_centre(r, c) for r, c in cells])
    points.objects.index = [f"p{i}" for i in range(len(cells))]

    values = extract_values(stack, points, bands=["a"])

    assert len(values) == len(cells)
    assert list(values.index) == list(points.objects.index)
    assert list(values["a"]) == [float(r * 10 + c) for r, c in cells]


def test_outside_points_and_nodata_are_nan(raster_factory, points_factory, cell_centre):
    """Points off the grid and nodata cells give NaN."""
    data = np.arange(100, dtype=np.float32).reshape(10, 10)
    data[2, 2] = -9999.0
    layer = raster_factory(data, nodata=-9999.0)
    points = points_factory([cell_centre(2, 2), (0.0, 0.0), cell_centre(3, 3)])

    values = extract_values(layer, points)

    assert np.isnan(values.iloc[0, 0])
    assert np.isnan(values.iloc[1, 0])
    assert values.iloc[2, 0] == 33.0


def test_points_in_other_crs(stack, points_factory, cell_centre):
    """Points are reprojected to the raster CRS before sampling."""
    points = reproject_vector(points_factory([cell_centre(4, 5), cell_centre(7, 2)]), "EPSG:4326")

    values = extract_values(stack, points)

    assert list(values["a"]) == [45.0, 72.0]


def test_non_point_geometries_rejected(stack):
    """Extraction is defined for points only."""
    polygons = stack.copy()
    polygons.objects = gpd.GeoDataFrame(
        geometry=[Polygon([(500000, 4649900), (500050, 4649900), (500050, 4649950)])], crs="EPSG:32633"
    )

    with pytest.raises(ValueError):
        extract_values(stack, polygons)


def test_unknown_band(stack, points_factory, cell_centre):
    """Unknown bands are rejected."""
    with pytest.raises(ValueError):
        extract_values(stack, points_factory([cell_centre(0, 0)]), bands=["c"])


def test_attach_returns_joined_layer(stack, points_factory, cell_centre):
    """Values are appended to a new joined layer; the input is left alone."""
    manager = LayerManager()
    points = points_factory([cell_centre(0, 1), cell_centre(5, 5)], site=["s1", "s2"])

    joined = attach_raster_values(points, stack, prefix="cov", layer_manager=manager, layer_name="joined")

    assert joined.type == "joined"
    assert list(joined.objects.columns) == ["site", "geometry", "cov_a", "cov_b"]
    assert list(joined.objects["cov_a"]) == [1.0, 55.0]
    assert list(joined.objects["site"]) == ["s1", "s2"]
    assert "cov_a" not in points.objects.columns
    assert manager.get_layer_names() == ["joined"]


def test_attach_column_clash(stack, points_factory, cell_centre):
    """Existing columns are only replaced on request."""
    points = points_factory([cell_centre(0, 1)], a=[-1.0])

    with pytest.raises(ValueError):
        attach_raster_values(points, stack)

    joined = attach_raster_values(points, stack, overwrite=True)
    assert joined.objects["a"].iloc[0] == 1.0
