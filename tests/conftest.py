# -*- coding: utf-8 -*-
"""Shared fixtures: small synthetic rasters and point layers built in memory or in tmp_path."""

import matplotlib

matplotlib.use("Agg")

import geopandas as gpd
import matplotlib.pyplot as plt
import numpy as np
import pytest
from rasterio.transform import from_origin

from soilspatial import Layer, create_sample_data

ORIGIN = (500000.0, 4650000.0)
CRS = "EPSG:32633"


@pytest.fixture(autouse=True)
def close_figures():
    """Fixture to close matplotlib figures after each test."""
    yield
    plt.close("all")


@pytest.fixture
def raster_factory():
    """Fixture returning a function that builds raster layers on a 10 m grid anchored at ORIGIN."""

    def make(data=None, names=None, cell_size=10.0, origin=ORIGIN, crs=CRS, nodata=None, name="raster"):
        if data is None:
            data = np.arange(100, dtype=np.float32).reshape(10, 10)
        data = np.asarray(data)
        if data.ndim == 2:
            data = data[np.newaxis]

        layer = Layer(name=name, type="raster")
        layer.raster = data
        if names:
            layer.band_names = list(names)
        elif data.shape[0] == 1:
            layer.band_names = [name]
        else:
            layer.band_names = [f"{name}_{i + 1}" for i in range(data.shape[0])]
        layer.transform = from_origin(origin[0], origin[1], cell_size, cell_size)
        layer.crs = crs
        layer.nodata = nodata
        return layer

    return make


@pytest.fixture
def points_factory():
    """Fixture returning a function that builds point layers from (x, y) pairs."""

    def make(coords, crs=CRS, name="points", **columns):
        xs = [c[0] for c in coords]
        ys = [c[1] for c in coords]
        layer = Layer(name=name, type="vector")
        layer.objects = gpd.GeoDataFrame(dict(columns), geometry=gpd.points_from_xy(xs, ys), crs=crs)
        layer.crs = layer.objects.crs
        return layer

    return make


@pytest.fixture
def cell_centre():
    """Fixture returning the map coordinates of a cell centre of the default test grid."""

    def centre(row, col, cell_size=10.0, origin=ORIGIN):
        return origin[0] + (col + 0.5) * cell_size, origin[1] - (row + 0.5) * cell_size

    return centre


@pytest.fixture
def sample_data(tmp_path):
    """Fixture providing the synthetic walkthrough dataset written to tmp_path."""
    return create_sample_data(output_dir=str(tmp_path / "data"))
