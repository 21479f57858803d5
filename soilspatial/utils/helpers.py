# -*- coding: utf-8 -*-
"""Sample data generation and raster band summaries used by the walkthrough and its tests."""

import os

import geopandas as gpd
import numpy as np
import pandas as pd
from pyproj import Transformer
from rasterio.transform import from_origin

from ..core.layer import Layer
from ..io.raster import layer_to_raster

SAMPLE_CRS = "EPSG:32633"
SAMPLE_ORIGIN = (500000.0, 4650000.0)
SOIL_TYPES = ["loam", "clay", "sand"]


def _raster_layer(name, data, transform, crs):
    layer = Layer(name=name, type="raster")
    layer.raster = data.reshape(1, *data.shape).astype(np.float32)
    layer.band_names = [name]
    layer.transform = transform
    layer.crs = crs
    layer.nodata = -9999.0
    return layer


def create_sample_data(output_dir=None, n_points=30, seed=42):
    """Create a synthetic soil survey: three single-band covariate rasters on different grids and a table of sample points.

    - elevation: 40 x 50 cells of 30 m in UTM 33N
    - ndvi: 20 x 25 cells of 60 m in UTM 33N, shifted by half a cell
    - precipitation: geographic (EPSG:4326) grid covering the same area

    Parameters:
    -----------
    output_dir : str, optional
        If given, rasters are written as <name>.tif and the points as soil_samples.csv
    n_points : int
        Number of soil sample points
    seed : int
        Random seed

    Returns:
    --------
    sample : dict
        {"rasters": {name: Layer}, "points": Layer, "paths": {name: path}}
    """
    rng = np.random.default_rng(seed)
    x0, y0 = SAMPLE_ORIGIN

    rows, cols = np.mgrid[0:40, 0:50]
    elevation = 200 + 50 * np.sin(cols / 8.0) + 30 * np.cos(rows / 6.0) + 0.5 * rows
    elevation_layer = _raster_layer("elevation", elevation, from_origin(x0, y0, 30, 30), SAMPLE_CRS)

    rows, cols = np.mgrid[0:20, 0:25]
    ndvi = np.clip(0.2 + 0.6 * np.exp(-((rows - 10) ** 2 + (cols - 12) ** 2) / 60.0), -1, 1)
    ndvi += rng.normal(0, 0.02, ndvi.shape)
    ndvi_layer = _raster_layer("ndvi", ndvi, from_origin(x0 + 15, y0 - 15, 60, 60), SAMPLE_CRS)

    to_geographic = Transformer.from_crs(SAMPLE_CRS, "EPSG:4326", always_xy=True)
    west, north = to_geographic.transform(x0 - 100, y0 + 100)
    east, south = to_geographic.transform(x0 + 1600, y0 - 1300)
    resolution = 0.0005
    height = int(np.ceil((north - south) / resolution))
    width = int(np.ceil((east - west) / resolution))
    rows, cols = np.mgrid[0:height, 0:width]
    precipitation = 600 + 4 * cols + 2 * rows
    precipitation_layer = _raster_layer(
        "precipitation", precipitation, from_origin(west, north, resolution, resolution), "EPSG:4326"
    )

    xs = rng.uniform(x0 + 100, x0 + 1400, n_points)
    ys = rng.uniform(y0 - 1100, y0 - 100, n_points)
    samples = pd.DataFrame(
        {
            "site_id": [f"S{i + 1:03d}" for i in range(n_points)],
            "x": xs,
            "y": ys,
            "soil_type": rng.choice(SOIL_TYPES, n_points),
            "organic_carbon": np.round(rng.gamma(2.0, 1.2, n_points), 2),
        }
    )
    points_layer = Layer(name="soil_samples", type="vector")
    points_layer.objects = gpd.GeoDataFrame(samples, geometry=gpd.points_from_xy(xs, ys), crs=SAMPLE_CRS)
    points_layer.crs = points_layer.objects.crs

    rasters = {layer.name: layer for layer in (elevation_layer, ndvi_layer, precipitation_layer)}

    paths = {}
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        for name, layer in rasters.items():
            paths[name] = os.path.join(output_dir, f"{name}.tif")
            layer_to_raster(layer, paths[name])

        paths["soil_samples"] = os.path.join(output_dir, "soil_samples.csv")
        samples.to_csv(paths["soil_samples"], index=False)

    return {"rasters": rasters, "points": points_layer, "paths": paths}


def get_band_statistics(layer):
    """Calculate statistics for each band of a raster layer, ignoring nodata.

    Parameters:
    -----------
    layer : Layer
        Raster layer

    Returns:
    --------
    stats : dict
        Dictionary with band statistics
    """
    if layer.raster is None:
        raise ValueError(f"Layer '{layer.name}' has no raster data")

    stats = {}

    for i, band_name in enumerate(layer.band_names):
        band_data = layer.raster[i].astype(np.float64)
        if layer.nodata is not None and not np.isnan(layer.nodata):
            band_data = np.where(layer.raster[i] == layer.nodata, np.nan, band_data)

        valid = band_data[~np.isnan(band_data)]
        if valid.size == 0:
            stats[band_name] = {"count": 0}
            continue

        stats[band_name] = {
            "count": int(valid.size),
            "min": float(np.min(valid)),
            "max": float(np.max(valid)),
            "mean": float(np.mean(valid)),
            "std": float(np.std(valid)),
            "median": float(np.median(valid)),
        }

    return stats
