# -*- coding: utf-8 -*-
"""Samples raster band values at point locations and attaches them to vector features.

Output rows follow the input points one to one: the Nth row belongs to the Nth point.
"""

import logging

import numpy as np
import pandas as pd
import rasterio.transform

from .layer import Layer, same_crs

logger = logging.getLogger(__name__)


def extract_values(raster_layer, points_layer, bands=None):
    """Sample raster values at the locations of point features.

    Parameters:
    -----------
    raster_layer : Layer
        Raster layer to sample
    points_layer : Layer
        Layer whose objects are point features
    bands : list of str, optional
        Bands to sample. If None, all bands are sampled.

    Returns:
    --------
    values : pandas.DataFrame
        One row per point (same index and order as the points), one column per band.
        Points outside the raster or on nodata cells get NaN.
    """
    if raster_layer.raster is None:
        raise ValueError(f"Layer '{raster_layer.name}' has no raster data")
    if points_layer.objects is None:
        raise ValueError(f"Layer '{points_layer.name}' has no vector objects")

    bands = list(raster_layer.band_names) if bands is None else ([bands] if isinstance(bands, str) else list(bands))
    for band in bands:
        if band not in raster_layer.band_names:
            raise ValueError(f"Band '{band}' not found in layer '{raster_layer.name}'")

    points = points_layer.objects
    geom_types = set(points.geom_type.dropna().unique())
    if geom_types - {"Point"}:
        raise ValueError(f"Extraction needs point geometries, got {sorted(geom_types)}")

    if points.crs is not None and raster_layer.crs is not None and not same_crs(points.crs, raster_layer.crs):
        logger.info(f"Reprojecting points from {points.crs} to {raster_layer.crs} for sampling")
        points = points.to_crs(raster_layer.crs)

    values = np.full((len(points), len(bands)), np.nan, dtype=np.float64)

    if len(points) > 0:
        xs = points.geometry.x.to_numpy()
        ys = points.geometry.y.to_numpy()
        valid = ~(np.isnan(xs) | np.isnan(ys))

        rows = np.full(len(points), -1, dtype=np.int64)
        cols = np.full(len(points), -1, dtype=np.int64)
        if valid.any():
            r, c = rasterio.transform.rowcol(raster_layer.transform, xs[valid], ys[valid])
            rows[valid] = np.asarray(r, dtype=np.int64)
            cols[valid] = np.asarray(c, dtype=np.int64)

        height, width = raster_layer.shape
        inside = valid & (rows >= 0) & (rows < height) & (cols >= 0) & (cols < width)
        if not inside.all():
            logger.warning(f"{int((~inside).sum())} of {len(points)} points fall outside '{raster_layer.name}'")

        indices = [raster_layer.band_names.index(band) for band in bands]
        sampled = raster_layer.raster[indices][:, rows[inside], cols[inside]].T.astype(np.float64)

        if raster_layer.nodata is not None and not np.isnan(raster_layer.nodata):
            sampled[sampled == raster_layer.nodata] = np.nan

        values[inside] = sampled

    return pd.DataFrame(values, columns=bands, index=points_layer.objects.index)


def attach_raster_values(
    points_layer,
    raster_layer,
    bands=None,
    prefix=None,
    overwrite=False,
    layer_manager=None,
    layer_name=None,
):
    """Extract raster values at points and append them as attribute columns.

    Parameters:
    -----------
    points_layer : Layer
        Layer whose objects are point features
    raster_layer : Layer
        Raster layer to sample
    bands : list of str, optional
        Bands to sample. If None, all bands are sampled.
    prefix : str, optional
        Prefix for the new column names
    overwrite : bool
        Replace existing columns with the same name instead of raising
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Joined layer: the input features plus one column per sampled band
    """
    values = extract_values(raster_layer, points_layer, bands=bands)
    if prefix:
        values = values.add_prefix(f"{prefix}_")

    objects = points_layer.objects.copy()
    clashes = [column for column in values.columns if column in objects.columns]
    if clashes and not overwrite:
        raise ValueError(f"Columns {clashes} already exist in layer '{points_layer.name}'")

    for column in values.columns:
        objects[column] = values[column]

    result_layer = Layer(name=layer_name or f"{points_layer.name}_joined", parent=points_layer, type="joined")
    result_layer.objects = objects
    result_layer.crs = objects.crs
    result_layer.metadata = {
        "operation": "extract",
        "raster": raster_layer.name,
        "columns": list(values.columns),
    }

    logger.info(f"Attached {len(values.columns)} raster columns to {len(objects)} features")

    if layer_manager is not None:
        layer_manager.add_layer(result_layer)

    return result_layer
