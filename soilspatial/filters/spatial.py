# -*- coding: utf-8 -*-
"""Implements spatial subsetting of layers: cropping rasters to an extent, masking them with polygons, and filtering cells or features by a predicate.

Cropping keeps whole cells, so a cropped raster stays aligned with its parent grid. Predicate filters operate on
tables: raster cells are first flattened into one row per cell with x/y cell-centre coordinates.
"""

import logging
import math

import numpy as np
import pandas as pd
import rasterio.features
import rasterio.transform
import rasterio.windows
from rasterio.windows import Window
from shapely.geometry import box

from ..core.layer import Layer, same_crs

logger = logging.getLogger(__name__)


def _extent_bounds(extent, crs):
    """Return (minx, miny, maxx, maxy) for a bounds tuple or a vector layer, in ``crs``."""
    if isinstance(extent, Layer):
        if extent.objects is None:
            return extent.bounds
        objects = extent.objects
        if crs is not None and objects.crs is not None and not same_crs(objects.crs, crs):
            objects = objects.to_crs(crs)
        return tuple(float(v) for v in objects.total_bounds)

    if len(extent) != 4:
        raise ValueError(f"Extent must be (minx, miny, maxx, maxy), got {extent}")
    return tuple(float(v) for v in extent)


def _nan_raster(layer):
    """Float copy of the raster with nodata cells set to NaN."""
    data = layer.raster.astype(np.float64)
    if layer.nodata is not None and not np.isnan(layer.nodata):
        data[layer.raster == layer.nodata] = np.nan
    return data


def crop_raster(layer, extent, layer_manager=None, layer_name=None):
    """Crop a raster layer to an extent.

    Parameters:
    -----------
    layer : Layer
        Raster layer to crop
    extent : tuple or Layer
        (minx, miny, maxx, maxy) in the raster CRS, or a vector layer whose bounds are used
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer covering the smallest block of whole cells that contains the extent
    """
    if layer.raster is None:
        raise ValueError(f"Layer '{layer.name}' has no raster data")

    minx, miny, maxx, maxy = _extent_bounds(extent, layer.crs)
    window = rasterio.windows.from_bounds(minx, miny, maxx, maxy, transform=layer.transform)

    # Snap outwards to whole cells
    col_start = math.floor(round(window.col_off, 6))
    row_start = math.floor(round(window.row_off, 6))
    col_stop = math.ceil(round(window.col_off + window.width, 6))
    row_stop = math.ceil(round(window.row_off + window.height, 6))

    height, width = layer.shape
    col_start, col_stop = max(col_start, 0), min(col_stop, width)
    row_start, row_stop = max(row_start, 0), min(row_stop, height)

    if col_start >= col_stop or row_start >= row_stop:
        raise ValueError(f"Extent {(minx, miny, maxx, maxy)} does not overlap layer '{layer.name}' {layer.bounds}")

    window = Window(col_start, row_start, col_stop - col_start, row_stop - row_start)
    row_slice, col_slice = window.toslices()

    result_layer = Layer(name=layer_name or f"{layer.name}_cropped", parent=layer, type="filter")
    result_layer.raster = layer.raster[:, row_slice, col_slice].copy()
    result_layer.band_names = list(layer.band_names)
    result_layer.transform = rasterio.windows.transform(window, layer.transform)
    result_layer.crs = layer.crs
    result_layer.nodata = layer.nodata
    result_layer.metadata = {"filter_type": "crop", "extent": (minx, miny, maxx, maxy)}

    logger.info(f"Cropped '{layer.name}' from {layer.shape} to {result_layer.shape}")

    if layer_manager is not None:
        layer_manager.add_layer(result_layer)

    return result_layer


def mask_raster(layer, vector_layer, invert=False, all_touched=False, layer_manager=None, layer_name=None):
    """Set raster cells outside (or inside, when inverted) the polygons of a vector layer to NaN.

    Parameters:
    -----------
    layer : Layer
        Raster layer to mask
    vector_layer : Layer
        Layer whose polygon features define the mask
    invert : bool
        If True, cells inside the polygons are masked instead
    all_touched : bool
        If True, every cell touched by a polygon counts as inside

    Returns:
    --------
    result_layer : Layer
        Float layer with masked cells set to NaN
    """
    if layer.raster is None:
        raise ValueError(f"Layer '{layer.name}' has no raster data")
    if vector_layer.objects is None:
        raise ValueError(f"Layer '{vector_layer.name}' has no vector objects")

    objects = vector_layer.objects
    if layer.crs is not None and objects.crs is not None and not same_crs(objects.crs, layer.crs):
        objects = objects.to_crs(layer.crs)

    geometries = [geom for geom in objects.geometry if geom is not None and not geom.is_empty]
    if not geometries:
        raise ValueError(f"Layer '{vector_layer.name}' has no geometries to mask with")

    # True where the cell lies outside every polygon
    outside = rasterio.features.geometry_mask(
        geometries, out_shape=layer.shape, transform=layer.transform, all_touched=all_touched
    )
    drop = ~outside if invert else outside

    data = _nan_raster(layer)
    data[:, drop] = np.nan

    result_layer = Layer(name=layer_name or f"{layer.name}_masked", parent=layer, type="filter")
    result_layer.raster = data
    result_layer.band_names = list(layer.band_names)
    result_layer.transform = layer.transform
    result_layer.crs = layer.crs
    result_layer.nodata = np.nan
    result_layer.metadata = {"filter_type": "mask", "mask_layer": vector_layer.name, "invert": invert}

    if layer_manager is not None:
        layer_manager.add_layer(result_layer)

    return result_layer


def raster_to_frame(layer, dropna=True):
    """Flatten a raster layer into a table with one row per cell.

    Parameters:
    -----------
    layer : Layer
        Raster layer
    dropna : bool
        Drop cells where every band is nodata

    Returns:
    --------
    frame : pandas.DataFrame
        Columns "x", "y" (cell centres) followed by one column per band, rows in row-major cell order
    """
    if layer.raster is None:
        raise ValueError(f"Layer '{layer.name}' has no raster data")

    height, width = layer.shape
    rows, cols = np.meshgrid(np.arange(height), np.arange(width), indexing="ij")
    xs, ys = rasterio.transform.xy(layer.transform, rows.ravel(), cols.ravel(), offset="center")

    frame = pd.DataFrame({"x": np.asarray(xs, dtype=np.float64), "y": np.asarray(ys, dtype=np.float64)})
    data = _nan_raster(layer)
    for i, band in enumerate(layer.band_names):
        frame[band] = data[i].ravel()

    if dropna and layer.band_names:
        frame = frame.dropna(subset=layer.band_names, how="all")

    return frame


def filter_cells(layer, predicate, dropna=True):
    """Select raster cells that satisfy a predicate.

    Parameters:
    -----------
    layer : Layer
        Raster layer
    predicate : callable
        Receives the cell table from raster_to_frame and returns a boolean mask, e.g. ``lambda df: df.x > 500``
    dropna : bool
        Ignore cells where every band is nodata

    Returns:
    --------
    cells : pandas.DataFrame
        The rows of raster_to_frame(layer) for which the predicate holds
    """
    frame = raster_to_frame(layer, dropna=dropna)
    mask = np.asarray(predicate(frame), dtype=bool)
    if mask.shape != (len(frame),):
        raise ValueError(f"Predicate must return one boolean per cell, got shape {mask.shape}")

    cells = frame[mask]
    logger.info(f"Kept {len(cells)} of {len(frame)} cells of '{layer.name}'")
    return cells


def filter_features(layer, predicate, layer_manager=None, layer_name=None):
    """Select the features of a vector layer that satisfy a predicate.

    Parameters:
    -----------
    layer : Layer
        Vector layer
    predicate : callable
        Receives the GeoDataFrame and returns a boolean mask, e.g. ``lambda gdf: gdf.geometry.x > 500``

    Returns:
    --------
    result_layer : Layer
        Layer with the matching features, in their original order
    """
    if layer.objects is None:
        raise ValueError(f"Layer '{layer.name}' has no vector objects")

    mask = np.asarray(predicate(layer.objects), dtype=bool)
    if mask.shape != (len(layer.objects),):
        raise ValueError(f"Predicate must return one boolean per feature, got shape {mask.shape}")

    result_layer = Layer(name=layer_name or f"{layer.name}_filtered", parent=layer, type="filter")
    result_layer.objects = layer.objects[mask].copy()
    result_layer.crs = layer.objects.crs
    result_layer.metadata = {"filter_type": "predicate", "kept": int(mask.sum()), "total": len(mask)}

    if layer_manager is not None:
        layer_manager.add_layer(result_layer)

    return result_layer


def crop_vector(layer, extent, layer_manager=None, layer_name=None):
    """Keep the features of a vector layer that intersect an extent.

    Parameters:
    -----------
    layer : Layer
        Vector layer
    extent : tuple or Layer
        (minx, miny, maxx, maxy) in the layer CRS, or another layer whose bounds are used

    Returns:
    --------
    result_layer : Layer
        Layer with the intersecting features
    """
    if layer.objects is None:
        raise ValueError(f"Layer '{layer.name}' has no vector objects")

    clip_box = box(*_extent_bounds(extent, layer.objects.crs))

    return filter_features(
        layer,
        lambda gdf: gdf.geometry.intersects(clip_box),
        layer_manager=layer_manager,
        layer_name=layer_name or f"{layer.name}_cropped",
    )
