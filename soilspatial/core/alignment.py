# -*- coding: utf-8 -*-
"""Reprojection and grid alignment of layers.

Rasters are warped with rasterio.warp, vectors with GeoDataFrame.to_crs. align_raster resamples one raster
onto the exact grid of another, which is what makes two rasters stackable.
"""

import logging

import numpy as np
from rasterio.enums import Resampling
from rasterio.warp import calculate_default_transform, reproject

from ..config import DEFAULT_RESAMPLING
from .layer import Layer, same_crs

logger = logging.getLogger(__name__)


def get_resampling(resampling):
    """Translate a resampling name (e.g. "nearest", "bilinear") into a rasterio Resampling member."""
    if isinstance(resampling, Resampling):
        return resampling

    try:
        return Resampling[resampling]
    except KeyError:
        options = ", ".join(r.name for r in Resampling)
        raise ValueError(f"Unknown resampling method '{resampling}'. Options: {options}") from None


def _warp(source, dst_transform, dst_crs, dst_shape, resampling):
    """Warp every band of ``source`` onto a destination grid. Output is float32 with NaN as nodata."""
    height, width = dst_shape
    destination = np.full((source.count, height, width), np.nan, dtype=np.float32)

    reproject(
        source=source.raster.astype(np.float32, copy=False),
        destination=destination,
        src_transform=source.transform,
        src_crs=source.crs,
        src_nodata=source.nodata,
        dst_transform=dst_transform,
        dst_crs=dst_crs,
        dst_nodata=np.nan,
        resampling=get_resampling(resampling),
    )

    return destination


def reproject_raster(layer, dst_crs, resolution=None, resampling=DEFAULT_RESAMPLING, layer_manager=None, layer_name=None):
    """Reproject a raster layer to another coordinate reference system.

    Parameters:
    -----------
    layer : Layer
        Raster layer to reproject
    dst_crs : str or CRS
        Target coordinate reference system
    resolution : float or tuple, optional
        Target cell size in target CRS units. If None, it is estimated by rasterio.
    resampling : str
        Resampling method name from rasterio.enums.Resampling
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Reprojected raster layer
    """
    if layer.raster is None:
        raise ValueError(f"Layer '{layer.name}' has no raster data")
    if layer.crs is None:
        raise ValueError(f"Layer '{layer.name}' has no CRS; assign one before reprojecting")

    height, width = layer.shape
    dst_transform, dst_width, dst_height = calculate_default_transform(
        layer.crs, dst_crs, width, height, *layer.bounds, resolution=resolution
    )

    logger.info(f"Reprojecting '{layer.name}' from {layer.crs} to {dst_crs} ({dst_height}x{dst_width})")

    result_layer = Layer(name=layer_name or f"{layer.name}_reprojected", parent=layer, type=layer.type)
    result_layer.raster = _warp(layer, dst_transform, dst_crs, (dst_height, dst_width), resampling)
    result_layer.band_names = list(layer.band_names)
    result_layer.transform = dst_transform
    result_layer.crs = dst_crs
    result_layer.nodata = np.nan
    result_layer.metadata = {
        "operation": "reproject",
        "src_crs": str(layer.crs),
        "dst_crs": str(dst_crs),
        "resampling": get_resampling(resampling).name,
    }

    if layer_manager is not None:
        layer_manager.add_layer(result_layer)

    return result_layer


def reproject_vector(layer, dst_crs, layer_manager=None, layer_name=None):
    """Reproject the features of a vector layer.

    Parameters:
    -----------
    layer : Layer
        Vector layer to reproject
    dst_crs : str or CRS
        Target coordinate reference system
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer with features in the target CRS
    """
    if layer.objects is None:
        raise ValueError(f"Layer '{layer.name}' has no vector objects")
    if layer.objects.crs is None:
        raise ValueError(f"Layer '{layer.name}' has no CRS; assign one before reprojecting")

    result_layer = Layer(name=layer_name or f"{layer.name}_reprojected", parent=layer, type=layer.type)
    result_layer.objects = layer.objects.to_crs(dst_crs)
    result_layer.crs = result_layer.objects.crs
    result_layer.metadata = {"operation": "reproject", "src_crs": str(layer.objects.crs), "dst_crs": str(dst_crs)}

    if layer_manager is not None:
        layer_manager.add_layer(result_layer)

    return result_layer


def align_raster(source, target, resampling=DEFAULT_RESAMPLING, layer_manager=None, layer_name=None):
    """Resample a raster onto the grid of another raster.

    Parameters:
    -----------
    source : Layer
        Raster layer whose values are resampled
    target : Layer
        Raster layer providing the grid (CRS, transform, shape)
    resampling : str
        Resampling method name from rasterio.enums.Resampling
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer with the source values on the target grid
    """
    if source.raster is None or target.raster is None:
        raise ValueError("Both source and target layers must have raster data")
    if source.crs is None or target.crs is None:
        raise ValueError("Both source and target layers must have a CRS to be aligned")

    if source.grid_matches(target):
        logger.info(f"'{source.name}' already shares the grid of '{target.name}'")
    else:
        reprojected = "" if same_crs(source.crs, target.crs) else f" (reprojecting {source.crs} -> {target.crs})"
        logger.info(f"Aligning '{source.name}' to '{target.name}' grid {target.shape}{reprojected}")

    result_layer = Layer(name=layer_name or f"{source.name}_aligned", parent=source, type="aligned")
    result_layer.raster = _warp(source, target.transform, target.crs, target.shape, resampling)
    result_layer.band_names = list(source.band_names)
    result_layer.transform = target.transform
    result_layer.crs = target.crs
    result_layer.nodata = np.nan
    result_layer.metadata = {
        "operation": "align",
        "target": target.name,
        "resampling": get_resampling(resampling).name,
    }

    if layer_manager is not None:
        layer_manager.add_layer(result_layer)

    return result_layer
