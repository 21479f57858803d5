# -*- coding: utf-8 -*-
"""Handles raster input and output operations, including reading multi-band grids into layers and saving them back.

Loading can assign a coordinate reference system to files that lack one, or reproject to a target system.
"""

import logging
import os
from pathlib import Path

import rasterio

from ..config import DEFAULT_RESAMPLING, resolve_path
from ..core.alignment import reproject_raster
from ..core.layer import Layer, same_crs

logger = logging.getLogger(__name__)


def read_raster(raster_path):
    """Read a raster file and return its data, transform, and CRS.

    Parameters:
    -----------
    raster_path : str
        Path to the raster file

    Returns:
    --------
    image_data : numpy.ndarray
        Array with raster data values
    transform : affine.Affine
        Affine transformation for the raster
    crs : rasterio.crs.CRS
        Coordinate reference system
    """
    with rasterio.open(resolve_path(raster_path)) as src:
        image_data = src.read()
        transform = src.transform
        crs = src.crs

    return image_data, transform, crs


def write_raster(output_path, data, transform, crs, nodata=None, band_names=None):
    """Write raster data to a GeoTIFF file.

    Parameters:
    -----------
    output_path : str
        Path to the output raster file
    data : numpy.ndarray
        Array with raster data values
    transform : affine.Affine
        Affine transformation for the raster
    crs : rasterio.crs.CRS
        Coordinate reference system
    nodata : int or float, optional
        No data value
    band_names : list of str, optional
        Stored as band descriptions
    """
    output_path = resolve_path(output_path)
    os.makedirs(output_path.parent, exist_ok=True)

    if len(data.shape) == 2:
        data = data.reshape(1, *data.shape)

    height, width = data.shape[-2], data.shape[-1]
    count = data.shape[0]

    with rasterio.open(
        output_path,
        "w",
        driver="GTiff",
        height=height,
        width=width,
        count=count,
        dtype=data.dtype,
        crs=crs,
        transform=transform,
        nodata=nodata,
    ) as dst:
        dst.write(data)
        if band_names:
            for i, band_name in enumerate(band_names, start=1):
                dst.set_band_description(i, band_name)


def _band_names(descriptions, stem, count):
    if descriptions and all(descriptions) and len(set(descriptions)) == len(descriptions):
        return list(descriptions)
    if count == 1:
        return [stem]
    return [f"{stem}_{i + 1}" for i in range(count)]


def load_raster_layer(
    raster_path,
    crs=None,
    target_crs=None,
    band_names=None,
    name=None,
    resolution=None,
    resampling=DEFAULT_RESAMPLING,
    layer_manager=None,
):
    """Read a raster file into a Layer, assigning or reprojecting its CRS.

    Parameters:
    -----------
    raster_path : str
        Path to the raster file, relative paths resolve against the project root
    crs : str or CRS, optional
        CRS to assign when the file does not declare one
    target_crs : str or CRS, optional
        CRS to reproject to when it differs from the source
    band_names : list of str, optional
        Band names. Defaults to the band descriptions, else the file name.
    name : str, optional
        Layer name. Defaults to the file stem.
    resolution : float, optional
        Cell size used when reprojecting
    resampling : str
        Resampling method used when reprojecting
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to

    Returns:
    --------
    layer : Layer
        Raster layer
    """
    raster_path = resolve_path(raster_path)
    stem = Path(raster_path).stem

    with rasterio.open(raster_path) as src:
        data = src.read()
        transform = src.transform
        source_crs = src.crs
        nodata = src.nodata
        descriptions = src.descriptions

    if band_names is None:
        band_names = _band_names(descriptions, stem, data.shape[0])
    elif len(band_names) != data.shape[0]:
        raise ValueError(f"Expected {data.shape[0]} band names for {raster_path}, got {len(band_names)}")

    layer = Layer(name=name or stem, type="raster")
    layer.raster = data
    layer.band_names = list(band_names)
    layer.transform = transform
    layer.nodata = nodata
    layer.metadata = {"source": str(raster_path)}

    if source_crs is None:
        if crs is not None:
            logger.info(f"Assigning CRS {crs} to '{layer.name}'")
        else:
            logger.warning(f"Raster {raster_path} has no CRS")
        layer.crs = crs
    else:
        layer.crs = source_crs

    logger.info(f"Loaded raster '{layer.name}' {data.shape} bands={layer.band_names} crs={layer.crs}")

    if target_crs is not None and not same_crs(layer.crs, target_crs):
        if layer.crs is None:
            raise ValueError(f"Cannot reproject '{layer.name}' to {target_crs}: the raster has no CRS")
        projected = reproject_raster(layer, target_crs, resolution=resolution, resampling=resampling, layer_name=layer.name)
        projected.type = "raster"
        projected.parent = None
        projected.metadata.update(layer.metadata)
        layer = projected

    if layer_manager is not None:
        layer_manager.add_layer(layer)

    return layer


def layer_to_raster(layer, output_path, nodata=None):
    """Save a raster layer to a GeoTIFF file.

    Parameters:
    -----------
    layer : Layer
        Layer to save
    output_path : str
        Path to the output raster file
    nodata : int or float, optional
        No data value. Defaults to the layer's own.
    """
    if layer.raster is None:
        raise ValueError("Layer must have raster data")

    write_raster(
        output_path,
        layer.raster,
        layer.transform,
        layer.crs,
        nodata=layer.nodata if nodata is None else nodata,
        band_names=layer.band_names,
    )
