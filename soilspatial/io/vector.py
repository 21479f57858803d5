# -*- coding: utf-8 -*-
"""Manages vector data I/O, supporting formats like Shapefile, GeoJSON, GeoPackage and delimited point tables.

Loading can assign a coordinate reference system to sources that lack one, or reproject to a target system.
"""

import logging
import os
from pathlib import Path

import geopandas as gpd
import pandas as pd

from ..config import resolve_path
from ..core.alignment import reproject_vector
from ..core.layer import Layer, same_crs

logger = logging.getLogger(__name__)

TABULAR_EXTENSIONS = {".csv": ",", ".tsv": "\t", ".txt": None}

VECTOR_DRIVERS = {
    ".shp": "ESRI Shapefile",
    ".geojson": "GeoJSON",
    ".json": "GeoJSON",
    ".gpkg": "GPKG",
}


def read_vector(vector_path):
    """Read a vector file into a GeoDataFrame.

    Parameters:
    -----------
    vector_path : str
        Path to the vector file

    Returns:
    --------
    gdf : geopandas.GeoDataFrame
        GeoDataFrame with vector data
    """
    return gpd.read_file(resolve_path(vector_path))


def read_points(table_path, x="x", y="y", crs=None, sep=","):
    """Read a delimited table with coordinate columns into a point GeoDataFrame.

    Parameters:
    -----------
    table_path : str
        Path to the table
    x, y : str
        Names of the coordinate columns
    crs : str or CRS, optional
        CRS of the coordinates
    sep : str, optional
        Field delimiter. None lets pandas sniff it.

    Returns:
    --------
    gdf : geopandas.GeoDataFrame
        Points with all table columns as attributes
    """
    if sep is None:
        table = pd.read_csv(resolve_path(table_path), sep=None, engine="python")
    else:
        table = pd.read_csv(resolve_path(table_path), sep=sep)

    missing = [column for column in (x, y) if column not in table.columns]
    if missing:
        raise ValueError(f"Coordinate columns {missing} not found in {table_path} (columns: {list(table.columns)})")

    return gpd.GeoDataFrame(table, geometry=gpd.points_from_xy(table[x], table[y]), crs=crs)


def load_vector_layer(
    vector_path,
    crs=None,
    target_crs=None,
    name=None,
    x="x",
    y="y",
    sep=None,
    layer_manager=None,
):
    """Read a vector file or a point table into a Layer, assigning or reprojecting its CRS.

    Parameters:
    -----------
    vector_path : str
        Path to a vector file or a .csv/.tsv/.txt table with coordinate columns
    crs : str or CRS, optional
        CRS to assign when the source does not declare one
    target_crs : str or CRS, optional
        CRS to reproject to when it differs from the source
    name : str, optional
        Layer name. Defaults to the file stem.
    x, y : str
        Coordinate columns for tables
    sep : str, optional
        Field delimiter for tables. Defaults by extension.
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to

    Returns:
    --------
    layer : Layer
        Vector layer
    """
    vector_path = resolve_path(vector_path)
    extension = vector_path.suffix.lower()

    if extension in TABULAR_EXTENSIONS:
        gdf = read_points(vector_path, x=x, y=y, sep=sep if sep is not None else TABULAR_EXTENSIONS[extension])
    else:
        gdf = read_vector(vector_path)

    if gdf.crs is None:
        if crs is not None:
            logger.info(f"Assigning CRS {crs} to {vector_path.name}")
            gdf = gdf.set_crs(crs)
        else:
            logger.warning(f"Vector source {vector_path} has no CRS")

    layer = Layer(name=name or Path(vector_path).stem, type="vector")
    layer.objects = gdf
    layer.crs = gdf.crs
    layer.metadata = {"source": str(vector_path)}

    logger.info(f"Loaded {len(gdf)} features from {vector_path.name} crs={gdf.crs}")

    if target_crs is not None and not same_crs(gdf.crs, target_crs):
        if gdf.crs is None:
            raise ValueError(f"Cannot reproject '{layer.name}' to {target_crs}: the source has no CRS")
        projected = reproject_vector(layer, target_crs, layer_name=layer.name)
        projected.type = "vector"
        projected.parent = None
        projected.metadata.update(layer.metadata)
        layer = projected

    if layer_manager is not None:
        layer_manager.add_layer(layer)

    return layer


def write_vector(gdf, output_path):
    """Write a GeoDataFrame to a vector file.

    Parameters:
    -----------
    gdf : geopandas.GeoDataFrame
        GeoDataFrame to write
    output_path : str
        Path to the output vector file
    """
    output_path = resolve_path(output_path)
    os.makedirs(output_path.parent, exist_ok=True)
    file_extension = output_path.suffix.lower()

    if file_extension not in VECTOR_DRIVERS:
        raise ValueError(f"Unsupported vector format: {file_extension}")

    gdf.to_file(output_path, driver=VECTOR_DRIVERS[file_extension])


def layer_to_vector(layer, output_path):
    """Save a layer's objects to a vector file.

    Parameters:
    -----------
    layer : Layer
        Layer to save
    output_path : str
        Path to the output vector file
    """
    if layer.objects is None:
        raise ValueError("Layer has no vector objects")

    write_vector(layer.objects, output_path)
