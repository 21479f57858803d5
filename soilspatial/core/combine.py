# -*- coding: utf-8 -*-
"""Combines layers: stacking aligned rasters into one multi-band layer, managing band names, and joining tables onto vector attributes.

All functions return new layers and leave their inputs untouched. Stacking requires every input to share the
same grid; run the rasters through align_raster first.
"""

import logging

import numpy as np

from .layer import Layer

logger = logging.getLogger(__name__)


def _check_unique(names):
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate band names: {duplicates}")


def _nodata_equal(a, b):
    if a is None or b is None:
        return a is None and b is None
    if np.isnan(a) and np.isnan(b):
        return True
    return a == b


def _derived_raster_layer(source, raster, band_names, name, type="stack"):
    layer = Layer(name=name, parent=source, type=type)
    layer.raster = raster
    layer.band_names = list(band_names)
    layer.transform = source.transform
    layer.crs = source.crs
    layer.nodata = source.nodata
    return layer


def stack_layers(layers, names=None, layer_manager=None, layer_name=None):
    """Stack raster layers that share one grid into a single multi-band layer.

    Parameters:
    -----------
    layers : list of Layer
        Raster layers with identical grids
    names : list of str, optional
        Names for the bands of the result. Defaults to the band names of the inputs.
    layer_manager : LayerManager, optional
        Layer manager to add the result layer to
    layer_name : str, optional
        Name for the result layer

    Returns:
    --------
    result_layer : Layer
        Layer whose bands are the bands of all inputs, in order
    """
    layers = list(layers)
    if not layers:
        raise ValueError("At least one layer is required to build a stack")

    reference = layers[0]
    for layer in layers:
        if layer.raster is None:
            raise ValueError(f"Layer '{layer.name}' has no raster data")
        if not layer.grid_matches(reference):
            raise ValueError(
                f"Layer '{layer.name}' does not share the grid of '{reference.name}'; align it before stacking"
            )

    band_names = [band for layer in layers for band in layer.band_names]
    if names is not None:
        names = list(names)
        if len(names) != len(band_names):
            raise ValueError(f"Expected {len(band_names)} band names, got {len(names)}")
        band_names = names
    _check_unique(band_names)

    nodata = reference.nodata
    if all(_nodata_equal(layer.nodata, nodata) for layer in layers):
        stacked = np.concatenate([layer.raster for layer in layers], axis=0)
    else:
        # Mixed nodata values collapse to NaN
        logger.info("Input layers disagree on nodata; stacking as float with NaN nodata")
        arrays = []
        for layer in layers:
            data = layer.raster.astype(np.float64)
            if layer.nodata is not None and not np.isnan(layer.nodata):
                data[layer.raster == layer.nodata] = np.nan
            arrays.append(data)
        stacked = np.concatenate(arrays, axis=0)
        nodata = np.nan

    result_layer = _derived_raster_layer(reference, stacked, band_names, layer_name or "Stack")
    result_layer.nodata = nodata
    result_layer.metadata = {"operation": "stack", "sources": [layer.name for layer in layers]}

    logger.info(f"Stacked {len(layers)} layers into '{result_layer.name}' with bands {band_names}")

    if layer_manager is not None:
        layer_manager.add_layer(result_layer)

    return result_layer


def rename_bands(layer, names, layer_name=None):
    """Rename the bands of a raster layer.

    Parameters:
    -----------
    layer : Layer
        Raster layer
    names : list of str or dict
        New names in band order, or a mapping from old name to new name

    Returns:
    --------
    result_layer : Layer
        Copy of the layer with renamed bands
    """
    if layer.raster is None:
        raise ValueError(f"Layer '{layer.name}' has no raster data")

    if isinstance(names, dict):
        unknown = [old for old in names if old not in layer.band_names]
        if unknown:
            raise ValueError(f"Bands {unknown} not found in layer '{layer.name}'")
        new_names = [names.get(band, band) for band in layer.band_names]
    else:
        new_names = list(names)
        if len(new_names) != layer.count:
            raise ValueError(f"Expected {layer.count} band names, got {len(new_names)}")

    _check_unique(new_names)

    result_layer = _derived_raster_layer(
        layer, layer.raster.copy(), new_names, layer_name or layer.name, type=layer.type
    )
    result_layer.metadata = dict(layer.metadata)
    return result_layer


def select_bands(layer, names, layer_name=None):
    """Select bands of a raster layer by name, in the given order."""
    names = [names] if isinstance(names, str) else list(names)
    indices = []
    for name in names:
        if name not in layer.band_names:
            raise ValueError(f"Band '{name}' not found in layer '{layer.name}' (bands: {layer.band_names})")
        indices.append(layer.band_names.index(name))

    result_layer = _derived_raster_layer(
        layer, layer.raster[indices].copy(), names, layer_name or f"{layer.name}_subset", type="filter"
    )
    result_layer.metadata = {"operation": "select_bands", "bands": names}
    return result_layer


def split_bands(layer):
    """Split a multi-band raster layer into one single-band layer per band.

    Returns:
    --------
    layers : list of Layer
        Single-band layers named after their band
    """
    if layer.raster is None:
        raise ValueError(f"Layer '{layer.name}' has no raster data")

    return [
        _derived_raster_layer(layer, layer.raster[i : i + 1].copy(), [band], band, type="raster")
        for i, band in enumerate(layer.band_names)
    ]


def join_attributes(layer, table, on, how="left", layer_manager=None, layer_name=None):
    """Join a table of attributes onto the features of a vector layer.

    Parameters:
    -----------
    layer : Layer
        Vector layer
    table : pandas.DataFrame
        Attribute table, at most one row per key
    on : str
        Key column present in both the layer objects and the table
    how : str
        "left" keeps every feature; "inner" keeps only features with a match

    Returns:
    --------
    result_layer : Layer
        Layer whose objects carry the joined columns, in the original feature order
    """
    if layer.objects is None:
        raise ValueError(f"Layer '{layer.name}' has no vector objects")
    if how not in ("left", "inner"):
        raise ValueError(f"Unsupported join type: {how}")
    if on not in layer.objects.columns:
        raise ValueError(f"Column '{on}' not found in layer objects")
    if on not in table.columns:
        raise ValueError(f"Column '{on}' not found in table")

    if "geometry" in table.columns:
        table = table.drop(columns=["geometry"])

    # merge resets the index; carry feature positions through it
    positions = layer.objects.assign(_feature_position=np.arange(len(layer.objects)))
    joined = positions.merge(table, on=on, how=how, validate="many_to_one").sort_values("_feature_position")
    joined.index = layer.objects.index[joined["_feature_position"].to_numpy()]
    joined = joined.drop(columns=["_feature_position"])

    result_layer = Layer(name=layer_name or f"{layer.name}_joined", parent=layer, type="joined")
    result_layer.objects = joined
    result_layer.crs = layer.objects.crs
    result_layer.metadata = {"operation": "join_attributes", "on": on, "how": how}

    if layer_manager is not None:
        layer_manager.add_layer(result_layer)

    return result_layer
