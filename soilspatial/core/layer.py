# -*- coding: utf-8 -*-
"""Defines the Layer class and related functionality for organizing geospatial data.

A layer is the single container the walkthrough passes from step to step. It can hold a raster grid
(bands, height, width) with its transform and coordinate reference system, a vector dataset as a
GeoDataFrame, or both. This module provides the Layer and LayerManager classes; layers remember the
layer they were derived from, so loading, alignment, stacking and extraction results stay traceable.
"""

import uuid

import numpy as np
import pandas as pd
from pyproj import CRS


def same_crs(crs_a, crs_b):
    """Return True when two CRS definitions (rasterio, pyproj, EPSG string...) describe the same system."""
    if crs_a is None or crs_b is None:
        return crs_a is None and crs_b is None
    return CRS.from_user_input(crs_a) == CRS.from_user_input(crs_b)


class Layer:
    """A Layer represents a raster grid, a set of vector features, or both.

    Layers can be derived from loading, alignment, stacking, filtering or extraction.
    Each layer can have functions attached to calculate additional properties.
    """

    def __init__(self, name=None, parent=None, type="generic"):
        """Initialize a Layer.

        Parameters:
        -----------
        name : str, optional
            Name of the layer. If None, a unique name will be generated.
        parent : Layer, optional
            Parent layer that this layer is derived from.
        type : str
            Type of layer: "raster", "vector", "aligned", "stack", "joined", "filter", or "generic"
        """
        self.id = str(uuid.uuid4())
        self.name = name if name else f"Layer_{self.id[:8]}"
        self.parent = parent
        self.type = type
        self.created_at = pd.Timestamp.now()

        self.raster = None
        self.band_names = []
        self.nodata = None
        self.objects = None
        self.metadata = {}
        self.transform = None
        self.crs = None

        self.attached_functions = {}

    @property
    def count(self):
        """Number of raster bands."""
        if self.raster is None:
            return 0
        return self.raster.shape[0]

    @property
    def shape(self):
        """Grid shape as (height, width)."""
        if self.raster is None:
            return None
        return tuple(self.raster.shape[-2:])

    @property
    def bounds(self):
        """Spatial extent as (left, bottom, right, top)."""
        if self.raster is not None and self.transform is not None:
            height, width = self.shape
            left, top = self.transform * (0, 0)
            right, bottom = self.transform * (width, height)
            return (min(left, right), min(bottom, top), max(left, right), max(bottom, top))

        if self.objects is not None and len(self.objects) > 0:
            return tuple(float(v) for v in self.objects.total_bounds)

        return None

    def band(self, name):
        """Return one band as a 2-D array.

        Parameters:
        -----------
        name : str or int
            Band name, or zero-based band index

        Returns:
        --------
        band : numpy.ndarray
            Band values (height, width)
        """
        if self.raster is None:
            raise ValueError(f"Layer '{self.name}' has no raster data")

        if isinstance(name, (int, np.integer)):
            if not 0 <= name < self.count:
                raise ValueError(f"Band index {name} out of range for layer '{self.name}'")
            return self.raster[name]

        if name not in self.band_names:
            raise ValueError(f"Band '{name}' not found in layer '{self.name}' (bands: {self.band_names})")

        return self.raster[self.band_names.index(name)]

    def grid_matches(self, other):
        """Check whether two raster layers share shape, transform and CRS.

        Parameters:
        -----------
        other : Layer
            Layer to compare against

        Returns:
        --------
        matches : bool
            True when cells of both layers line up one to one
        """
        if self.raster is None or other.raster is None:
            return False

        if self.shape != other.shape:
            return False

        if self.transform is None or other.transform is None:
            return False

        if not np.allclose(tuple(self.transform)[:6], tuple(other.transform)[:6]):
            return False

        return same_crs(self.crs, other.crs)

    def attach_function(self, function, name=None, **kwargs):
        """Attach a function to this layer and execute it.

        Parameters:
        -----------
        function : callable
            Function to attach and execute
        name : str, optional
            Name for this function. If None, uses function.__name__
        **kwargs : dict
            Arguments to pass to the function

        Returns:
        --------
        self : Layer
            Returns self for chaining
        """
        func_name = name if name else function.__name__

        result = function(self, **kwargs)

        self.attached_functions[func_name] = {
            "function": function,
            "args": kwargs,
            "result": result,
        }

        return self

    def get_function_result(self, function_name):
        """Get the result of an attached function."""
        if function_name not in self.attached_functions:
            raise ValueError(f"Function '{function_name}' not attached to this layer")

        return self.attached_functions[function_name]["result"]

    def copy(self):
        """Create a copy of this layer.

        Returns:
        --------
        layer_copy : Layer
            Copy of this layer
        """
        new_layer = Layer(name=f"{self.name}_copy", parent=self.parent, type=self.type)

        if self.raster is not None:
            new_layer.raster = self.raster.copy()

        if self.objects is not None:
            new_layer.objects = self.objects.copy()

        new_layer.band_names = list(self.band_names)
        new_layer.nodata = self.nodata
        new_layer.metadata = self.metadata.copy()
        new_layer.transform = self.transform
        new_layer.crs = self.crs

        return new_layer

    def __str__(self):
        """String representation of the layer."""
        parent_name = self.parent.name if self.parent else "None"
        parts = [f"Layer '{self.name}' (type: {self.type}, parent: {parent_name}"]

        if self.raster is not None:
            height, width = self.shape
            parts.append(f"bands: {self.band_names}, grid: {height}x{width}")

        if self.objects is not None:
            parts.append(f"objects: {len(self.objects)}")

        return ", ".join(parts) + ")"


class LayerManager:
    """Keeps the layers produced during one walkthrough run, in creation order."""

    def __init__(self):
        """Initialize the layer manager."""
        self.layers = {}
        self.active_layer = None

    def __len__(self):
        return len(self.layers)

    def __contains__(self, layer_id_or_name):
        return self._find(layer_id_or_name) is not None

    def _find(self, layer_id_or_name):
        if layer_id_or_name in self.layers:
            return self.layers[layer_id_or_name]
        # Names are not unique; the most recent layer wins
        matches = [layer for layer in self.layers.values() if layer.name == layer_id_or_name]
        return matches[-1] if matches else None

    def add_layer(self, layer, set_active=True):
        """Register a layer and return it, optionally making it the active layer."""
        self.layers[layer.id] = layer
        if set_active:
            self.active_layer = layer
        return layer

    def get_layer(self, layer_id_or_name):
        """Get a layer by ID or name."""
        layer = self._find(layer_id_or_name)
        if layer is None:
            raise ValueError(f"Layer '{layer_id_or_name}' not found")
        return layer

    def get_layer_names(self):
        """Names of all layers, in the order they were added."""
        return [layer.name for layer in self.layers.values()]

    def remove_layer(self, layer_id_or_name):
        """Remove a layer; the most recently added remaining layer becomes active if needed.

        Returns:
        --------
        layer : Layer
            The removed layer
        """
        layer = self.layers.pop(self.get_layer(layer_id_or_name).id)

        if self.active_layer is layer:
            self.active_layer = next(reversed(list(self.layers.values())), None)

        return layer
