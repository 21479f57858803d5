# -*- coding: utf-8 -*-
# soilspatial/__init__.py

"""
soilspatial: loading, aligning, stacking and sampling spatial vector and raster data
===================================================================================

soilspatial walks through the steps needed to join raster covariates onto field
samples, for example soil trait measurements:

- Loading vector, point-table and raster files with CRS assignment or reprojection
- Aligning rasters onto a common grid
- Stacking aligned rasters into one multi-band layer
- Cropping, masking and filtering by spatial predicates
- Extracting raster values at point locations
- Static and interactive maps of the result
"""

__version__ = "0.1.0"

from .core.layer import Layer, LayerManager
from .core.alignment import align_raster, reproject_raster, reproject_vector
from .core.combine import join_attributes, rename_bands, select_bands, split_bands, stack_layers
from .core.extract import attach_raster_values, extract_values

from .filters.spatial import crop_raster, crop_vector, filter_cells, filter_features, mask_raster, raster_to_frame

from .io.raster import layer_to_raster, load_raster_layer, read_raster, write_raster
from .io.vector import layer_to_vector, load_vector_layer, read_points, read_vector, write_vector

from .logging_config import setup_logging

from .stats.basic import attach_basic_stats, attach_class_distribution

from .utils.helpers import create_sample_data, get_band_statistics
from .viz.charts import plot_histogram, plot_scatter

from .viz.maps import plot_bands, plot_categories, plot_comparison, plot_layer, plot_layer_interactive
