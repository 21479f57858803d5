# -*- coding: utf-8 -*-
"""The filters package provides spatial subsetting of layers.

It includes cropping rasters to an extent, masking them with polygons, and keeping only the cells or features
that satisfy a coordinate or attribute predicate.
"""
