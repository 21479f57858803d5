# -*- coding: utf-8 -*-
"""The core package holds the Layer data model and the steps that transform layers.

It covers reprojection and grid alignment, stacking and renaming bands, attribute joins, and sampling raster values at points.
"""
