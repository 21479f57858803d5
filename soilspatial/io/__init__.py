# -*- coding: utf-8 -*-
"""The io package reads raster grids, vector files and point tables into layers, and writes layers back out.

Coordinate reference systems are assigned or reprojected while loading.
"""
