# -*- coding: utf-8 -*-
"""Configuration settings shared by the soilspatial walkthrough.

Paths, resampling defaults and logging options live here so they can be changed in one place.
"""

import os
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np

# Path configuration
PROJECT_ROOT: Path = Path(os.environ.get("SOILSPATIAL_ROOT", os.getcwd())).absolute()
DATA_DIR: Path = PROJECT_ROOT / "data"
OUTPUT_DIR: Path = PROJECT_ROOT / "output"

# Raster defaults
DEFAULT_RESAMPLING: str = "bilinear"
DEFAULT_NODATA: float = np.nan

# Map rendering
WEB_CRS: str = "EPSG:4326"
MAP_TILES: str = "OpenStreetMap"
MAP_ZOOM_START: int = 12
DEFAULT_CMAP: str = "viridis"

# Logging configuration
LOGGING_CONFIG: Dict[str, Any] = {
    "level": "INFO",  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    "log_to_file": False,
    "log_file": OUTPUT_DIR / "soilspatial.log",
    "log_format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


def resolve_path(path: Union[str, os.PathLike]) -> Path:
    """Resolve a path against the project root unless it is already absolute."""
    path = Path(path).expanduser()
    if path.is_absolute():
        return path
    return PROJECT_ROOT / path
