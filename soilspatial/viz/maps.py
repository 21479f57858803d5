# -*- coding: utf-8 -*-
"""Functions to create static maps and interactive web maps of raster and vector layers."""

import logging

import folium
import matplotlib.patches as mpatches
import matplotlib.pyplot as plt
import numpy as np
from folium.raster_layers import ImageOverlay
from matplotlib.colors import ListedColormap, Normalize, to_hex

from ..config import DEFAULT_CMAP, MAP_TILES, MAP_ZOOM_START, WEB_CRS
from ..core.alignment import reproject_raster
from ..core.layer import same_crs

logger = logging.getLogger(__name__)

MARKERS = ["o", "s", "^", "D", "v", "P", "X", "*", "h", "<", ">"]


def _band_data(layer, band):
    """Band values as float with nodata as NaN, plus the band name."""
    if band is None:
        band = layer.band_names[0] if layer.band_names else 0
    data = layer.band(band).astype(np.float64)
    if layer.nodata is not None and not np.isnan(layer.nodata):
        data = np.where(layer.band(band) == layer.nodata, np.nan, data)
    name = band if isinstance(band, str) else layer.band_names[band]
    return data, name


def _extent(layer):
    left, bottom, right, top = layer.bounds
    return (left, right, bottom, top)


def _points_frame(points, crs=None):
    """GeoDataFrame of a points layer (or GeoDataFrame), in ``crs`` when both CRSs are known."""
    objects = getattr(points, "objects", points)
    if objects is None:
        raise ValueError("Points layer has no vector objects")
    if crs is not None and objects.crs is not None and not same_crs(objects.crs, crs):
        objects = objects.to_crs(crs)
    return objects


def _check_column(objects, column):
    if column is not None and column not in objects.columns:
        raise ValueError(f"Attribute '{column}' not found in layer objects")


def plot_layer(
    layer,
    band=None,
    points=None,
    attribute=None,
    category=None,
    title=None,
    figsize=(12, 10),
    cmap=DEFAULT_CMAP,
    point_cmap="plasma",
    point_size=60,
):
    """Plot a raster band as a coloured backdrop with point features on top.

    Parameters:
    -----------
    layer : Layer
        Raster layer for the backdrop, or a vector layer to plot on its own
    band : str or int, optional
        Band to draw. Defaults to the first band.
    points : Layer, optional
        Point features to overlay
    attribute : str, optional
        Numeric attribute that sets the point colour
    category : str, optional
        Categorical attribute that sets the point marker

    Returns:
    --------
    fig : matplotlib.figure.Figure
        Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    band_name = None
    if layer.raster is not None:
        data, band_name = _band_data(layer, band)
        image = ax.imshow(np.ma.masked_invalid(data), extent=_extent(layer), cmap=cmap, origin="upper")
        cbar = fig.colorbar(image, ax=ax, fraction=0.046, pad=0.04)
        cbar.set_label(band_name)
    elif points is None:
        points = layer

    if points is not None:
        objects = _points_frame(points, layer.crs if layer.raster is not None else None)
        _check_column(objects, attribute)
        _check_column(objects, category)

        norm = None
        if attribute is not None:
            values = objects[attribute].astype(float)
            norm = Normalize(vmin=np.nanmin(values), vmax=np.nanmax(values))

        groups = objects.groupby(category, sort=True) if category else [(None, objects)]
        scatter = None
        for i, (category_value, group) in enumerate(groups):
            style = {
                "marker": MARKERS[i % len(MARKERS)],
                "s": point_size,
                "edgecolor": "black",
                "linewidth": 0.6,
                "label": str(category_value) if category else None,
            }
            if attribute is not None:
                scatter = ax.scatter(
                    group.geometry.x, group.geometry.y, c=group[attribute], cmap=point_cmap, norm=norm, **style
                )
            else:
                ax.scatter(group.geometry.x, group.geometry.y, c="white", **style)

        if scatter is not None:
            point_cbar = fig.colorbar(scatter, ax=ax, fraction=0.046, pad=0.1)
            point_cbar.set_label(attribute)
        if category:
            ax.legend(title=category, loc="upper right")

    if title:
        ax.set_title(title)
    elif band_name and attribute:
        ax.set_title(f"{attribute} over {band_name}")
    elif band_name:
        ax.set_title(band_name)
    else:
        ax.set_title("Layer Visualization")

    ax.set_xlabel("X Coordinate")
    ax.set_ylabel("Y Coordinate")
    ax.grid(alpha=0.3)
    return fig


def plot_bands(layer, ncols=3, figsize=None, cmap=DEFAULT_CMAP):
    """Plot every band of a raster layer in its own panel."""
    if layer.raster is None:
        raise ValueError(f"Layer '{layer.name}' has no raster data")

    nbands = layer.count
    ncols = max(1, min(ncols, nbands))
    nrows = int(np.ceil(nbands / ncols))
    figsize = figsize or (5 * ncols, 4 * nrows)

    fig, axes = plt.subplots(nrows, ncols, figsize=figsize, squeeze=False)
    for ax in axes.ravel()[nbands:]:
        ax.set_visible(False)

    for i, ax in enumerate(axes.ravel()[:nbands]):
        data, band_name = _band_data(layer, i)
        image = ax.imshow(np.ma.masked_invalid(data), extent=_extent(layer), cmap=cmap, origin="upper")
        fig.colorbar(image, ax=ax, fraction=0.046, pad=0.04)
        ax.set_title(band_name)

    fig.suptitle(layer.name)
    fig.tight_layout()
    return fig


def plot_categories(layer, class_field, figsize=(12, 10), legend=True, class_color=None):
    """Plot vector features with one colour per category."""
    if layer.objects is None:
        raise ValueError(f"Layer '{layer.name}' has no vector objects")
    if class_field not in layer.objects.columns:
        raise ValueError(f"Class field '{class_field}' not found in layer objects")

    fig, ax = plt.subplots(figsize=figsize)
    class_color = dict(class_color) if class_color else {}

    objects = layer.objects[layer.objects[class_field].notna()].copy()
    class_values = sorted(objects[class_field].unique(), key=str)

    base_colors = plt.cm.tab20(np.linspace(0, 1, max(len(class_values), 1)))
    for idx, class_value in enumerate(class_values):
        if class_value not in class_color:
            class_color[class_value] = to_hex(base_colors[idx])

    cmap = ListedColormap([class_color[value] for value in class_values])
    class_map = {value: i for i, value in enumerate(class_values)}
    objects["_class_id"] = objects[class_field].map(class_map)

    if len(objects) > 0:
        objects.plot(
            column="_class_id",
            cmap=cmap,
            vmin=0,
            vmax=max(len(class_values) - 1, 1),
            ax=ax,
            edgecolor="black",
            linewidth=0.5,
            legend=False,
        )

    if legend and len(class_values) > 0:
        patches = [mpatches.Patch(color=class_color[value], label=value) for value in class_values]
        ax.legend(handles=patches, loc="upper right", title=class_field)

    ax.set_title(f"{layer.name} by {class_field}")
    ax.set_xlabel("X Coordinate")
    ax.set_ylabel("Y Coordinate")

    return fig


def plot_comparison(before_layer, after_layer, band=None, figsize=(16, 8), title=None, cmap=DEFAULT_CMAP):
    """Plot two rasters side by side, e.g. before and after alignment."""
    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=figsize)

    if title:
        fig.suptitle(title)

    for ax, layer, label in ((ax1, before_layer, "Before"), (ax2, after_layer, "After")):
        data, band_name = _band_data(layer, band)
        image = ax.imshow(np.ma.masked_invalid(data), extent=_extent(layer), cmap=cmap, origin="upper")
        fig.colorbar(image, ax=ax, fraction=0.046, pad=0.04)
        height, width = layer.shape
        ax.set_title(f"{label}: {band_name} ({height}x{width})")

    return fig


def _raster_overlay(layer, band, cmap, opacity):
    """Warp a raster band to EPSG:4326 and wrap it as a folium ImageOverlay."""
    if layer.crs is None:
        raise ValueError(f"Layer '{layer.name}' has no CRS and cannot be placed on a web map")

    data, band_name = _band_data(layer, band)
    single = layer.copy()
    single.raster = data.reshape(1, *data.shape)
    single.band_names = [band_name]
    single.nodata = np.nan

    web = reproject_raster(single, WEB_CRS, resampling="nearest")
    values = web.raster[0]

    finite = np.isfinite(values)
    rgba = np.zeros(values.shape + (4,), dtype=np.uint8)
    if finite.any():
        norm = Normalize(vmin=np.nanmin(values), vmax=np.nanmax(values))
        colored = plt.get_cmap(cmap)(norm(np.where(finite, values, np.nanmin(values))))
        rgba = (colored * 255).astype(np.uint8)
        rgba[~finite] = 0

    west, south, east, north = web.bounds
    overlay = ImageOverlay(
        name=band_name,
        image=rgba,
        bounds=[[south, west], [north, east]],
        opacity=opacity,
        interactive=True,
        cross_origin=False,
    )
    return overlay, (west, south, east, north)


def plot_layer_interactive(
    layer,
    points=None,
    band=None,
    attribute=None,
    cmap=DEFAULT_CMAP,
    point_cmap="plasma",
    opacity=0.7,
    zoom_start=MAP_ZOOM_START,
    tiles=MAP_TILES,
):
    """Build a pannable, zoomable web map of a raster band and point features.

    Parameters:
    -----------
    layer : Layer
        Raster layer for the overlay, or a vector layer to map on its own
    points : Layer, optional
        Point features drawn as circle markers with attribute popups
    band : str or int, optional
        Band to draw. Defaults to the first band.
    attribute : str, optional
        Numeric attribute that sets the marker colour

    Returns:
    --------
    fmap : folium.Map
        Map with one overlay per drawn layer and a layer control
    """
    overlay = None
    bounds = None
    if layer.raster is not None:
        overlay, bounds = _raster_overlay(layer, band, cmap, opacity)
    elif points is None:
        points = layer

    objects = None
    if points is not None:
        objects = _points_frame(points)
        if objects.crs is None:
            raise ValueError("Points have no CRS and cannot be placed on a web map")
        objects = objects.to_crs(WEB_CRS)
        _check_column(objects, attribute)
        point_bounds = tuple(objects.total_bounds)
        if bounds is None:
            bounds = point_bounds
        else:
            bounds = (
                min(bounds[0], point_bounds[0]),
                min(bounds[1], point_bounds[1]),
                max(bounds[2], point_bounds[2]),
                max(bounds[3], point_bounds[3]),
            )

    if bounds is None or not np.all(np.isfinite(bounds)):
        raise ValueError("Nothing to map: the layers have no extent")

    west, south, east, north = bounds
    fmap = folium.Map(location=[(south + north) / 2, (west + east) / 2], zoom_start=zoom_start, tiles=tiles)

    if overlay is not None:
        overlay.add_to(fmap)

    if objects is not None:
        group = folium.FeatureGroup(name=getattr(points, "name", "points"))
        colormap = plt.get_cmap(point_cmap)
        norm = None
        if attribute is not None:
            values = objects[attribute].astype(float)
            norm = Normalize(vmin=np.nanmin(values), vmax=np.nanmax(values))

        attributes = [column for column in objects.columns if column != objects.geometry.name]
        for _, row in objects.iterrows():
            if row.geometry is None or row.geometry.is_empty:
                continue
            point = row.geometry.representative_point()
            color = "#3388ff"
            if norm is not None and np.isfinite(row[attribute]):
                color = to_hex(colormap(norm(row[attribute])))
            popup = "<br>".join(f"<b>{column}</b>: {row[column]}" for column in attributes)
            folium.CircleMarker(
                location=[point.y, point.x],
                radius=6,
                color="black",
                weight=1,
                fill=True,
                fill_color=color,
                fill_opacity=0.9,
                popup=folium.Popup(popup, max_width=300),
            ).add_to(group)
        group.add_to(fmap)

    fmap.fit_bounds([[south, west], [north, east]])
    folium.LayerControl().add_to(fmap)
    return fmap
