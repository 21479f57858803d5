# -*- coding: utf-8 -*-
"""Tests for static plots and the interactive map."""

import folium
import numpy as np
import pytest
from folium.raster_layers import ImageOverlay
from matplotlib.figure import Figure

from soilspatial import (
    plot_bands,
    plot_categories,
    plot_comparison,
    plot_histogram,
    plot_layer,
    plot_layer_interactive,
    plot_scatter,
    stack_layers,
)


@pytest.fixture
def samples(points_factory, cell_centre):
    """Fixture providing six sample points with a numeric and a categorical attribute."""
    coords = [cell_centre(r, c) for r, c in [(1, 1), (2, 5), (4, 8), (6, 3), (8, 8), (9, 1)]]
    return points_factory(
        coords,
        name="samples",
        organic_carbon=[1.2, 2.5, 0.8, 3.1, 1.9, 2.2],
        ph=[6.1, 6.8, 7.2, 5.9, 6.5, 7.0],
        soil_type=["loam", "clay", "sand", "loam", "clay", "sand"],
    )


def test_plot_layer_with_points(raster_factory, samples):
    """Raster backdrop with points keyed by attribute and category."""
    fig = plot_layer(raster_factory(), points=samples, attribute="organic_carbon", category="soil_type")

    assert isinstance(fig, Figure)
    ax = fig.axes[0]
    assert ax.get_title() == "organic_carbon over raster"
    assert len(ax.collections) == 3
    assert sorted(t.get_text() for t in ax.get_legend().get_texts()) == ["clay", "loam", "sand"]


def test_plot_layer_vector_only(samples):
    """Vector layers can be plotted without a raster."""
    fig = plot_layer(samples, attribute="organic_carbon")
    assert isinstance(fig, Figure)


def test_plot_layer_unknown_attribute(raster_factory, samples):
    """Unknown attributes are rejected."""
    with pytest.raises(ValueError):
        plot_layer(raster_factory(), points=samples, attribute="nitrogen")


def test_plot_bands_and_comparison(raster_factory):
    """One panel per band; comparisons show two panels."""
    stack = stack_layers([raster_factory(name="a"), raster_factory(np.ones((10, 10)), name="b")])

    fig = plot_bands(stack)
    visible = [ax for ax in fig.axes if ax.get_visible() and ax.get_title()]
    assert [ax.get_title() for ax in visible] == ["a", "b"]

    fig = plot_comparison(raster_factory(name="a"), raster_factory(np.zeros((5, 5)), cell_size=20.0, name="b"))
    assert fig.axes[1].get_title() == "After: b (5x5)"


def test_plot_categories(samples):
    """Each category gets its own legend entry and stored colours are reused."""
    fig = plot_categories(samples, "soil_type", class_color={"loam": "#8b4513"})

    legend = fig.axes[0].get_legend()
    assert [t.get_text() for t in legend.get_texts()] == ["clay", "loam", "sand"]

    with pytest.raises(ValueError):
        plot_categories(samples, "texture")


def test_charts(samples):
    """Histogram and scatter plots of joined attributes."""
    assert isinstance(plot_histogram(samples, "organic_carbon", by_class="soil_type"), Figure)
    assert isinstance(plot_scatter(samples, "ph", "organic_carbon", color_by="soil_type"), Figure)

    with pytest.raises(ValueError):
        plot_histogram(samples, "nitrogen")


def test_interactive_map(raster_factory, samples):
    """The web map holds the raster overlay and one marker per point."""
    fmap = plot_layer_interactive(raster_factory(), points=samples, attribute="organic_carbon")

    assert isinstance(fmap, folium.Map)
    children = list(fmap._children.values())
    assert any(isinstance(child, ImageOverlay) for child in children)
    groups = [child for child in children if isinstance(child, folium.FeatureGroup)]
    assert len(groups) == 1
    assert len(groups[0]._children) == len(samples.objects)
    assert any(isinstance(child, folium.LayerControl) for child in children)


def test_interactive_map_requires_crs(raster_factory):
    """Rasters without a CRS cannot be placed on a web map."""
    with pytest.raises(ValueError):
        plot_layer_interactive(raster_factory(crs=None))
