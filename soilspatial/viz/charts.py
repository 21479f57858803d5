# -*- coding: utf-8 -*-
"""Charts of joined sample attributes: distributions and trait-versus-covariate scatter plots."""

import matplotlib.pyplot as plt
import seaborn as sns


def _attribute_table(layer, *columns):
    """Attribute table without geometry, after checking the requested columns exist."""
    if layer.objects is None:
        raise ValueError(f"Layer '{layer.name}' has no vector objects")
    missing = [column for column in columns if column and column not in layer.objects.columns]
    if missing:
        raise ValueError(f"Attributes {missing} not found in layer objects")
    return layer.objects.drop(columns=layer.objects.geometry.name)


def plot_histogram(layer, attribute, bins=20, figsize=(10, 6), by_class=None):
    """Plot the distribution of an attribute, one overlaid histogram per category if requested.

    Parameters:
    -----------
    layer : Layer
        Layer containing data
    attribute : str
        Attribute to plot
    bins : int
        Number of bins
    by_class : str, optional
        Column to split by (e.g. 'soil_type')

    Returns:
    --------
    fig : matplotlib.figure.Figure
        Figure object
    """
    data = _attribute_table(layer, attribute, by_class).dropna(subset=[attribute])

    fig, ax = plt.subplots(figsize=figsize)
    sns.histplot(data=data, x=attribute, hue=by_class, bins=bins, alpha=0.6, multiple="layer", ax=ax)

    ax.set_title(f"Histogram of {attribute}")
    ax.set_ylabel("Count")
    return fig


def plot_scatter(layer, x_attribute, y_attribute, color_by=None, figsize=(10, 8)):
    """Scatter two attributes, e.g. a soil trait against a sampled covariate."""
    data = _attribute_table(layer, x_attribute, y_attribute, color_by)

    fig, ax = plt.subplots(figsize=figsize)
    sns.scatterplot(
        data=data,
        x=x_attribute,
        y=y_attribute,
        hue=color_by,
        palette="viridis" if color_by else None,
        alpha=0.8,
        s=50,
        edgecolor="k",
        ax=ax,
    )

    ax.set_title(f"{y_attribute} vs {x_attribute}")
    ax.grid(alpha=0.3)
    return fig
