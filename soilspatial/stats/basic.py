# -*- coding: utf-8 -*-
"""Summary statistics for the attributes of joined sample layers."""

import numpy as np

PERCENTILES = (10, 25, 50, 75, 90)


def attach_basic_stats(layer, column, prefix=None):
    """Summarise one numeric attribute of a layer.

    Missing values (e.g. points that fell outside a raster) are counted separately and left out
    of every other statistic.

    Parameters:
    -----------
    layer : Layer
        Layer whose objects carry the attribute
    column : str
        Numeric attribute
    prefix : str, optional
        Prefix for the keys of the result

    Returns:
    --------
    stats : dict
        min, max, mean, median, std, sum, count, missing and percentile_<p> entries
    """
    if layer.objects is None or column not in layer.objects.columns:
        raise ValueError(f"Column '{column}' not found in layer objects")

    series = layer.objects[column]
    valid = series.dropna().astype(float)
    key = (lambda name: f"{prefix}_{name}") if prefix else (lambda name: name)

    summary = {
        "min": valid.min(),
        "max": valid.max(),
        "mean": valid.mean(),
        "median": valid.median(),
        "std": valid.std(),
        "sum": valid.sum(),
        "count": int(valid.size),
        "missing": int(series.isna().sum()),
    }
    levels = np.percentile(valid, PERCENTILES) if valid.size else [np.nan] * len(PERCENTILES)
    summary.update({f"percentile_{p}": level for p, level in zip(PERCENTILES, levels)})

    return {key(name): value for name, value in summary.items()}


def attach_class_distribution(layer, class_column="soil_type", value_column=None):
    """Count the features of each category, optionally with the mean of a value per category.

    Parameters:
    -----------
    layer : Layer
        Layer to analyze
    class_column : str
        Categorical attribute
    value_column : str, optional
        Numeric attribute averaged within each category

    Returns:
    --------
    distribution : dict
        {"counts": {...}, "percentages": {...}, "total": n} plus "means" when value_column is given.
        Empty when the category column is missing.
    """
    if layer.objects is None or class_column not in layer.objects.columns:
        return {}

    categories = layer.objects[class_column]
    counts = categories.value_counts()
    total = len(categories)

    distribution = {
        "counts": {value: int(count) for value, count in counts.items()},
        "percentages": (counts / total * 100).round(2).to_dict() if total else {},
        "total": total,
    }

    if value_column is not None:
        if value_column not in layer.objects.columns:
            raise ValueError(f"Column '{value_column}' not found in layer objects")
        distribution["means"] = layer.objects.groupby(class_column)[value_column].mean().to_dict()

    return distribution
