# -*- coding: utf-8 -*-
"""Test suite for the soilspatial walkthrough.

This suite runs the full workflow: loading sample points and covariate rasters,
aligning the rasters onto one grid, stacking them, extracting the stack at the
points and rendering the results. It also checks the generated outputs.
"""

import os

import numpy as np
import pytest

import main
from soilspatial import (
    LayerManager,
    align_raster,
    attach_basic_stats,
    attach_class_distribution,
    attach_raster_values,
    get_band_statistics,
    load_raster_layer,
    load_vector_layer,
    plot_layer,
    stack_layers,
)


def test_sample_data_files(sample_data):
    """The synthetic dataset is written as GeoTIFFs and a CSV table."""
    paths = sample_data["paths"]

    assert set(paths) == {"elevation", "ndvi", "precipitation", "soil_samples"}
    assert all(os.path.exists(path) for path in paths.values())
    assert len(sample_data["points"].objects) == 30
    assert not sample_data["rasters"]["elevation"].grid_matches(sample_data["rasters"]["ndvi"])


def test_full_workflow(sample_data, tmp_path):
    """Test the full workflow of loading, alignment, stacking, extraction and rendering."""
    # Step 1: Load the points and rasters.
    output_dir = tmp_path / "output"
    os.makedirs(output_dir, exist_ok=True)
    manager = LayerManager()
    paths = sample_data["paths"]

    points = load_vector_layer(paths["soil_samples"], crs="EPSG:32633", layer_manager=manager)
    assert len(points.objects) == 30, "Points were not loaded."

    rasters = [
        load_raster_layer(paths[name], target_crs=points.crs, layer_manager=manager)
        for name in ("elevation", "ndvi", "precipitation")
    ]
    assert [r.band_names for r in rasters] == [["elevation"], ["ndvi"], ["precipitation"]]

    # Step 2: Align everything to the elevation grid.
    reference = rasters[0]
    aligned = [reference] + [align_raster(r, reference, layer_manager=manager) for r in rasters[1:]]
    assert all(layer.grid_matches(reference) for layer in aligned), "Alignment failed."

    # Step 3: Stack.
    stack = stack_layers(aligned, layer_manager=manager, layer_name="Covariates")
    assert stack.band_names == ["elevation", "ndvi", "precipitation"]
    np.testing.assert_allclose(stack.band("elevation"), reference.raster[0])
    stats = get_band_statistics(stack)
    assert stats["ndvi"]["count"] > 0

    # Step 4: Extract at points.
    joined = attach_raster_values(points, stack, layer_manager=manager, layer_name="Joined")
    assert len(joined.objects) == len(points.objects), "Extraction changed the point count."
    assert list(joined.objects["site_id"]) == list(points.objects["site_id"])
    assert joined.objects[stack.band_names].notna().all().all(), "Points should fall inside every raster."

    joined.attach_function(attach_basic_stats, name="carbon", column="organic_carbon")
    joined.attach_function(attach_class_distribution, name="soil", class_column="soil_type")
    assert joined.get_function_result("carbon")["count"] == 30
    assert joined.get_function_result("soil")["total"] == 30

    # Step 5: Render.
    fig = plot_layer(stack, band="ndvi", points=joined, attribute="organic_carbon", category="soil_type")
    fig_path = output_dir / "samples.png"
    fig.savefig(fig_path)
    assert fig_path.exists(), "Sample figure not saved."

    assert len(manager.get_layer_names()) >= 7, "Expected every step to register its layer."


def test_walkthrough_script(sample_data, tmp_path):
    """The main.py walkthrough runs end to end and writes its figures and map."""
    paths = sample_data["paths"]
    output_dir = tmp_path / "walkthrough"

    joined = main.run_example(
        [paths["elevation"], paths["ndvi"], paths["precipitation"]],
        paths["soil_samples"],
        output_dir=str(output_dir),
        points_crs="EPSG:32633",
    )

    assert len(joined.objects) == 30
    assert {"cov_elevation", "cov_ndvi", "cov_precipitation"} <= set(joined.objects.columns)
    for name in ("1_alignment.png", "2_covariates.png", "3_samples.png", "4_scatter.png", "5_histogram.png", "6_map.html"):
        assert (output_dir / name).exists(), f"{name} not written."


def test_walkthrough_without_category(sample_data, tmp_path):
    """Without a category column the walkthrough still renders; an unknown one is rejected up front."""
    paths = sample_data["paths"]
    rasters = [paths["elevation"], paths["ndvi"]]

    joined = main.run_example(
        rasters, paths["soil_samples"], output_dir=str(tmp_path / "plain"), points_crs="EPSG:32633", category=None
    )
    assert "cov_ndvi" in joined.objects.columns

    with pytest.raises(ValueError, match="texture"):
        main.run_example(
            rasters, paths["soil_samples"], output_dir=str(tmp_path / "bad"), points_crs="EPSG:32633", category="texture"
        )


def test_walkthrough_relative_paths(sample_data, tmp_path, monkeypatch):
    """Relative input paths resolve against the project root."""
    monkeypatch.setattr("soilspatial.config.PROJECT_ROOT", tmp_path)

    joined = main.run_example(
        ["data/elevation.tif", "data/precipitation.tif"],
        "data/soil_samples.csv",
        output_dir=str(tmp_path / "relative"),
        points_crs="EPSG:32633",
    )

    assert len(joined.objects) == 30
    assert (tmp_path / "relative" / "6_map.html").exists()
