# -*- coding: utf-8 -*-
"""Walkthrough: joining raster covariates onto soil samples.

Loads the sample points and covariate rasters, aligns the rasters onto one grid, stacks them,
samples the stack at every point and renders the result as figures and an interactive map.
"""

import os

from soilspatial import (
    LayerManager,
    align_raster,
    attach_basic_stats,
    attach_class_distribution,
    attach_raster_values,
    create_sample_data,
    crop_raster,
    filter_cells,
    filter_features,
    get_band_statistics,
    load_raster_layer,
    load_vector_layer,
    plot_bands,
    plot_comparison,
    plot_histogram,
    plot_layer,
    plot_layer_interactive,
    plot_scatter,
    rename_bands,
    setup_logging,
    stack_layers,
)
from soilspatial.config import resolve_path


def run_example(raster_paths, points_path, output_dir="output", points_crs=None, attribute="organic_carbon", category="soil_type"):
    """Run Example."""
    setup_logging()
    os.makedirs(output_dir, exist_ok=True)

    manager = LayerManager()

    print("Loading soil samples...")
    points = load_vector_layer(points_path, crs=points_crs, layer_manager=manager)
    print(points)

    if category is not None and category not in points.objects.columns:
        raise ValueError(f"Category column '{category}' not found in {points_path}")

    print("\nLoading covariate rasters...")
    rasters = []
    for raster_path in raster_paths:
        if not resolve_path(raster_path).exists():
            raise ValueError(f"Raster file not found at {raster_path}. Please provide a valid raster file.")
        raster = load_raster_layer(raster_path, target_crs=points.crs, layer_manager=manager)
        print(raster)
        rasters.append(raster)

    print("\nAligning rasters to the grid of the first one...")
    reference = rasters[0]
    aligned = [reference]
    for raster in rasters[1:]:
        aligned_layer = align_raster(raster, reference, layer_manager=manager)
        aligned.append(aligned_layer)

    fig1 = plot_comparison(rasters[-1], aligned[-1], title="Alignment")
    fig1.savefig(os.path.join(output_dir, "1_alignment.png"))

    print("\nStacking aligned rasters...")
    stack = stack_layers(aligned, layer_manager=manager, layer_name="Covariates")
    stack = rename_bands(stack, {name: f"cov_{name}" for name in stack.band_names})
    print(stack)

    for band_name, stats in get_band_statistics(stack).items():
        print(f"  {band_name}: mean {stats.get('mean', float('nan')):.3f} ({stats['count']} cells)")

    fig2 = plot_bands(stack)
    fig2.savefig(os.path.join(output_dir, "2_covariates.png"))

    print("\nCropping the stack to the sample extent...")
    stack = crop_raster(stack, points, layer_manager=manager)
    print(stack)

    east_cells = filter_cells(stack, lambda df: df.x > df.x.median())
    print(f"Cells east of the median easting: {len(east_cells)}")

    print("\nExtracting covariates at sample points...")
    joined = attach_raster_values(points, stack, layer_manager=manager, layer_name="Samples_with_covariates")
    print(joined)

    joined.attach_function(attach_basic_stats, name="trait_stats", column=attribute)
    joined.attach_function(attach_class_distribution, name="categories", class_column=category)
    stats = joined.get_function_result("trait_stats")
    print(f"\n{attribute}: mean {stats['mean']:.2f}, min {stats['min']:.2f}, max {stats['max']:.2f}")
    for category_value, count in joined.get_function_result("categories").get("counts", {}).items():
        print(f"  {category_value}: {count} samples")

    complete = filter_features(joined, lambda gdf: gdf[stack.band_names].notna().all(axis=1), layer_manager=manager)
    print(f"Samples with every covariate: {len(complete.objects)} of {len(joined.objects)}")

    print("\nRendering...")
    first_band = stack.band_names[0]
    fig3 = plot_layer(stack, band=first_band, points=joined, attribute=attribute, category=category)
    fig3.savefig(os.path.join(output_dir, "3_samples.png"))

    fig4 = plot_scatter(joined, first_band, attribute, color_by=category)
    fig4.savefig(os.path.join(output_dir, "4_scatter.png"))

    fig5 = plot_histogram(joined, attribute, by_class=category)
    fig5.savefig(os.path.join(output_dir, "5_histogram.png"))

    fmap = plot_layer_interactive(stack, points=joined, band=first_band, attribute=attribute)
    fmap.save(os.path.join(output_dir, "6_map.html"))

    print(f"\nResults saved to {output_dir}")
    print("Available layers:")
    for i, layer_name in enumerate(manager.get_layer_names()):
        print(f"  {i + 1}. {layer_name}")

    return joined


if __name__ == "__main__":
    sample = create_sample_data(output_dir="data")
    paths = sample["paths"]

    run_example(
        [paths["elevation"], paths["ndvi"], paths["precipitation"]],
        paths["soil_samples"],
        points_crs="EPSG:32633",
    )
