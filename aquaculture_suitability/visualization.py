"""
Visualization Module for Suitability Results
=============================================

Generates maps to communicate suitability results for one species.

  1. Suitable area per zone (choropleth, km²)
  2. Percent of each zone that is suitable (choropleth, %)
  3. Suitability mask over the zone outlines (raster map)

Plots only read the result dict from pipeline.run_suitability_analysis;
they never modify it.
"""

from pathlib import Path
from typing import Dict, Optional

import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
import numpy as np
from pyproj import CRS as ProjCRS

from .config import AREA_CMAP, PERCENT_CMAP, PLOT_DPI, ZONE_NAME_FIELD
from .raster_processing.grid import layer_bounds


def _finish(fig, save_path: Optional[str], show: bool):
    plt.tight_layout()

    if save_path:
        Path(save_path).parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(save_path, dpi=PLOT_DPI, bbox_inches='tight')
        print(f"Saved: {save_path}")

    if show:
        plt.show()
    else:
        plt.close(fig)


def _axis_labels(crs):
    """Axis labels for a CRS: degrees on geographic grids, else easting/northing."""
    if crs is None:
        return 'x', 'y'
    crs = ProjCRS.from_user_input(crs)
    if crs.is_geographic:
        return 'Longitude (°)', 'Latitude (°)'
    unit = crs.axis_info[0].unit_name if crs.axis_info else 'unknown'
    return f'Easting ({unit})', f'Northing ({unit})'


def _label_zones(ax, report, zone_field: str):
    """Write each zone's name at a point guaranteed inside its polygon."""
    for name, geom in zip(report[zone_field], report.geometry):
        if geom is None or geom.is_empty:
            continue
        point = geom.representative_point()
        ax.annotate(str(name), (point.x, point.y), ha='center', fontsize=8,
                    color='#1A1A2E', alpha=0.85)


def _plot_choropleth(report, column: str, cmap: str, legend_label: str, title: str,
                     zone_field: str, save_path: Optional[str], show: bool):
    fig, ax = plt.subplots(figsize=(9, 11))

    report.plot(
        column=column,
        ax=ax,
        cmap=cmap,
        edgecolor='black',
        linewidth=0.6,
        legend=True,
        legend_kwds={'label': legend_label, 'shrink': 0.6},
    )
    _label_zones(ax, report, zone_field)

    xlabel, ylabel = _axis_labels(report.crs)
    ax.set_xlabel(xlabel, fontsize=12)
    ax.set_ylabel(ylabel, fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.grid(True, alpha=0.3)

    _finish(fig, save_path, show)
    return fig


def plot_suitable_area_map(result: Dict, zone_field: str = ZONE_NAME_FIELD,
                           save_path: Optional[str] = None, show: bool = False):
    """
    Choropleth of total suitable area (km²) per zone.

    Args:
        result: Dict from run_suitability_analysis
        zone_field: Zone name column
        save_path: Optional path to save figure
        show: Display the figure interactively (default: False)
    """
    species = result['species'] or 'Selected species'
    total = result['report']['suitable_area_km2'].sum()
    return _plot_choropleth(
        result['report'],
        column='suitable_area_km2',
        cmap=AREA_CMAP,
        legend_label='Suitable area (km²)',
        title=f'{species}: Suitable Area by Zone\nTotal: {total:,.0f} km²',
        zone_field=zone_field,
        save_path=save_path,
        show=show,
    )


def plot_percent_suitable_map(result: Dict, zone_field: str = ZONE_NAME_FIELD,
                              save_path: Optional[str] = None, show: bool = False):
    """
    Choropleth of the percentage of each zone that is suitable.

    Args:
        result: Dict from run_suitability_analysis
        zone_field: Zone name column
        save_path: Optional path to save figure
        show: Display the figure interactively (default: False)
    """
    species = result['species'] or 'Selected species'
    return _plot_choropleth(
        result['report'],
        column='pct_suitable',
        cmap=PERCENT_CMAP,
        legend_label='Suitable area (% of zone)',
        title=f'{species}: Percent of Zone Suitable',
        zone_field=zone_field,
        save_path=save_path,
        show=show,
    )


def plot_suitability_mask(result: Dict, save_path: Optional[str] = None,
                          show: bool = False):
    """
    Map of suitable cells with zone outlines on top.

    Args:
        result: Dict from run_suitability_analysis
        save_path: Optional path to save figure
        show: Display the figure interactively (default: False)
    """
    mask = result['suitability_mask']
    west, south, east, north = layer_bounds(mask)

    fig, ax = plt.subplots(figsize=(9, 11))
    ax.set_facecolor('#E8EEF2')

    suitable = np.where(mask['values'] == 1.0, 1.0, np.nan)
    ax.imshow(suitable, extent=[west, east, south, north], origin='upper',
              cmap='Greens', vmin=0, vmax=1.2, interpolation='nearest', zorder=2)

    zones = result['report']
    if zones.crs is not None and mask['crs'] is not None:
        zones = zones.to_crs(mask['crs'].to_wkt())
    zones.boundary.plot(ax=ax, color='#1E5AA8', linewidth=1.0, zorder=3)

    species = result['species'] or 'Selected species'
    ax.set_xlim(west, east)
    ax.set_ylim(south, north)
    xlabel, ylabel = _axis_labels(mask['crs'])
    ax.set_xlabel(xlabel, fontsize=12)
    ax.set_ylabel(ylabel, fontsize=12)
    ax.set_title(
        f'{species}: Suitable Cells\n'
        f'SST {result["temp_range_c"][0]}-{result["temp_range_c"][1]} °C | '
        f'Depth {result["depth_range_m"][0]}-{result["depth_range_m"][1]} m',
        fontsize=14, fontweight='bold',
    )

    legend_elements = [
        mpatches.Patch(facecolor='#2E8B57', label='Suitable'),
        mpatches.Patch(facecolor='none', edgecolor='#1E5AA8', label='Zone boundary'),
    ]
    ax.legend(handles=legend_elements, loc='lower left', fontsize=10)
    ax.grid(True, alpha=0.3)

    _finish(fig, save_path, show)
    return fig


def plot_all(result: Dict, save_dir: Optional[str] = None,
             zone_field: str = ZONE_NAME_FIELD, show: bool = False):
    """
    Generate all maps for one species run.

    Args:
        result: Dict from run_suitability_analysis
        save_dir: Optional directory to save all figures
        zone_field: Zone name column
        show: Display each figure interactively (default: False)

    Returns:
        dict name → saved path (None when save_dir is None)
    """
    stem = "_".join(str(result['species'] or 'species').lower().split())

    def target(name):
        return str(Path(save_dir) / f"{stem}_{name}.png") if save_dir else None

    print("\n" + "=" * 60)
    print(f"GENERATING MAPS: {result['species'] or 'unnamed species'}")
    print("=" * 60)

    paths = {
        'suitable_area': target('suitable_area'),
        'percent_suitable': target('percent_suitable'),
        'suitability_mask': target('suitability_mask'),
    }

    print("\n[1/3] Suitable Area by Zone...")
    plot_suitable_area_map(result, zone_field=zone_field,
                           save_path=paths['suitable_area'], show=show)

    print("\n[2/3] Percent of Zone Suitable...")
    plot_percent_suitable_map(result, zone_field=zone_field,
                              save_path=paths['percent_suitable'], show=show)

    print("\n[3/3] Suitability Mask...")
    plot_suitability_mask(result, save_path=paths['suitability_mask'], show=show)

    print("\n" + "=" * 60)
    print("All maps generated!")
    if save_dir:
        print(f"Figures saved to: {save_dir}/")
    print("=" * 60)

    return paths
