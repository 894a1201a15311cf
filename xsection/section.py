# region Header
"""
section.py - cross-section pipeline

Stages, each a function of the previous one's output:
  resolve endpoints -> sample points -> west-east resampling
  -> meridional interpolation per sample -> radial regridding

A sample point without coverage is skipped, never fatal.
"""
# endregion

# region Imports
from __future__ import annotations
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple
import numpy as np

from .models import CrossSection, FullPosition, HorizontalPosition, ScatteredField, SectionParams, Trace
from .geometry import crosses_date_line, epicentral_distance_deg, km2deg
from .grid import decide_grid_interval, latitude_interval, nice_interval, resolve_endpoints, sample_positions
from .connectivity import extract_latitude_run
from .interpolation import interpolate_on_grid, meridional_value, resample_west_east
# endregion

logger = logging.getLogger(__name__)

# region Geometry
@dataclass(frozen=True)
class SectionGeometry:
    """Sampling layout shared by a field and its mask."""
    samples: Dict[float, HorizontalPosition]
    distance: float
    horizontal_interval: float
    radial_interval: float
    radii: Tuple[float, ...]
    mean_radius: float
    cross_date_line: bool


def build_geometry(field: ScatteredField, params: SectionParams) -> SectionGeometry:
    if not field:
        raise ValueError("No values given; the input field is empty")
    positions = list(field)

    start, end = resolve_endpoints(params)
    distance = epicentral_distance_deg(start, end)
    horizontal_interval = nice_interval(latitude_interval(positions)) / params.horizontal_factor
    samples = sample_positions(start, end, horizontal_interval)
    logger.info(f"{len(samples)} sample points along {distance:.4f} deg "
                f"(every {horizontal_interval} deg)")

    radii = tuple(sorted({p.radius for p in positions}))
    radial_interval = decide_grid_interval(radii, params.vertical_factor)
    logger.info(f"{len(radii)} radii, radial grid every {radial_interval} km")

    return SectionGeometry(
        samples=samples,
        distance=distance,
        horizontal_interval=horizontal_interval,
        radial_interval=radial_interval,
        radii=radii,
        mean_radius=float(np.mean(radii)),
        cross_date_line=crosses_date_line(samples.values()),
    )
# endregion

# region Validation
def validate_field(field: ScatteredField, allowed: Iterable[FullPosition]) -> None:
    allowed = set(allowed)
    stray = [p for p in field if p not in allowed]
    if stray:
        raise ValueError(f"field contains {len(stray)} positions not in the reference field, "
                         f"e.g. {stray[0]}")
# endregion

# region Meridian Index
def _index_by_meridian(resampled: ScatteredField) -> Dict[float, Dict[float, Dict[float, float]]]:
    """longitude -> radius -> latitude -> value"""
    index: Dict[float, Dict[float, Dict[float, float]]] = defaultdict(lambda: defaultdict(dict))
    for pos, value in resampled.items():
        index[pos.longitude][pos.radius][pos.latitude] = value
    return index
# endregion

# region Pipeline
def compute_cross_section(
    field: ScatteredField,
    params: SectionParams,
    geometry: Optional[SectionGeometry] = None,
) -> CrossSection:
    """
    Sample `field` on the arc described by `params`. Pass the geometry of
    another field (e.g. when computing a mask) to reuse its sampling.
    """
    if geometry is None:
        geometry = build_geometry(field, params)

    margin_lat_deg = (km2deg(params.margin_latitude, geometry.mean_radius)
                      if params.margin_latitude_in_km else params.margin_latitude)

    # region West-east Resampling
    sample_lons = sorted({p.longitude_for(geometry.cross_date_line) for p in geometry.samples.values()})
    resampled = resample_west_east(
        field, sample_lons, params.margin_longitude, params.margin_longitude_in_km,
        geometry.mean_radius, geometry.cross_date_line, params.mosaic,
    )
    meridians = _index_by_meridian(resampled)
    logger.info(f"resampled {len(resampled)} values onto {len(sample_lons)} longitudes")
    # endregion

    traces: Dict[float, Trace] = {}
    for d in sorted(geometry.samples):
        pos = geometry.samples[d]

        # region Latitude Run
        columns = meridians.get(pos.longitude)
        if not columns:
            logger.debug(f"no data on longitude {pos.longitude} (distance {d})")
            continue
        lats = sorted({lat for column in columns.values() for lat in column})
        run = extract_latitude_run(lats, pos.latitude, margin_lat_deg)
        if run is None:
            logger.debug(f"latitude {pos.latitude} not covered on longitude {pos.longitude} (distance {d})")
            continue
        # endregion

        # region Vertical Trace
        rs, vs = [], []
        for radius in geometry.radii:
            v = meridional_value(run, columns.get(radius, {}), pos.latitude, margin_lat_deg, params.mosaic)
            if v is not None:
                rs.append(radius)
                vs.append(v)
        if not rs:
            continue
        traces[d] = interpolate_on_grid(Trace(rs, vs), geometry.radial_interval,
                                        params.margin_radius, params.mosaic)
        # endregion

    logger.info(f"{len(traces)} of {len(geometry.samples)} sample points have coverage")

    return CrossSection(
        samples=geometry.samples,
        traces=traces,
        distance=geometry.distance,
        horizontal_interval=geometry.horizontal_interval,
        radial_interval=geometry.radial_interval,
        radii=geometry.radii,
        margin_radius=params.margin_radius,
        cross_date_line=geometry.cross_date_line,
    )
# endregion
