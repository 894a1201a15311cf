# interpolation.py
# ----------------
# 1-D interpolation of Traces and the west-east line resampler.
#
# Two policies, picked by the `mosaic` flag:
#   - mosaic: nearest neighbour, values are copied from the data
#   - linear: piecewise-linear between data, end values held flat across
#     the margin
#
# A query is only answered inside [min_x - margin, max_x + margin]; beyond
# that the point is treated as uncovered.

from __future__ import annotations
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import numpy as np

from .config import GRID_PRECISION
from .models import FullPosition, LatitudeRun, ResampledField, ScatteredField, Trace
from .connectivity import split_at_gaps
from .geometry import km2deg_lon
from .grid import grid_points

# Grid points are rounded to GRID_PRECISION, so allow them to poke out of
# the domain by half a unit in the last place
_DOMAIN_TOL = 10.0 ** -GRID_PRECISION / 2


# -----------------------------
# Single trace
# -----------------------------

def in_domain(trace: Trace, x: float, margin: float, tol: float = 0.0) -> bool:
    return trace.min_x - margin - tol <= x <= trace.max_x + margin + tol


def interpolate_at_point(trace: Trace, x: float, margin: float, mosaic: bool) -> float:
    """Value of the trace at x. Raises ValueError when x is outside the domain."""
    if len(trace) == 0:
        raise ValueError("cannot interpolate an empty trace")
    if not in_domain(trace, x, margin):
        raise ValueError(f"sample point {x} out of range "
                         f"[{trace.min_x - margin}:{trace.max_x + margin}]")
    if mosaic:
        return float(trace.ys[trace.nearest_index(x)])
    return float(np.interp(x, trace.xs, trace.ys))


def interpolate_at_points(
    trace: Trace,
    points: Iterable[float],
    margin: float,
    mosaic: bool,
) -> Trace:
    """
    Interpolate at each of the sorted points. Points outside the domain are
    dropped, so the result may be shorter than `points`.
    """
    pts = np.asarray(list(points), dtype=np.float64)
    if len(trace) == 0 or pts.size == 0:
        return Trace(np.empty(0), np.empty(0))

    lo = trace.min_x - margin - _DOMAIN_TOL
    hi = trace.max_x + margin + _DOMAIN_TOL
    xs = pts[(lo <= pts) & (pts <= hi)]

    if mosaic:
        idx = np.argmin(np.abs(xs[:, None] - trace.xs[None, :]), axis=1)
        ys = trace.ys[idx]
    else:
        ys = np.interp(xs, trace.xs, trace.ys)
    return Trace(xs, ys)


def interpolate_on_grid(trace: Trace, interval: float, margin: float, mosaic: bool) -> Trace:
    """Resample at every multiple of interval inside the margin-extended domain."""
    if len(trace) == 0:
        return trace
    pts = grid_points(trace.min_x, trace.max_x, interval, margin)
    return interpolate_at_points(trace, pts, margin, mosaic)


# -----------------------------
# West-east line resampler
# -----------------------------

def _lines_by_latitude(
    field: ScatteredField,
    cross_date_line: bool,
) -> Dict[Tuple[float, float], List[Tuple[float, float]]]:
    """Group values into lines of constant (radius, latitude)."""
    lines: Dict[Tuple[float, float], List[Tuple[float, float]]] = defaultdict(list)
    for pos, value in field.items():
        lines[(pos.radius, pos.latitude)].append((pos.longitude_for(cross_date_line), float(value)))
    return lines


def resample_west_east(
    field: ScatteredField,
    sample_longitudes: Sequence[float],
    margin: float,
    margin_in_km: bool,
    mean_radius: float,
    cross_date_line: bool,
    mosaic: bool,
) -> ResampledField:
    """
    Interpolate the field along each line of latitude onto sample_longitudes.

    Each line is split at gaps first, so a value is only produced when a
    sample longitude lies within the margin of a run of real data. A km
    margin is converted to degrees of longitude on the small circle at that
    latitude, using mean_radius.
    """
    targets = np.unique(np.asarray(sample_longitudes, dtype=np.float64))
    resampled: ResampledField = {}

    lines = _lines_by_latitude(field, cross_date_line)
    for (radius, latitude) in sorted(lines):
        pairs = sorted(lines[(radius, latitude)])
        line = Trace([p[0] for p in pairs], [p[1] for p in pairs])
        margin_deg = km2deg_lon(margin, latitude, mean_radius) if margin_in_km else margin

        for start, stop in split_at_gaps(line.xs, margin_deg):
            run = interpolate_at_points(line.sub_trace(start, stop), targets, margin_deg, mosaic)
            for lon, value in zip(run.xs, run.ys):
                resampled[FullPosition(latitude, lon, radius)] = float(value)

    return resampled


# -----------------------------
# Meridional interpolation
# -----------------------------

def meridional_value(
    run: LatitudeRun,
    column: Mapping[float, float],
    target_latitude: float,
    margin: float,
    mosaic: bool,
) -> Optional[float]:
    """
    Value at target_latitude from the latitudes of `run`, for one longitude
    and radius. `column` maps latitude -> resampled value. Returns None when
    this radius has no data around the target.
    """
    lats = [lat for lat in run.latitudes if lat in column]
    if not lats:
        return None
    trace = Trace(lats, [column[lat] for lat in lats])
    if not in_domain(trace, target_latitude, margin):
        return None
    return interpolate_at_point(trace, target_latitude, margin, mosaic)
