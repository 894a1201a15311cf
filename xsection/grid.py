# region Imports
import math
from typing import Dict, Iterable, Tuple
import numpy as np
from .config import GRID_PRECISION, LATITUDE_DECIMALS
from .models import HorizontalPosition, SectionParams
from .geometry import azimuth_deg, epicentral_distance_deg, point_along_azimuth
# endregion

# Ratios are rounded to this many decimals before floor/ceil so that
# 9.9999999999 counts as 10
_RATIO_DECIMALS = 9

# region Grid Intervals
def nice_interval(raw: float) -> float:
    """Round a spacing down to 1, 2 or 5 times a power of ten."""
    if not np.isfinite(raw) or raw <= 0:
        raise ValueError(f"Grid interval decision went wrong for spacing {raw}")
    power = math.floor(round(math.log10(raw), _RATIO_DECIMALS))
    coef = round(raw / 10.0 ** power, _RATIO_DECIMALS)
    if coef < 1 or coef >= 10:
        raise ValueError(f"Grid interval decision went wrong for spacing {raw}")
    if coef < 2:
        return 1.0 * 10.0 ** power
    if coef < 5:
        return 2.0 * 10.0 ** power
    return 5.0 * 10.0 ** power


def decide_grid_interval(values: Iterable[float], factor: int = 1) -> float:
    """
    Mean spacing of the distinct values, rounded by nice_interval, then
    subdivided by factor. E.g. radii every 50 km with factor 2 -> 25.
    """
    distinct = np.unique(np.asarray(list(values), dtype=np.float64))
    if distinct.size < 2:
        raise ValueError("At least two distinct values are needed to decide a grid interval")
    spacing = float(np.mean(np.diff(distinct)))
    return nice_interval(spacing) / factor


def latitude_interval(positions: Iterable[HorizontalPosition]) -> float:
    """Smallest non-zero spacing between distinct latitudes."""
    lats = np.unique([p.latitude for p in positions])
    if lats.size < 2:
        raise ValueError("At least two distinct latitudes are needed to decide the latitude interval")
    diffs = np.diff(lats)
    diffs = diffs[diffs > 10.0 ** -LATITUDE_DECIMALS / 2]
    return float(np.min(diffs))
# endregion

# region Cross-section Sampler
def resolve_endpoints(params: SectionParams) -> Tuple[HorizontalPosition, HorizontalPosition]:
    pos0, pos1 = params.pos0, params.pos1
    start = point_along_azimuth(pos0, azimuth_deg(pos0, pos1), -params.before_pos0_deg)
    if params.use_after_pos1:
        end = point_along_azimuth(pos1, azimuth_deg(pos1, pos0), -params.after_pos_deg)
    else:
        end = point_along_azimuth(pos0, azimuth_deg(pos0, pos1), params.after_pos_deg)
    return start, end


def sample_count(distance: float, step: float) -> int:
    return int(math.floor(round(distance / step, _RATIO_DECIMALS))) + 1


def sample_positions(
    start: HorizontalPosition,
    end: HorizontalPosition,
    step: float,
) -> Dict[float, HorizontalPosition]:
    """Evenly spaced positions along the arc, keyed by distance from start [deg]."""
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    distance = epicentral_distance_deg(start, end)
    azimuth = azimuth_deg(start, end)
    out: Dict[float, HorizontalPosition] = {}
    for i in range(sample_count(distance, step)):
        d = round(i * step, GRID_PRECISION)
        out[d] = point_along_azimuth(start, azimuth, i * step)
    return out
# endregion

# region Regular Grid Points
def grid_points(lo: float, hi: float, interval: float, margin: float) -> np.ndarray:
    """Multiples of interval lying in [lo - margin, hi + margin]."""
    start = math.ceil(round((lo - margin) / interval, _RATIO_DECIMALS)) * interval
    end = math.floor(round((hi + margin) / interval, _RATIO_DECIMALS)) * interval
    n = int(round((end - start) / interval)) + 1
    if n <= 0:
        return np.empty(0)
    return np.round(start + np.arange(n) * interval, GRID_PRECISION)
# endregion
