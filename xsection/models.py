# models.py
from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple
import numpy as np

from .config import (
    LATITUDE_DECIMALS, LONGITUDE_DECIMALS, RADIUS_DECIMALS,
    DEFAULT_MARGIN_DEG, DEFAULT_MARGIN_RADIUS_KM, DEFAULT_SCALE, DEFAULT_MASK_THRESHOLD,
    DEFAULT_VARIABLE, DEFAULT_SCALAR_TYPE, GRID_SMOOTHING_FACTOR, VERTICAL_ENLARGE_FACTOR,
)

# region Positions
def canonical_longitude(lon: float) -> float:
    """Longitude in [-180, 180), rounded to LONGITUDE_DECIMALS."""
    lon = round(((float(lon) + 180.0) % 360.0) - 180.0, LONGITUDE_DECIMALS)
    if lon >= 180.0:
        lon -= 360.0
    return lon + 0.0  # drop -0.0


@dataclass(frozen=True)
class HorizontalPosition:
    latitude: float
    longitude: float

    def __post_init__(self):
        lat = float(self.latitude)
        if not -90.0 <= lat <= 90.0:
            raise ValueError(f"latitude {lat} out of range [-90:90]")
        object.__setattr__(self, "latitude", round(lat, LATITUDE_DECIMALS) + 0.0)
        object.__setattr__(self, "longitude", canonical_longitude(self.longitude))

    def longitude_for(self, cross_date_line: bool) -> float:
        if cross_date_line and self.longitude < 0:
            return self.longitude + 360.0
        return self.longitude


@dataclass(frozen=True)
class FullPosition(HorizontalPosition):
    radius: float = 0.0

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "radius", round(float(self.radius), RADIUS_DECIMALS) + 0.0)

    @property
    def horizontal(self) -> HorizontalPosition:
        return HorizontalPosition(self.latitude, self.longitude)


ScatteredField = Dict[FullPosition, float]
ResampledField = Dict[FullPosition, float]
# endregion

# region Trace
@dataclass(frozen=True, eq=False)
class Trace:
    """
    A sampled 1-D function: xs must be strictly increasing and the same
    length as ys.
    """
    xs: np.ndarray
    ys: np.ndarray

    def __post_init__(self):
        xs = np.asarray(self.xs, dtype=np.float64)
        ys = np.asarray(self.ys, dtype=np.float64)
        if xs.shape != ys.shape or xs.ndim != 1:
            raise ValueError(f"xs {xs.shape} and ys {ys.shape} must be 1-D and of equal length")
        if xs.size > 1 and np.any(np.diff(xs) <= 0):
            raise ValueError("xs must be strictly increasing")
        object.__setattr__(self, "xs", xs)
        object.__setattr__(self, "ys", ys)

    def __len__(self) -> int:
        return int(self.xs.size)

    @property
    def min_x(self) -> float:
        return float(self.xs[0])

    @property
    def max_x(self) -> float:
        return float(self.xs[-1])

    def nearest_index(self, x: float) -> int:
        # argmin returns the first hit, so ties go to the lower index
        return int(np.argmin(np.abs(self.xs - x)))

    def sub_trace(self, start: int, stop: int) -> "Trace":
        return Trace(self.xs[start:stop], self.ys[start:stop])
# endregion

# region Latitude Run
@dataclass(frozen=True)
class LatitudeRun:
    """A gap-free, sorted run of latitudes along one meridian."""
    latitudes: Tuple[float, ...]

    @property
    def first(self) -> float:
        return self.latitudes[0]

    @property
    def last(self) -> float:
        return self.latitudes[-1]

    def covers(self, target: float, margin: float) -> bool:
        return self.first - margin <= target < self.last + margin
# endregion

# region Section Parameters
@dataclass(frozen=True)
class SectionParams:
    """
    Everything a cross-section run needs. Built once (usually by
    properties.load_params) and handed to each pipeline stage.

    Margins are in km when the matching *_in_km flag is set, else degrees.
    margin_radius is always km.
    """
    pos0_latitude: float
    pos0_longitude: float
    pos1_latitude: float
    pos1_longitude: float
    before_pos0_deg: float = 0.0
    after_pos_deg: float = 0.0
    use_after_pos1: bool = True

    zero_point_radius: float = 0.0
    zero_point_name: str = "0"
    flip_vertical_axis: bool = False

    margin_latitude: float = DEFAULT_MARGIN_DEG
    margin_latitude_in_km: bool = False
    margin_longitude: float = DEFAULT_MARGIN_DEG
    margin_longitude_in_km: bool = False
    margin_radius: float = DEFAULT_MARGIN_RADIUS_KM

    scale: float = DEFAULT_SCALE
    mosaic: bool = False
    mask_threshold: float = DEFAULT_MASK_THRESHOLD

    variable: str = DEFAULT_VARIABLE
    scalar_type: str = DEFAULT_SCALAR_TYPE
    tag: Optional[str] = None
    folder_tag: Optional[str] = None
    work_path: Path = Path(".")
    perturbation_path: Optional[Path] = None
    mask_path: Optional[Path] = None

    horizontal_factor: int = GRID_SMOOTHING_FACTOR
    vertical_factor: int = VERTICAL_ENLARGE_FACTOR

    def __post_init__(self):
        for name in ("pos0_latitude", "pos1_latitude"):
            v = getattr(self, name)
            if not -90.0 <= v <= 90.0:
                raise ValueError(f"{name} must be in [-90:90], got {v}")
        if self.before_pos0_deg < 0 or self.after_pos_deg < 0:
            raise ValueError("arc extensions must not be negative")
        if self.zero_point_radius < 0:
            raise ValueError("zero_point_radius must be positive.")
        for name in ("margin_latitude", "margin_longitude", "margin_radius"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive.")
        if self.scale <= 0:
            raise ValueError("scale must be positive.")
        if self.mask_threshold < 0:
            raise ValueError("mask_threshold must not be negative.")
        if self.horizontal_factor < 1 or self.vertical_factor < 1:
            raise ValueError("grid factors must be at least 1")

    @property
    def pos0(self) -> HorizontalPosition:
        return HorizontalPosition(self.pos0_latitude, self.pos0_longitude)

    @property
    def pos1(self) -> HorizontalPosition:
        return HorizontalPosition(self.pos1_latitude, self.pos1_longitude)
# endregion

# region Output Grid
@dataclass
class CrossSection:
    """
    samples: every sample position along the arc, keyed by distance [deg].
    traces: (radius, value) trace on the regular radial grid, only for the
    samples that had coverage.
    """
    samples: Dict[float, HorizontalPosition]
    traces: Dict[float, Trace]
    distance: float
    horizontal_interval: float
    radial_interval: float
    radii: Sequence[float]
    margin_radius: float
    cross_date_line: bool = False

    @property
    def lower_radius(self) -> float:
        return float(self.radii[0]) - self.margin_radius

    @property
    def upper_radius(self) -> float:
        return float(self.radii[-1]) + self.margin_radius

    @property
    def sampled_distance(self) -> float:
        """Distance of the last sample point, a multiple of horizontal_interval."""
        return max(self.samples) if self.samples else 0.0

    def rows(self):
        """Yield (distance, latitude, longitude, radius, value) in output order."""
        for d in sorted(self.traces):
            pos = self.samples[d]
            tr = self.traces[d]
            lon = pos.longitude_for(self.cross_date_line)
            for r, v in zip(tr.xs, tr.ys):
                yield d, pos.latitude, lon, float(r), float(v)
# endregion
