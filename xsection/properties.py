# region Imports
from __future__ import annotations
import configparser
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from .config import (
    DEFAULT_MARGIN_DEG, DEFAULT_MARGIN_RADIUS_KM, DEFAULT_SCALE, DEFAULT_MASK_THRESHOLD,
    DEFAULT_VARIABLE, DEFAULT_SCALAR_TYPE,
)
from .models import SectionParams
# endregion

logger = logging.getLogger(__name__)

SECTION = "CrossSectionCreator"

REQUIRED_KEYS = ("pos0Latitude", "pos0Longitude", "pos1Latitude", "pos1Longitude", "perturbationPath")

# region Template
_TEMPLATE = f"""\
[{SECTION}]
## Path of a work folder (.)
#workPath = .
## (String) A tag to include in output folder name. If no tag is needed, leave this unset.
#folderTag =
## (String) A tag to include in output file names. If no tag is needed, leave this unset.
#tag =
## Path of perturbation file, must be set
perturbationPath = scalar.{DEFAULT_VARIABLE}.{DEFAULT_SCALAR_TYPE}.lst
## Path of perturbation file for mask, when mask is to be applied
#maskPath = scalar.{DEFAULT_VARIABLE}.PercentRatio.lst
## Variable type of perturbation file ({DEFAULT_VARIABLE})
#variable = {DEFAULT_VARIABLE}
## Scalar type of perturbation file ({DEFAULT_SCALAR_TYPE})
#scalarType = {DEFAULT_SCALAR_TYPE}

########## Settings of great circle arc to display in the cross section
## (double) Latitude of position 0, must be set
pos0Latitude =
## (double) Longitude of position 0, must be set
pos0Longitude =
## (double) Latitude of position 1, must be set
pos1Latitude =
## (double) Longitude of position 1, must be set
pos1Longitude =
## (double) Distance along arc before position 0 [deg] (0)
#beforePos0Deg = 0
## (double) Distance along arc after position 0 [deg]. If not set, the following afterPos1Deg will be used.
#afterPos0Deg =
## (double) Distance along arc after position 1 [deg] (0)
#afterPos1Deg = 0

########## Radius display settings
## (double) Radius of zero point of vertical axis (0)
#zeroPointRadius = 0
## Name of zero point of vertical axis (0)
#zeroPointName = 0
## (boolean) Whether to flip vertical axis (false)
#flipVerticalAxis = false

########## The following should be set to half of dLatitude, dLongitude, and dRadius used to design voxels (or smaller).
## (double) Latitude margin at both ends of region [km]. If this is unset, the following marginLatitudeDeg will be used.
#marginLatitudeKm =
## (double) Latitude margin at both ends of region [deg] ({DEFAULT_MARGIN_DEG})
#marginLatitudeDeg = {DEFAULT_MARGIN_DEG}
## (double) Longitude margin at both ends of region [km]. If this is unset, the following marginLongitudeDeg will be used.
#marginLongitudeKm =
## (double) Longitude margin at both ends of region [deg] ({DEFAULT_MARGIN_DEG})
#marginLongitudeDeg = {DEFAULT_MARGIN_DEG}
## (double) Radius margin at both ends of region [km] ({DEFAULT_MARGIN_RADIUS_KM:g})
#marginRadiusKm = {DEFAULT_MARGIN_RADIUS_KM:g}

########## Parameters for perturbation values
## (double) Range of percent scale ({DEFAULT_SCALE:g})
#scale = {DEFAULT_SCALE:g}
## (boolean) Whether to display map as mosaic without smoothing (false)
#mosaic = false
## (double) Threshold for mask ({DEFAULT_MASK_THRESHOLD})
#maskThreshold = {DEFAULT_MASK_THRESHOLD}
"""


def write_default_properties(path: Path) -> Path:
    """Write a commented template. An existing file is never overwritten."""
    path = Path(path)
    with open(path, "x") as f:
        f.write(_TEMPLATE)
    logger.info(f"{path} is created.")
    return path
# endregion

# region Parsing Helpers
def _get(sec: configparser.SectionProxy, key: str) -> Optional[str]:
    value = sec.get(key)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _float(sec, key: str, default: Optional[float] = None) -> float:
    raw = _get(sec, key)
    if raw is None:
        if default is None:
            raise ValueError(f"{key} must be set")
        return float(default)
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{key}: cannot parse {raw!r} as a number") from e


def _bool(sec, key: str, default: bool = False) -> bool:
    if _get(sec, key) is None:
        return default
    try:
        return sec.getboolean(key)
    except ValueError as e:
        raise ValueError(f"{key}: cannot parse {sec.get(key)!r} as a boolean") from e


def _margin(sec, name: str) -> tuple:
    """(value, in_km) from either margin<name>Km or margin<name>Deg."""
    if _get(sec, f"margin{name}Km") is not None:
        return _float(sec, f"margin{name}Km"), True
    return _float(sec, f"margin{name}Deg", DEFAULT_MARGIN_DEG), False
# endregion

# region Loading
def params_from_section(sec, base: Path) -> SectionParams:
    missing = [k for k in REQUIRED_KEYS if _get(sec, k) is None]
    if missing:
        raise ValueError(f"missing required properties: {', '.join(missing)}")

    work_path = base / (_get(sec, "workPath") or ".")
    mask = _get(sec, "maskPath")

    if _get(sec, "afterPos0Deg") is not None:
        after, use_after_pos1 = _float(sec, "afterPos0Deg"), False
    else:
        after, use_after_pos1 = _float(sec, "afterPos1Deg", 0.0), True

    margin_lat, lat_km = _margin(sec, "Latitude")
    margin_lon, lon_km = _margin(sec, "Longitude")

    return SectionParams(
        pos0_latitude=_float(sec, "pos0Latitude"),
        pos0_longitude=_float(sec, "pos0Longitude"),
        pos1_latitude=_float(sec, "pos1Latitude"),
        pos1_longitude=_float(sec, "pos1Longitude"),
        before_pos0_deg=_float(sec, "beforePos0Deg", 0.0),
        after_pos_deg=after,
        use_after_pos1=use_after_pos1,
        zero_point_radius=_float(sec, "zeroPointRadius", 0.0),
        zero_point_name=_get(sec, "zeroPointName") or "0",
        flip_vertical_axis=_bool(sec, "flipVerticalAxis"),
        margin_latitude=margin_lat,
        margin_latitude_in_km=lat_km,
        margin_longitude=margin_lon,
        margin_longitude_in_km=lon_km,
        margin_radius=_float(sec, "marginRadiusKm", DEFAULT_MARGIN_RADIUS_KM),
        scale=_float(sec, "scale", DEFAULT_SCALE),
        mosaic=_bool(sec, "mosaic"),
        mask_threshold=_float(sec, "maskThreshold", DEFAULT_MASK_THRESHOLD),
        variable=_get(sec, "variable") or DEFAULT_VARIABLE,
        scalar_type=_get(sec, "scalarType") or DEFAULT_SCALAR_TYPE,
        tag=_get(sec, "tag"),
        folder_tag=_get(sec, "folderTag"),
        work_path=work_path,
        perturbation_path=work_path / _get(sec, "perturbationPath"),
        mask_path=(work_path / mask) if mask else None,
    )


def _read_properties(path: Path, overrides: Optional[Dict[str, Any]] = None) -> configparser.ConfigParser:
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str  # keep camelCase keys
    with open(path) as f:
        parser.read_file(f)
    if not parser.has_section(SECTION):
        raise ValueError(f"{path}: no [{SECTION}] section")
    for k, v in (overrides or {}).items():
        parser[SECTION][k] = str(v)
    return parser


def load_params(path: Path, overrides: Optional[Dict[str, Any]] = None) -> SectionParams:
    """
    Read a property file into SectionParams. `overrides` are applied on top
    of the file, keyed by property name. Paths are relative to workPath,
    which is itself relative to the property file's folder.
    """
    path = Path(path)
    return params_from_section(_read_properties(path, overrides)[SECTION], path.parent)


def dump_params(path: Path, source: Path, overrides: Optional[Dict[str, Any]] = None) -> None:
    """Write the effective properties of a run (file plus overrides) next to its outputs."""
    parser = _read_properties(Path(source), overrides)
    with open(path, "w") as f:
        parser.write(f)
# endregion
