# region Imports
from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Union
from .models import CrossSection, FullPosition, ScatteredField
# endregion

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# region Formatting
def simplest_string(value: float) -> str:
    """Integral values without the trailing '.0', everything else as repr."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def scalar_file_name(variable: str, scalar_type: str, tag: Optional[str] = None) -> str:
    return "scalar" + (f"_{tag}" if tag else "") + f".{variable}.{scalar_type}.lst"
# endregion

# region Scalar List Files
def read_scalar_list(path: PathLike) -> ScatteredField:
    """
    Read 'latitude longitude radius value' rows. Blank lines and anything
    after '#' are ignored.
    """
    path = Path(path)
    field: ScatteredField = {}
    with open(path) as f:
        for lineno, line in enumerate(f, start=1):
            line = line.split("#", 1)[0].strip()
            if not line:
                continue
            parts = line.split()
            if len(parts) < 4:
                raise ValueError(f"{path}:{lineno}: expected 'lat lon radius value', got {line!r}")
            try:
                lat, lon, radius, value = (float(x) for x in parts[:4])
                pos = FullPosition(lat, lon, radius)
            except ValueError as e:
                raise ValueError(f"{path}:{lineno}: {e}") from e
            if pos in field:
                raise ValueError(f"{path}:{lineno}: duplicate position {lat} {lon} {radius}")
            field[pos] = value

    logger.info(f"read {len(field)} values from {path}")
    return field


def write_scalar_list(field: ScatteredField, path: PathLike) -> None:
    with open(path, "w") as f:
        for pos, value in field.items():
            f.write(f"{pos.latitude:.4f} {pos.longitude:.4f} {simplest_string(pos.radius)} {value!r}\n")
# endregion

# region Section Output
def write_section(section: CrossSection, path: PathLike) -> int:
    """Write 'distance latitude longitude radius value' rows. Returns the row count."""
    n = 0
    with open(path, "w") as f:
        for d, lat, lon, radius, value in section.rows():
            f.write(f"{simplest_string(d)} {lat:.4f} {lon:.4f} {simplest_string(radius)} {value!r}\n")
            n += 1
    logger.info(f"wrote {n} rows to {path}")
    return n
# endregion
