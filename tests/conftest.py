import pytest

from xsection.models import FullPosition, SectionParams

LATITUDES = (0.0, 2.0, 4.0, 6.0, 8.0)
LONGITUDES = (10.0, 12.0, 14.0)
RADII = (5700.0, 5750.0, 5800.0, 5850.0)


def make_field(value=lambda lat, lon, r: 1.0):
    return {
        FullPosition(lat, lon, r): float(value(lat, lon, r))
        for lat in LATITUDES for lon in LONGITUDES for r in RADII
    }


@pytest.fixture
def constant_field():
    return make_field()


@pytest.fixture
def params():
    # meridional arc along lon 12, inside the data
    return SectionParams(
        pos0_latitude=2.0, pos0_longitude=12.0,
        pos1_latitude=6.0, pos1_longitude=12.0,
        margin_latitude=1.0, margin_longitude=1.0, margin_radius=25.0,
    )


def write_field(field, path):
    with open(path, "w") as f:
        f.write("# lat lon radius value\n")
        for pos, v in field.items():
            f.write(f"{pos.latitude} {pos.longitude} {pos.radius} {v}\n")
    return path
