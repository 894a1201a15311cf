import pytest

from xsection.properties import SECTION, dump_params, load_params, write_default_properties

BASE = f"""\
[{SECTION}]
pos0Latitude = 2
pos0Longitude = 12
pos1Latitude = 6
pos1Longitude = 12
perturbationPath = field.lst
"""


def _write(tmp_path, extra=""):
    path = tmp_path / "x.properties"
    path.write_text(BASE + extra)
    return path


def test_template_refuses_overwrite(tmp_path):
    path = write_default_properties(tmp_path / "t.properties")
    assert f"[{SECTION}]" in path.read_text()
    with pytest.raises(FileExistsError):
        write_default_properties(path)


def test_template_needs_positions(tmp_path):
    path = write_default_properties(tmp_path / "t.properties")
    with pytest.raises(ValueError, match="pos0Latitude"):
        load_params(path)


def test_defaults(tmp_path):
    params = load_params(_write(tmp_path))
    assert params.pos0_latitude == 2.0
    assert params.margin_latitude == 2.5 and not params.margin_latitude_in_km
    assert params.margin_radius == 25.0
    assert params.scale == 3.0
    assert not params.mosaic
    assert params.variable == "Vs" and params.scalar_type == "Percent"
    assert params.tag is None and params.mask_path is None
    assert params.use_after_pos1 and params.after_pos_deg == 0.0
    assert params.perturbation_path == tmp_path / "field.lst"


def test_paths_relative_to_work_path(tmp_path):
    params = load_params(_write(tmp_path, "workPath = data\nmaskPath = mask.lst\n"))
    assert params.work_path == tmp_path / "data"
    assert params.perturbation_path == tmp_path / "data" / "field.lst"
    assert params.mask_path == tmp_path / "data" / "mask.lst"


def test_km_margin_overrides_deg(tmp_path):
    params = load_params(_write(tmp_path, "marginLatitudeKm = 100\nmarginLatitudeDeg = 1\nmarginLongitudeDeg = 1.5\n"))
    assert params.margin_latitude == 100.0 and params.margin_latitude_in_km
    assert params.margin_longitude == 1.5 and not params.margin_longitude_in_km


def test_after_pos0_overrides_after_pos1(tmp_path):
    params = load_params(_write(tmp_path, "afterPos0Deg = 10\nafterPos1Deg = 3\n"))
    assert params.after_pos_deg == 10.0 and not params.use_after_pos1


def test_overrides(tmp_path):
    params = load_params(_write(tmp_path, "mosaic = false\n"), {"mosaic": "true"})
    assert params.mosaic


@pytest.mark.parametrize("extra", [
    "marginRadiusKm = 0\n",
    "marginLatitudeDeg = -1\n",
    "scale = -1\n",
    "zeroPointRadius = -5\n",
    "maskThreshold = -0.1\n",
    "scale = abc\n",
    "mosaic = maybe\n",
])
def test_invalid_values(tmp_path, extra):
    with pytest.raises(ValueError):
        load_params(_write(tmp_path, extra))


def test_latitude_out_of_range(tmp_path):
    path = tmp_path / "x.properties"
    path.write_text(BASE.replace("pos1Latitude = 6", "pos1Latitude = 95"))
    with pytest.raises(ValueError):
        load_params(path)


def test_missing_section(tmp_path):
    path = tmp_path / "x.properties"
    path.write_text("[Other]\nfoo = 1\n")
    with pytest.raises(ValueError, match=SECTION):
        load_params(path)


def test_dump_params_records_overrides(tmp_path):
    source = _write(tmp_path, "scale = 2\n")
    dumped = tmp_path / "copy.properties"
    dump_params(dumped, source, {"mosaic": "true", "scale": "4"})
    params = load_params(dumped)
    assert params.mosaic
    assert params.scale == 4.0
    assert params.pos1_latitude == 6.0
