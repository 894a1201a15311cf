import pytest

from xsection.cli import main
from xsection.properties import SECTION, load_params

from conftest import make_field, write_field


@pytest.fixture
def workdir(tmp_path):
    field = make_field()
    write_field(field, tmp_path / "field.lst")
    write_field({pos: 0.5 for pos in field}, tmp_path / "mask.lst")
    return tmp_path


def _properties(workdir, extra=""):
    path = workdir / "x.properties"
    path.write_text(
        f"[{SECTION}]\n"
        "pos0Latitude = 2\npos0Longitude = 12\npos1Latitude = 6\npos1Longitude = 12\n"
        "perturbationPath = field.lst\n"
        "marginLatitudeDeg = 1\nmarginLongitudeDeg = 1\n" + extra
    )
    return path


def test_template(tmp_path):
    path = tmp_path / "t.properties"
    assert main(["template", str(path)]) == 0
    assert path.exists()
    assert main(["template", str(path)]) == 1


def test_run(workdir):
    out = workdir / "out"
    assert main(["-q", "run", str(_properties(workdir)), "--out", str(out)]) == 0

    lines = (out / "scalar_XZ.Vs.Percent.lst").read_text().splitlines()
    assert len(lines) == 45
    assert all(line.endswith(" 1.0") for line in lines)
    dumped = (out / f"_{SECTION}.properties").read_text()
    assert "pos0Latitude = 2" in dumped and "perturbationPath = field.lst" in dumped
    assert "mosaic" not in dumped
    assert (out / "vsPercentSection.sh").exists()
    assert (out / "cp_master.cpt").exists()
    assert (out / "rAnnotation.txt").exists()
    assert not (out / "cp_mask.cpt").exists()


def test_run_with_mask_and_tag(workdir):
    out = workdir / "out"
    props = _properties(workdir, "maskPath = mask.lst\ntag = t1\n")
    assert main(["run", str(props), "--out", str(out), "--mosaic"]) == 0

    mask_lines = (out / "scalar_t1_forMaskXZ.Vs.Percent.lst").read_text().splitlines()
    assert len(mask_lines) == 45
    assert all(line.endswith(" 0.5") for line in mask_lines)
    assert (out / "scalar_t1_XZ.Vs.Percent.lst").exists()
    assert (out / "cp_mask.cpt").exists()
    assert "0mask.grd" in (out / "vsPercent_t1_Section.sh").read_text()

    # the copied properties carry the command-line override
    dumped = out / f"_{SECTION}.properties"
    assert "mosaic = true" in dumped.read_text()
    assert load_params(dumped).mosaic


def test_run_into_timestamped_folder(workdir):
    assert main(["run", str(_properties(workdir, "folderTag = demo\n"))]) == 0
    folders = list(workdir.glob("crossSection_demo_*"))
    assert len(folders) == 1
    assert (folders[0] / "scalar_XZ.Vs.Percent.lst").exists()


def test_run_preview(workdir):
    out = workdir / "out"
    assert main(["run", str(_properties(workdir)), "--out", str(out), "--preview"]) == 0
    assert (out / "vsPercentPreview.png").read_bytes().startswith(b"\x89PNG")


def test_run_missing_field_file(workdir, caplog):
    props = _properties(workdir).read_text().replace("field.lst", "nothing.lst")
    (workdir / "x.properties").write_text(props)
    assert main(["run", str(workdir / "x.properties"), "--out", str(workdir / "out")]) == 1
    assert "nothing.lst" in caplog.text


def test_run_invalid_properties(workdir):
    assert main(["run", str(_properties(workdir, "scale = 0\n")), "--out", str(workdir / "out")]) == 1


def test_run_stray_mask(workdir):
    (workdir / "mask.lst").write_text("50 50 5700 1\n")
    props = _properties(workdir, "maskPath = mask.lst\n")
    assert main(["run", str(props), "--out", str(workdir / "out")]) == 1
