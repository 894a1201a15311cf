import logging

import pytest

from xsection.models import SectionParams
from xsection.section import compute_cross_section
from xsection.shellscript import (
    plot_file_root, run_script, scale_label, section_script_text, write_annotation_file, write_cp_mask,
    write_scripts,
)


@pytest.mark.parametrize("variable, scalar_type, label", [
    ("Vs", "Percent", "@~d@~Vs/Vs (%)"),
    ("Vp", "Delta", "@~d@~Vp (km/s)"),
    ("RHO", "Absolute", "@~r@~ (g/cm@+3@+)"),
    ("MU", "Absolute", "@~m@~ (GPa)"),
    ("XI", "Absolute", "@~x@~"),
    ("Vs", "PercentRatio", "@~d@~Vs/Vs Ratio"),
    ("Vs", "Kernel", "Sensitivity (normalized)"),
])
def test_scale_label(variable, scalar_type, label):
    assert scale_label(variable, scalar_type) == label


def test_scale_label_unsupported():
    with pytest.raises(ValueError):
        scale_label("Vs", "Whatever")


def test_plot_file_root(params):
    assert plot_file_root(params) == "vsPercent"
    assert plot_file_root(SectionParams(0, 0, 1, 1, tag="run1")) == "vsPercent_run1_"


def test_annotation_file(tmp_path):
    path = tmp_path / "rAnnotation.txt"
    write_annotation_file([3480.0, 3505.0, 3517.5, 3530.0], path, 3505.0, "D''", flip=False)
    assert path.read_text().splitlines() == ["3480 a -25", "3505 a D''", "3517.5 f", "3530 a 25"]

    write_annotation_file([3480.0, 3505.0, 3530.0], path, 3505.0, "D''", flip=True)
    assert path.read_text().splitlines() == ["3480 a 25", "3505 a D''", "3530 a -25"]


def test_cp_mask(tmp_path):
    write_cp_mask(tmp_path / "cp_mask.cpt", 0.3)
    assert (tmp_path / "cp_mask.cpt").read_text().startswith("0 black 0.3 black\n")


def test_section_script(constant_field, params):
    section = compute_cross_section(constant_field, params)
    text = section_script_text(section, params, "scalar_XZ.Vs.Percent.lst")
    assert text.startswith("#!/bin/sh\n")
    assert "cat scalar_XZ.Vs.Percent.lst" in text
    assert "-I1/25" in text
    assert "0mask.grd" not in text
    assert "outputps=vsPercentSection.eps" in text
    assert "MP=3" in text

    masked = section_script_text(section, params, "scalar_XZ.Vs.Percent.lst", "scalar_forMaskXZ.Vs.Percent.lst")
    assert "gmt xyz2grd -G0mask.grd" in masked
    assert "-Ccp_mask.cpt" in masked


def test_write_scripts(constant_field, params, tmp_path):
    section = compute_cross_section(constant_field, params)
    script = write_scripts(section, params, tmp_path, "scalar_XZ.Vs.Percent.lst")
    assert script == tmp_path / "vsPercentSection.sh"
    assert (tmp_path / "cp_master.cpt").exists()
    assert not (tmp_path / "cp_mask.cpt").exists()
    assert (tmp_path / "rAnnotation.txt").read_text().splitlines() == [
        "5675 a 5675", "5700 f", "5750 f", "5800 f", "5850 f", "5875 a 5875"]


def test_run_script_success(tmp_path):
    script = tmp_path / "ok.sh"
    script.write_text("echo done > out.txt\n")
    assert run_script(script) == 0
    assert (tmp_path / "out.txt").read_text() == "done\n"


def test_run_script_failure_is_logged(tmp_path, caplog):
    script = tmp_path / "bad.sh"
    script.write_text("exit 3\n")
    with caplog.at_level(logging.ERROR):
        assert run_script(script) == 3
    assert "exited with status 3" in caplog.text


def test_run_script_missing_folder_is_logged(tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        assert run_script(tmp_path / "missing" / "x.sh") == -1
    assert "could not run" in caplog.text


def test_region_ends_on_last_sample(constant_field):
    # arc of 4.3 deg sampled every 1 deg: the last sample is at 4
    params = SectionParams(pos0_latitude=2.0, pos0_longitude=12.0, pos1_latitude=6.3, pos1_longitude=12.0,
                           margin_latitude=1.0, margin_longitude=1.0)
    section = compute_cross_section(constant_field, params)
    assert section.sampled_distance == 4.0
    text = section_script_text(section, params, "scalar_XZ.Vs.Percent.lst")
    assert "gmt xyz2grd -G0model.grd -R0/4/5675/5875 -I1/25 -di0" in text
    assert "R='-R0/4/5675/5875'" in text
    assert "J='-JP60+a+t2'" in text
