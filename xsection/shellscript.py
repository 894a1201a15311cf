# shellscript.py
# ----------------
# GMT support files for a cross-section folder:
#   cp_master.cpt, cp_mask.cpt  color palettes
#   rAnnotation.txt             custom vertical-axis annotations
#   <root>Section.sh            script that grids and renders the section
#
# The text files written by listfile.write_section are the only input the
# script reads; column layout is 'distance lat lon radius value'.

from __future__ import annotations
import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from .listfile import simplest_string
from .models import CrossSection, SectionParams

logger = logging.getLogger(__name__)

_RADIUS_EPSILON = 1e-6 / 2

# Blue-white-red palette over [-3.5, 3.5], rescaled by makecpt to +-scale
_CP_MASTER = """\
-3.5 129 14  30 -3.088235294117647 129 14  30
-3.088235294117647 158 15  9 -2.6764705882352944 158 15  9
-2.6764705882352944 218 20  7 -2.264705882352941 218 20  7
-2.264705882352941 241 80  29 -1.8529411764705883 241 80  29
-1.8529411764705883 244 129  17 -1.441176470588235 244 129  17
-1.441176470588235 247 220  100 -1.0294117647058822 247 220  100
-1.0294117647058822 247 238  159 -0.6176470588235294 247 238  159
-0.6176470588235294 245 247  198 -0.20588235294117663 245 247  198
-0.20588235294117663 253 253  253 0.20588235294117663 253 253  253
0.20588235294117663 236 246  247 0.6176470588235299 236 246  247
0.6176470588235299 212 237  239 1.0294117647058822 212 237  239
1.0294117647058822 117 201  222 1.4411764705882355 117 201  222
1.4411764705882355 64 172  197 1.8529411764705879 64 172  197
1.8529411764705879 44 144  169 2.264705882352941 44 144  169
2.264705882352941 59 80  129 2.6764705882352935 59 80  129
2.6764705882352935 30 46  110 3.0882352941176467 30 46  110
3.0882352941176467 17 46  85 3.5 17 46  85
B       129 14  30
F       17 46  85
N       255 255 255
"""

_PARAM_NAMES = {
    "RHO": "@~r@~", "LAMBDA2MU": "(@~l@~+2@~m@~)", "LAMBDA": "@~l@~", "MU": "@~m@~",
    "KAPPA": "@~k@~", "ETA": "@~h@~", "XI": "@~x@~", "QMU": "Q@-@~m@~@-", "QKAPPA": "Q@-@~k@~@-",
}
_VELOCITIES = {"VP", "VS", "VB", "VPV", "VPH", "VSV", "VSH"}
_UNITLESS = {"R", "ETA", "XI"}


# -----------------------------
# Labels
# -----------------------------

def scale_label(variable: str, scalar_type: str) -> str:
    """Scale-bar label in GMT markup, e.g. '@~d@~Vs/Vs (%)'."""
    key = variable.upper()
    name = _PARAM_NAMES.get(key, variable)
    if key == "RHO":
        unit = "g/cm@+3@+"
    elif key in _VELOCITIES:
        unit = "km/s"
    elif key in _UNITLESS:
        unit = ""
    else:
        unit = "GPa"
    with_unit = f" ({unit})" if unit else ""

    st = scalar_type.upper().replace("_", "")
    if st == "ABSOLUTE":
        return name + with_unit
    if st == "DELTA":
        return "@~d@~" + name + with_unit
    if st == "PERCENT":
        return f"@~d@~{name}/{name} (%)"
    if st == "PERCENTDIFFERENCE":
        return f"@~d@~{name}/{name} Difference (%)"
    if st == "PERCENTRATIO":
        return f"@~d@~{name}/{name} Ratio"
    if st.startswith("KERNEL"):
        return "Sensitivity (normalized)"
    raise ValueError(f"Unsupported scalar type: {scalar_type}")


def plot_file_root(params: SectionParams) -> str:
    root = params.variable.lower() + params.scalar_type
    return root + (f"_{params.tag}_" if params.tag else "")


# -----------------------------
# Palettes and annotations
# -----------------------------

def write_cp_master(path: Path) -> None:
    Path(path).write_text(_CP_MASTER)


def write_cp_mask(path: Path, threshold: float) -> None:
    Path(path).write_text(f"0 black {threshold} black\nB black\nF white\nN 127.5\n")


def write_annotation_file(
    radii: Sequence[float],
    path: Path,
    zero_point_radius: float,
    zero_point_name: str,
    flip: bool,
) -> None:
    """
    One line per radius: the zero point is labelled by name, the two ends by
    their height above (or depth below, when flipped) the zero point, and
    the rest get a bare tick.
    """
    lines = []
    last = len(radii) - 1
    for i, r in enumerate(radii):
        if abs(r - zero_point_radius) < _RADIUS_EPSILON:
            lines.append(f"{simplest_string(r)} a {zero_point_name}")
        elif i == 0 or i == last:
            z = -(r - zero_point_radius) if flip else (r - zero_point_radius)
            lines.append(f"{simplest_string(r)} a {simplest_string(z)}")
        else:
            lines.append(f"{simplest_string(r)} f")
    Path(path).write_text("\n".join(lines) + "\n")


# -----------------------------
# Section script
# -----------------------------

def _xyz2grd(file_name: str, grd: str, region: str, increment: str) -> list:
    return [
        f"cat {file_name} | \\",
        "awk '{print $1,$4,$5}' | \\",
        f"gmt xyz2grd -G{grd} {region} {increment} -di0",
    ]


def section_script_text(
    section: CrossSection,
    params: SectionParams,
    scalar_file: str,
    mask_file: Optional[str] = None,
) -> str:
    d = simplest_string(section.sampled_distance)
    lo = simplest_string(section.lower_radius)
    hi = simplest_string(section.upper_radius)
    region = f"-R0/{d}/{lo}/{hi}"
    increment = f"-I{simplest_string(section.horizontal_interval)}/{simplest_string(section.radial_interval)}"
    root = plot_file_root(params)

    out = ["#!/bin/sh", "", "# create grid"]
    out += _xyz2grd(scalar_file, "0model.grd", region, increment)
    if mask_file:
        out += _xyz2grd(mask_file, "0mask.grd", region, increment)
    out += [
        "",
        "# GMT options",
        "gmt set COLOR_MODEL RGB",
        "gmt set PS_MEDIA 6000x6000",
        "gmt set PS_PAGE_ORIENTATION landscape",
        "gmt set MAP_DEFAULT_PEN black",
        "gmt set MAP_TITLE_OFFSET 1p",
        "gmt set FONT 50",
        "gmt set FONT_LABEL 50p,Helvetica,black",
        "gmt set MAP_ANNOT_OFFSET_PRIMARY 10p",
        "gmt set MAP_TICK_LENGTH_PRIMARY 10p",
        "",
        "# map parameters",
        f"R='{region}'",
        f"J='-JP60+a+t{simplest_string(section.sampled_distance / 2)}'",
        "B='-BWeSn -Bx30f10 -BycrAnnotation.txt'",
        "",
        f"outputps={root}Section.eps",
        f"MP={simplest_string(params.scale)}",
        "gmt makecpt -Ccp_master.cpt -T-$MP/$MP > cp.cpt",
        "",
        "#------- Panels",
        "gmt grdimage 0model.grd $B $J $R -Ccp.cpt -K -Y80 -X20 > $outputps",
    ]
    if mask_file:
        out.append("gmt grdimage 0mask.grd $J $R -Ccp_mask.cpt -G0/0/0 -t80 -K -O >> $outputps")
    out += [
        "",
        "#------- Scale",
        f"gmt psscale -Ccp.cpt -Dx2/-4+w12/0.8+h -B$MP+l\"{scale_label(params.variable, params.scalar_type)}\""
        " -K -O -Y2 -X5 >> $outputps",
        "",
        "#------- Finalize",
        "gmt pstext -N -F+jLM+f30p,Helvetica,black $J $R -O << END >> $outputps",
        "END",
        "",
        "gmt psconvert $outputps -E100 -Tf -A -Qg4",
        "gmt psconvert $outputps -E100 -Tg -A -Qg4",
        "",
        "#-------- Clear",
        "rm -rf cp.cpt gmt.conf gmt.history",
        "echo \"Done!\"",
    ]
    return "\n".join(out) + "\n"


def write_scripts(
    section: CrossSection,
    params: SectionParams,
    out_dir: Path,
    scalar_file: str,
    mask_file: Optional[str] = None,
) -> Path:
    """Write palettes, annotation file and the section script. Returns the script path."""
    out_dir = Path(out_dir)
    write_cp_master(out_dir / "cp_master.cpt")
    if mask_file:
        write_cp_mask(out_dir / "cp_mask.cpt", params.mask_threshold)
    write_annotation_file(
        [section.lower_radius, *section.radii, section.upper_radius], out_dir / "rAnnotation.txt",
        params.zero_point_radius, params.zero_point_name, params.flip_vertical_axis,
    )
    script = out_dir / f"{plot_file_root(params)}Section.sh"
    script.write_text(section_script_text(section, params, scalar_file, mask_file))
    logger.info(f"wrote {script}")
    return script


# -----------------------------
# Running
# -----------------------------

def run_script(script: Path) -> int:
    """
    Run a generated script with sh inside its folder. Failures are logged,
    not raised: the text output is already on disk.
    """
    script = Path(script)
    try:
        proc = subprocess.run(["sh", script.name], cwd=script.parent,
                              capture_output=True, text=True)
    except OSError as e:
        logger.error(f"could not run {script}: {e}")
        return -1
    if proc.returncode != 0:
        logger.error(f"{script.name} exited with status {proc.returncode}: {proc.stderr.strip()}")
    return proc.returncode
