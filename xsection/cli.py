# region Header
"""
cli.py - command line entry point

  xsection template [path]                 write a property file template
  xsection run <properties> [options]      compute a cross section
  xsection serve <properties> [--port N]   serve the section API
"""
# endregion

# region Imports
from __future__ import annotations
import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .listfile import read_scalar_list, scalar_file_name, write_section
from .models import SectionParams
from .properties import SECTION, dump_params, load_params, write_default_properties
from .section import build_geometry, compute_cross_section, validate_field
from .shellscript import plot_file_root, run_script, write_scripts
# endregion

logger = logging.getLogger("xsection")

DEFAULT_PROPERTY_FILE = f"{SECTION}.properties"

# region Output Folder
def create_output_folder(params: SectionParams, out: Optional[Path] = None) -> Path:
    if out is None:
        stamp = datetime.now().strftime("%Y%m%d%H%M%S")
        tag = f"_{params.folder_tag}" if params.folder_tag else ""
        out = params.work_path / f"crossSection{tag}_{stamp}"
    out = Path(out)
    out.mkdir(parents=True, exist_ok=True)
    logger.info(f"output folder: {out}")
    return out
# endregion

# region Run
def run(params: SectionParams, out_dir: Path, run_gmt: bool = False, preview: bool = False) -> Path:
    """Compute the section (and mask) and write every output into out_dir."""
    field = read_scalar_list(params.perturbation_path)
    mask = read_scalar_list(params.mask_path) if params.mask_path else None
    if mask is not None:
        validate_field(mask, field)

    geometry = build_geometry(field, params)
    section = compute_cross_section(field, params, geometry)

    scalar_file = scalar_file_name(params.variable, params.scalar_type,
                                   f"{params.tag}_XZ" if params.tag else "XZ")
    write_section(section, out_dir / scalar_file)

    mask_file = None
    if mask is not None:
        mask_file = scalar_file_name(params.variable, params.scalar_type,
                                     f"{params.tag}_forMaskXZ" if params.tag else "forMaskXZ")
        write_section(compute_cross_section(mask, params, geometry), out_dir / mask_file)

    script = write_scripts(section, params, out_dir, scalar_file, mask_file)

    if preview:
        from .viz import plot_cross_section
        png = out_dir / f"{plot_file_root(params)}Preview.png"
        plot_cross_section(section, params.scale, out_path=str(png),
                           zero_point_radius=params.zero_point_radius, flip=params.flip_vertical_axis)
        logger.info(f"wrote {png}")

    if run_gmt:
        run_script(script)
    return script
# endregion

# region Argument Parsing
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="xsection",
                                     description="Create cross sections of a scattered 3-D scalar field.")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug messages")
    parser.add_argument("-q", "--quiet", action="store_true", help="log warnings and errors only")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("template", help="write a property file template")
    p.add_argument("path", nargs="?", default=DEFAULT_PROPERTY_FILE)

    p = sub.add_parser("run", help="compute a cross section")
    p.add_argument("properties", type=Path)
    p.add_argument("--out", type=Path, default=None, help="output folder (default: timestamped folder in workPath)")
    p.add_argument("--run-gmt", action="store_true", help="run the generated GMT script")
    p.add_argument("--preview", action="store_true", help="save a matplotlib preview PNG")
    p.add_argument("--mosaic", action="store_true", default=None, help="override: nearest-neighbour mode")

    p = sub.add_parser("serve", help="serve the section API over HTTP")
    p.add_argument("properties", type=Path)
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8081)
    return parser


def _setup_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(level=level, format="%(name)s - %(levelname)s - %(message)s")
# endregion

# region Main
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose, args.quiet)

    try:
        if args.command == "template":
            write_default_properties(Path(args.path))
            return 0

        overrides = {"mosaic": "true"} if getattr(args, "mosaic", None) else None
        params = load_params(args.properties, overrides)

        if args.command == "serve":
            from .app import create_app
            field = read_scalar_list(params.perturbation_path)
            mask = read_scalar_list(params.mask_path) if params.mask_path else None
            create_app(field, mask).run(host=args.host, port=args.port)
            return 0

        out_dir = create_output_folder(params, args.out)
        dump_params(out_dir / f"_{SECTION}.properties", args.properties, overrides)
        run(params, out_dir, run_gmt=args.run_gmt, preview=args.preview)
    except FileExistsError as e:
        logger.error(f"{e.filename} already exists")
        return 1
    except (ValueError, OSError) as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
# endregion
