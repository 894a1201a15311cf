# app.py - Slim Flask API around the cross-section pipeline
# deps: pip install flask numpy pillow

from __future__ import annotations
from typing import Any, Dict, Optional
import io
import numpy as np
from flask import Flask, request, jsonify, make_response
from PIL import Image

from .models import ScatteredField, SectionParams
from .section import build_geometry, compute_cross_section, validate_field
from .viz import section_to_array


def _params_from_json(data: Dict[str, Any]) -> SectionParams:
    """
    JSON body:
    {
      "pos0": {"lat": .., "lon": ..},             // required
      "pos1": {"lat": .., "lon": ..},             // required
      "before_deg": 0, "after_deg": 0,
      "after_from_pos0": false,
      "margin_latitude": 2.5, "margin_latitude_km": false,
      "margin_longitude": 2.5, "margin_longitude_km": false,
      "margin_radius_km": 25,
      "scale": 3,
      "mosaic": false
    }
    """
    try:
        p0, p1 = data["pos0"], data["pos1"]
        kw = dict(
            pos0_latitude=float(p0["lat"]), pos0_longitude=float(p0["lon"]),
            pos1_latitude=float(p1["lat"]), pos1_longitude=float(p1["lon"]),
        )
    except (KeyError, TypeError) as e:
        raise ValueError("pos0 and pos1 with lat and lon are required") from e

    try:
        kw["before_pos0_deg"] = float(data.get("before_deg", 0.0))
        kw["after_pos_deg"] = float(data.get("after_deg", 0.0))
        kw["use_after_pos1"] = not bool(data.get("after_from_pos0", False))
        for key in ("margin_latitude", "margin_longitude"):
            if key in data:
                kw[key] = float(data[key])
            kw[f"{key}_in_km"] = bool(data.get(f"{key}_km", False))
        if "margin_radius_km" in data:
            kw["margin_radius"] = float(data["margin_radius_km"])
        if "scale" in data:
            kw["scale"] = float(data["scale"])
        kw["mosaic"] = bool(data.get("mosaic", False))
    except (TypeError, ValueError) as e:
        raise ValueError(f"invalid parameter: {e}") from e
    return SectionParams(**kw)


def create_app(field: ScatteredField, mask: Optional[ScatteredField] = None) -> Flask:
    if mask is not None:
        validate_field(mask, field)

    app = Flask(__name__)

    # ======= CORS =======
    @app.after_request
    def _cors(resp):
        resp.headers["Access-Control-Allow-Origin"]  = "*"
        resp.headers["Access-Control-Allow-Headers"] = "*"
        resp.headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
        return resp

    def _compute():
        data = request.get_json(force=True, silent=True)
        if not isinstance(data, dict):
            raise ValueError("invalid JSON body: expected an object")
        params = _params_from_json(data)
        return params, compute_cross_section(field, params)

    # ======= info =======
    @app.route("/", methods=["GET"])
    def root():
        return {"ok": True, "positions": len(field), "has_mask": mask is not None,
                "section": "/section (POST JSON)", "png": "/section/png (POST JSON)"}

    # ======= cross section =======
    @app.route("/section", methods=["POST"])
    def section_rows():
        try:
            params, section = _compute()
            mask_rows = None
            if mask is not None:
                geometry = build_geometry(field, params)
                mask_rows = [list(r) for r in compute_cross_section(mask, params, geometry).rows()]
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

        resp = {
            "distance": section.distance,
            "horizontal_interval": section.horizontal_interval,
            "radial_interval": section.radial_interval,
            "lower_radius": section.lower_radius,
            "upper_radius": section.upper_radius,
            "columns": ["distance", "latitude", "longitude", "radius", "value"],
            "rows": [list(r) for r in section.rows()],
        }
        if mask_rows is not None:
            resp["mask_rows"] = mask_rows
        return jsonify(resp)

    @app.route("/section/png", methods=["POST"])
    def section_png():
        try:
            params, section = _compute()
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

        arr, _ = section_to_array(section)
        # row 0 is the lowest radius; images are drawn top-down
        arr = arr[::-1]
        scaled = np.clip((arr + params.scale) / (2.0 * params.scale), 0, 1)
        scaled = np.where(np.isfinite(scaled), scaled, 1.0)

        buf = io.BytesIO()
        Image.fromarray((scaled * 255).astype("uint8")).save(buf, "PNG")
        buf.seek(0)
        resp = make_response(buf.read())
        resp.headers["Content-Type"] = "image/png"
        return resp

    return app
