import pytest

from xsection.app import create_app
from xsection.models import FullPosition

ARC = {"pos0": {"lat": 2, "lon": 12}, "pos1": {"lat": 6, "lon": 12},
       "margin_latitude": 1, "margin_longitude": 1}


@pytest.fixture
def client(constant_field):
    return create_app(constant_field).test_client()


def test_info(client, constant_field):
    body = client.get("/").get_json()
    assert body["ok"] is True
    assert body["positions"] == len(constant_field)
    assert body["has_mask"] is False


def test_section(client):
    resp = client.post("/section", json=ARC)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["radial_interval"] == 25.0
    assert body["columns"] == ["distance", "latitude", "longitude", "radius", "value"]
    assert len(body["rows"]) == 45
    assert {row[4] for row in body["rows"]} == {1.0}
    assert "mask_rows" not in body
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


def test_section_with_mask(constant_field):
    mask = {pos: 0.5 for pos in constant_field}
    body = create_app(constant_field, mask).test_client().post("/section", json=ARC).get_json()
    assert len(body["mask_rows"]) == 45
    assert {row[4] for row in body["mask_rows"]} == {0.5}


def test_stray_mask_rejected(constant_field):
    with pytest.raises(ValueError):
        create_app(constant_field, {FullPosition(50, 50, 5700): 1.0})


@pytest.mark.parametrize("body", [
    {},
    {"pos0": {"lat": 2, "lon": 12}},
    {**ARC, "pos1": {"lat": 95, "lon": 12}},
    {**ARC, "scale": -1},
    {**ARC, "margin_latitude": 0},
    {**ARC, "before_deg": None},
    {**ARC, "scale": [1, 2]},
    {**ARC, "margin_radius_km": {"km": 25}},
    {"pos0": {"lat": None, "lon": 12}, "pos1": {"lat": 6, "lon": 12}},
])
def test_bad_requests(client, body):
    resp = client.post("/section", json=body)
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_png(client):
    resp = client.post("/section/png", json=ARC)
    assert resp.status_code == 200
    assert resp.headers["Content-Type"] == "image/png"
    assert resp.data.startswith(b"\x89PNG")


def test_png_bad_request(client):
    assert client.post("/section/png", json={}).status_code == 400


@pytest.mark.parametrize("data", ["{not json", "[1, 2]", ""])
def test_malformed_json_body(client, data):
    resp = client.post("/section", data=data, content_type="application/json")
    assert resp.status_code == 400
    assert resp.get_json()["error"].startswith("invalid JSON body")
