"""Nearby Help route — proximity search over open help posts.

Invariants:
    - Only open posts with a location are returned, nearest first
    - latitude=0/longitude=0 is a real search origin
    - Missing or malformed parameters are 400s with a specific code
"""

import pytest

BASE = "/api/v1/nearby-help"


async def _create(client, member, title, lat, lon, type_="offer_help"):
    res = await client.post(
        "/api/v1/help-posts",
        json={
            "type": type_, "title": title, "description": "details",
            "category": "food", "latitude": lat, "longitude": lon,
        },
        headers=member.headers,
    )
    assert res.status_code == 201
    return res.json()["data"]


@pytest.fixture
async def posts(client, member):
    return {
        "far": await _create(client, member, "far", 0.0, 0.2),
        "near": await _create(client, member, "near", 0.0, 0.01),
        "mid": await _create(client, member, "mid", 0.0, 0.05, type_="need_help"),
    }


async def test_returns_posts_in_radius_nearest_first(client, member, posts):
    res = await client.get(
        BASE, params={"latitude": "0", "longitude": "0", "radius_km": "10"},
        headers=member.headers,
    )
    assert res.status_code == 200
    body = res.json()
    assert [p["title"] for p in body["data"]] == ["near", "mid"]
    assert body["data"][0]["distance_km"] == 1.11
    assert body["count"] == 2
    assert body["search_params"] == {"latitude": 0.0, "longitude": 0.0, "radius_km": 10.0}


async def test_default_radius_is_10km(client, member, posts):
    res = await client.get(
        BASE, params={"latitude": "0", "longitude": "0"}, headers=member.headers,
    )
    assert res.json()["search_params"]["radius_km"] == 10.0
    assert res.json()["count"] == 2


async def test_legacy_radius_parameter(client, member, posts):
    res = await client.get(
        BASE, params={"latitude": "0", "longitude": "0", "radius": "30"},
        headers=member.headers,
    )
    assert res.json()["count"] == 3


async def test_type_filter(client, member, posts):
    res = await client.get(
        BASE, params={"latitude": "0", "longitude": "0", "type": "need_help"},
        headers=member.headers,
    )
    assert [p["title"] for p in res.json()["data"]] == ["mid"]


async def test_non_open_posts_are_excluded(client, member, posts):
    await client.put(
        f"/api/v1/help-posts/{posts['near']['id']}", json={"status": "cancelled"},
        headers=member.headers,
    )
    res = await client.get(
        BASE, params={"latitude": "0", "longitude": "0"}, headers=member.headers,
    )
    assert [p["title"] for p in res.json()["data"]] == ["mid"]


async def test_posts_without_location_are_excluded(client, member):
    await _create(client, member, "nowhere", None, None)
    res = await client.get(
        BASE, params={"latitude": "0", "longitude": "0"}, headers=member.headers,
    )
    assert res.json()["count"] == 0


async def test_missing_coordinates_is_400(client, member):
    res = await client.get(BASE, params={"latitude": "1"}, headers=member.headers)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "COORDINATES_REQUIRED"


@pytest.mark.parametrize("params,code", [
    ({"latitude": "north", "longitude": "1"}, "INVALID_LATITUDE"),
    ({"latitude": "1", "longitude": "999"}, "INVALID_LONGITUDE"),
    ({"latitude": "1", "longitude": "1", "radius_km": "0"}, "INVALID_RADIUS"),
    ({"latitude": "1", "longitude": "1", "radius_km": "100000"}, "RADIUS_TOO_LARGE"),
])
async def test_bad_parameters_are_400(client, member, params, code):
    res = await client.get(BASE, params=params, headers=member.headers)
    assert res.status_code == 400
    assert res.json()["error"]["code"] == code


async def test_requires_authentication(client):
    res = await client.get(BASE, params={"latitude": "0", "longitude": "0"})
    assert res.status_code == 401
