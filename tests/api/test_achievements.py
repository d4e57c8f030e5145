"""Tests for the achievement catalog and metrics endpoints"""
import pytest

from badger_claims.monitoring.prometheus_metrics import metrics


@pytest.mark.asyncio
async def test_list_achievements(client, registry):
    response = await client.get("/api/achievements")

    assert response.status_code == 200
    data = response.json()
    assert [a["id"] for a in data] == registry.list_ids()
    rainy = next(a for a in data if a["id"] == "RAINY_DAY_2025")
    assert rainy["validation_rules"]["type"] == "weather"
    assert rainy["validation_rules"]["condition"] == "rain"


@pytest.mark.asyncio
async def test_list_by_category(client):
    response = await client.get("/api/achievements", params={"category": "academic"})

    assert response.status_code == 200
    assert {a["id"] for a in response.json()} == {
        "STRAIGHT_A_BADGER", "FIRST_INTERNSHIP_UNLOCKED", "RESEARCH_ROOKIE"
    }


@pytest.mark.asyncio
async def test_unknown_category(client):
    response = await client.get("/api/achievements", params={"category": "sports"})
    assert response.status_code == 400
    assert response.json()["error"].startswith("Unknown category 'sports'")


@pytest.mark.asyncio
async def test_get_achievement(client):
    response = await client.get("/api/achievements/LATE_NIGHT_MORGRIDGE")

    assert response.status_code == 200
    window = response.json()["validation_rules"]["hour_window"]
    assert window == {"hour_start": 2, "hour_end": 5, "timezone": "America/Chicago"}


@pytest.mark.asyncio
async def test_get_unknown_achievement(client):
    response = await client.get("/api/achievements/NOT_A_BADGE")
    assert response.status_code == 404
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_metrics_endpoint(client, user_wallet):
    if not metrics.enabled:
        pytest.skip("Prometheus metrics disabled")

    await client.post(
        "/api/claim",
        json={"wallet": user_wallet, "achievementId": "TEST_BADGE", "lat": 43.07, "lng": -89.40}
    )
    response = await client.get("/metrics")

    assert response.status_code == 200
    body = response.text
    assert "claims_total" in body
    assert 'authorizations_issued_total{chain="evm"}' in body
    assert 'endpoint="/api/claim"' in body
