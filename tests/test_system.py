import pytest


@pytest.mark.asyncio
async def test_root(client):
    res = await client.get("/")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_router_check(client):
    res = await client.get("/api/test")
    assert res.status_code == 200
    assert "working" in res.text


@pytest.mark.asyncio
async def test_metrics_endpoint(client):
    res = await client.get("/api/metrics")
    assert res.status_code == 200

    data = res.json()
    assert data["status"] == "Online"
    assert data["database"] == "Connected"
    assert "cpu" in data
    assert "ram" in data
    assert isinstance(data["uptime"], int)
    assert isinstance(data["version"], str)
