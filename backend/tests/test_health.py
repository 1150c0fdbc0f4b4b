async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "message": "API is running"}


async def test_database_health(client):
    response = await client.get("/health/db")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_unknown_route_uses_error_body(client):
    response = await client.get("/nope")
    assert response.status_code == 404
    assert "error" in response.json()
