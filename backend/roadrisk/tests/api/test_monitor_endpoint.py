from roadrisk.api.routers import monitor as monitor_router


def _create_session(api_client, **filters):
    response = api_client.post("/api/monitor/sessions", json=filters or None)
    assert response.status_code == 201
    return response.json()


def test_session_alerts_once_per_entry(api_client):
    session = _create_session(api_client, road_name="Princes")
    assert session["reload"]["ok"] is True
    assert len(session["zones"]) == 1
    session_id = session["session_id"]
    url = f"/api/monitor/sessions/{session_id}/position"

    far = api_client.post(url, json={"lat": -34.5, "lon": 150.8931}).json()
    assert far["alerts"] == []
    assert far["banner"] is None

    inside = api_client.post(url, json={"lat": -34.4278, "lon": 150.8931}).json()
    assert len(inside["alerts"]) == 1
    alert = inside["alerts"][0]
    assert alert["level"] == "extreme"
    assert "Princes Highway" in alert["message"]
    assert inside["banner"]["message"] == alert["message"]
    assert [zone["road_name"] for zone in inside["active"]] == ["Princes Highway"]

    again = api_client.post(url, json={"lat": -34.4279, "lon": 150.8931}).json()
    assert again["alerts"] == []

    api_client.post(url, json={"lat": -34.5, "lon": 150.8931})
    back = api_client.post(url, json={"lat": -34.4278, "lon": 150.8931}).json()
    assert len(back["alerts"]) == 1


def test_session_reload_resets_latches(api_client):
    session_id = _create_session(api_client)["session_id"]
    url = f"/api/monitor/sessions/{session_id}/position"
    assert len(api_client.post(url, json={"lat": -34.065, "lon": 150.795}).json()["alerts"]) == 1

    reload = api_client.post(f"/api/monitor/sessions/{session_id}/reload", json={"road_name": "Hume"})
    assert reload.status_code == 200
    body = reload.json()
    assert body["reload"]["loaded"] == 1
    assert body["zones"][0]["alerted"] is False

    assert len(api_client.post(url, json={"lat": -34.065, "lon": 150.795}).json()["alerts"]) == 1


def test_position_validation(api_client):
    session_id = _create_session(api_client)["session_id"]
    response = api_client.post(f"/api/monitor/sessions/{session_id}/position", json={"lat": 123, "lon": 0})
    assert response.status_code == 422


def test_unknown_session_returns_404(api_client):
    response = api_client.post("/api/monitor/sessions/missing/position", json={"lat": 0, "lon": 0})
    assert response.status_code == 404


def test_delete_session(api_client):
    session_id = _create_session(api_client)["session_id"]
    assert api_client.delete(f"/api/monitor/sessions/{session_id}").status_code == 204
    assert api_client.delete(f"/api/monitor/sessions/{session_id}").status_code == 404


def test_oldest_session_dropped_when_table_is_full(api_client, monkeypatch):
    monkeypatch.setattr(monitor_router, "MAX_MONITOR_SESSIONS", 2)
    first = _create_session(api_client)["session_id"]
    second = _create_session(api_client)["session_id"]
    third = _create_session(api_client)["session_id"]

    assert len(api_client.app.state.monitor_sessions) == 2
    position = {"lat": 0, "lon": 0}
    assert api_client.post(f"/api/monitor/sessions/{first}/position", json=position).status_code == 404
    assert api_client.post(f"/api/monitor/sessions/{second}/position", json=position).status_code == 200
    assert api_client.post(f"/api/monitor/sessions/{third}/position", json=position).status_code == 200
