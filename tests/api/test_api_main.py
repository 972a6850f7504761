from datetime import timedelta

from booking_calendar import main
from booking_calendar.core.clock import local_today


def test_ping(client):
    assert client.get("/ping").json() == {"ok": True}


def test_bad_token_is_unauthorized(client):
    r = client.get("/availability/me/settings", headers={"Authorization": "Bearer not-a-jwt"})

    assert r.status_code == 401


def test_maintenance_blocks_writes_but_not_reads(client, auth_headers, monkeypatch):
    monkeypatch.setattr(main.settings, "MAINTENANCE_MODE", True)
    day = (local_today() + timedelta(days=3)).isoformat()

    write = client.post("/availability/me/status", json={"dates": [day], "status": "blocked"},
                        headers=auth_headers())
    read = client.get("/availability/artist-1/check", params={"day": day})
    evaluate = client.post("/availability/artist-1/evaluate", json={"candidate_date": day})

    assert write.status_code == 503
    assert write.json()["code"] == "maintenance"
    assert read.status_code == 200
    assert evaluate.status_code == 200


def test_storage_failure_maps_to_503(client, monkeypatch):
    from booking_calendar.core.errors import StorageError
    from booking_calendar.services import resolver

    def broken(*args, **kwargs):
        raise StorageError("Backend non disponibile", entity_id="artist-1")

    monkeypatch.setattr(resolver, "check_availability", broken)

    r = client.get("/availability/artist-1/check", params={"day": local_today().isoformat()})

    assert r.status_code == 503
    assert r.json() == {
        "detail": "Backend non disponibile",
        "code": "storage_error",
        "context": {"entity_id": "artist-1"},
    }


def test_lifespan_creates_tables(monkeypatch):
    from fastapi.testclient import TestClient

    calls = []
    monkeypatch.setattr(main, "create_tables", lambda: calls.append(True))

    with TestClient(main.app) as c:
        assert c.get("/ping").status_code == 200

    assert calls == [True]
