"""
End-to-end checks through the FastAPI transport: status codes per error category.
"""


class TestSessions:
    def test_login_and_whoami(self, client):
        r = client.post("/api/sessions", json={"operator_id": "op-9"})
        assert r.status_code == 201
        token = r.json()["token"]
        r = client.get("/api/sessions/me", headers={"Authorization": f"Bearer {token}"})
        assert r.json() == {"operator_id": "op-9"}

    def test_missing_and_bad_token(self, client):
        r = client.get("/api/sessions/me")
        assert r.status_code == 401
        assert r.json()["reason"] == "MISSING"
        r = client.get("/api/sessions/me", headers={"Authorization": "Bearer nope"})
        assert r.status_code == 401
        assert r.json()["reason"] == "NOT_FOUND"

    def test_expired_token(self, client, auth, clock):
        clock.advance(hours=24)
        r = client.post("/api/downtime", headers=auth, json={
            "machine_id": "m1", "reason_code": "MECH_JAM", "start_time": "2024-01-01T08:00",
        })
        assert r.status_code == 401
        assert r.json()["reason"] == "EXPIRED"

    def test_logout(self, client, auth):
        assert client.delete("/api/sessions", headers=auth).json() == {"ok": True}
        assert client.get("/api/sessions/me", headers=auth).status_code == 401


class TestDowntime:
    def _open(self, client, auth, **extra):
        body = {"machine_id": "m1", "reason_code": "MECH_BREAKDOWN", "start_time": "2024-01-01T08:00"}
        body.update(extra)
        return client.post("/api/downtime", headers=auth, json=body)

    def test_open_and_resolve(self, client, auth):
        r = self._open(client, auth, reason_category="quality")
        assert r.status_code == 201
        log = r.json()
        assert log["reason_category"] == "mechanical"
        assert log["reported_by"] == "op-1"
        assert log["end_time"] is None

        r = client.patch(f"/api/downtime/{log['id']}/resolve", headers=auth, json={"end_time": "2024-01-01T09:30"})
        assert r.status_code == 200
        assert r.json()["duration"] == 90
        assert r.json()["resolved_by"] == "op-1"

        r = client.patch(f"/api/downtime/{log['id']}/resolve", headers=auth, json={"end_time": "2024-01-01T10:00"})
        assert r.status_code == 409
        assert client.get(f"/api/downtime/{log['id']}").json()["duration"] == 90

    def test_open_unknown_code(self, client, auth):
        r = self._open(client, auth, reason_code="NOPE")
        assert r.status_code == 400
        assert r.json()["field"] == "reason_code"

    def test_open_missing_field(self, client, auth):
        r = client.post("/api/downtime", headers=auth, json={"machine_id": "m1", "reason_code": "MECH_JAM"})
        assert r.status_code == 400
        assert r.json()["field"] == "start_time"

    def test_open_requires_token(self, client):
        r = client.post("/api/downtime", json={
            "machine_id": "m1", "reason_code": "MECH_JAM", "start_time": "2024-01-01T08:00",
        })
        assert r.status_code == 401

    def test_resolve_unknown_and_invalid(self, client, auth):
        r = client.patch("/api/downtime/missing/resolve", headers=auth, json={"end_time": "2024-01-01T09:00"})
        assert r.status_code == 404
        log = self._open(client, auth).json()
        r = client.patch(f"/api/downtime/{log['id']}/resolve", headers=auth, json={"end_time": "2024-01-01T07:00"})
        assert r.status_code == 400

    def test_listing_active_and_stats(self, client, auth):
        a = self._open(client, auth).json()
        self._open(client, auth, reason_code="ELEC_POWER", start_time="2024-01-01T10:00")
        client.patch(f"/api/downtime/{a['id']}/resolve", headers=auth, json={"end_time": "2024-01-01T08:45"})

        assert len(client.get("/api/downtime", params={"machine_id": "m1"}).json()) == 2
        active = client.get("/api/downtime/active").json()
        assert [x["reason_code"] for x in active] == ["ELEC_POWER"]
        stats = client.get("/api/downtime/stats").json()
        assert stats["summary"]["total_downtime_minutes"] == 45
        assert stats["by_category"]["electrical"]["count"] == 1

    def test_reason_codes(self, client):
        codes = client.get("/api/reason-codes", params={"category": "quality"}).json()
        assert {c["category"] for c in codes} == {"quality"}
        assert {c["category_label"] for c in codes} == {"Quality"}
        assert client.get("/api/reason-codes", params={"category": "bogus"}).status_code == 400


class TestOee:
    def test_compute(self, client):
        r = client.post("/api/oee", json={
            "planned_production_time": 480, "downtime": 60,
            "good_parts_ran": 380, "scrap_parts": 20, "ideal_cycle_time": 1,
        })
        assert r.status_code == 200
        assert r.json()["availability"] == 0.875

    def test_malformed(self, client):
        r = client.post("/api/oee", json={"planned_production_time": "lots"})
        assert r.status_code == 400
        assert r.json()["field"] == "planned_production_time"

    def test_aggregate_list_delete(self, client, auth):
        r = client.post("/api/production-stats/aggregate", headers=auth,
                        json={"machine_id": "m1", "shift": "Day", "date": "2024-01-01"})
        assert r.status_code == 201
        assert r.json()["planned_production_time"] == 480
        assert r.json()["created_by"] == "op-1"
        assert len(client.get("/api/production-stats", params={"machine_id": "m1"}).json()) == 1

        r = client.delete("/api/production-stats/by-date", headers=auth,
                          params={"machine_id": "m1", "date": "2024-01-01"})
        assert r.json() == {"deleted": 1}
        assert client.get("/api/production-stats").json() == []

    def test_aggregate_errors(self, client, auth):
        r = client.post("/api/production-stats/aggregate", headers=auth,
                        json={"machine_id": "ghost", "shift": "Day", "date": "2024-01-01"})
        assert r.status_code == 404
        r = client.post("/api/production-stats/aggregate", headers=auth,
                        json={"machine_id": "m1", "shift": "Brunch", "date": "2024-01-01"})
        assert r.status_code == 400


def test_health(client):
    assert client.get("/health").json()["ok"] is True
