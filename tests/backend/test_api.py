"""HTTP tests for the measurement, alert and threshold routers."""

from datetime import datetime, timedelta, timezone

from app.api.formatting import iso
from app.models.alert import AlertModel
from app.models.measurement import MeasurementModel


def post_measurement(client, sensor_id=1, variable_id="PM25", value=40):
    return client.post(
        "/api/measurements",
        json={"sensor_id": sensor_id, "variable_id": variable_id, "value": value},
    )


class TestCreateMeasurement:
    def test_created(self, client):
        resp = post_measurement(client)
        assert resp.status_code == 201
        body = resp.json()
        assert body["sensor_id"] == 1
        assert body["variable_id"] == "PM25"
        assert body["value"] == 40
        assert body["id"] > 0
        assert body["timestamp"]

    def test_breach_visible_in_alert_list(self, client):
        post_measurement(client, value=40)
        alerts = client.get("/api/alerts").json()
        assert len(alerts) == 1
        assert alerts[0]["severity"] == "medium"
        assert alerts[0]["station_id"] == 1
        assert "35" in alerts[0]["message"]
        assert alerts[0]["is_resolved"] is False

    def test_missing_field_is_400(self, client):
        resp = client.post("/api/measurements", json={"sensor_id": 1, "variable_id": "PM25"})
        assert resp.status_code == 400
        assert client.get("/api/measurements/sensor/1").json() == []

    def test_malformed_value_is_400(self, client):
        resp = post_measurement(client, value="lots")
        assert resp.status_code == 400

    def test_empty_variable_is_400(self, client):
        resp = post_measurement(client, variable_id="")
        assert resp.status_code == 400

    def test_unknown_sensor_is_404(self, client):
        resp = post_measurement(client, sensor_id=404, value=999)
        assert resp.status_code == 404
        assert client.get("/api/measurements/sensor/404").json() == []
        assert client.get("/api/alerts").json() == []


class TestAlerts:
    def test_resolve(self, client):
        post_measurement(client, value=200)
        alert_id = client.get("/api/alerts").json()[0]["id"]

        resp = client.put(f"/api/alerts/{alert_id}/resolve")
        assert resp.status_code == 200
        body = resp.json()
        assert body["is_resolved"] is True
        assert body["resolved_at"] is not None

    def test_resolve_twice_keeps_first_timestamp(self, client):
        post_measurement(client, value=200)
        alert_id = client.get("/api/alerts").json()[0]["id"]
        first = client.put(f"/api/alerts/{alert_id}/resolve").json()
        second = client.put(f"/api/alerts/{alert_id}/resolve")
        assert second.status_code == 200
        assert second.json()["resolved_at"][:19] == first["resolved_at"][:19]

    def test_resolve_unknown_is_404(self, client):
        assert client.put("/api/alerts/999/resolve").status_code == 404

    def test_breach_after_resolve_opens_new_alert(self, client):
        post_measurement(client, value=40)
        post_measurement(client, value=41)
        alerts = client.get("/api/alerts").json()
        assert len(alerts) == 1

        client.put(f"/api/alerts/{alerts[0]['id']}/resolve")
        post_measurement(client, value=42)

        alerts = client.get("/api/alerts").json()
        assert len(alerts) == 2
        assert [a["is_resolved"] for a in alerts] == [False, True]


class TestMeasurementReads:
    def test_station_listing_joins_variable(self, client):
        post_measurement(client, sensor_id=1, value=5)
        post_measurement(client, sensor_id=2, variable_id="O3", value=30)
        post_measurement(client, sensor_id=3, value=5)

        rows = client.get("/api/measurements/station/1").json()
        assert len(rows) == 2
        assert {r["station_id"] for r in rows} == {1}
        assert rows[0]["variable_id"] == "O3"
        assert rows[0]["unit"] == "ppb"
        assert rows[1]["variable_name"] == "Fine particulate matter PM2.5"

    def test_station_listing_filters_variable(self, client):
        post_measurement(client, sensor_id=1, value=5)
        post_measurement(client, sensor_id=1, variable_id="O3", value=30)
        rows = client.get("/api/measurements/station/1", params={"variable_id": "O3"}).json()
        assert [r["variable_id"] for r in rows] == ["O3"]

    def test_station_listing_filters_dates(self, client, session_factory):
        now = datetime.now(timezone.utc)
        with session_factory() as db:
            db.add_all([
                MeasurementModel(sensor_id=1, variable_id="PM25", value=1, timestamp=now - timedelta(days=10)),
                MeasurementModel(sensor_id=1, variable_id="PM25", value=2, timestamp=now - timedelta(days=1)),
            ])
            db.commit()
        start = (now - timedelta(days=2)).replace(tzinfo=None).isoformat()
        rows = client.get("/api/measurements/station/1", params={"startDate": start}).json()
        assert [r["value"] for r in rows] == [2]

        end = (now - timedelta(days=2)).replace(tzinfo=None).isoformat()
        rows = client.get("/api/measurements/station/1", params={"endDate": end}).json()
        assert [r["value"] for r in rows] == [1]

    def test_station_listing_offset_dates_compare_in_utc(self, client, session_factory):
        now = datetime.now(timezone.utc)
        with session_factory() as db:
            db.add(MeasurementModel(
                sensor_id=1, variable_id="PM25", value=7, timestamp=now - timedelta(hours=3),
            ))
            db.commit()
        # Two hours ago, written with a -05:00 offset
        start = (now - timedelta(hours=2)).astimezone(timezone(timedelta(hours=-5))).isoformat()
        rows = client.get("/api/measurements/station/1", params={"startDate": start}).json()
        assert rows == []

    def test_sensor_listing_newest_first(self, client):
        for v in (1, 2, 3):
            post_measurement(client, sensor_id=2, value=v)
        rows = client.get("/api/measurements/sensor/2").json()
        assert [r["value"] for r in rows] == [3, 2, 1]

    def test_history_series(self, client, session_factory):
        now = datetime.now(timezone.utc)
        with session_factory() as db:
            db.add_all([
                MeasurementModel(sensor_id=1, variable_id="PM25", value=1, timestamp=now - timedelta(days=30)),
                MeasurementModel(sensor_id=2, variable_id="PM25", value=3, timestamp=now - timedelta(hours=2)),
                MeasurementModel(sensor_id=1, variable_id="PM25", value=2, timestamp=now - timedelta(days=3)),
                MeasurementModel(sensor_id=3, variable_id="PM25", value=9, timestamp=now - timedelta(hours=1)),
            ])
            db.commit()

        resp = client.get(
            "/api/measurements/history",
            params={"station_id": 1, "variable_id": "PM25", "days": 7},
        )
        assert resp.status_code == 200
        points = resp.json()
        assert isinstance(points, list)
        assert [p["value"] for p in points] == [2, 3]
        assert {p["unit"] for p in points} == {"µg/m³"}
        assert all(p["timestamp"].endswith("Z") for p in points)

    def test_history_empty_is_list(self, client):
        resp = client.get(
            "/api/measurements/history",
            params={"station_id": 2, "variable_id": "O3"},
        )
        assert resp.json() == []

    def test_history_rejects_bad_days(self, client):
        resp = client.get(
            "/api/measurements/history",
            params={"station_id": 1, "variable_id": "PM25", "days": 0},
        )
        assert resp.status_code == 400


class TestTimestamps:
    def test_post_and_listing_agree(self, client):
        created = post_measurement(client, sensor_id=2, value=5).json()
        listed = client.get("/api/measurements/sensor/2").json()
        assert created["timestamp"].endswith("Z")
        assert listed[0]["timestamp"] == created["timestamp"]

    def test_resolve_response_uses_one_format(self, client):
        post_measurement(client, value=200)
        alert_id = client.get("/api/alerts").json()[0]["id"]
        body = client.put(f"/api/alerts/{alert_id}/resolve").json()
        assert body["created_at"].endswith("Z")
        assert body["resolved_at"].endswith("Z")
        assert "+00:00" not in body["resolved_at"]

    def test_iso_converts_offsets_to_utc(self):
        bogota = timezone(timedelta(hours=-5))
        assert iso(datetime(2026, 3, 15, 7, 0, tzinfo=bogota)) == "2026-03-15T12:00:00Z"
        assert iso(datetime(2026, 3, 15, 12, 0)) == "2026-03-15T12:00:00Z"
        assert iso(None) is None

    def test_timestamp_columns_are_timezone_aware(self):
        assert MeasurementModel.__table__.c.timestamp.type.timezone is True
        assert AlertModel.__table__.c.created_at.type.timezone is True
        assert AlertModel.__table__.c.resolved_at.type.timezone is True


class TestThresholds:
    def test_list(self, client):
        rows = client.get("/api/thresholds").json()
        assert [r["variable_id"] for r in rows] == ["NO2", "PM25"]
        pm25 = rows[1]
        assert (pm25["low"], pm25["medium"], pm25["high"], pm25["critical"]) == (12, 35, 55, 150)

    def test_create_enables_alerting(self, client):
        post_measurement(client, variable_id="O3", value=130)
        assert client.get("/api/alerts").json() == []

        resp = client.post("/api/thresholds", json={"variable_id": "O3", "medium": 100, "high": 160})
        assert resp.status_code == 201
        assert resp.json()["low"] is None

        post_measurement(client, variable_id="O3", value=130)
        alerts = client.get("/api/alerts").json()
        assert [a["severity"] for a in alerts] == ["medium"]

    def test_duplicate_is_409(self, client):
        resp = client.post("/api/thresholds", json={"variable_id": "PM25", "low": 1})
        assert resp.status_code == 409

    def test_unknown_variable_is_404(self, client):
        resp = client.post("/api/thresholds", json={"variable_id": "CO", "low": 1})
        assert resp.status_code == 404

    def test_no_tiers_is_400(self, client):
        resp = client.post("/api/thresholds", json={"variable_id": "O3"})
        assert resp.status_code == 400
