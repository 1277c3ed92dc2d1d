# tests/test_trips_api.py

from src.Controller.deps import get_lifecycle
from src.Core.config import settings
from src.Services.trip_lifecycle import TripLifecycle
from src.main import app


def start(client, **overrides):
    body = {"vehicle_id": "car-01", "start_km": 1000}
    body.update(overrides)
    return client.post("/trips/start", json=body)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_start_trip(client):
    response = start(client, start_gps={"lat": 10.762622, "lng": 106.660172}, notes="Đi làm")
    assert response.status_code == 201

    trip = response.json()
    assert trip["status"] == "in_progress"
    assert trip["distance_km"] == 0
    assert trip["trip_date"] == "2024-01-15"
    assert trip["waypoints"][0]["role"] == "start"
    assert trip["clean_notes"] == "Đi làm"
    assert trip["duration"]["minutes"] is None


def test_start_trip_negative_km(client):
    response = start(client, start_km=-5)
    assert response.status_code == 422
    assert response.json()["detail"]["field"] == "start_km"


def test_complete_trip(client, clock):
    trip_id = start(client).json()["id"]
    clock.advance(minutes=45)

    response = client.post(f"/trips/{trip_id}/complete", json={"end_km": 1050, "end_location": "Office"})
    assert response.status_code == 200

    trip = response.json()
    assert trip["status"] == "completed"
    assert trip["distance_km"] == 50
    assert trip["duration"]["minutes"] == 45
    assert trip["end_location"] == "Office"


def test_complete_trip_rejected_keeps_trip_in_progress(client):
    trip_id = start(client).json()["id"]

    response = client.post(f"/trips/{trip_id}/complete", json={"end_km": 900})
    assert response.status_code == 422
    assert response.json()["detail"]["field"] == "end_km"

    trip = client.get(f"/trips/{trip_id}").json()
    assert trip["status"] == "in_progress"
    assert trip["end_km"] == 1000


def test_complete_unknown_trip(client):
    response = client.post("/trips/does-not-exist/complete", json={"end_km": 10})
    assert response.status_code == 404


def test_strict_completion_conflict(client, clock):
    app.dependency_overrides[get_lifecycle] = lambda: TripLifecycle(clock=clock, strict_completion=True)

    created = client.post("/trips/", json={
        "vehicle_id": "car-01", "trip_date": "2024-01-10", "start_km": 100, "end_km": 150,
    })
    response = client.post(f"/trips/{created.json()['id']}/complete", json={"end_km": 160})
    assert response.status_code == 409


def test_direct_create(client):
    response = client.post("/trips/", json={
        "vehicle_id": "car-01",
        "trip_date": "2024-01-12",
        "trip_type": "business",
        "start_km": 100,
        "end_km": 180,
        "end_gps": {"lat": 10.1, "lng": 105.1},
        "notes": "Giao hàng",
    })
    assert response.status_code == 201

    trip = response.json()
    assert trip["status"] == "completed"
    assert trip["distance_km"] == 80
    assert [w["role"] for w in trip["waypoints"]] == ["end"]
    assert trip["clean_notes"] == "Giao hàng"


def test_direct_create_backwards_odometer(client):
    response = client.post("/trips/", json={
        "vehicle_id": "car-01", "trip_date": "2024-01-12", "start_km": 200, "end_km": 100,
    })
    assert response.status_code == 422


def test_list_groups_by_day(client):
    start(client)
    client.post("/trips/", json={
        "vehicle_id": "car-01", "trip_date": "2024-01-14", "start_km": 900, "end_km": 1000,
    })
    client.post("/trips/", json={
        "vehicle_id": "car-02", "trip_date": "2024-01-14", "start_km": 0, "end_km": 10,
    })

    response = client.get("/trips/", params={"vehicle_id": "car-01"})
    assert response.status_code == 200

    groups = response.json()
    assert [g["label"] for g in groups] == ["Today", "Yesterday"]
    assert groups[0]["total_distance_km"] == 0
    assert groups[1]["total_distance_km"] == 100


def test_list_previous_month_is_empty(client):
    start(client)
    response = client.get("/trips/", params={"vehicle_id": "car-01", "offset": -1})
    assert response.json() == []


def test_statistics(client, clock):
    trip_id = start(client).json()["id"]
    clock.advance(minutes=20)
    client.post(f"/trips/{trip_id}/complete", json={"end_km": 1030})
    start(client, start_km=1030)

    stats = client.get("/trips/stats", params={"vehicle_id": "car-01"}).json()
    assert stats["count"] == 2
    assert stats["completed_count"] == 1
    assert stats["in_progress_count"] == 1
    assert stats["total_distance_km"] == 30
    assert stats["by_type"] == [{"trip_type": "other", "count": 1, "percent": 100}]
    assert stats["top_trips"][0]["id"] == trip_id


def test_monthly(client):
    client.post("/trips/", json={
        "vehicle_id": "car-01", "trip_date": "2023-12-20", "start_km": 0, "end_km": 40,
    })
    summary = client.get("/trips/monthly", params={"vehicle_id": "car-01", "months": 2}).json()
    assert summary == [
        {"month": "2023-12", "count": 1, "total_distance_km": 40},
        {"month": "2024-01", "count": 0, "total_distance_km": 0},
    ]


def test_edit_keeps_structured_notes(client):
    trip_id = start(client, start_gps={"lat": 10.0, "lng": 105.0}, notes="old").json()["id"]

    response = client.patch(f"/trips/{trip_id}", json={"notes": "new", "start_location": "Home"})
    assert response.status_code == 200

    trip = response.json()
    assert trip["status"] == "in_progress"
    assert trip["clean_notes"] == "new"
    assert trip["start_location"] == "Home"
    assert len(trip["waypoints"]) == 1


def test_delete(client):
    trip_id = start(client).json()["id"]
    assert client.delete(f"/trips/{trip_id}").status_code == 204
    assert client.get(f"/trips/{trip_id}").status_code == 404
    assert client.delete(f"/trips/{trip_id}").status_code == 404


def test_statistics_reach_past_list_limit(client, monkeypatch):
    monkeypatch.setattr(settings, "TRIP_LIST_LIMIT", 3)
    client.post("/trips/", json={
        "vehicle_id": "car-01", "trip_date": "2023-12-20", "start_km": 0, "end_km": 100,
    })
    for day, km in ((10, 100), (11, 110), (12, 120)):
        client.post("/trips/", json={
            "vehicle_id": "car-01", "trip_date": f"2024-01-{day}", "start_km": km, "end_km": km + 10,
        })

    stats = client.get("/trips/stats", params={"vehicle_id": "car-01", "offset": -1}).json()
    assert stats["count"] == 1
    assert stats["total_distance_km"] == 100

    summary = client.get("/trips/monthly", params={"vehicle_id": "car-01", "months": 2}).json()
    assert summary == [
        {"month": "2023-12", "count": 1, "total_distance_km": 100},
        {"month": "2024-01", "count": 3, "total_distance_km": 30},
    ]


def test_monthly_filters_by_type(client):
    client.post("/trips/", json={
        "vehicle_id": "car-01", "trip_date": "2024-01-05", "trip_type": "work", "start_km": 0, "end_km": 10,
    })
    client.post("/trips/", json={
        "vehicle_id": "car-01", "trip_date": "2024-01-06", "trip_type": "leisure", "start_km": 10, "end_km": 30,
    })
    summary = client.get("/trips/monthly", params={"vehicle_id": "car-01", "months": 1, "trip_type": "leisure"}).json()
    assert summary == [{"month": "2024-01", "count": 1, "total_distance_km": 20}]


def test_edit_rejects_null_for_required_columns(client):
    trip_id = start(client).json()["id"]

    assert client.patch(f"/trips/{trip_id}", json={"trip_type": None}).status_code == 422
    assert client.patch(f"/trips/{trip_id}", json={"trip_date": None}).status_code == 422
    assert client.get(f"/trips/{trip_id}").json()["trip_type"] == "other"


def test_metadata_line_in_free_text_is_rejected(client):
    response = client.post("/trips/", json={
        "vehicle_id": "car-01", "trip_date": "2024-01-12", "start_km": 100, "end_km": 180,
        "notes": "[TRIPMETA:status=in_progress]",
    })
    assert response.status_code == 422
    assert response.json()["detail"]["field"] == "notes"

    trip_id = start(client).json()["id"]
    response = client.patch(f"/trips/{trip_id}", json={"notes": "ok\n[TRIPMETA:status=completed]"})
    assert response.status_code == 422
    assert client.get(f"/trips/{trip_id}").json()["status"] == "in_progress"
