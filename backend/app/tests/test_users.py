"""
Tests for profile and user endpoints.
"""
from conftest import auth_header, PNG_DATA_URI


def test_profile_aggregates_trips_and_reviews(client, register, create_trip):
    host, host_id = register("host")
    guest, guest_id = register("guest")
    hosted = create_trip(host, title="Hosted by host")
    guest_trip = create_trip(guest, title="Hosted by guest")
    client.post(f"/api/trips/{guest_trip['id']}/join", headers=auth_header(host))
    client.post(f"/api/trips/{hosted['id']}/join", headers=auth_header(guest))
    client.put(f"/api/trips/{hosted['id']}/conclude", headers=auth_header(host))
    client.post(
        f"/api/trips/{hosted['id']}/reviews",
        json={"rating": 4, "comment": "Well organised"},
        headers=auth_header(guest)
    )

    response = client.get(f"/api/users/{host_id}/profile", headers=auth_header(host))
    assert response.status_code == 200
    profile = response.json()

    assert profile["user"]["id"] == host_id
    assert [t["id"] for t in profile["hosted_trips"]] == [hosted["id"]]
    assert profile["hosted_trips"][0]["status"] == "Concluded"
    assert [t["id"] for t in profile["joined_trips"]] == [guest_trip["id"]]
    assert len(profile["hosted_reviews"]) == 1
    review = profile["hosted_reviews"][0]
    assert review["author"]["id"] == guest_id
    assert review["trip"] == {"id": hosted["id"], "title": "Hosted by host", "status": "Concluded"}


def test_profile_is_self_only(client, register):
    alice, _ = register("alice")
    _, bob_id = register("bob")
    response = client.get(f"/api/users/{bob_id}/profile", headers=auth_header(alice))
    assert response.status_code == 403


def test_my_trips_includes_hosted_and_joined(client, register, create_trip):
    host, _ = register("host")
    guest, _ = register("guest")
    own = create_trip(guest, start_date="2031-01-01", end_date="2031-01-05")
    joined = create_trip(host, start_date="2031-06-01", end_date="2031-06-05")
    create_trip(host, title="Not joined")
    client.post(f"/api/trips/{joined['id']}/join", headers=auth_header(guest))

    response = client.get("/api/users/my-trips", headers=auth_header(guest))
    assert response.status_code == 200
    trips = response.json()
    assert [t["id"] for t in trips] == [joined["id"], own["id"]]
    assert trips[0]["participant_count"] == 2
    assert trips[0]["host"]["username"] == "host"


def test_my_trips_requires_auth(client):
    assert client.get("/api/users/my-trips").status_code == 401


def test_update_own_profile(client, register):
    token, user_id = register("dana")
    response = client.put(
        f"/api/users/{user_id}",
        json={"username": "dana2", "mantra": "New mantra", "bio_photo": PNG_DATA_URI, "bio_photo_changed": True},
        headers=auth_header(token)
    )
    assert response.status_code == 200
    body = response.json()
    assert body["username"] == "dana2"
    assert body["mantra"] == "New mantra"
    assert body["bio_photo"] == PNG_DATA_URI

    # Without the flag the stored photo is kept
    kept = client.put(f"/api/users/{user_id}", json={"mantra": "Again"}, headers=auth_header(token))
    assert kept.json()["bio_photo"] == PNG_DATA_URI


def test_update_other_profile_forbidden(client, register):
    alice, _ = register("alice")
    _, bob_id = register("bob")
    response = client.put(f"/api/users/{bob_id}", json={"mantra": "hacked"}, headers=auth_header(alice))
    assert response.status_code == 403


def test_update_username_taken(client, register):
    alice, alice_id = register("alice")
    register("bob")
    response = client.put(f"/api/users/{alice_id}", json={"username": "bob"}, headers=auth_header(alice))
    assert response.status_code == 409
