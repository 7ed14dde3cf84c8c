import pytest

from medstock.core.exceptions import ConflictError, ValidationError


def test_location_round_trip(client, bandage):
    item_id = bandage["item"]["id"]
    client.post("/api/cabinets", json={"id": "CAB2", "name": "Cabinet 2", "abbreviation": "C2"})

    response = client.post(
        "/api/item-locations",
        json={"itemId": item_id, "ambulancePostId": "post-a", "cabinetId": "CAB2"},
    )
    assert response.status_code == 201
    assert response.json()["stockStatus"] == "in-stock"
    assert response.json()["supplyRequestedAt"] is None

    locations = client.get(f"/api/item-locations/{item_id}").json()
    assert {loc["cabinetId"] for loc in locations} == {"CAB1", "CAB2"}


def test_invalid_status_is_rejected(client, bandage):
    location_id = bandage["location"]["id"]

    response = client.patch(
        f"/api/item-locations/{location_id}/status",
        json={"stockStatus": "empty"},
    )
    assert response.status_code == 400

    location = client.get(f"/api/item-locations/{bandage['item']['id']}").json()[0]
    assert location["stockStatus"] == "in-stock"


def test_status_transitions(client, bandage):
    location_id = bandage["location"]["id"]

    for stock_status in ["out-of-stock", "low-stock", "in-stock", "out-of-stock"]:
        response = client.patch(
            f"/api/item-locations/{location_id}/status",
            json={"stockStatus": stock_status},
        )
        assert response.status_code == 200
        assert response.json()["stockStatus"] == stock_status


def test_duplicate_location_is_a_conflict(client, bandage):
    response = client.post(
        "/api/item-locations",
        json={
            "itemId": bandage["item"]["id"],
            "ambulancePostId": "post-a",
            "cabinetId": "CAB1",
        },
    )
    assert response.status_code == 409


def test_same_cabinet_other_drawer_is_allowed(client, bandage):
    drawer = client.post("/api/drawers", json={"cabinetId": "CAB1", "name": "Lade 1"}).json()

    response = client.post(
        "/api/item-locations",
        json={
            "itemId": bandage["item"]["id"],
            "ambulancePostId": "post-a",
            "cabinetId": "CAB1",
            "drawerId": drawer["id"],
        },
    )
    assert response.status_code == 201


def test_cabinet_uniqueness_ignores_drawers(storage):
    storage.uniqueness = "cabinet"
    storage.create_ambulance_post({"id": "post-a", "name": "Post A"})
    storage.create_cabinet({"id": "CAB1", "name": "Cabinet 1", "abbreviation": "C1"})
    drawer = storage.create_drawer({"cabinet_id": "CAB1", "name": "Lade 1"})
    item = storage.create_item(
        {"name": "Bandage", "category": "Wound Care"},
        locations=[{"ambulance_post_id": "post-a", "cabinet_id": "CAB1"}],
    )

    with pytest.raises(ConflictError):
        storage.create_item_location(
            {
                "item_id": item.id,
                "ambulance_post_id": "post-a",
                "cabinet_id": "CAB1",
                "drawer_id": drawer.id,
            }
        )


def test_drawer_must_belong_to_cabinet(client, bandage):
    client.post("/api/cabinets", json={"id": "CAB2", "name": "Cabinet 2", "abbreviation": "C2"})
    drawer = client.post("/api/drawers", json={"cabinetId": "CAB2", "name": "Lade 1"}).json()

    response = client.patch(
        f"/api/item-locations/{bandage['location']['id']}",
        json={"drawerId": drawer["id"]},
    )
    assert response.status_code == 400


def test_contact_must_belong_to_post(client, bandage):
    client.post("/api/ambulance-posts", json={"id": "post-b", "name": "Post B"})
    other = client.post(
        "/api/post-contacts",
        json={"ambulancePostId": "post-b", "name": "Piet", "email": "piet@example.org"},
    ).json()

    response = client.patch(
        f"/api/item-locations/{bandage['location']['id']}",
        json={"contactPersonId": other["id"]},
    )
    assert response.status_code == 400


def test_has_contact_follows_post_contacts(client, bandage):
    item_id = bandage["item"]["id"]
    assert client.get(f"/api/item-locations/{item_id}").json()[0]["hasContact"] is False

    contact = client.post(
        "/api/post-contacts",
        json={"ambulancePostId": "post-a", "name": "Jan", "email": "jan@example.org"},
    ).json()
    assert client.get(f"/api/item-locations/{item_id}").json()[0]["hasContact"] is True

    client.patch(f"/api/post-contacts/{contact['id']}", json={"isActive": False})
    assert client.get(f"/api/item-locations/{item_id}").json()[0]["hasContact"] is False


def test_list_locations_by_post(client, bandage):
    client.post("/api/ambulance-posts", json={"id": "post-b", "name": "Post B"})
    client.post(
        "/api/item-locations",
        json={"itemId": bandage["item"]["id"], "ambulancePostId": "post-b", "cabinetId": "CAB1"},
    )

    all_locations = client.get("/api/item-locations").json()
    post_b = client.get("/api/item-locations", params={"ambulancePostId": "post-b"}).json()

    assert len(all_locations) == 2
    assert [loc["ambulancePostId"] for loc in post_b] == ["post-b"]


def test_delete_location(client, bandage):
    location_id = bandage["location"]["id"]

    assert client.delete(f"/api/item-locations/{location_id}").status_code == 204
    assert client.delete(f"/api/item-locations/{location_id}").status_code == 404
    assert client.get(f"/api/item-locations/{bandage['item']['id']}").json() == []


def test_unknown_status_in_storage(storage):
    storage.create_ambulance_post({"id": "post-a", "name": "Post A"})
    storage.create_cabinet({"id": "CAB1", "name": "Cabinet 1", "abbreviation": "C1"})
    item = storage.create_item(
        {"name": "Bandage", "category": "Wound Care"},
        locations=[{"ambulance_post_id": "post-a", "cabinet_id": "CAB1"}],
    )
    location = storage.list_item_locations(item_id=item.id)[0]

    with pytest.raises(ValidationError):
        storage.set_stock_status(location.id, "empty")


def test_episode_start_is_kept_between_low_and_out(storage):
    storage.create_ambulance_post({"id": "post-a", "name": "Post A"})
    storage.create_cabinet({"id": "CAB1", "name": "Cabinet 1", "abbreviation": "C1"})
    item = storage.create_item(
        {"name": "Bandage", "category": "Wound Care"},
        locations=[{"ambulance_post_id": "post-a", "cabinet_id": "CAB1"}],
    )
    location = storage.list_item_locations(item_id=item.id)[0]
    assert location.supply_episode_started_at is None

    location = storage.set_stock_status(location.id, "low-stock")
    started = location.supply_episode_started_at
    assert started is not None

    location = storage.set_stock_status(location.id, "out-of-stock")
    assert location.supply_episode_started_at == started

    location = storage.set_stock_status(location.id, "in-stock")
    assert location.supply_episode_started_at is None
