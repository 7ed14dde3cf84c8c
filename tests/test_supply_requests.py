def set_status(client, location_id, stock_status):
    response = client.patch(
        f"/api/item-locations/{location_id}/status",
        json={"stockStatus": stock_status},
    )
    assert response.status_code == 200
    return response.json()


def location_of(client, bandage):
    return client.get(f"/api/item-locations/{bandage['item']['id']}").json()[0]


def test_in_stock_location_needs_no_request(client, transport, bandage, contact):
    response = client.post(f"/api/supply-request/{bandage['location']['id']}")

    assert response.status_code == 400
    assert transport.sent == []


def test_request_without_contact_is_rejected(client, transport, bandage):
    location_id = bandage["location"]["id"]
    set_status(client, location_id, "low-stock")

    response = client.post(f"/api/supply-request/{location_id}")

    assert response.status_code == 400
    assert transport.sent == []
    assert client.get("/api/supply-requests").json() == []


def test_request_for_unknown_location_is_404(client):
    response = client.post("/api/supply-request/999")
    assert response.status_code == 404


def test_request_falls_back_to_post_contact(client, transport, bandage):
    location_id = bandage["location"]["id"]
    set_status(client, location_id, "low-stock")

    assert client.post(f"/api/supply-request/{location_id}").status_code == 400

    client.post(
        "/api/post-contacts",
        json={"ambulancePostId": "post-a", "name": "Jan", "email": "jan@example.org"},
    )
    response = client.post(f"/api/supply-request/{location_id}")

    assert response.status_code == 201
    assert response.json()["success"] is True
    assert response.json()["notification"]["recipientEmail"] == "jan@example.org"
    assert [message.to for message in transport.sent] == ["jan@example.org"]


def test_own_contact_wins_over_post_contact(client, transport, bandage, contact):
    location_id = bandage["location"]["id"]
    own = client.post(
        "/api/post-contacts",
        json={"ambulancePostId": "post-a", "name": "Els", "email": "els@example.org"},
    ).json()
    client.patch(f"/api/item-locations/{location_id}", json={"contactPersonId": own["id"]})
    set_status(client, location_id, "out-of-stock")

    response = client.post(f"/api/supply-request/{location_id}")

    assert response.status_code == 201
    assert transport.sent[0].to == "els@example.org"
    assert transport.sent[0].subject.startswith("URGENT")


def test_failed_delivery_records_nothing(client, transport, bandage, contact):
    location_id = bandage["location"]["id"]
    set_status(client, location_id, "low-stock")
    transport.fail = True

    response = client.post(f"/api/supply-request/{location_id}")

    assert response.status_code == 500
    assert client.get("/api/supply-requests").json() == []
    assert location_of(client, bandage)["supplyRequestedAt"] is None

    transport.fail = False
    response = client.post(f"/api/supply-request/{location_id}")

    assert response.status_code == 201
    assert len(client.get("/api/supply-requests").json()) == 1
    assert location_of(client, bandage)["supplyRequestedAt"] is not None


def test_supply_requested_at_resets_with_new_episode(client, bandage, contact):
    location_id = bandage["location"]["id"]
    set_status(client, location_id, "low-stock")
    client.post(f"/api/supply-request/{location_id}")

    assert location_of(client, bandage)["supplyRequestedAt"] is not None

    set_status(client, location_id, "out-of-stock")
    assert location_of(client, bandage)["supplyRequestedAt"] is not None

    set_status(client, location_id, "in-stock")
    assert location_of(client, bandage)["supplyRequestedAt"] is None

    set_status(client, location_id, "low-stock")
    assert location_of(client, bandage)["supplyRequestedAt"] is None

    # History stays
    assert len(client.get("/api/supply-requests").json()) == 1


def test_list_supply_requests_filters(client, bandage, contact):
    location_id = bandage["location"]["id"]
    set_status(client, location_id, "low-stock")
    client.post(f"/api/supply-request/{location_id}")

    item_id = bandage["item"]["id"]
    assert len(client.get("/api/supply-requests", params={"itemId": item_id}).json()) == 1
    assert len(client.get("/api/supply-requests", params={"ambulancePost": "post-a"}).json()) == 1
    assert client.get("/api/supply-requests", params={"ambulancePost": "post-b"}).json() == []


def test_mark_out_of_stock_sends_request(client, transport, bandage, contact):
    item_id = bandage["item"]["id"]

    response = client.post(f"/api/items/{item_id}/mark-out-of-stock")

    assert response.status_code == 200
    body = response.json()
    assert body["emailSent"] is True
    assert body["location"]["stockStatus"] == "out-of-stock"
    assert body["location"]["supplyRequestedAt"] is not None
    assert body["notification"]["stockStatus"] == "out-of-stock"
    assert transport.sent[0].subject.startswith("URGENT")


def test_mark_low_stock_without_contact_only_sets_status(client, transport, bandage):
    item_id = bandage["item"]["id"]

    response = client.post(f"/api/items/{item_id}/mark-low-stock")

    assert response.status_code == 200
    assert response.json()["emailSent"] is False
    assert response.json()["notification"] is None
    assert location_of(client, bandage)["stockStatus"] == "low-stock"
    assert transport.sent == []


def test_mark_rolls_back_when_delivery_fails(client, transport, bandage, contact):
    item_id = bandage["item"]["id"]
    transport.fail = True

    response = client.post(f"/api/items/{item_id}/mark-low-stock")

    assert response.status_code == 500
    assert location_of(client, bandage)["stockStatus"] == "in-stock"
    assert client.get("/api/supply-requests").json() == []


def test_mark_needs_location_choice_when_ambiguous(client, bandage, contact):
    item_id = bandage["item"]["id"]
    client.post("/api/cabinets", json={"id": "CAB2", "name": "Cabinet 2", "abbreviation": "C2"})
    second = client.post(
        "/api/item-locations",
        json={"itemId": item_id, "ambulancePostId": "post-a", "cabinetId": "CAB2"},
    ).json()

    response = client.post(f"/api/items/{item_id}/mark-low-stock")
    assert response.status_code == 400

    response = client.post(
        f"/api/items/{item_id}/mark-low-stock",
        json={"locationId": second["id"]},
    )
    assert response.status_code == 200
    assert response.json()["location"]["id"] == second["id"]


def test_warning_email_goes_to_alert_address(client, transport, bandage):
    item_id = bandage["item"]["id"]

    assert client.post(f"/api/send-warning-email/{item_id}").status_code == 400

    client.patch(f"/api/medical-items/{item_id}", json={"alertEmail": "magazijn@example.org"})
    response = client.post(f"/api/send-warning-email/{item_id}")

    assert response.status_code == 201
    assert response.json()["notification"]["itemLocationId"] is None
    assert transport.sent[0].to == "magazijn@example.org"
