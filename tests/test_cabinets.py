def test_create_cabinet_uppercases_abbreviation(client, cabinet_1):
    assert cabinet_1["abbreviation"] == "C1"
    assert cabinet_1["color"] == "bg-slate-200"


def test_cabinet_id_is_unique(client, cabinet_1):
    response = client.post(
        "/api/cabinets",
        json={"id": "CAB1", "name": "Again", "abbreviation": "AG"},
    )
    assert response.status_code == 409


def test_abbreviation_too_long(client):
    response = client.post(
        "/api/cabinets",
        json={"id": "CAB9", "name": "Cabinet 9", "abbreviation": "ABCD"},
    )
    assert response.status_code == 400


def test_update_cabinet_is_visible_in_list(client, cabinet_1):
    assert [c["name"] for c in client.get("/api/cabinets").json()] == ["Cabinet 1"]

    response = client.patch("/api/cabinets/CAB1", json={"name": "Trauma"})
    assert response.status_code == 200

    assert [c["name"] for c in client.get("/api/cabinets").json()] == ["Trauma"]


def test_cannot_delete_cabinet_with_items(client, bandage):
    response = client.delete("/api/cabinets/CAB1")

    assert response.status_code == 409
    assert response.json()["detail"] == "Cannot delete cabinet with items in it"
    assert client.get("/api/cabinets/CAB1").status_code == 200


def test_delete_cabinet_removes_drawers(client, cabinet_1):
    drawer = client.post("/api/drawers", json={"cabinetId": "CAB1", "name": "Lade 1"}).json()

    assert client.delete("/api/cabinets/CAB1").status_code == 204
    assert client.get("/api/cabinets/CAB1").status_code == 404
    assert client.get("/api/drawers").json() == []
    assert client.delete(f"/api/drawers/{drawer['id']}").status_code == 404


def test_summary_counts_per_cabinet(client, bandage):
    client.post(
        "/api/medical-items",
        json={
            "name": "Paracetamol",
            "category": "Medication",
            "locations": [
                {"ambulancePostId": "post-a", "cabinetId": "CAB1", "stockStatus": "out-of-stock"}
            ],
        },
    )
    client.post("/api/cabinets", json={"id": "CAB2", "name": "Cabinet 2", "abbreviation": "C2"})

    summary = {entry["id"]: entry for entry in client.get("/api/cabinets/summary").json()}

    assert summary["CAB1"]["totalItems"] == 2
    assert summary["CAB1"]["lowStockItems"] == 1
    assert summary["CAB1"]["categories"] == {"Wound Care": 1, "Medication": 1}
    assert summary["CAB2"]["totalItems"] == 0

    other_post = client.get("/api/cabinets/summary", params={"ambulancePostId": "post-b"}).json()
    assert all(entry["totalItems"] == 0 for entry in other_post)


def test_drawers_crud(client, cabinet_1):
    response = client.post(
        "/api/drawers",
        json={"cabinetId": "CAB1", "name": "Lade 1", "position": "boven", "drawerNumber": 1},
    )
    assert response.status_code == 201
    drawer = response.json()

    response = client.patch(f"/api/drawers/{drawer['id']}", json={"name": "Bovenlade"})
    assert response.json()["name"] == "Bovenlade"

    listed = client.get("/api/drawers", params={"cabinetId": "CAB1"}).json()
    assert [d["id"] for d in listed] == [drawer["id"]]

    assert client.delete(f"/api/drawers/{drawer['id']}").status_code == 204


def test_drawer_for_unknown_cabinet(client):
    response = client.post("/api/drawers", json={"cabinetId": "NOPE", "name": "Lade 1"})
    assert response.status_code == 404


def test_cabinet_order_per_post(client, post_a):
    for cabinet_id in ["A", "B", "C"]:
        client.post(
            "/api/cabinets",
            json={"id": cabinet_id, "name": f"Cabinet {cabinet_id}", "abbreviation": cabinet_id},
        )

    ordered = client.get("/api/ambulance-posts/post-a/cabinets/ordered").json()
    assert [c["id"] for c in ordered] == ["A", "B", "C"]

    response = client.post(
        "/api/ambulance-posts/post-a/cabinets/order",
        json={"orderedCabinetIds": ["C", "A"]},
    )
    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == ["C", "A", "B"]

    ordered = client.get("/api/ambulance-posts/post-a/cabinets/ordered").json()
    assert [c["id"] for c in ordered] == ["C", "A", "B"]


def test_cabinet_order_rejects_bad_input(client, post_a, cabinet_1):
    url = "/api/ambulance-posts/post-a/cabinets/order"

    assert client.post(url, json={"orderedCabinetIds": ["CAB1", "CAB1"]}).status_code == 400
    assert client.post(url, json={"orderedCabinetIds": ["NOPE"]}).status_code == 404
    assert client.post(
        "/api/ambulance-posts/nope/cabinets/order",
        json={"orderedCabinetIds": ["CAB1"]},
    ).status_code == 404


def test_cabinet_locations_limit_ordered_cabinets(client, post_a, cabinet_1):
    client.post("/api/cabinets", json={"id": "CAB2", "name": "Cabinet 2", "abbreviation": "C2"})

    response = client.post(
        "/api/cabinet-locations",
        json={"cabinetId": "CAB2", "ambulancePostId": "post-a", "subLocation": "Garage"},
    )
    assert response.status_code == 201
    placement = response.json()

    ordered = client.get("/api/ambulance-posts/post-a/cabinets/ordered").json()
    assert [c["id"] for c in ordered] == ["CAB2"]

    duplicate = client.post(
        "/api/cabinet-locations",
        json={"cabinetId": "CAB2", "ambulancePostId": "post-a"},
    )
    assert duplicate.status_code == 409

    listed = client.get("/api/cabinet-locations", params={"ambulancePostId": "post-a"}).json()
    assert [row["subLocation"] for row in listed] == ["Garage"]

    assert client.delete(f"/api/cabinet-locations/{placement['id']}").status_code == 204
    ordered = client.get("/api/ambulance-posts/post-a/cabinets/ordered").json()
    assert [c["id"] for c in ordered] == ["CAB1", "CAB2"]


def test_deleted_cabinet_leaves_cached_list(client, cabinet_1):
    client.post("/api/cabinets", json={"id": "CAB2", "name": "Cabinet 2", "abbreviation": "C2"})
    assert [c["id"] for c in client.get("/api/cabinets").json()] == ["CAB1", "CAB2"]

    assert client.delete("/api/cabinets/CAB1").status_code == 204

    assert [c["id"] for c in client.get("/api/cabinets").json()] == ["CAB2"]


def test_delete_missing_cabinet_is_404(client):
    assert client.delete("/api/cabinets/NOPE").status_code == 404
