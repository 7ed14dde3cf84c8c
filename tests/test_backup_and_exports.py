from io import BytesIO

from openpyxl import load_workbook


def test_export_then_import_restores_data(client, bandage, contact):
    client.post("/api/categories", json={"name": "Wound Care", "icon": "🩹"})
    client.post(f"/api/items/{bandage['item']['id']}/mark-low-stock")

    snapshot = client.get("/api/backup/export").json()
    assert snapshot["version"] == 1
    assert len(snapshot["tables"]["medical_items"]) == 1
    assert len(snapshot["tables"]["supply_requests"]) == 1

    client.delete(f"/api/medical-items/{bandage['item']['id']}")
    assert client.get("/api/medical-items").json() == []

    response = client.post("/api/backup/import", json=snapshot)
    assert response.status_code == 200
    assert response.json()["imported"]["item_locations"] == 1

    items = client.get("/api/medical-items").json()
    assert [item["name"] for item in items] == ["Bandage"]

    location = client.get(f"/api/item-locations/{items[0]['id']}").json()[0]
    assert location["stockStatus"] == "low-stock"
    assert location["supplyRequestedAt"] is not None

    assert [c["name"] for c in client.get("/api/post-contacts").json()] == ["Jan de Vries"]


def test_import_keeps_replacement_links(client, post_a):
    snapshot = {
        "version": 1,
        "tables": {
            "medical_items": [
                {"id": 1, "name": "Old", "category": "Misc", "is_discontinued": True,
                 "replacement_item_id": 2},
                {"id": 2, "name": "New", "category": "Misc", "is_discontinued": False},
            ],
        },
    }

    assert client.post("/api/backup/import", json=snapshot).status_code == 200

    assert client.get("/api/medical-items/1").json()["replacementItemId"] == 2
    # Tables missing from the snapshot are emptied
    assert client.get("/api/ambulance-posts").json() == []


def test_import_rejects_unknown_tables(client):
    response = client.post("/api/backup/import", json={"tables": {"users": []}})
    assert response.status_code == 400


def test_import_rejects_unknown_columns(client):
    response = client.post(
        "/api/backup/import",
        json={"tables": {"categories": [{"id": 1, "name": "X", "colour": "red"}]}},
    )
    assert response.status_code == 400


def test_inventory_export_is_a_workbook(client, bandage):
    response = client.get("/api/exports/inventory")

    assert response.status_code == 200
    assert "attachment; filename=inventory_all_" in response.headers["content-disposition"]

    workbook = load_workbook(BytesIO(response.content))
    assert workbook.sheetnames == ["Inventory", "Cabinet Summary"]

    rows = list(workbook["Inventory"].iter_rows(values_only=True))
    assert rows[0][0] == "Item"
    assert rows[1][:4] == ("Bandage", "Wound Care", "Post A", "Cabinet 1")
    assert rows[1][5] == "in-stock"

    summary = list(workbook["Cabinet Summary"].iter_rows(values_only=True))
    assert summary[1] == ("CAB1", "Cabinet 1", 1, 0)


def test_import_runs_create_checks_and_keeps_current_data(client, bandage):
    snapshot = {
        "tables": {
            "medical_items": [{"id": 1, "name": "", "category": "  "}],
            "ambulance_posts": [{"id": "Bad Post!", "name": ""}],
        }
    }

    response = client.post("/api/backup/import", json=snapshot)
    assert response.status_code == 400

    assert [item["name"] for item in client.get("/api/medical-items").json()] == ["Bandage"]
    assert [post["id"] for post in client.get("/api/ambulance-posts").json()] == ["post-a"]


def test_import_rejects_bad_post_id(client):
    snapshot = {"tables": {"ambulance_posts": [{"id": "Bad Post!", "name": "Post"}]}}

    assert client.post("/api/backup/import", json=snapshot).status_code == 400
    assert client.get("/api/ambulance-posts").json() == []


def test_import_rejects_malformed_rows(client):
    bad_snapshots = [
        {"medical_items": [{"id": 1, "category": "X"}]},
        {"medical_items": [{"name": "X", "category": "X", "replacement_item_id": 2}]},
        {"medical_items": [{"id": 1, "name": "X", "category": "X", "replacement_item_id": 9}]},
        {"cabinets": [{"id": "CAB1", "name": "Cabinet", "abbreviation": "ABCDE"}]},
        {
            "ambulance_posts": [{"id": "post-a", "name": "Post A"}],
            "cabinets": [{"id": "CAB1", "name": "Cabinet", "abbreviation": "C1"}],
            "medical_items": [{"id": 1, "name": "X", "category": "X"}],
            "item_locations": [
                {"id": 1, "item_id": 1, "ambulance_post_id": "post-a",
                 "cabinet_id": "CAB1", "stock_status": "bogus"},
            ],
        },
    ]

    for tables in bad_snapshots:
        response = client.post("/api/backup/import", json={"tables": tables})
        assert response.status_code == 400, tables


def test_import_checks_location_references(client):
    snapshot = {
        "tables": {
            "ambulance_posts": [
                {"id": "post-a", "name": "Post A"},
                {"id": "post-b", "name": "Post B"},
            ],
            "cabinets": [
                {"id": "CAB1", "name": "Cabinet 1", "abbreviation": "C1"},
                {"id": "CAB2", "name": "Cabinet 2", "abbreviation": "C2"},
            ],
            "drawers": [{"id": 1, "cabinet_id": "CAB2", "name": "Lade 1"}],
            "post_contacts": [
                {"id": 1, "ambulance_post_id": "post-b", "name": "Piet", "email": "piet@example.org"},
            ],
            "medical_items": [{"id": 1, "name": "Bandage", "category": "Wound Care"}],
            "item_locations": [
                {"id": 1, "item_id": 1, "ambulance_post_id": "post-a", "cabinet_id": "CAB1"},
            ],
        }
    }
    assert client.post("/api/backup/import", json=snapshot).status_code == 200

    snapshot["tables"]["item_locations"][0]["drawer_id"] = 1
    assert client.post("/api/backup/import", json=snapshot).status_code == 400

    snapshot["tables"]["item_locations"][0]["drawer_id"] = None
    snapshot["tables"]["item_locations"][0]["contact_person_id"] = 1
    assert client.post("/api/backup/import", json=snapshot).status_code == 400

    # The last good import is still in place
    assert len(client.get("/api/item-locations").json()) == 1
