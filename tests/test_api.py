"""
End-to-end tests through the HTTP API.
"""

import pytest

COLLECTION = "Paris 2025"


@pytest.fixture
async def paris_collection(client, admin_headers):
    response = await client.post("/api/collections/", json={"name": COLLECTION}, headers=admin_headers)
    assert response.status_code == 200
    return response.json()


async def create_event(client, headers, **fields):
    body = {
        "collection": COLLECTION,
        "title": "Concert de Jazz",
        "type": "Concert",
        "date": "2025-10-16",
        "address": "Paris, France",
    }
    body.update(fields)
    return await client.post("/api/events/", json=body, headers=headers)


async def test_root(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"


async def test_metrics_exposition(client):
    response = await client.get("/metrics")

    assert response.status_code == 200
    assert "eventmap_" in response.text


class TestCollections:
    async def test_create_and_list(self, client, admin_headers, paris_collection):
        assert paris_collection["name"] == COLLECTION

        response = await client.get("/api/collections/", headers=admin_headers)
        assert response.json() == [COLLECTION]

    async def test_duplicate_name_conflicts(self, client, admin_headers, paris_collection):
        response = await client.post("/api/collections/", json={"name": COLLECTION}, headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    async def test_blank_name_is_rejected(self, client, admin_headers):
        response = await client.post("/api/collections/", json={"name": "  "}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["fields"] == ["name"]

    async def test_delete_removes_events(self, client, admin_headers, paris_collection):
        await create_event(client, admin_headers)
        await create_event(client, admin_headers, address="Lyon, France")

        response = await client.delete(f"/api/collections/{COLLECTION}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "name": COLLECTION, "events_deleted": 2}
        listing = await client.get("/api/events/", params={"collection": COLLECTION})
        assert listing.json() == []

    async def test_delete_name_with_slash(self, client, admin_headers):
        await client.post("/api/collections/", json={"name": "Paris/Nord"}, headers=admin_headers)

        response = await client.delete("/api/collections/Paris%2FNord", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["name"] == "Paris/Nord"
        listing = await client.get("/api/collections/", headers=admin_headers)
        assert listing.json() == []

    async def test_delete_unknown_collection(self, client, admin_headers):
        response = await client.delete("/api/collections/Nowhere", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestActiveCollection:
    async def test_defaults_before_first_activation(self, client):
        response = await client.get("/api/collections/active")

        assert response.json() == {"activeCollection": "Default"}

    async def test_activate_accepts_either_key(self, client, admin_headers):
        first = await client.post(
            "/api/collections/activate", json={"collection": COLLECTION}, headers=admin_headers
        )
        second = await client.post(
            "/api/collections/activate", json={"name": "Lyon 2026"}, headers=admin_headers
        )

        assert first.json() == {"activeCollection": COLLECTION, "success": True}
        assert second.json()["activeCollection"] == "Lyon 2026"
        current = await client.get("/api/collections/active")
        assert current.json() == {"activeCollection": "Lyon 2026"}

    async def test_activate_requires_a_name(self, client, admin_headers):
        response = await client.post("/api/collections/activate", json={}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    async def test_anonymous_listing_follows_active_collection(self, client, admin_headers, paris_collection):
        await create_event(client, admin_headers)
        await client.post("/api/collections/activate", json={"collection": COLLECTION}, headers=admin_headers)

        response = await client.get("/api/events/")

        assert [event["collection"] for event in response.json()] == [COLLECTION]


class TestEvents:
    async def test_create_geocodes_and_appends(self, client, admin_headers, paris_collection, geocoder):
        response = await create_event(client, admin_headers, date="2025-10-16T20:30:00")

        assert response.status_code == 200
        event = response.json()
        assert event["latitude"] == 48.8566
        assert event["longitude"] == 2.3522
        assert event["date"] == "2025-10-16"
        assert event["position"] == 1
        assert event["favorite"] is False
        assert event["collection"] == COLLECTION
        assert geocoder.calls == ["Paris, France"]

    async def test_same_location_is_rejected(self, client, admin_headers, paris_collection):
        await create_event(client, admin_headers)

        response = await create_event(client, admin_headers, title="Another concert")

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "duplicate_location"
        assert (body["latitude"], body["longitude"]) == (48.8566, 2.3522)

    async def test_missing_fields_are_all_reported(self, client, admin_headers, paris_collection):
        response = await client.post(
            "/api/events/", json={"collection": COLLECTION, "title": "Expo"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["fields"] == ["type", "date", "address"]

    async def test_unknown_address(self, client, admin_headers, paris_collection):
        response = await create_event(client, admin_headers, address="Atlantis")

        assert response.status_code == 422
        assert response.json() == {
            "error": "geocode_error",
            "detail": "Cannot geocode address",
            "address": "Atlantis",
        }

    async def test_unknown_collection(self, client, admin_headers):
        response = await create_event(client, admin_headers, collection="Nowhere", latitude=1.0, longitude=1.0)

        assert response.status_code == 404

    async def test_update_keeps_favorite_and_position(self, client, admin_headers, paris_collection):
        created = (await create_event(client, admin_headers)).json()
        await client.patch(
            f"/api/events/{created['id']}/favorite", params={"collection": COLLECTION}, headers=admin_headers
        )

        response = await client.put(
            f"/api/events/{created['id']}",
            json={
                "collection": COLLECTION,
                "title": "Concert de Jazz (complet)",
                "type": "Concert",
                "date": "2025-10-17",
                "address": "Paris, France",
                "latitude": 48.8566,
                "longitude": 2.3522,
            },
            headers=admin_headers,
        )

        assert response.status_code == 200
        event = response.json()
        assert event["title"] == "Concert de Jazz (complet)"
        assert event["date"] == "2025-10-17"
        assert event["favorite"] is True
        assert event["position"] == 1

    async def test_update_unknown_event(self, client, admin_headers, paris_collection):
        response = await client.put(
            "/api/events/999",
            json={
                "collection": COLLECTION,
                "title": "Ghost",
                "type": "Concert",
                "date": "2025-10-17",
                "address": "Paris, France",
            },
            headers=admin_headers,
        )

        assert response.status_code == 404

    async def test_delete_is_idempotent(self, client, admin_headers, paris_collection):
        created = (await create_event(client, admin_headers)).json()
        url = f"/api/events/{created['id']}"

        first = await client.delete(url, params={"collection": COLLECTION}, headers=admin_headers)
        second = await client.delete(url, params={"collection": COLLECTION}, headers=admin_headers)

        assert first.json() == {"success": True, "deleted": True}
        assert second.status_code == 200
        assert second.json() == {"success": True, "deleted": False}

    async def test_delete_without_collection_targets_default(self, client, admin_headers, paris_collection):
        created = (await create_event(client, admin_headers)).json()

        response = await client.delete(f"/api/events/{created['id']}", headers=admin_headers)

        assert response.json() == {"success": True, "deleted": False}
        listing = (await client.get("/api/events/", params={"collection": COLLECTION})).json()
        assert [event["id"] for event in listing] == [created["id"]]

    async def test_toggle_favorite(self, client, admin_headers, paris_collection):
        created = (await create_event(client, admin_headers)).json()
        url = f"/api/events/{created['id']}/favorite"

        on = await client.patch(url, params={"collection": COLLECTION}, headers=admin_headers)
        off = await client.patch(url, params={"collection": COLLECTION}, headers=admin_headers)

        assert on.json() == {"id": created["id"], "favorite": True}
        assert off.json() == {"id": created["id"], "favorite": False}


class TestReorder:
    async def test_reorder_changes_listing(self, client, admin_headers, paris_collection):
        ids = []
        for address in ("Paris, France", "Lyon, France", "Marseille, France"):
            ids.append((await create_event(client, admin_headers, address=address)).json()["id"])

        response = await client.patch(
            "/api/events/reorder",
            json={"collection": COLLECTION, "orderedIds": [ids[2], ids[0], ids[1]]},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "collection": COLLECTION, "reordered": 3}
        listing = (await client.get("/api/events/", params={"collection": COLLECTION})).json()
        assert [event["id"] for event in listing] == [ids[2], ids[0], ids[1]]
        assert [event["position"] for event in listing] == [1, 2, 3]

    async def test_foreign_id_changes_nothing(self, client, admin_headers, paris_collection):
        first = (await create_event(client, admin_headers)).json()
        second = (await create_event(client, admin_headers, address="Lyon, France")).json()

        response = await client.patch(
            "/api/events/reorder",
            json={"collection": COLLECTION, "orderedIds": [second["id"], 999]},
            headers=admin_headers,
        )

        assert response.status_code == 404
        listing = (await client.get("/api/events/", params={"collection": COLLECTION})).json()
        assert [event["id"] for event in listing] == [first["id"], second["id"]]

    async def test_duplicate_ids_are_rejected(self, client, admin_headers, paris_collection):
        created = (await create_event(client, admin_headers)).json()

        response = await client.patch(
            "/api/events/reorder",
            json={"collection": COLLECTION, "orderedIds": [created["id"], created["id"]]},
            headers=admin_headers,
        )

        assert response.status_code == 400


class TestBulk:
    async def test_bulk_import_stops_at_first_failure(self, client, admin_headers, paris_collection):
        base = {"title": "Expo", "type": "Exposition", "date": "2025-11-02"}
        response = await client.post(
            "/api/events/bulk",
            json={
                "collection": COLLECTION,
                "events": [
                    dict(base, address="Paris, France"),
                    dict(base, address="Atlantis"),
                    dict(base, address="Lyon, France"),
                ],
            },
            headers=admin_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert (body["created"], body["failed"], body["skipped"]) == (1, 1, 1)
        assert [item["status"] for item in body["items"]] == ["created", "failed", "skipped"]
        assert body["items"][0]["event"]["position"] is None
        assert body["items"][1]["error"] == "geocode_error"

    async def test_bulk_import_can_continue(self, client, admin_headers, paris_collection):
        base = {"title": "Expo", "type": "Exposition", "date": "2025-11-02"}
        response = await client.post(
            "/api/events/bulk",
            json={
                "collection": COLLECTION,
                "stop_on_error": False,
                "events": [
                    dict(base, address="Atlantis"),
                    dict(base, address="Paris, France"),
                    dict(base, address="Paris, France"),
                ],
            },
            headers=admin_headers,
        )

        body = response.json()
        assert (body["created"], body["failed"], body["skipped"]) == (2, 1, 0)

    async def test_bulk_import_needs_events(self, client, admin_headers, paris_collection):
        response = await client.post(
            "/api/events/bulk", json={"collection": COLLECTION, "events": []}, headers=admin_headers
        )

        assert response.status_code == 400


class TestRoute:
    async def make_favorites(self, client, headers, addresses):
        for address in addresses:
            event = (await create_event(client, headers, address=address)).json()
            await client.patch(
                f"/api/events/{event['id']}/favorite", params={"collection": COLLECTION}, headers=headers
            )

    async def test_route_through_favorites_in_display_order(
        self, client, admin_headers, paris_collection, route_provider
    ):
        await self.make_favorites(client, admin_headers, ["Paris, France", "Lyon, France"])
        await create_event(client, admin_headers, address="Marseille, France")

        response = await client.get("/api/events/route", params={"collection": COLLECTION, "mode": "foot"})

        assert response.status_code == 200
        body = response.json()
        assert body["collection"] == COLLECTION
        assert body["mode"] == "foot"
        assert body["distance"] == 1200.5
        coordinates, mode = route_provider.calls[0]
        assert mode == "foot"
        assert [(c.latitude, c.longitude) for c in coordinates] == [(48.8566, 2.3522), (45.764, 4.8357)]

    async def test_route_needs_two_favorites(self, client, admin_headers, paris_collection):
        await self.make_favorites(client, admin_headers, ["Paris, France"])

        response = await client.get("/api/events/route", params={"collection": COLLECTION})

        assert response.status_code == 400
        assert response.json()["error"] == "insufficient_points"

    async def test_routing_service_failure(self, client, admin_headers, paris_collection, route_provider):
        await self.make_favorites(client, admin_headers, ["Paris, France", "Lyon, France"])
        route_provider.error = "Routing service unavailable"

        response = await client.get("/api/events/route", params={"collection": COLLECTION})

        assert response.status_code == 502
        assert response.json() == {"error": "upstream_error", "detail": "Routing service unavailable"}
