# tests/test_catalog_api.py
"""Categories, profiles and favorites."""
import uuid

import pytest


@pytest.fixture
def seller(client, signup, listing_payload):
    user_id, headers = signup()
    active = client.post("/api/products", json=listing_payload(title="Lamp", status="active"), headers=headers).json()["product"]
    draft = client.post("/api/products", json=listing_payload(title="Desk"), headers=headers).json()["product"]
    return {"id": user_id, "headers": headers, "active": active, "draft": draft}


class TestCategories:
    def test_list_ordered_by_name(self, client, category):
        names = [c["name"] for c in client.get("/api/categories").json()["categories"]]
        assert names == sorted(names)
        assert "Electronics" in names

    def test_get_and_missing(self, client, category):
        resp = client.get(f"/api/categories/{category.id}")
        assert resp.json()["category"]["slug"] == "electronics"
        missing = client.get(f"/api/categories/{uuid.uuid4()}")
        assert missing.status_code == 404
        assert missing.json() == {"error": "Category not found"}

    def test_products_in_category_are_active_only(self, client, category, seller):
        body = client.get(f"/api/categories/{category.id}/products", headers=seller["headers"]).json()
        assert [p["title"] for p in body["products"]] == ["Lamp"]
        assert body["pagination"]["total"] == 1


class TestProfile:
    def test_get_and_update_own(self, client, seller):
        assert client.get("/api/profile", headers=seller["headers"]).json()["profile"]["full_name"] == "Seller"
        resp = client.put("/api/profile", json={
            "full_name": "New Name", "phone": " 555 ", "avatar_url": "https://cdn.example.com/a.png",
        }, headers=seller["headers"])
        assert resp.status_code == 200
        profile = resp.json()["profile"]
        assert profile["full_name"] == "New Name"
        assert profile["phone"] == "555"
        assert profile["avatar_url"] == "https://cdn.example.com/a.png"
        assert profile["location"] == "Lisbon"

    def test_update_rejects_bad_avatar(self, client, seller):
        resp = client.put("/api/profile", json={"avatar_url": "not a url"}, headers=seller["headers"])
        assert resp.status_code == 400

    def test_update_refuses_explicit_null(self, client, seller):
        resp = client.put("/api/profile", json={"full_name": None, "location": None}, headers=seller["headers"])
        assert resp.status_code == 400
        assert sorted(e["field"] for e in resp.json()["errors"]) == ["full_name", "location"]
        profile = client.get("/api/profile", headers=seller["headers"]).json()["profile"]
        assert profile["full_name"] == "Seller"
        assert profile["location"] == "Lisbon"

    def test_own_listings_include_every_status(self, client, seller):
        body = client.get("/api/profile/listings", headers=seller["headers"]).json()
        assert sorted(p["title"] for p in body["products"]) == ["Desk", "Lamp"]
        drafts = client.get("/api/profile/listings", params={"status": "draft"}, headers=seller["headers"]).json()
        assert [p["title"] for p in drafts["products"]] == ["Desk"]

    def test_public_profile_hides_contact_details(self, client, seller):
        profile = client.get(f"/api/profile/{seller['id']}").json()["profile"]
        assert profile["full_name"] == "Seller"
        assert "email" not in profile
        assert "phone" not in profile
        assert client.get(f"/api/profile/{uuid.uuid4()}").status_code == 404


class TestFavorites:
    def test_add_list_check_remove(self, client, signup, seller):
        _, headers = signup(email="fan@example.com")
        product_id = seller["active"]["id"]

        resp = client.post("/api/favorites", json={"product_id": product_id}, headers=headers)
        assert resp.status_code == 201
        assert resp.json()["favorite"]["product_id"] == product_id

        favorites = client.get("/api/favorites", headers=headers).json()["favorites"]
        assert [f["product"]["title"] for f in favorites] == ["Lamp"]
        assert client.get(f"/api/favorites/check/{product_id}", headers=headers).json() == {"isFavorite": True}

        resp = client.delete(f"/api/favorites/{product_id}", headers=headers)
        assert resp.json() == {"message": "Product removed from favorites"}
        assert client.get(f"/api/favorites/check/{product_id}", headers=headers).json() == {"isFavorite": False}

    def test_duplicate_favorite(self, client, signup, seller):
        _, headers = signup(email="fan@example.com")
        payload = {"product_id": seller["active"]["id"]}
        client.post("/api/favorites", json=payload, headers=headers)
        resp = client.post("/api/favorites", json=payload, headers=headers)
        assert resp.status_code == 400
        assert resp.json() == {"error": "Product already in favorites"}

    def test_cannot_favorite_hidden_or_missing(self, client, signup, seller):
        _, headers = signup(email="fan@example.com")
        hidden = client.post("/api/favorites", json={"product_id": seller["draft"]["id"]}, headers=headers)
        assert hidden.status_code == 403
        missing = client.post("/api/favorites", json={"product_id": str(uuid.uuid4())}, headers=headers)
        assert missing.status_code == 404

    def test_embedded_product_hidden_after_unpublish(self, client, signup, seller):
        _, headers = signup(email="fan@example.com")
        product_id = seller["active"]["id"]
        client.post("/api/favorites", json={"product_id": product_id}, headers=headers)
        client.patch(f"/api/products/{product_id}/status", json={"status": "draft"}, headers=seller["headers"])

        favorites = client.get("/api/favorites", headers=headers).json()["favorites"]
        assert len(favorites) == 1
        assert favorites[0]["product"] is None

    def test_favorites_are_private(self, client, signup, seller):
        _, fan = signup(email="fan@example.com")
        _, other = signup(email="other@example.com")
        client.post("/api/favorites", json={"product_id": seller["active"]["id"]}, headers=fan)
        assert client.get("/api/favorites", headers=other).json()["favorites"] == []
