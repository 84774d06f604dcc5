"""Test POST /api/products/bulk."""

import uuid


class TestBulkActions:

    def test_publish_three(self, client, make_product):
        ids = [make_product(slug)["id"] for slug in ("anzug", "weste", "fliege")]

        response = client.post("/api/products/bulk", json={"ids": ids, "action": "publish"})

        assert response.status_code == 200
        assert response.json == {
            "success": True,
            "action": "publish",
            "affected": 3,
            "message": "3 product(s) published",
        }
        published = client.get("/api/products?published=true").json
        assert len(published) == 3

    def test_unpublish(self, client, make_product):
        ids = [make_product(slug, published=True)["id"] for slug in ("anzug", "weste")]

        response = client.post("/api/products/bulk", json={"ids": ids[:1], "action": "unpublish"})

        assert response.json["affected"] == 1
        assert response.json["message"] == "1 product(s) moved to drafts"
        assert [p["slug"] for p in client.get("/api/products?published=true").json] == ["weste"]

    def test_delete_counts_only_existing(self, client, make_product):
        ids = [make_product("anzug")["id"], str(uuid.uuid4())]

        response = client.post("/api/products/bulk", json={"ids": ids, "action": "delete"})

        assert response.json["affected"] == 1
        assert client.get("/api/products").json == []

    def test_unknown_action(self, client, make_product):
        product = make_product("anzug")

        response = client.post("/api/products/bulk", json={"ids": [product["id"]], "action": "archive"})

        assert response.status_code == 400
        assert "action" in response.json["error"]

    def test_empty_ids(self, client):
        response = client.post("/api/products/bulk", json={"ids": [], "action": "publish"})
        assert response.status_code == 400
