"""Tests for the enemy catalog endpoints"""
from backend.seed import seed_enemies


class TestEnemyCatalog:
    """Tests for GET /api/enemies endpoints"""

    def test_seeded_catalog_weakest_first(self, client):
        response = client.get("/api/enemies")
        assert response.status_code == 200
        data = response.json()
        assert [e["id"] for e in data] == ["slime", "goblin", "wolf", "orc", "dragon"]
        powers = [e["power"] for e in data]
        assert powers == sorted(powers)

    def test_get_enemy(self, client):
        response = client.get("/api/enemies/slime")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Slime"
        assert data["loot"] == [{"item": "gel", "chance": 0.5, "quantity": 1}]

    def test_unknown_enemy(self, client):
        response = client.get("/api/enemies/unicorn")
        assert response.status_code == 404
        assert response.json() == {"error": "enemy_not_found"}

    def test_invalid_enemy_id(self, client):
        response = client.get("/api/enemies/Bad-ID")
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_enemy_id"


class TestEnemyPut:
    """Tests for PUT /api/enemies/{id}"""

    def test_requires_admin(self, client, sample_enemy):
        response = client.put("/api/enemies/troll", json=sample_enemy)
        assert response.status_code == 403
        assert client.get("/api/enemies/troll").status_code == 404

    def test_wrong_secret(self, client, sample_enemy):
        response = client.put(
            "/api/enemies/troll", json=sample_enemy, headers={"X-Admin-Secret": "guess"}
        )
        assert response.status_code == 403

    def test_create(self, client, admin_headers, sample_enemy):
        response = client.put("/api/enemies/troll", json=sample_enemy, headers=admin_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["id"] == "troll"
        assert data["power"] == 40
        assert len(data["loot"]) == 2

    def test_replace(self, client, admin_headers, sample_enemy):
        client.put("/api/enemies/troll", json=sample_enemy, headers=admin_headers)
        sample_enemy["power"] = 55
        sample_enemy["loot"] = []
        response = client.put("/api/enemies/troll", json=sample_enemy, headers=admin_headers)
        assert response.status_code == 200
        stored = client.get("/api/enemies/troll").json()
        assert stored["power"] == 55
        assert stored["loot"] == []

    def test_missing_power(self, client, admin_headers):
        response = client.put("/api/enemies/troll", json={"hp": 10}, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "missing_power"

    def test_invalid_hp(self, client, admin_headers):
        response = client.put(
            "/api/enemies/troll", json={"power": 5, "hp": 0}, headers=admin_headers
        )
        assert response.json()["error"] == "invalid_hp"

    def test_loot_chance_out_of_range(self, client, admin_headers, sample_enemy):
        sample_enemy["loot"][0]["chance"] = 1.5
        response = client.put("/api/enemies/troll", json=sample_enemy, headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_loot"

    def test_loot_item_must_be_key(self, client, admin_headers, sample_enemy):
        sample_enemy["loot"][0]["item"] = "troll/hide"
        response = client.put("/api/enemies/troll", json=sample_enemy, headers=admin_headers)
        assert response.json()["error"] == "invalid_loot"


class TestEnemyDelete:
    """Tests for DELETE /api/enemies/{id}"""

    def test_delete(self, client, admin_headers):
        response = client.delete("/api/enemies/slime", headers=admin_headers)
        assert response.status_code == 200
        assert client.get("/api/enemies/slime").status_code == 404

    def test_delete_requires_admin(self, client):
        assert client.delete("/api/enemies/slime").status_code == 403

    def test_delete_unknown(self, client, admin_headers):
        response = client.delete("/api/enemies/unicorn", headers=admin_headers)
        assert response.status_code == 404


class TestSeeding:
    """Tests for the default catalog seed"""

    def test_seed_writes_catalog_once(self, store):
        assert seed_enemies(store) == 5
        assert store.count("enemies") == 5
        assert seed_enemies(store) == 0

    def test_seed_skips_customised_catalog(self, store):
        store.set("enemies/custom", {"id": "custom", "name": "Custom", "power": 1, "hp": 1})
        assert seed_enemies(store) == 0
        assert store.count("enemies") == 1
