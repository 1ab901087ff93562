"""Integration tests for POST /api/combat/attack"""
from backend import dependencies
from backend.dependencies import RATE_LIMITS, check_rate_limit


def attack(client, player="alice", enemy="slime"):
    return client.post("/api/combat/attack", json={"player": player, "enemy": enemy})


class TestAttackOutcome:
    """A level 1 player (power 10) against the seeded slime (power 5): chance 2/3"""

    def test_win_awards_xp_loot_and_progress(self, client, scripted_rng):
        client.put("/api/players/alice", json={})
        # fight roll, then the gel loot roll
        scripted_rng.script(0.1, 0.2)

        response = attack(client)
        assert response.status_code == 200
        data = response.json()
        assert data["win"] is True
        assert data["player"] == "alice"
        assert data["enemy"] == "slime"
        assert data["xp_gained"] == 10
        assert data["xp"] == 10
        assert data["loot"] == {"gel": 1}
        assert data["global"]["current"] == 1

        assert client.get("/api/players/alice").json()["xp"] == 10
        assert client.get("/api/players/alice/inventory").json() == {"gel": 1}
        assert client.get("/api/global").json()["current"] == 1

    def test_loot_accumulates(self, client, scripted_rng):
        client.put("/api/players/alice", json={})
        scripted_rng.script(0.1, 0.2)
        attack(client)
        attack(client)
        assert client.get("/api/players/alice/inventory").json() == {"gel": 2}

    def test_win_without_loot(self, client, scripted_rng):
        client.put("/api/players/alice", json={})
        scripted_rng.script(0.1, 0.9)
        data = attack(client).json()
        assert data["win"] is True
        assert data["loot"] == {}
        assert client.get("/api/players/alice/inventory").json() == {}

    def test_loss_changes_nothing(self, client, scripted_rng):
        client.put("/api/players/alice", json={"xp": 40})
        scripted_rng.script(0.99)

        data = attack(client).json()
        assert data["win"] is False
        assert data["xp_gained"] == 0
        assert data["global"] is None
        assert client.get("/api/players/alice").json()["xp"] == 40
        assert client.get("/api/global").json()["current"] == 0

    def test_level_up_reported(self, client, scripted_rng):
        client.put("/api/players/alice", json={"xp": 95})
        scripted_rng.script(0.1, 0.9)
        data = attack(client).json()
        assert data["level"] == 2
        assert data["levels_gained"] == 1
        assert data["leveled_up"] is True

    def test_equipment_raises_chance(self, client, scripted_rng):
        client.put("/api/players/bare", json={})
        client.put("/api/players/geared", json={"equipment": ["sword", "shield", "helm"]})
        scripted_rng.script(0.99)
        bare = attack(client, player="bare", enemy="goblin").json()
        geared = attack(client, player="geared", enemy="goblin").json()
        assert geared["player_power"] > bare["player_power"]
        assert geared["chance"] > bare["chance"]


class TestAttackErrors:

    def test_missing_player(self, client):
        response = client.post("/api/combat/attack", json={"enemy": "slime"})
        assert response.status_code == 400
        assert response.json() == {"error": "missing_player"}

    def test_invalid_player(self, client):
        response = attack(client, player="not valid")
        assert response.json() == {"error": "invalid_player"}

    def test_missing_enemy(self, client):
        response = client.post("/api/combat/attack", json={"player": "alice"})
        assert response.status_code == 400
        assert response.json() == {"error": "missing_enemy"}

    def test_unknown_player(self, client):
        response = attack(client, player="ghost")
        assert response.status_code == 404
        assert response.json() == {"error": "player_not_found"}

    def test_unknown_enemy(self, client):
        client.put("/api/players/alice", json={})
        response = attack(client, enemy="unicorn")
        assert response.status_code == 404
        assert response.json() == {"error": "enemy_not_found"}

    def test_rate_limited(self, client, scripted_rng):
        client.put("/api/players/alice", json={})
        scripted_rng.script(0.99)
        for _ in range(RATE_LIMITS["attack"]):
            assert attack(client).status_code == 200

        response = attack(client)
        assert response.status_code == 429
        assert response.json() == {"error": "rate_limited"}
        assert int(response.headers["Retry-After"]) > 0

    def test_rate_limit_is_per_player(self, client, scripted_rng):
        client.put("/api/players/alice", json={})
        client.put("/api/players/bob", json={})
        scripted_rng.script(0.99)
        for _ in range(RATE_LIMITS["attack"]):
            attack(client, player="alice")
        assert attack(client, player="bob").status_code == 200


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def time(self):
        return self.now


class TestRateLimitStore:
    """The in-memory limiter only tracks players with recent requests"""

    def test_unknown_players_not_tracked(self, client):
        for i in range(50):
            assert attack(client, player=f"ghost{i}").status_code == 404
            client.post(f"/api/players/ghost{i}/xp", json={"amount": 1})
        assert dependencies._rate_limit_store == {}

    def test_failed_validation_not_tracked(self, client):
        attack(client, player="bad name")
        assert dependencies._rate_limit_store == {}

    def test_expired_keys_dropped(self, monkeypatch):
        clock = FakeClock()
        monkeypatch.setattr(dependencies, "time", clock)
        dependencies.reset_rate_limits()

        assert check_rate_limit("alice", "attack", 5) == (True, None)
        assert "alice" in dependencies._rate_limit_store

        clock.now += dependencies.RATE_LIMIT_WINDOW
        check_rate_limit("bob", "attack", 5)
        assert list(dependencies._rate_limit_store) == ["bob"]
        dependencies.reset_rate_limits()

    def test_window_slides(self, monkeypatch):
        clock = FakeClock()
        monkeypatch.setattr(dependencies, "time", clock)
        dependencies.reset_rate_limits()

        for _ in range(3):
            assert check_rate_limit("alice", "attack", 3)[0] is True
        allowed, retry_after = check_rate_limit("alice", "attack", 3)
        assert allowed is False
        assert retry_after == dependencies.RATE_LIMIT_WINDOW + 1

        clock.now += dependencies.RATE_LIMIT_WINDOW
        assert check_rate_limit("alice", "attack", 3) == (True, None)
        dependencies.reset_rate_limits()
