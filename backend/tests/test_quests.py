"""Tests for the quest list endpoints"""


def create_quest(client, **payload):
    payload.setdefault("title", "Slay ten slimes")
    response = client.post("/api/quests", json=payload)
    assert response.status_code == 201
    return response.json()


class TestQuestCreate:
    """Tests for POST /api/quests"""

    def test_create_returns_quest(self, client):
        quest = create_quest(client, title="  Find the lost ring  ", player="alice")
        assert quest["id"]
        assert quest["title"] == "Find the lost ring"
        assert quest["status"] == "open"
        assert quest["player"] == "alice"
        assert quest["completed_at"] is None

    def test_create_done_sets_completed_at(self, client):
        quest = create_quest(client, status="done")
        assert quest["completed_at"] is not None

    def test_missing_title(self, client):
        response = client.post("/api/quests", json={"player": "alice"})
        assert response.status_code == 400
        assert response.json() == {"error": "missing_title"}

    def test_non_string_title(self, client):
        response = client.post("/api/quests", json={"title": 5})
        assert response.status_code == 400
        assert response.json() == {"error": "invalid_title"}

    def test_null_title(self, client):
        response = client.post("/api/quests", json={"title": None})
        assert response.json() == {"error": "missing_title"}

    def test_blank_title(self, client):
        response = client.post("/api/quests", json={"title": "   "})
        assert response.json()["error"] == "missing_title"

    def test_title_too_long(self, client):
        response = client.post("/api/quests", json={"title": "x" * 201})
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_title"

    def test_invalid_status(self, client):
        response = client.post("/api/quests", json={"title": "Q", "status": "paused"})
        assert response.json()["error"] == "invalid_status"

    def test_invalid_player(self, client):
        response = client.post("/api/quests", json={"title": "Q", "player": "no spaces"})
        assert response.json()["error"] == "invalid_player"


class TestQuestRead:
    """Tests for GET /api/quests endpoints"""

    def test_get_quest(self, client):
        quest = create_quest(client)
        response = client.get(f"/api/quests/{quest['id']}")
        assert response.status_code == 200
        assert response.json() == quest

    def test_get_unknown_quest(self, client):
        response = client.get("/api/quests/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"error": "quest_not_found"}

    def test_list_all(self, client):
        ids = {create_quest(client, title=f"Quest {i}")["id"] for i in range(3)}
        response = client.get("/api/quests")
        assert response.status_code == 200
        assert {q["id"] for q in response.json()} == ids

    def test_filter_by_status(self, client):
        create_quest(client, title="open one")
        done = create_quest(client, title="done one", status="done")
        data = client.get("/api/quests?status=done").json()
        assert [q["id"] for q in data] == [done["id"]]

    def test_filter_by_player(self, client):
        mine = create_quest(client, player="alice")
        create_quest(client, player="bob")
        create_quest(client)
        data = client.get("/api/quests?player=alice").json()
        assert [q["id"] for q in data] == [mine["id"]]

    def test_unknown_status_filter(self, client):
        response = client.get("/api/quests?status=someday")
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_status"


class TestQuestPatch:
    """Tests for PATCH /api/quests/{id}"""

    def test_mark_done_sets_completed_at(self, client):
        quest = create_quest(client)
        response = client.patch(f"/api/quests/{quest['id']}", json={"status": "done"})
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "done"
        assert data["completed_at"] is not None

    def test_reopen_clears_completed_at(self, client):
        quest = create_quest(client, status="done")
        data = client.patch(f"/api/quests/{quest['id']}", json={"status": "active"}).json()
        assert data["status"] == "active"
        assert data["completed_at"] is None

    def test_rename(self, client):
        quest = create_quest(client)
        data = client.patch(f"/api/quests/{quest['id']}", json={"title": "Renamed"}).json()
        assert data["title"] == "Renamed"
        assert client.get(f"/api/quests/{quest['id']}").json()["title"] == "Renamed"

    def test_empty_patch(self, client):
        quest = create_quest(client)
        response = client.patch(f"/api/quests/{quest['id']}", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "no_fields"

    def test_invalid_status(self, client):
        quest = create_quest(client)
        response = client.patch(f"/api/quests/{quest['id']}", json={"status": "nope"})
        assert response.json()["error"] == "invalid_status"

    def test_patch_unknown_quest(self, client):
        response = client.patch("/api/quests/missing", json={"status": "done"})
        assert response.status_code == 404


class TestQuestDelete:
    """Tests for DELETE /api/quests/{id}"""

    def test_delete_requires_admin(self, client):
        quest = create_quest(client)
        response = client.delete(f"/api/quests/{quest['id']}")
        assert response.status_code == 403
        assert response.json() == {"error": "forbidden"}

    def test_delete(self, client, admin_headers):
        quest = create_quest(client)
        response = client.delete(f"/api/quests/{quest['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert client.get(f"/api/quests/{quest['id']}").status_code == 404

    def test_delete_unknown(self, client, admin_headers):
        response = client.delete("/api/quests/missing", headers=admin_headers)
        assert response.status_code == 404
