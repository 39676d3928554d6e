"""Tests for the boards blueprint — /api/boards, /api/lists, /api/cards.

Covers:
- Board listing, aggregate loading (ordered lists + ordered cards), 404
- Board create / update / delete (cascade observed through GET)
- List create (append position, empty cards), rename, reorder, delete
- Card create, move within and across lists, delete
- Error shape: {error} with 400 / 404 / 500
"""

from unittest.mock import patch

from sqlalchemy.exc import SQLAlchemyError

from taskboard.models.board import BoardList, Card
from taskboard.services.ordering import list_cards


def _board(client, board_id):
    resp = client.get(f"/api/boards/{board_id}")
    assert resp.status_code == 200
    return resp.get_json()


def _cards_of(board, list_title):
    for board_list in board["lists"]:
        if board_list["title"] == list_title:
            return [(c["position"], c["title"]) for c in board_list["cards"]]
    raise AssertionError(f"no list {list_title}")


# ══════════════════════════════════════════════
#  BOARDS
# ══════════════════════════════════════════════

class TestBoards:

    def test_list_boards_returns_summaries(self, client, board_data):
        resp = client.get("/api/boards")
        assert resp.status_code == 200
        data = resp.get_json()
        assert len(data) == 1
        assert data[0]["id"] == board_data["board_id"]
        assert data[0]["title"] == "Test Board"
        assert "lists" not in data[0]

    def test_get_board_orders_lists_and_cards_by_position(self, client, board_data):
        # Shuffle insertion order vs. position order to prove the sort key
        client.put(f"/api/lists/{board_data['done_id']}/reorder", json={"position": 0})
        client.put(f"/api/cards/{board_data['cards']['C']}/move",
                   json={"list_id": board_data["todo_id"], "position": 0})

        board = _board(client, board_data["board_id"])
        assert [bl["title"] for bl in board["lists"]] == ["Done", "To Do", "Doing"]
        assert [bl["position"] for bl in board["lists"]] == [0, 1, 2]
        assert _cards_of(board, "To Do") == [(0, "C"), (1, "A"), (2, "B")]
        assert _cards_of(board, "Doing") == [(0, "X"), (1, "Y")]
        assert _cards_of(board, "Done") == []

    def test_get_missing_board_is_404(self, client, db_session):
        resp = client.get("/api/boards/does-not-exist")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Board not found"}

    def test_create_board(self, client, db_session):
        resp = client.post("/api/boards", json={"title": "Garage", "description": "Jobs"})
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["title"] == "Garage"
        assert data["description"] == "Jobs"
        assert _board(client, data["id"])["lists"] == []

    def test_create_board_without_title_is_400(self, client, db_session):
        resp = client.post("/api/boards", json={"description": "no title"})
        assert resp.status_code == 400
        assert "title is required" in resp.get_json()["error"]

    def test_create_board_strips_html(self, client, db_session):
        resp = client.post("/api/boards", json={"title": "<b>Shop</b><script>x</script>"})
        assert resp.status_code == 201
        assert "<" not in resp.get_json()["title"]

    def test_update_board(self, client, board_data):
        resp = client.put(f"/api/boards/{board_data['board_id']}", json={"title": "Renamed"})
        assert resp.get_json() == {"success": True}
        assert _board(client, board_data["board_id"])["title"] == "Renamed"

    def test_delete_board_cascades(self, client, board_data):
        resp = client.delete(f"/api/boards/{board_data['board_id']}")
        assert resp.get_json() == {"success": True}

        assert client.get(f"/api/boards/{board_data['board_id']}").status_code == 404
        assert client.get("/api/boards").get_json() == []
        assert BoardList.query.count() == 0
        assert Card.query.count() == 0

    def test_delete_missing_board_is_404(self, client, db_session):
        assert client.delete("/api/boards/nope").status_code == 404


# ══════════════════════════════════════════════
#  LISTS
# ══════════════════════════════════════════════

class TestLists:

    def test_create_list_appends(self, client, board_data):
        resp = client.post("/api/lists", json={
            "board_id": board_data["board_id"], "title": "Archive",
        })
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["position"] == 3
        assert data["board_id"] == board_data["board_id"]
        assert data["cards"] == []

    def test_create_list_on_empty_board_starts_at_zero(self, client, db_session):
        board_id = client.post("/api/boards", json={"title": "Empty"}).get_json()["id"]
        resp = client.post("/api/lists", json={"board_id": board_id, "title": "First"})
        assert resp.get_json()["position"] == 0

    def test_create_list_missing_board_is_404(self, client, db_session):
        resp = client.post("/api/lists", json={"board_id": "ghost", "title": "x"})
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Board not found"}

    def test_create_list_missing_title_is_400(self, client, board_data):
        resp = client.post("/api/lists", json={"board_id": board_data["board_id"]})
        assert resp.status_code == 400

    def test_rename_list(self, client, board_data):
        resp = client.put(f"/api/lists/{board_data['todo_id']}", json={"title": "Backlog"})
        assert resp.get_json() == {"success": True}
        board = _board(client, board_data["board_id"])
        assert board["lists"][0]["title"] == "Backlog"
        assert board["lists"][0]["position"] == 0

    def test_rename_missing_list_is_404(self, client, db_session):
        resp = client.put("/api/lists/ghost", json={"title": "x"})
        assert resp.status_code == 404

    def test_reorder_list(self, client, board_data):
        resp = client.put(f"/api/lists/{board_data['todo_id']}/reorder", json={"position": 2})
        assert resp.get_json() == {"success": True}
        board = _board(client, board_data["board_id"])
        assert [bl["title"] for bl in board["lists"]] == ["Doing", "Done", "To Do"]

    def test_reorder_to_current_position_is_success(self, client, board_data):
        resp = client.put(f"/api/lists/{board_data['doing_id']}/reorder", json={"position": 1})
        assert resp.get_json() == {"success": True}
        board = _board(client, board_data["board_id"])
        assert [bl["title"] for bl in board["lists"]] == ["To Do", "Doing", "Done"]

    def test_reorder_without_position_is_400(self, client, board_data):
        resp = client.put(f"/api/lists/{board_data['todo_id']}/reorder", json={})
        assert resp.status_code == 400

    def test_reorder_negative_position_is_400(self, client, board_data):
        resp = client.put(f"/api/lists/{board_data['todo_id']}/reorder", json={"position": -2})
        assert resp.status_code == 400

    def test_delete_list_cascades_and_closes_gap(self, client, board_data):
        resp = client.delete(f"/api/lists/{board_data['doing_id']}")
        assert resp.get_json() == {"success": True}

        board = _board(client, board_data["board_id"])
        assert [(bl["position"], bl["title"]) for bl in board["lists"]] == [
            (0, "To Do"), (1, "Done"),
        ]
        assert Card.query.filter_by(list_id=board_data["doing_id"]).count() == 0


# ══════════════════════════════════════════════
#  CARDS
# ══════════════════════════════════════════════

class TestCards:

    def test_create_card_appends(self, client, board_data):
        resp = client.post("/api/cards", json={
            "list_id": board_data["todo_id"], "title": "D", "description": "fourth",
        })
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["position"] == 3
        assert data["list_id"] == board_data["todo_id"]
        assert data["description"] == "fourth"
        assert data["priority"] == "medium"
        assert data["due_date"] is None

    def test_create_card_missing_list_is_404(self, client, db_session):
        resp = client.post("/api/cards", json={"list_id": "ghost", "title": "x"})
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "List not found"}

    def test_create_card_missing_title_is_400(self, client, board_data):
        resp = client.post("/api/cards", json={"list_id": board_data["todo_id"]})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Card title is required."

    def test_move_within_list(self, client, board_data):
        resp = client.put(f"/api/cards/{board_data['cards']['C']}/move", json={
            "list_id": board_data["todo_id"], "position": 0,
        })
        assert resp.get_json() == {"success": True}
        board = _board(client, board_data["board_id"])
        assert _cards_of(board, "To Do") == [(0, "C"), (1, "A"), (2, "B")]

    def test_move_across_lists(self, client, board_data):
        resp = client.put(f"/api/cards/{board_data['cards']['X']}/move", json={
            "list_id": board_data["done_id"], "position": 0,
        })
        assert resp.get_json() == {"success": True}
        board = _board(client, board_data["board_id"])
        assert _cards_of(board, "Doing") == [(0, "Y")]
        assert _cards_of(board, "Done") == [(0, "X")]

    def test_move_to_same_position_is_success(self, client, board_data):
        resp = client.put(f"/api/cards/{board_data['cards']['A']}/move", json={
            "list_id": board_data["todo_id"], "position": 0,
        })
        assert resp.status_code == 200
        assert resp.get_json() == {"success": True}

    def test_move_missing_card_is_404(self, client, board_data):
        resp = client.put("/api/cards/ghost/move", json={
            "list_id": board_data["todo_id"], "position": 0,
        })
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Card not found"}

    def test_move_to_missing_list_is_404(self, client, board_data):
        resp = client.put(f"/api/cards/{board_data['cards']['A']}/move", json={
            "list_id": "ghost", "position": 0,
        })
        assert resp.status_code == 404
        board = _board(client, board_data["board_id"])
        assert _cards_of(board, "To Do") == [(0, "A"), (1, "B"), (2, "C")]

    def test_move_without_position_is_400(self, client, board_data):
        resp = client.put(f"/api/cards/{board_data['cards']['A']}/move", json={
            "list_id": board_data["doing_id"],
        })
        assert resp.status_code == 400

    def test_move_with_non_integer_position_is_400(self, client, board_data):
        resp = client.put(f"/api/cards/{board_data['cards']['A']}/move", json={
            "list_id": board_data["doing_id"], "position": "top",
        })
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Position must be an integer."}

    def test_store_failure_mid_move_is_500_and_rolled_back(self, client, board_data):
        original = list_cards._shift
        calls = []

        def flaky(*args, **kwargs):
            calls.append(args)
            if len(calls) == 2:
                raise SQLAlchemyError("simulated write failure")
            return original(*args, **kwargs)

        with patch.object(list_cards, "_shift", side_effect=flaky):
            resp = client.put(f"/api/cards/{board_data['cards']['X']}/move", json={
                "list_id": board_data["todo_id"], "position": 1,
            })

        assert resp.status_code == 500
        assert "simulated write failure" in resp.get_json()["error"]
        board = _board(client, board_data["board_id"])
        assert _cards_of(board, "Doing") == [(0, "X"), (1, "Y")]
        assert _cards_of(board, "To Do") == [(0, "A"), (1, "B"), (2, "C")]

    def test_delete_card_closes_gap(self, client, board_data):
        resp = client.delete(f"/api/cards/{board_data['cards']['B']}")
        assert resp.get_json() == {"success": True}
        board = _board(client, board_data["board_id"])
        assert _cards_of(board, "To Do") == [(0, "A"), (1, "C")]

    def test_delete_missing_card_is_404(self, client, db_session):
        assert client.delete("/api/cards/ghost").status_code == 404


# ══════════════════════════════════════════════
#  ERROR SHAPE
# ══════════════════════════════════════════════

class TestErrors:

    def test_unknown_route_is_json_404(self, client, db_session):
        resp = client.get("/api/nothing-here")
        assert resp.status_code == 404
        assert "error" in resp.get_json()

    def test_malformed_json_is_400(self, client, db_session):
        resp = client.post(
            "/api/boards", data="{not json", content_type="application/json"
        )
        assert resp.status_code == 400
        assert "error" in resp.get_json()

    def test_non_object_body_is_400(self, client, db_session):
        resp = client.post("/api/boards", json=["title"])
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Request body must be a JSON object."}
