"""Boards blueprint — <API_PREFIX>/boards, /lists, /cards

JSON API behind the drag-and-drop board UI. Every mutating route runs in
one unit of work: all position shifts commit together or not at all.

Route Map:
  GET    /boards                  — Board summaries, newest first
  GET    /boards/<id>             — Board + ordered lists + ordered cards
  POST   /boards                  — Create board
  PUT    /boards/<id>             — Update board title/description
  DELETE /boards/<id>             — Delete board (cascades)
  POST   /lists                   — Create list at the end of its board
  PUT    /lists/<id>              — Rename list
  PUT    /lists/<id>/reorder      — Move list to a new position
  DELETE /lists/<id>              — Delete list (cascades), close the gap
  POST   /cards                   — Create card at the end of its list
  PUT    /cards/<id>              — Merge fields over a card
  PUT    /cards/<id>/move         — Move card within or across lists
  DELETE /cards/<id>              — Delete card, close the gap
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from taskboard.errors import ValidationError
from taskboard.extensions import limiter
from taskboard.services import board_service
from taskboard.services.transaction import unit_of_work

logger = logging.getLogger(__name__)

boards_bp = Blueprint("boards", __name__)


def _write_limit():
    return current_app.config["WRITE_RATE_LIMIT"]


def _json_body():
    data = request.get_json(force=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data


# ─── Board API ───────────────────────────────────────────────────

@boards_bp.route("/boards")
def api_list_boards():
    boards = board_service.list_boards()
    return jsonify([board_service.board_summary(b) for b in boards])


@boards_bp.route("/boards/<board_id>")
def api_get_board(board_id):
    board = board_service.load_board(board_id)
    return jsonify(board_service.board_dict(board))


@boards_bp.route("/boards", methods=["POST"])
@limiter.limit(_write_limit)
def api_create_board():
    data = _json_body()
    with unit_of_work("board.create"):
        board = board_service.create_board(data.get("title"), data.get("description"))
    return jsonify(board_service.board_summary(board)), 201


@boards_bp.route("/boards/<board_id>", methods=["PUT"])
@limiter.limit(_write_limit)
def api_update_board(board_id):
    data = _json_body()
    with unit_of_work("board.update"):
        board_service.update_board(board_id, data)
    return jsonify({"success": True})


@boards_bp.route("/boards/<board_id>", methods=["DELETE"])
@limiter.limit(_write_limit)
def api_delete_board(board_id):
    with unit_of_work("board.delete"):
        board_service.delete_board(board_id)
    return jsonify({"success": True})


# ─── List API ────────────────────────────────────────────────────

@boards_bp.route("/lists", methods=["POST"])
@limiter.limit(_write_limit)
def api_create_list():
    data = _json_body()
    with unit_of_work("list.create"):
        board_list = board_service.create_list(data.get("board_id"), data.get("title"))
    return jsonify(board_service.list_dict(board_list)), 201


@boards_bp.route("/lists/<list_id>", methods=["PUT"])
@limiter.limit(_write_limit)
def api_update_list(list_id):
    data = _json_body()
    with unit_of_work("list.update"):
        board_service.rename_list(list_id, data.get("title"))
    return jsonify({"success": True})


@boards_bp.route("/lists/<list_id>/reorder", methods=["PUT"])
@limiter.limit(_write_limit)
def api_reorder_list(list_id):
    data = _json_body()
    if "position" not in data:
        raise ValidationError("position is required.")
    with unit_of_work("list.reorder"):
        board_service.reorder_list(list_id, data["position"])
    return jsonify({"success": True})


@boards_bp.route("/lists/<list_id>", methods=["DELETE"])
@limiter.limit(_write_limit)
def api_delete_list(list_id):
    with unit_of_work("list.delete"):
        board_service.delete_list(list_id)
    return jsonify({"success": True})


# ─── Card API ────────────────────────────────────────────────────

@boards_bp.route("/cards", methods=["POST"])
@limiter.limit(_write_limit)
def api_create_card():
    data = _json_body()
    with unit_of_work("card.create"):
        card = board_service.create_card(data)
    return jsonify(board_service.card_dict(card)), 201


@boards_bp.route("/cards/<card_id>", methods=["PUT"])
@limiter.limit(_write_limit)
def api_update_card(card_id):
    data = _json_body()
    with unit_of_work("card.update"):
        card = board_service.update_card(card_id, data)
        due_date = card.due_date
    return jsonify({"success": True, "due_date": due_date})


@boards_bp.route("/cards/<card_id>/move", methods=["PUT"])
@limiter.limit(_write_limit)
def api_move_card(card_id):
    data = _json_body()
    if "position" not in data:
        raise ValidationError("position is required.")
    with unit_of_work("card.move"):
        board_service.move_card(card_id, data.get("list_id"), data["position"])
    return jsonify({"success": True})


@boards_bp.route("/cards/<card_id>", methods=["DELETE"])
@limiter.limit(_write_limit)
def api_delete_card(card_id):
    with unit_of_work("card.delete"):
        board_service.delete_card(card_id)
    return jsonify({"success": True})
