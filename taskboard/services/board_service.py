"""Board service — boards, lists and cards, plus their serialization.

All positions go through services.ordering. User-supplied text is sanitized
with bleach.clean() to strip HTML tags.

Functions flush but do NOT commit; the caller commits (see
services.transaction.unit_of_work).
"""

import logging
import re
import uuid
from datetime import datetime

import bleach
from flask import current_app
from sqlalchemy import inspect, select
from sqlalchemy.orm import selectinload

from taskboard.errors import NotFound, ValidationError
from taskboard.extensions import db
from taskboard.models.board import Board, BoardList, Card
from taskboard.models.directory import Client, Worker
from taskboard.services.ordering import board_lists, list_cards

logger = logging.getLogger(__name__)

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)

# Fixed id, so processes seeding at the same time collide on the primary key.
DEFAULT_BOARD_ID = str(uuid.uuid5(uuid.NAMESPACE_URL, "taskboard:default-board"))


def _sanitize(text):
    """Strip all HTML tags from user input."""
    if text is None:
        return text
    return bleach.clean(str(text), tags=[], strip=True).strip()


def _require_title(value, what):
    title = _sanitize(value)
    if not title:
        raise ValidationError(f"{what} title is required.")
    return title


def _require_id(value, field):
    if value in (None, ""):
        raise ValidationError(f"{field} is required.")
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string id.")
    return value


def normalize_due_date(value):
    """Reduce a caller's due date to a plain ``YYYY-MM-DD`` string.

    Accepts ``YYYY-MM-DD`` or an ISO date-time (the time part is dropped
    as text, never parsed into a timestamp). Empty values clear the date.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Invalid due_date format. Use YYYY-MM-DD.")
    value = value.strip()
    if not value:
        return None
    date_part = value.split("T", 1)[0]
    if not DATE_RE.match(date_part):
        raise ValidationError("Invalid due_date format. Use YYYY-MM-DD.")
    try:
        datetime.strptime(date_part, "%Y-%m-%d")
    except ValueError:
        raise ValidationError(f"Invalid due_date: {date_part} is not a calendar date.")
    return date_part


def _parse_start_at(value):
    if value in (None, ""):
        return None
    if not isinstance(value, str):
        raise ValidationError("Invalid start_at format. Use an ISO date-time.")
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError("Invalid start_at format. Use an ISO date-time.")
    # Stored as wall-clock time, the way the caller sent it.
    return parsed.replace(tzinfo=None)


def _validate_priority(value):
    if value is None:
        return "medium"
    if value not in Card.PRIORITIES:
        raise ValidationError(
            f"Invalid priority '{value}'. Must be one of: {', '.join(Card.PRIORITIES)}"
        )
    return value


def _resolve_client(client_id):
    if client_id in (None, ""):
        return None
    client = db.session.get(Client, _require_id(client_id, "client_id"))
    if client is None:
        raise NotFound("Client not found")
    return client


def _resolve_workers(worker_ids):
    if worker_ids is None:
        return []
    if not isinstance(worker_ids, list):
        raise ValidationError("worker_ids must be a list of ids.")
    workers = []
    for worker_id in dict.fromkeys(_require_id(w, "worker_ids entry") for w in worker_ids):
        worker = db.session.get(Worker, worker_id)
        if worker is None:
            raise NotFound("Worker not found")
        workers.append(worker)
    return workers


def get_board(board_id):
    board = db.session.get(Board, board_id)
    if board is None:
        raise NotFound("Board not found")
    return board


def get_list(list_id):
    board_list = db.session.get(BoardList, list_id)
    if board_list is None:
        raise NotFound("List not found")
    return board_list


def get_card(card_id):
    card = db.session.get(Card, card_id)
    if card is None:
        raise NotFound("Card not found")
    return card


# ─── Boards ──────────────────────────────────────────────────────

def list_boards():
    """Board summaries, newest first."""
    return db.session.execute(
        select(Board).order_by(Board.created_at.desc(), Board.id)
    ).scalars().all()


def load_board(board_id):
    """Board with lists and cards eagerly loaded, both by ascending position."""
    board = db.session.execute(
        select(Board)
        .where(Board.id == board_id)
        .options(selectinload(Board.lists).selectinload(BoardList.cards))
    ).scalar_one_or_none()
    if board is None:
        raise NotFound("Board not found")
    return board


def create_board(title, description=None, list_titles=None, board_id=None):
    """Create a board, optionally seeded with lists in the given order."""
    board = Board(
        title=_require_title(title, "Board"),
        description=_sanitize(description) or "",
    )
    if board_id is not None:
        board.id = board_id
    db.session.add(board)
    db.session.flush()
    for list_title in list_titles or []:
        board_lists.append(board.id, BoardList(title=list_title))
    logger.info(f"Created board {board.id} ({board.title})")
    return board


def update_board(board_id, data):
    board = get_board(board_id)
    if "title" in data:
        board.title = _require_title(data["title"], "Board")
    if "description" in data:
        board.description = _sanitize(data["description"]) or ""
    db.session.flush()
    return board


def delete_board(board_id):
    """Delete a board; its lists and their cards go with it."""
    board = get_board(board_id)
    db.session.delete(board)
    db.session.flush()
    logger.info(f"Deleted board {board_id}")


def _has_boards():
    return db.session.execute(select(Board.id).limit(1)).first() is not None


def ensure_default_board():
    """Create the default board with its three lists if no board exists.

    Returns the new board, or None if boards already exist or the schema
    has not been created yet. The board always gets DEFAULT_BOARD_ID, so a
    second process racing past the emptiness check fails on the insert.
    """
    if not inspect(db.session.connection()).has_table(Board.__tablename__):
        logger.warning("Boards table missing; run migrations before seeding.")
        return None
    if _has_boards():
        return None
    config = current_app.config
    board = create_board(
        config["DEFAULT_BOARD_TITLE"],
        config["DEFAULT_BOARD_DESCRIPTION"],
        list_titles=config["DEFAULT_LIST_TITLES"],
        board_id=DEFAULT_BOARD_ID,
    )
    logger.info(f"Seeded default board {board.id}")
    return board


# ─── Lists ───────────────────────────────────────────────────────

def create_list(board_id, title):
    _require_id(board_id, "board_id")
    title = _require_title(title, "List")
    board_lists.lock_groups(board_id)
    board_list = BoardList(title=title)
    board_lists.append(board_id, board_list)
    logger.info(f"Created list {board_list.id} on board {board_id} at {board_list.position}")
    return board_list


def rename_list(list_id, title):
    board_list = get_list(list_id)
    board_list.title = _require_title(title, "List")
    db.session.flush()
    return board_list


def reorder_list(list_id, position):
    """Move a list to ``position`` on its board (full resequence)."""
    board_list = get_list(list_id)
    board_lists.lock_groups(board_list.board_id)
    from_position = board_list.position
    to_position = board_lists.reorder(board_list, position)
    logger.info(
        f"Reordered list {list_id} on board {board_list.board_id}: "
        f"{from_position} -> {to_position}"
    )
    return to_position


def delete_list(list_id):
    """Delete a list and its cards, closing the gap among its siblings."""
    board_list = get_list(list_id)
    board_id = board_list.board_id
    board_lists.lock_groups(board_id)
    board_lists.remove(board_list)
    logger.info(f"Deleted list {list_id} from board {board_id}")


# ─── Cards ───────────────────────────────────────────────────────

def create_card(data):
    list_id = _require_id(data.get("list_id"), "list_id")
    title = _require_title(data.get("title"), "Card")
    list_cards.lock_groups(list_id)

    card = Card(
        title=title,
        description=_sanitize(data.get("description")) or "",
        priority=_validate_priority(data.get("priority")),
        due_date=normalize_due_date(data.get("due_date")),
        vehicle=_sanitize(data.get("vehicle")) or None,
        commands=_sanitize(data.get("commands")) or None,
        start_at=_parse_start_at(data.get("start_at")),
    )
    card.client = _resolve_client(data.get("client_id"))
    card.workers = _resolve_workers(data.get("worker_ids"))
    list_cards.append(list_id, card)
    logger.info(f"Created card {card.id} in list {list_id} at {card.position}")
    return card


def update_card(card_id, data):
    """Merge the given fields over an existing card.

    ``position`` and ``list_id`` are ignored here; use move_card().
    """
    card = get_card(card_id)

    if "title" in data:
        card.title = _require_title(data["title"], "Card")
    if "description" in data:
        card.description = _sanitize(data["description"]) or ""
    for field in ("vehicle", "commands"):
        if field in data:
            setattr(card, field, _sanitize(data[field]) or None)
    if "priority" in data:
        card.priority = _validate_priority(data["priority"])
    if "due_date" in data:
        card.due_date = normalize_due_date(data["due_date"])
    if "start_at" in data:
        card.start_at = _parse_start_at(data["start_at"])
    if "client_id" in data:
        card.client = _resolve_client(data["client_id"])
    if "worker_ids" in data:
        card.workers = _resolve_workers(data["worker_ids"])

    db.session.flush()
    return card


def move_card(card_id, list_id, position):
    """Move a card within its list or into another list.

    Returns the card's final position.
    """
    _require_id(list_id, "list_id")
    card = get_card(card_id)
    list_cards.lock_groups(card.list_id, list_id)
    db.session.refresh(card, with_for_update=True)
    from_list_id, from_position = card.list_id, card.position

    if from_list_id == list_id:
        to_position = list_cards.move_within_group(card, position)
    else:
        to_position = list_cards.move_across_group(card, list_id, position)

    logger.info(
        f"Moved card {card_id}: list {from_list_id}@{from_position} "
        f"-> list {list_id}@{to_position}"
    )
    return to_position


def delete_card(card_id):
    card = get_card(card_id)
    list_id = card.list_id
    list_cards.lock_groups(list_id)
    db.session.refresh(card, with_for_update=True)
    list_cards.remove(card)
    logger.info(f"Deleted card {card_id} from list {list_id}")


# ─── Position audit ──────────────────────────────────────────────

def find_sparse_groups():
    """Return ``(kind, group_id, positions)`` for every non-dense group."""
    sparse = []
    for board_id in db.session.execute(select(Board.id)).scalars().all():
        if not board_lists.is_dense(board_id):
            sparse.append(("board", board_id, board_lists.positions(board_id)))
    for list_id in db.session.execute(select(BoardList.id)).scalars().all():
        if not list_cards.is_dense(list_id):
            sparse.append(("list", list_id, list_cards.positions(list_id)))
    return sparse


def repair_group(kind, group_id):
    """Resequence one group in its current order. Returns rows changed."""
    sibling_set = board_lists if kind == "board" else list_cards
    sibling_set.lock_groups(group_id)
    return sibling_set.resequence(group_id)


# ─── Serialization ───────────────────────────────────────────────

def _iso(value):
    return value.isoformat() if value else None


def board_summary(board):
    return {
        "id": board.id,
        "title": board.title,
        "description": board.description or "",
        "created_at": _iso(board.created_at),
    }


def board_dict(board):
    data = board_summary(board)
    data["lists"] = [list_dict(bl) for bl in board.lists]
    return data


def list_dict(board_list, with_cards=True):
    data = {
        "id": board_list.id,
        "board_id": board_list.board_id,
        "title": board_list.title,
        "position": board_list.position,
        "created_at": _iso(board_list.created_at),
    }
    if with_cards:
        data["cards"] = [card_dict(c) for c in board_list.cards]
    return data


def card_dict(card):
    """Serialize a Card to a JSON-safe dict."""
    return {
        "id": card.id,
        "list_id": card.list_id,
        "title": card.title,
        "description": card.description or "",
        "position": card.position,
        "priority": card.priority,
        "due_date": card.due_date,
        "client_id": card.client_id,
        "worker_ids": card.worker_ids,
        "vehicle": card.vehicle,
        "commands": card.commands,
        "start_at": _iso(card.start_at),
        "created_at": _iso(card.created_at),
        "updated_at": _iso(card.updated_at),
    }
