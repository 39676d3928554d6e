"""Board models.

- Board: top-level container, owns an ordered set of lists.
- BoardList: a column on a board; ``position`` is dense from 0 per board.
- Card: a task inside a list; ``position`` is dense from 0 per list.

Positions are only ever written by services.ordering, never by a plain
field update.
"""

import uuid

from taskboard.extensions import db


card_workers = db.Table(
    "card_workers",
    db.Column(
        "card_id",
        db.String(36),
        db.ForeignKey("cards.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    db.Column(
        "worker_id",
        db.String(36),
        db.ForeignKey("workers.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Board(db.Model):
    __tablename__ = "boards"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, default="")
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    lists = db.relationship(
        "BoardList",
        back_populates="board",
        cascade="all, delete-orphan",
        order_by="BoardList.position",
    )

    def __repr__(self):
        return f"<Board {self.title}>"


class BoardList(db.Model):
    __tablename__ = "lists"
    __table_args__ = (
        db.Index("ix_lists_board_id_position", "board_id", "position"),
    )

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    board_id = db.Column(
        db.String(36),
        db.ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = db.Column(db.String(255), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    board = db.relationship("Board", back_populates="lists")
    cards = db.relationship(
        "Card",
        back_populates="board_list",
        cascade="all, delete-orphan",
        order_by="Card.position",
    )

    def __repr__(self):
        return f"<BoardList {self.title} @{self.position}>"


class Card(db.Model):
    __tablename__ = "cards"
    __table_args__ = (
        db.Index("ix_cards_list_id_position", "list_id", "position"),
    )

    # -- Valid priorities --
    PRIORITIES = ["low", "medium", "high", "urgent"]

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    list_id = db.Column(
        db.String(36),
        db.ForeignKey("lists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = db.Column(db.String(500), nullable=False)
    description = db.Column(db.Text, default="")
    position = db.Column(db.Integer, nullable=False, default=0)
    priority = db.Column(
        db.String(20), default="medium", nullable=False
    )  # low | medium | high | urgent
    # Plain YYYY-MM-DD text; never a DATE/TIMESTAMP column so no driver
    # or time-zone conversion can shift it.
    due_date = db.Column(db.String(10), nullable=True)

    # --- Extended fields ---
    client_id = db.Column(
        db.String(36),
        db.ForeignKey("clients.id", ondelete="SET NULL"),
        nullable=True,
    )
    vehicle = db.Column(db.String(255), nullable=True)
    commands = db.Column(db.Text, nullable=True)
    start_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    # --- Relationships ---
    board_list = db.relationship("BoardList", back_populates="cards")
    client = db.relationship("Client", back_populates="cards")
    workers = db.relationship(
        "Worker",
        secondary=card_workers,
        back_populates="cards",
        order_by="Worker.name",
    )

    @property
    def worker_ids(self):
        return [w.id for w in self.workers]

    def __repr__(self):
        return f"<Card {self.title[:40]} @{self.position}>"
