"""Client and worker directory models.

Only as much as cards need to reference: a card points at one client and
any number of workers (through the ``card_workers`` join table).
"""

import uuid

from taskboard.extensions import db


class Client(db.Model):
    __tablename__ = "clients"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    cards = db.relationship("Card", back_populates="client")

    def __repr__(self):
        return f"<Client {self.name}>"


class Worker(db.Model):
    __tablename__ = "workers"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True), server_default=db.func.now()
    )

    cards = db.relationship(
        "Card", secondary="card_workers", back_populates="workers"
    )

    def __repr__(self):
        return f"<Worker {self.name}>"
