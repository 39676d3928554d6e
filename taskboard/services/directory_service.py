"""Directory service — clients and workers that cards can reference.

Functions flush but do NOT commit; the caller commits. A duplicate email
surfaces as an IntegrityError on flush, which unit_of_work() reports as a
400 ConflictOrStoreError.
"""

import logging
import re

import bleach
from sqlalchemy import select

from taskboard.errors import NotFound, ValidationError
from taskboard.extensions import db
from taskboard.models.directory import Client, Worker

logger = logging.getLogger(__name__)

# Simple email regex, not exhaustive, just a sanity check
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

KINDS = {"client": Client, "worker": Worker}


def _sanitize(text):
    """Strip all HTML tags from user input."""
    if text is None:
        return text
    return bleach.clean(str(text), tags=[], strip=True).strip()


def list_entries(kind):
    model = KINDS[kind]
    return db.session.execute(select(model).order_by(model.name)).scalars().all()


def create_entry(kind, data):
    """Create a client or worker from ``name``, ``email`` and ``phone``."""
    name = _sanitize(data.get("name"))
    if not name:
        raise ValidationError("Name is required.")
    email = (data.get("email") or "").strip().lower() or None
    if email and not EMAIL_RE.match(email):
        raise ValidationError("A valid email is required.")

    entry = KINDS[kind](
        name=name,
        email=email,
        phone=_sanitize(data.get("phone")) or None,
    )
    db.session.add(entry)
    db.session.flush()
    logger.info(f"Created {kind} {entry.id} ({entry.name})")
    return entry


def delete_entry(kind, entry_id):
    """Delete a client or worker; cards keep existing but lose the reference."""
    entry = db.session.get(KINDS[kind], entry_id)
    if entry is None:
        raise NotFound(f"{kind.capitalize()} not found")
    db.session.delete(entry)
    db.session.flush()
    logger.info(f"Deleted {kind} {entry_id}")


def entry_dict(entry):
    return {
        "id": entry.id,
        "name": entry.name,
        "email": entry.email,
        "phone": entry.phone,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }
