"""Ordered sibling sets: dense position bookkeeping for lists and cards.

Every list on a board and every card in a list carries a ``position``.
Within one group (a board's lists, a list's cards) positions are always
exactly ``0..n-1``. This module is the only writer of those positions.

Moves use bounded shifts: one range UPDATE per affected group, touching only
the rows between the old and new slot. List reordering on a board uses a
full resequence instead, which is cheap for the handful of lists a board has.

Functions flush but do NOT commit; the caller wraps them in
services.transaction.unit_of_work().
"""

import logging

from sqlalchemy import func, select, update

from taskboard.errors import NotFound, ValidationError
from taskboard.extensions import db
from taskboard.models.board import Board, BoardList, Card

logger = logging.getLogger(__name__)


def coerce_position(value):
    """Validate a caller-supplied target position.

    Returns the position as an int. Raises ValidationError for anything
    that is not a non-negative integer (bools included).
    """
    if isinstance(value, bool):
        raise ValidationError("Position must be an integer.")
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise ValidationError("Position must be an integer.") from None
    if not isinstance(value, int):
        raise ValidationError("Position must be an integer.")
    if value < 0:
        raise ValidationError("Position must not be negative.")
    return value


class OrderedSiblingSet:
    """Dense 0-based ordering of ``model`` rows grouped by ``group_column``.

    Args:
        model: The mapped class whose rows are ordered (BoardList, Card).
        group_column: Column holding the group key (BoardList.board_id).
        parent_model: Mapped class the group key points at; its row is
            locked for the duration of a move.
        label: Human name of the parent, used in NotFound messages.
    """

    def __init__(self, model, group_column, parent_model, label):
        self.model = model
        self.group_column = group_column
        self.group_attr = group_column.key
        self.parent_model = parent_model
        self.label = label

    # ─── Group helpers ───────────────────────────────────────────

    def lock_groups(self, *group_keys):
        """Lock the parent rows of the given groups, lowest id first.

        Emits SELECT ... FOR UPDATE where the dialect supports it, so two
        operations on the same group serialize. SQLite ignores the clause;
        there every transaction already holds the write lock (see
        extensions._begin_sqlite_immediate). Raises NotFound if any group
        does not exist.
        """
        keys = sorted(set(group_keys))
        found = db.session.execute(
            select(self.parent_model.id)
            .where(self.parent_model.id.in_(keys))
            .order_by(self.parent_model.id)
            .with_for_update()
        ).scalars().all()
        missing = [k for k in keys if k not in found]
        if missing:
            raise NotFound(f"{self.label} not found")

    def group_key(self, item):
        return getattr(item, self.group_attr)

    def size(self, group_key):
        return db.session.execute(
            select(func.count(self.model.id)).where(self.group_column == group_key)
        ).scalar_one()

    def positions(self, group_key):
        """Current positions of a group, ascending."""
        return db.session.execute(
            select(self.model.position)
            .where(self.group_column == group_key)
            .order_by(self.model.position)
        ).scalars().all()

    def is_dense(self, group_key):
        positions = self.positions(group_key)
        return positions == list(range(len(positions)))

    def ordered(self, group_key):
        """Siblings in render order; ties fall back to creation then id."""
        return db.session.execute(
            select(self.model)
            .where(self.group_column == group_key)
            .order_by(self.model.position, self.model.created_at, self.model.id)
        ).scalars().all()

    def _shift(self, group_key, delta, lower, upper=None):
        """Add ``delta`` to every position in ``[lower, upper]`` of a group."""
        stmt = (
            update(self.model)
            .where(self.group_column == group_key)
            .where(self.model.position >= lower)
        )
        if upper is not None:
            stmt = stmt.where(self.model.position <= upper)
        db.session.execute(stmt.values(position=self.model.position + delta))

    # ─── Operations ──────────────────────────────────────────────

    def append(self, group_key, item):
        """Place ``item`` at the end of its group and return its position."""
        max_pos = db.session.execute(
            select(func.max(self.model.position)).where(
                self.group_column == group_key
            )
        ).scalar()
        position = max_pos + 1 if max_pos is not None else 0
        setattr(item, self.group_attr, group_key)
        item.position = position
        db.session.add(item)
        db.session.flush()
        return position

    def move_within_group(self, item, to_position):
        """Move ``item`` to ``to_position`` inside its current group.

        Only the siblings strictly between the old and new slot shift.
        Targets past the end are clamped to the last slot.
        """
        group_key = self.group_key(item)
        from_position = item.position
        last = self.size(group_key) - 1
        to_position = min(coerce_position(to_position), max(last, 0))

        if to_position == from_position:
            return to_position

        if to_position > from_position:
            self._shift(group_key, -1, from_position + 1, to_position)
        else:
            self._shift(group_key, +1, to_position, from_position - 1)

        item.position = to_position
        db.session.flush()
        return to_position

    def move_across_group(self, item, to_group_key, to_position):
        """Move ``item`` out of its group into ``to_group_key`` at ``to_position``.

        Closes the gap in the source, opens a slot in the target, then
        re-parents the item. Targets past the end of the target group are
        clamped to an append.
        """
        from_group_key = self.group_key(item)
        if from_group_key == to_group_key:
            return self.move_within_group(item, to_position)

        to_position = min(coerce_position(to_position), self.size(to_group_key))
        from_position = item.position

        self._shift(from_group_key, -1, from_position + 1)
        self._shift(to_group_key, +1, to_position)

        setattr(item, self.group_attr, to_group_key)
        item.position = to_position
        db.session.flush()
        return to_position

    def remove(self, item):
        """Delete ``item`` and close the gap behind it."""
        group_key = self.group_key(item)
        removed_position = item.position
        db.session.delete(item)
        db.session.flush()
        self._shift(group_key, -1, removed_position + 1)

    def reorder(self, item, to_position):
        """Full-resequence move: rewrite every sibling's position in one pass."""
        group_key = self.group_key(item)
        siblings = [s for s in self.ordered(group_key) if s.id != item.id]
        to_position = min(coerce_position(to_position), len(siblings))
        siblings.insert(to_position, item)
        self.resequence(group_key, siblings)
        return to_position

    def resequence(self, group_key, ordered_items=None):
        """Rewrite positions of a group to 0..n-1 in the given (or current) order.

        Returns the number of rows whose position changed.
        """
        if ordered_items is None:
            ordered_items = self.ordered(group_key)
        changed = 0
        for index, sibling in enumerate(ordered_items):
            if sibling.position != index:
                sibling.position = index
                changed += 1
        db.session.flush()
        if changed:
            logger.debug(
                f"Resequenced {self.model.__tablename__} in {self.label} {group_key}: "
                f"{changed} row(s)"
            )
        return changed


board_lists = OrderedSiblingSet(BoardList, BoardList.board_id, Board, "Board")
list_cards = OrderedSiblingSet(Card, Card.list_id, BoardList, "List")
