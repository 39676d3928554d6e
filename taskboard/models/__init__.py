# Models package: import all models here so Alembic can discover them.

from taskboard.models.board import Board, BoardList, Card, card_workers  # noqa: F401
from taskboard.models.directory import Client, Worker  # noqa: F401
