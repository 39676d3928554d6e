"""Shared test fixtures for the taskboard test suite.

Provides:
- app: Flask app configured for testing (in-memory SQLite, no rate limits)
- client: Flask test client
- db_session: clean database per test (tables created/dropped)
- board_data: a board with lists "To Do" [A, B, C], "Doing" [X, Y], "Done" []
- file_app: app on a file-backed SQLite database, for multi-connection tests
"""

import pytest

from taskboard import create_app
from taskboard.extensions import db as _db
from taskboard.models.board import Board, BoardList, Card


@pytest.fixture(scope="session")
def app():
    """Create the Flask application configured for testing."""
    app = create_app("testing")
    yield app


@pytest.fixture(autouse=True)
def db_session(app):
    """Create all tables before each test, drop after."""
    with app.app_context():
        _db.create_all()
        yield _db.session
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture
def file_app(tmp_path):
    """App whose engine opens real, separate SQLite connections per thread."""
    app = create_app("testing", {
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'taskboard.db'}",
    })
    with app.app_context():
        _db.create_all()
    yield app
    with app.app_context():
        _db.engine.dispose()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def board_data(app, db_session):
    """Seed a board with three lists and a few cards at dense positions.

    Returns plain ids so tests can use them after the session expires
    objects on commit.
    """
    board = Board(title="Test Board", description="Fixture board")
    db_session.add(board)
    db_session.flush()

    lists = {}
    for position, title in enumerate(["To Do", "Doing", "Done"]):
        board_list = BoardList(board_id=board.id, title=title, position=position)
        db_session.add(board_list)
        lists[title] = board_list
    db_session.flush()

    cards = {}
    layout = {"To Do": ["A", "B", "C"], "Doing": ["X", "Y"], "Done": []}
    for list_title, titles in layout.items():
        for position, title in enumerate(titles):
            card = Card(
                list_id=lists[list_title].id, title=title, position=position
            )
            db_session.add(card)
            cards[title] = card
    db_session.flush()

    data = {
        "board_id": board.id,
        "todo_id": lists["To Do"].id,
        "doing_id": lists["Doing"].id,
        "done_id": lists["Done"].id,
        "list_ids": [lists[t].id for t in ("To Do", "Doing", "Done")],
        "cards": {title: card.id for title, card in cards.items()},
    }
    db_session.commit()
    return data
