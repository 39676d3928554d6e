import os
import logging

import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from taskboard.config import config_by_name
from taskboard.errors import BoardError, ConflictOrStoreError
from taskboard.extensions import db, migrate, limiter


def create_app(config_name=None, test_config=None):
    """Application factory.

    ``test_config`` is a mapping applied over the named config, used by tests
    that need a different database.
    """

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    if test_config:
        app.config.update(test_config)

    # --- Validate required env vars (skip in testing) ---
    if config_name != "testing":
        try:
            config_by_name[config_name].validate()
        except RuntimeError as e:
            app.logger.warning(f"Config validation: {e}")

    # --- Init extensions ---
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    # --- Import models so Alembic can discover them ---
    with app.app_context():
        from taskboard import models  # noqa: F401

    # --- Register blueprints ---
    from taskboard.blueprints.boards import boards_bp
    from taskboard.blueprints.directory import directory_bp

    api_prefix = app.config["API_PREFIX"]
    app.register_blueprint(boards_bp, url_prefix=api_prefix)
    app.register_blueprint(directory_bp, url_prefix=api_prefix)

    # --- Error handlers ---
    register_error_handlers(app)

    # --- CLI commands ---
    register_cli(app)

    # --- Logging ---
    if not app.debug:
        logging.basicConfig(level=logging.INFO)

    # --- Default board ---
    if app.config["SEED_DEFAULT_BOARD"]:
        from taskboard.services import board_service
        from taskboard.services.transaction import unit_of_work

        with app.app_context():
            try:
                with unit_of_work("board.seed_default"):
                    board_service.ensure_default_board()
            except ConflictOrStoreError as e:
                # Another worker inserted the default board first.
                if e.status_code != 400:
                    raise
                app.logger.info(f"Default board already seeded: {e}")

    return app


def register_error_handlers(app):
    """Every error leaves the API as {"error": message} JSON."""

    @app.errorhandler(BoardError)
    def board_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(500)
    def server_error(e):
        original = getattr(e, "original_exception", None) or e
        app.logger.error(f"Unhandled error: {original}", exc_info=original)
        return jsonify({"error": str(original)}), 500


def register_cli(app):
    """Register custom CLI commands with the Flask app."""

    @app.cli.command("init-db")
    def init_db():
        """Create all tables and seed the default board.

        Usage:
            flask init-db
        """
        from taskboard.services import board_service
        from taskboard.services.transaction import unit_of_work

        db.create_all()
        with unit_of_work("board.seed_default"):
            board = board_service.ensure_default_board()
        if board is None:
            click.echo("Tables ready. Boards already exist, nothing seeded.")
        else:
            click.echo(f"Tables ready. Seeded default board: {board.title} (id: {board.id})")

    @app.cli.command("seed-board")
    @click.option("--title", required=True, help="Board title")
    @click.option("--description", default="", help="Board description")
    def seed_board(title, description):
        """Create a board with the default To Do / In Progress / Done lists.

        Usage:
            flask seed-board --title "Workshop"
        """
        from taskboard.services import board_service
        from taskboard.services.transaction import unit_of_work

        with unit_of_work("board.seed"):
            board = board_service.create_board(
                title, description, list_titles=app.config["DEFAULT_LIST_TITLES"]
            )
            board_id = board.id
        click.echo(f"Created board: {title} (id: {board_id})")

    @app.cli.command("check-positions")
    @click.option("--fix", is_flag=True, help="Resequence every sparse group.")
    def check_positions(fix):
        """Report lists/cards whose positions are not a dense 0..n-1 run.

        Usage:
            flask check-positions
            flask check-positions --fix
        """
        from taskboard.services import board_service
        from taskboard.services.transaction import unit_of_work

        sparse = board_service.find_sparse_groups()
        if not sparse:
            click.echo("All positions are dense.")
            return

        for kind, group_id, positions in sparse:
            click.echo(f"  {kind} {group_id}: {positions}")

        if not fix:
            click.echo(f"{len(sparse)} sparse group(s). Re-run with --fix to repair.")
            return

        for kind, group_id, _ in sparse:
            with unit_of_work(f"{kind}.resequence"):
                changed = board_service.repair_group(kind, group_id)
            click.echo(f"  fixed {kind} {group_id}: {changed} row(s) renumbered")
