import os


class Config:
    """Base configuration. Shared across all environments."""

    # --- Required ---
    SECRET_KEY = os.environ.get("SECRET_KEY")

    # Handle DATABASE_URL: some PaaS providers (Railway, Heroku) use
    # "postgres://" which SQLAlchemy 1.4+ doesn't accept.
    _db_url = os.environ.get("DATABASE_URL", "")
    if _db_url.startswith("postgres://"):
        _db_url = _db_url.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = _db_url or None

    # --- HTTP surface ---
    API_PREFIX = os.environ.get("API_PREFIX", "/api")
    PORT = int(os.environ.get("PORT", 3001))

    # --- Default board ---
    # Materialized at startup when the boards table is empty.
    SEED_DEFAULT_BOARD = os.environ.get(
        "SEED_DEFAULT_BOARD", "true"
    ).lower() in ("1", "true", "yes")
    DEFAULT_BOARD_TITLE = os.environ.get("DEFAULT_BOARD_TITLE", "KanBan Board")
    DEFAULT_BOARD_DESCRIPTION = os.environ.get(
        "DEFAULT_BOARD_DESCRIPTION", "Welcome to your Kanban board!"
    )
    DEFAULT_LIST_TITLES = ["To Do", "In Progress", "Done"]

    # --- Rate limiting (mutating endpoints only) ---
    WRITE_RATE_LIMIT = os.environ.get("WRITE_RATE_LIMIT", "120 per minute")
    RATELIMIT_ENABLED = True

    # --- SQLAlchemy ---
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }

    @staticmethod
    def validate():
        """Fail fast if required env vars are missing."""
        required = ["SECRET_KEY", "DATABASE_URL"]
        missing = [v for v in required if not os.environ.get(v)]
        if missing:
            raise RuntimeError(
                f"Missing required environment variables: {', '.join(missing)}"
            )


class DevConfig(Config):
    """Local development: file-backed SQLite unless DATABASE_URL is set."""

    DEBUG = True
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = Config.SQLALCHEMY_DATABASE_URI or "sqlite:///kanban.db"


class TestConfig(Config):
    """Testing: in-memory SQLite, no seeding, no rate limits."""

    TESTING = True
    DEBUG = True
    SECRET_KEY = "test-secret-key-not-for-production"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SEED_DEFAULT_BOARD = False
    RATELIMIT_ENABLED = False  # disable rate limiting in tests
    SERVER_NAME = "localhost"

    @staticmethod
    def validate():
        """Skip validation in test mode; everything is hardcoded."""
        pass


class ProdConfig(Config):
    """Production."""

    DEBUG = False


config_by_name = {
    "development": DevConfig,
    "production": ProdConfig,
    "testing": TestConfig,
}
