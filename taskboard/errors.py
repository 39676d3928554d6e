"""Error taxonomy shared by services and blueprints.

Services raise these; the app-level error handler turns them into
``{"error": message}`` JSON responses with the matching status code.
"""


class BoardError(Exception):
    """Base class for every error surfaced to an API caller."""

    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"error": self.message}


class ValidationError(BoardError):
    """Missing or malformed input (absent title, bad date, bad position)."""

    status_code = 400


class NotFound(BoardError):
    """A board, list, card, client or worker id did not resolve."""

    status_code = 404


class ConflictOrStoreError(BoardError):
    """Transaction failure or constraint violation.

    400 when the caller caused it (duplicate unique field), 500 otherwise.
    """

    status_code = 500
