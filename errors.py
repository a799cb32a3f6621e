"""
Error kinds raised by the stores.

Each kind maps to one HTTP status in main.py.
"""


class QuizError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(QuizError):
    """A required field is missing or a value has the wrong type."""
    status_code = 400


class NotFoundError(QuizError):
    """The identifier does not resolve to a stored record."""
    status_code = 404


class StoreError(QuizError):
    """The database call failed. The message is generic and safe to return."""
    status_code = 500
