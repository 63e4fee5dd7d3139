from __future__ import annotations


class MathPracticeError(Exception):
    """Base for errors that reach the client as a ``{"success": false, "error": ...}`` envelope."""

    status_code = 500
    message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ProblemNotFound(MathPracticeError):
    status_code = 404
    message = "Problem session not found. Please try again."


class ProblemAlreadySolved(MathPracticeError):
    status_code = 409
    message = "This problem has already been solved. Generate a new one!"


class NoMoreHints(MathPracticeError):
    status_code = 400
    message = "No more hints available for this problem."


class PersistenceError(MathPracticeError):
    status_code = 500


class GenerationError(Exception):
    """The text generator was unreachable or returned nothing usable. Never sent to clients."""
