"""Failure kinds raised by the game services.

Routes never build error responses for these by hand; the handler registered
in ``create_app`` renders any ``GameError`` as ``{"error": message}`` with the
matching status code.
"""


class GameError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'error': self.message}


class ValidationError(GameError):
    """Malformed input, rejected before any state is touched."""
    status_code = 400


class Forbidden(GameError):
    """The user is not a participant of the referenced session."""
    status_code = 403


class NotFound(GameError):
    status_code = 404


class Conflict(GameError):
    """A scarce resource (seat, room code) is already taken."""
    status_code = 409
