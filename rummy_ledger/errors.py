"""
Error taxonomy for game commands

Every command either succeeds or raises one of these before touching
the session, so a rejected command never leaves partial state behind.
"""


class GameError(Exception):
    """Base class for all rejected commands"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GameError):
    """Bad, missing, negative or non-numeric input"""


class EligibilityError(GameError):
    """Command is well-formed but the game rules do not allow it right now"""


class NotFoundError(GameError):
    """Unknown round number, player, config or saved player"""


class SessionStateError(GameError):
    """Command not allowed in the session's current state"""


class StorageError(GameError):
    """Persistence backend failed or returned an unreadable blob"""
