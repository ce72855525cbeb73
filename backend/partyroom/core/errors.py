"""
Error types raised by the services
"""


class LobbyError(ValueError):
    """A user-facing validation error; non-fatal, retryable by the user"""

    code = "lobby_error"
    status_code = 400
    message = "Request could not be completed"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)

    def to_detail(self) -> dict:
        return {"code": self.code, "message": str(self)}


class EmptyNicknameError(LobbyError):
    code = "empty_nickname"
    message = "Please enter a nickname"


class InvalidRoomCodeError(LobbyError):
    code = "invalid_code"
    status_code = 404
    message = "Invalid room code"


class GameAlreadyStartedError(LobbyError):
    code = "already_started"
    status_code = 409
    message = "Game already started"


class RoomFullError(LobbyError):
    code = "room_full"
    status_code = 409
    message = "Room is full"


class NotEnoughPlayersError(LobbyError):
    code = "not_enough_players"
    status_code = 409
    message = "At least 2 players required"


class InvalidTransitionError(LobbyError):
    code = "invalid_transition"
    status_code = 409
    message = "Session is not in the right state for this action"


class SessionNotFoundError(LobbyError):
    code = "session_not_found"
    status_code = 404
    message = "Session not found"


class PlayerNotFoundError(LobbyError):
    code = "player_not_found"
    status_code = 404
    message = "Player not found"


class PlayerKickedError(LobbyError):
    code = "player_kicked"
    status_code = 403
    message = "You were removed from the game"


class HostAuthorizationError(LobbyError):
    code = "not_host"
    status_code = 403
    message = "Only the host can do this"


class InvalidSettingsError(LobbyError):
    code = "invalid_settings"
    message = "Those settings are not allowed"


class DatastoreError(Exception):
    """A read or write against the datastore failed"""

    message = "Something went wrong, please try again"
