"""Typed domain exceptions for scorer rule violations.

Lifecycle misuse raises subclasses of GameRuleError rather than raw
ValueError so callers can catch one base class. Malformed hand data is
never an error: decoding and scoring fall back to defaults instead.
"""


class GameRuleError(Exception):
    """Base exception for invalid scorer operations.

    Raised by GameManager when an operation is not allowed in the
    current game or series state.
    """


class InvalidActionError(GameRuleError):
    """Operation is not valid in the current game or series state."""


class InvalidSetupError(GameRuleError):
    """Roster does not have exactly four players and two teams."""


class UnsupportedSettingsError(GameRuleError):
    """Game settings contain values the scorer cannot honor."""


class SnapshotLoadError(Exception):
    """Raised when a saved game snapshot cannot be parsed or reconstructed.

    Attributes:
        reason: Human-readable explanation of what was wrong with the data.

    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"cannot restore game snapshot: {reason}")
