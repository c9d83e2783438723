"""
Exception classes for the priority matrix system.

Centralized location for all custom exceptions to avoid circular imports.
"""


class ValidationError(Exception):
    """Raised when item data fails validation."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors: list[str] = errors if errors is not None else [message]


class ImportFormatError(ValidationError):
    """Raised when an import payload does not have the expected shape."""
    pass


class ItemNotFoundError(KeyError):
    """Raised when an item id is not present in the matrix."""
    pass


class TournamentError(Exception):
    """Base exception for all tournament-related errors."""
    pass


class InsufficientItemsError(TournamentError):
    """Raised when a tournament is created with fewer than two items."""
    pass


class TooManyItemsError(TournamentError):
    """Raised when a tournament is created with more items than allowed."""
    pass


class DuplicateItemError(TournamentError):
    """Raised when a tournament snapshot contains the same item id twice."""
    pass


class InvalidComparisonError(TournamentError):
    """Raised when an outcome does not match the current pair."""
    pass


class NoActiveComparisonError(TournamentError):
    """Raised when an outcome is recorded after the tournament completed."""
    pass


class BattleAborted(Exception):
    """Raised by a judge when the user abandons a battle."""
    pass
