"""Custom exceptions for loading story definitions."""


class DataError(Exception):
    """Base exception for the data layer."""


class DataLoadError(DataError):
    """Raised when JSON files are missing or invalid."""


class DataValidationError(DataError):
    """Raised when JSON content fails structural validation."""


class DataReferenceError(DataError):
    """Raised when a definition file disagrees with the id it is stored under."""


class DuplicateIdError(DataError):
    """Raised when a story or scene id collides with an existing one."""


class NotFoundError(DataError):
    """Raised when updating or deleting a story or scene that does not exist."""
