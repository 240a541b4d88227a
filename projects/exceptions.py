"""Exception hierarchy for the portfolio projects app."""


class PortfolioError(Exception):
    """Base exception for all portfolio errors."""


class ProjectNotFound(PortfolioError):
    """Raised when a referenced project does not exist."""


class PersistenceError(PortfolioError):
    """Raised when the project store fails to read or write."""


class RecordValidationError(PortfolioError):
    """Raised when a project record breaks one of its invariants."""

    def __init__(self, errors):
        self.errors = dict(errors)
        message = '; '.join(f'{field}: {msg}' for field, msg in self.errors.items())
        super().__init__(message)


class ImportFileError(PortfolioError):
    """Raised when an uploaded CSV cannot be read as tabular data."""


class ImageValidationError(PortfolioError):
    """Raised when an uploaded image has the wrong type or size."""


class GeocodingError(PortfolioError):
    """Raised inside the geocoding client when a lookup fails outright."""
