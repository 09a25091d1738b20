class PlacesError(Exception):
    """Raised when place resolution fails."""


class PlacesValidationError(PlacesError):
    """Raised when a place API payload does not have the expected shape."""


class PlacesNetworkError(PlacesError):
    """Raised when the place API call fails due to timeout or network issues."""
