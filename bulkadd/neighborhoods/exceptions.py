class NeighborhoodLookupError(Exception):
    """Raised when the neighborhood lookup call fails or returns a malformed payload."""
