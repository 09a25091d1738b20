class SubmissionError(Exception):
    """Raised when the duplicate check or bulk submit cannot complete."""


class DuplicateCheckError(SubmissionError):
    """Raised when the check-existing call fails or returns a malformed payload."""


class TransactionFailureError(SubmissionError):
    """Raised when the batch insert transaction cannot begin or commit."""
