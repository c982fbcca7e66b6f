"""Exception hierarchy for the import pipeline."""


class ImportPipelineError(Exception):
    """Base class for errors raised by the import pipeline."""


class ParseError(ImportPipelineError):
    """Raised when an uploaded file cannot be turned into a table."""


class BulkImportError(ImportPipelineError):
    """Raised when a bulk import call fails as a whole.

    ``committed_count`` is the number of rows that were already written by
    earlier chunks before the failure. Those rows are not rolled back.
    """

    def __init__(self, message: str, committed_count: int = 0) -> None:
        super().__init__(message)
        self.message = message
        self.committed_count = committed_count


class InvalidTransitionError(ImportPipelineError):
    """Raised when an import session action is not allowed in its current step."""
