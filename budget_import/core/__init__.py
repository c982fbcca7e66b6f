"""Core package: provides models, database helpers, settings, errors, and shared utilities."""

from .errors import BulkImportError, ImportPipelineError, InvalidTransitionError, ParseError  # noqa: F401
from .models import ColumnMapping, ParsedFile, ProcessedRow, TransactionCreate  # noqa: F401
from .settings import Settings, get_settings  # noqa: F401
from .utils import get_logger  # noqa: F401
