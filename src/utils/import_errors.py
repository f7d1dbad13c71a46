"""
Exceptions raised by the CSV import pipeline.

The import session catches every ImportPipelineError and turns it into its
terminal error state; InvalidStateTransition and SelectionError are raised
back to the caller because they describe a misuse of the session rather than
a problem with the uploaded file.
"""
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from models.import_session import ValidationIssue


class ImportPipelineError(Exception):
    """Base class for import pipeline failures."""
    pass


class FormatError(ImportPipelineError):
    """Raised when a file cannot be tokenized or its columns cannot be mapped."""
    pass


class TemplateNotFound(FormatError):
    """Raised when a template id is not in the catalog."""
    pass


class ImportLimitExceeded(FormatError):
    """Raised when a file is larger than the configured size or row limits."""
    pass


class BatchValidationError(ImportPipelineError):
    """Raised when one or more candidate transactions fail validation."""

    def __init__(self, issues: List["ValidationIssue"]):
        self.issues = list(issues)
        super().__init__(f"Found {len(self.issues)} validation error(s)")


class CommitError(ImportPipelineError):
    """Raised when the persistence layer rejects a transaction batch."""
    pass


class SelectionError(ValueError):
    """Raised when a commit is requested with no rows selected, or a row index is unknown."""
    pass


class InvalidStateTransition(Exception):
    """Raised when an import session operation is not allowed in its current state."""
    pass
