"""
Models package for the CSV statement import pipeline.
"""

from .import_template import (
    DateLayout,
    ExpectedHeaders,
    SourceTemplate,
    TemplateCatalog,
    DEFAULT_TEMPLATES,
    DEFAULT_TEMPLATE_ID,
    default_catalog,
)

from .column_mapping import (
    ColumnMapping,
    TransactionType,
    DEFAULT_CATEGORY,
)

from .transaction import (
    CandidateTransaction,
    PersistableTransaction,
)

from .import_session import (
    ImportSession,
    ImportStatus,
    ImportMode,
    StagedFile,
    ValidationIssue,
)

__all__ = [
    'DateLayout',
    'ExpectedHeaders',
    'SourceTemplate',
    'TemplateCatalog',
    'DEFAULT_TEMPLATES',
    'DEFAULT_TEMPLATE_ID',
    'default_catalog',
    'ColumnMapping',
    'TransactionType',
    'DEFAULT_CATEGORY',
    'CandidateTransaction',
    'PersistableTransaction',
    'ImportSession',
    'ImportStatus',
    'ImportMode',
    'StagedFile',
    'ValidationIssue',
]
