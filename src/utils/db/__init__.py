"""
Database utilities for DynamoDB operations.

This module provides a clean interface for all database operations.
Imports are organized by resource type for easy navigation.
"""

# ============================================================================
# Core Infrastructure
# ============================================================================

from .base import (
    # Table management
    tables,
    DynamoDBTables,

    # Exceptions
    TableUnavailable,

    # Decorators
    dynamodb_operation,
    retry_on_throttle,
)

from .helpers import (
    # Batch operations
    chunked,
    batch_write_items,
    batch_delete_items,
)

# ============================================================================
# Transaction Operations
# ============================================================================

from .transactions import (
    insert_transactions_batch,
)

# ============================================================================
# __all__ Export List
# ============================================================================

__all__ = [
    # Table management
    'tables',
    'DynamoDBTables',
    'TableUnavailable',

    # Decorators
    'dynamodb_operation',
    'retry_on_throttle',

    # Batch operations
    'chunked',
    'batch_write_items',
    'batch_delete_items',

    # Transactions
    'insert_transactions_batch',
]
