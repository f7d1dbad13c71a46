"""
Helper functions for database operations.

This module provides:
- Batch operation helpers
"""

import logging
from typing import List, Dict, Any, Callable, Sequence

logger = logging.getLogger(__name__)


# ============================================================================
# Batch Operations
# ============================================================================

def chunked(items: Sequence[Any], batch_size: int) -> List[Sequence[Any]]:
    """Split items into consecutive chunks of at most batch_size."""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    return [items[i:i + batch_size] for i in range(0, len(items), batch_size)]


def batch_write_items(
    table: Any,
    items: List[Dict[str, Any]],
    batch_size: int = 25
) -> int:
    """
    Write items in batches respecting DynamoDB limits.

    Args:
        table: DynamoDB table resource
        items: List of item dicts to write
        batch_size: Batch size (DynamoDB limit is 25)

    Returns:
        Number of items written
    """
    if not items:
        logger.debug("No items to write")
        return 0

    count = 0
    for batch in chunked(items, batch_size):
        with table.batch_writer() as writer:
            for item in batch:
                writer.put_item(Item=item)
        count += len(batch)

    logger.info(f"Batch wrote {count} items to {table.table_name}")
    return count


def batch_delete_items(
    table: Any,
    items: List[Any],
    key_extractor: Callable[[Any], Dict[str, str]],
    batch_size: int = 25
) -> int:
    """
    Delete items in batches respecting DynamoDB limits.

    Args:
        table: DynamoDB table resource
        items: List of items to delete (can be models or dicts)
        key_extractor: Function to extract key dict from item
        batch_size: Batch size (DynamoDB limit is 25)

    Returns:
        Number of items deleted

    Example:
        deleted_count = batch_delete_items(
            table=tables.transactions,
            items=transactions,
            key_extractor=lambda t: {'transactionId': str(t.transaction_id)}
        )
    """
    if not items:
        logger.debug("No items to delete")
        return 0

    count = 0
    for batch in chunked(items, batch_size):
        with table.batch_writer() as writer:
            for item in batch:
                writer.delete_item(Key=key_extractor(item))
        count += len(batch)

    logger.info(f"Batch deleted {count} items from {table.table_name}")
    return count
