"""
Transaction database operations.

This module provides the batch insert used to commit an import.
"""

import logging
from typing import List, Any, Optional, Sequence

from botocore.exceptions import ClientError

from models.transaction import PersistableTransaction
from utils.import_errors import CommitError
from .base import (
    tables,
    dynamodb_operation,
    retry_on_throttle,
)
from .helpers import batch_write_items, batch_delete_items, chunked

logger = logging.getLogger(__name__)


def _transaction_key(transaction: PersistableTransaction) -> dict:
    return {'transactionId': str(transaction.transaction_id)}


@retry_on_throttle(max_attempts=3, base_delay=0.2)
def _write_chunk(table: Any, chunk: Sequence[PersistableTransaction], batch_size: int) -> int:
    return batch_write_items(table, [t.to_dynamodb_item() for t in chunk], batch_size=batch_size)


def _roll_back(table: Any, attempted: List[PersistableTransaction]) -> None:
    """Delete every item of a failed batch; deleting an item that was never written is a no-op."""
    try:
        deleted = batch_delete_items(table, attempted, _transaction_key)
        logger.warning(f"Rolled back {deleted} transaction(s) from failed import batch")
    except ClientError as e:
        logger.error(
            f"Rollback of failed import batch incomplete; "
            f"transaction ids: {[str(t.transaction_id) for t in attempted]}",
            exc_info=True
        )
        raise CommitError(f"Import failed and rollback was incomplete: {str(e)}") from e


@dynamodb_operation("insert_transactions_batch")
def insert_transactions_batch(
    transactions: Sequence[PersistableTransaction],
    table: Optional[Any] = None,
    batch_size: int = 25
) -> int:
    """
    Insert a batch of transactions as a unit.

    Items are written in chunks; if any chunk fails, every item of the batch is
    deleted again before the failure is reported, so callers never see a
    partially imported batch.

    Args:
        transactions: Transactions to insert
        table: DynamoDB table resource (defaults to the transactions table)
        batch_size: Items per batch_writer chunk

    Returns:
        Number of transactions inserted

    Raises:
        CommitError: If DynamoDB rejected the batch
    """
    if not transactions:
        return 0
    table = table if table is not None else tables.transactions

    attempted: List[PersistableTransaction] = []
    written = 0
    for chunk in chunked(list(transactions), batch_size):
        attempted.extend(chunk)
        try:
            written += _write_chunk(table, chunk, batch_size)
        except ClientError as e:
            error_msg = e.response.get('Error', {}).get('Message', str(e))
            logger.error(f"Import batch failed after {written} of {len(transactions)} transaction(s): {error_msg}")
            _roll_back(table, attempted)
            raise CommitError(error_msg) from e

    logger.info(f"Inserted {written} transaction(s) for user {transactions[0].user_id}")
    return written
