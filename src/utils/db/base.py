"""
Core database infrastructure.

This module provides:
- DynamoDB table management
- Decorators for cross-cutting concerns
- Common exceptions
"""

import os
import logging
import boto3
import time
from typing import Dict, Any, Optional, Tuple, Callable, TypeVar
from functools import wraps
from botocore.exceptions import ClientError
from pydantic import ValidationError

# Configure logging
logger = logging.getLogger(__name__)

# Type variables
T = TypeVar('T')

# ============================================================================
# Exceptions
# ============================================================================

class TableUnavailable(Exception):
    """Raised when a table's environment variable is not configured."""
    pass


# ============================================================================
# Decorators
# ============================================================================

def dynamodb_operation(operation_name: Optional[str] = None):
    """
    Decorator for consistent DynamoDB error handling and logging.

    Features:
    - Automatic error logging with stack traces
    - Structured logging with operation context
    - Pydantic validation errors re-raised as ValueError

    Usage:
        @dynamodb_operation("insert_transactions_batch")
        def insert_transactions_batch(transactions) -> int:
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            op_name = operation_name or func.__name__
            try:
                logger.debug(f"Starting {op_name}")
                result = func(*args, **kwargs)
                logger.info(f"Successfully completed {op_name}")
                return result
            except ClientError as e:
                error_code = e.response.get('Error', {}).get('Code', 'Unknown')
                error_msg = e.response.get('Error', {}).get('Message', str(e))
                logger.error(
                    f"DynamoDB error in {op_name}: {error_code} - {error_msg}",
                    exc_info=True,
                    extra={
                        'operation': op_name,
                        'error_code': error_code,
                        'function': func.__name__
                    }
                )
                raise
            except ValidationError as e:
                logger.error(
                    f"Validation error in {op_name}: {str(e)}",
                    exc_info=True,
                    extra={'operation': op_name}
                )
                raise ValueError(f"Invalid data in {op_name}: {str(e)}")
            except Exception as e:
                logger.error(
                    f"Unexpected error in {op_name}: {str(e)}",
                    exc_info=True,
                    extra={'operation': op_name}
                )
                raise
        return wrapper
    return decorator


def retry_on_throttle(
    max_attempts: int = 3,
    base_delay: float = 0.1,
    max_delay: float = 5.0,
    exponential_base: float = 2,
    retry_on: Tuple[str, ...] = (
        'ProvisionedThroughputExceededException',
        'ThrottlingException',
        'RequestLimitExceeded'
    )
):
    """
    Decorator to retry DynamoDB operations on throttling with exponential backoff.

    Algorithm:
        Attempt 1: immediate
        Attempt 2: wait base_delay * (2^0) = 0.1s
        Attempt 3: wait base_delay * (2^1) = 0.2s
        ...
        Up to max_delay

    Only the listed throttling codes are retried; every other ClientError
    propagates on the first attempt.
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except ClientError as e:
                    error_code = e.response.get('Error', {}).get('Code', 'Unknown')
                    if error_code not in retry_on or attempt >= max_attempts - 1:
                        raise
                    delay = min(base_delay * (exponential_base ** attempt), max_delay)
                    logger.warning(
                        f"Throttled on {func.__name__} "
                        f"(attempt {attempt + 1}/{max_attempts}), "
                        f"retrying in {delay:.2f}s... "
                        f"Error: {error_code}"
                    )
                    time.sleep(delay)
            raise RuntimeError(f"Unexpected state in retry_on_throttle for {func.__name__}")
        return wrapper
    return decorator


# ============================================================================
# Table Management
# ============================================================================

class DynamoDBTables:
    """
    Singleton for managing DynamoDB table resources.

    Features:
    - Lazy initialization (resource and tables created on first access)
    - Automatic table name lookup from environment variables

    Usage:
        tables = DynamoDBTables()
        transactions = tables.transactions
    """
    _instance: Optional['DynamoDBTables'] = None

    # Table name to environment variable mapping
    TABLE_CONFIGS = {
        'transactions': 'TRANSACTIONS_TABLE',
    }

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self._dynamodb: Optional[Any] = None
            self._tables: Dict[str, Any] = {}
            self._initialized = True

    def _get_table(self, table_key: str) -> Any:
        """
        Get table resource with lazy initialization.

        Raises:
            TableUnavailable: If the table is unknown or its environment variable is unset
        """
        if table_key not in self._tables:
            env_var_name = self.TABLE_CONFIGS.get(table_key)
            if not env_var_name:
                raise TableUnavailable(f"Unknown table key: {table_key}")

            table_name = os.environ.get(env_var_name)
            if not table_name:
                logger.warning(
                    f"Environment variable {env_var_name} not set, "
                    f"table '{table_key}' unavailable"
                )
                raise TableUnavailable(f"Table '{table_key}' is not configured")

            if self._dynamodb is None:
                self._dynamodb = boto3.resource('dynamodb')
            self._tables[table_key] = self._dynamodb.Table(table_name)
            logger.info(f"Initialized table: {table_key} ({table_name})")

        return self._tables[table_key]

    @property
    def transactions(self) -> Any:
        """Get transactions table."""
        return self._get_table('transactions')

    def reinitialize(self):
        """Drop cached resources so the next access picks up new settings (useful for testing)."""
        self._dynamodb = None
        self._tables.clear()
        logger.info("Reinitialized DynamoDB tables")


# Global instance
tables = DynamoDBTables()
