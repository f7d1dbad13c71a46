"""
Utility functions for transaction amounts and types.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Optional
import logging

from models.column_mapping import TransactionType

logger = logging.getLogger(__name__)

# Anything that is not a digit, decimal point or sign is formatting (currency symbols, thousands separators)
_AMOUNT_NOISE = re.compile(r'[^\d.+-]')

# Python's default decimal context precision; longer amounts would be rounded
MAX_AMOUNT_DIGITS = 28

_INCOME_WORDS = {'income', 'credit', 'deposit', 'cr'}
_EXPENSE_WORDS = {'expense', 'debit', 'withdrawal', 'dr'}


def parse_amount(raw: str) -> Optional[Decimal]:
    """
    Parse a statement amount into a Decimal.

    Args:
        raw: The amount as it appears in the file, e.g. "$1,234.50" or "-12"

    Returns:
        The finite Decimal value, or None if nothing numeric remains or the
        value has more than MAX_AMOUNT_DIGITS significant digits
    """
    cleaned = _AMOUNT_NOISE.sub('', raw or '')
    if not cleaned:
        return None
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    if len(value.as_tuple().digits) > MAX_AMOUNT_DIGITS:
        logger.debug(f"Amount '{raw}' has more than {MAX_AMOUNT_DIGITS} significant digits")
        return None
    return value


def normalize_transaction_type(raw: Optional[str], default: TransactionType) -> TransactionType:
    """
    Map a bank's type label onto income/expense.

    Unrecognised or blank labels fall back to the mapping's default type.
    """
    label = (raw or '').strip().lower()
    if label in _INCOME_WORDS:
        return TransactionType.INCOME
    if label in _EXPENSE_WORDS:
        return TransactionType.EXPENSE
    if label:
        logger.debug(f"Unrecognised transaction type '{raw}', using default {default.value}")
    return default


def signed_amount(amount: Decimal, transaction_type: TransactionType) -> Decimal:
    """Expenses are stored negative and income positive, whatever sign the file used."""
    if transaction_type == TransactionType.EXPENSE:
        return amount.copy_abs().copy_negate()
    return amount.copy_abs()
