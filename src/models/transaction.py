import uuid
from typing import Dict, Any, Optional
from datetime import datetime, timezone
from decimal import Decimal
import logging

from typing_extensions import Self

from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict

from models.column_mapping import TransactionType

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 1000


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class CandidateTransaction(BaseModel):
    """
    An unvalidated transaction read from one CSV row.

    Values stay exactly as they appear in the file; only the type has been
    resolved to income/expense. Columns that no field consumed are kept in
    ``extra`` under their original header.
    """
    raw_row_index: int = Field(alias="rawRowIndex", ge=0)
    source_line: Optional[int] = Field(default=None, alias="sourceLine")
    date: str
    amount: str
    description: str
    category: str
    type: TransactionType
    extra: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True
    )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)


class PersistableTransaction(BaseModel):
    """
    A transaction ready for the transactions table, using Pydantic for validation and serialization.
    """
    transaction_id: uuid.UUID = Field(default_factory=uuid.uuid4, alias="transactionId")
    transaction_date: str = Field(alias="transactionDate")  # ISO-8601 timestamp
    description: str = Field(max_length=MAX_DESCRIPTION_LENGTH)
    amount: Decimal
    category: str
    type: TransactionType
    user_id: str = Field(alias="userId", min_length=1)
    created_at: str = Field(default_factory=_utc_now_iso, alias="createdAt")

    model_config = ConfigDict(
        populate_by_name=True,
        json_encoders={
            Decimal: str,
            uuid.UUID: str
        },
        use_enum_values=False
    )

    @field_validator('transaction_date', 'created_at')
    @classmethod
    def check_iso_timestamp(cls, v: str) -> str:
        try:
            datetime.fromisoformat(v)
        except ValueError:
            raise ValueError(f"Timestamp must be ISO-8601, got: {v}")
        return v

    @model_validator(mode='after')
    def check_sign_matches_type(self) -> Self:
        if self.type == TransactionType.EXPENSE and self.amount > 0:
            raise ValueError("Expense amounts must not be positive")
        if self.type == TransactionType.INCOME and self.amount < 0:
            raise ValueError("Income amounts must not be negative")
        return self

    def to_dynamodb_item(self) -> Dict[str, Any]:
        """Convert to a DynamoDB item; Decimals stay Decimal, UUIDs become strings."""
        return {
            'transactionId': str(self.transaction_id),
            'transactionDate': self.transaction_date,
            'description': self.description,
            'amount': self.amount,
            'category': self.category,
            'type': self.type.value,
            'userId': self.user_id,
            'createdAt': self.created_at,
        }

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True)
