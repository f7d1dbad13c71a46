"""
Column mapping model for CSV statement imports.
"""
import enum
from typing import List, Optional, Any, Dict, Sequence

from pydantic import BaseModel, Field, field_validator, ConfigDict

from models.import_template import DateLayout
from utils.import_errors import FormatError

DEFAULT_CATEGORY = "Uncategorized"


class TransactionType(str, enum.Enum):
    """Enum for transaction direction"""
    INCOME = "income"
    EXPENSE = "expense"


class ColumnMapping(BaseModel):
    """
    Resolved correspondence between a file's headers and the logical transaction fields.

    Required column names may be empty when automatic resolution found no
    matching header; the import session reports that before rows are accepted.
    """
    date_column: str = Field(default="", alias="dateColumn")
    amount_column: str = Field(default="", alias="amountColumn")
    description_column: str = Field(default="", alias="descriptionColumn")
    category_column: Optional[str] = Field(default=None, alias="categoryColumn")
    type_column: Optional[str] = Field(default=None, alias="typeColumn")
    date_layout: DateLayout = Field(default=DateLayout.YMD, alias="dateFormat")
    default_category: str = Field(default=DEFAULT_CATEGORY, alias="defaultCategory")
    default_type: TransactionType = Field(default=TransactionType.EXPENSE, alias="defaultType")

    model_config = ConfigDict(
        populate_by_name=True,
        extra='forbid'
    )

    @field_validator('category_column', 'type_column')
    @classmethod
    def blank_optional_column_is_unset(cls, v: Optional[str]) -> Optional[str]:
        # The mapping form submits "" for "no column"
        if v is not None and not v.strip():
            return None
        return v

    @field_validator('default_category')
    @classmethod
    def blank_default_category_falls_back(cls, v: str) -> str:
        return v.strip() or DEFAULT_CATEGORY

    @property
    def required_columns(self) -> Dict[str, str]:
        return {
            'date': self.date_column,
            'amount': self.amount_column,
            'description': self.description_column,
        }

    @property
    def optional_columns(self) -> Dict[str, Optional[str]]:
        return {
            'category': self.category_column,
            'type': self.type_column,
        }

    def unresolved_required_fields(self) -> List[str]:
        """Names of required fields with no column assigned."""
        return [field for field, column in self.required_columns.items() if not column]

    def check_against_headers(self, headers: Sequence[str]) -> None:
        """
        Verify every assigned column exists in the file.

        Raises:
            FormatError: If a required column is unassigned or any assigned column is not a header
        """
        missing = self.unresolved_required_fields()
        if missing:
            raise FormatError(f"Could not find columns for: {', '.join(missing)}")

        for field, column in {**self.required_columns, **self.optional_columns}.items():
            if column and headers.count(column) != 1:
                if column not in headers:
                    raise FormatError(f"Column '{column}' selected for {field} is not in the file")
                raise FormatError(f"Column '{column}' selected for {field} appears more than once in the file")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with camelCase keys for API responses."""
        return self.model_dump(mode='json', by_alias=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColumnMapping":
        return cls.model_validate(data)
