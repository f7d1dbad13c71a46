import logging
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Sequence

from models.column_mapping import ColumnMapping
from models.transaction import CandidateTransaction
from utils.import_errors import FormatError
from utils.transaction_utils import normalize_transaction_type

# Get logger for this module
logger = logging.getLogger(__name__)

__all__ = [
    'RawTable',
    'decode_csv_bytes',
    'parse_csv_line',
    'tokenize_csv',
    'find_column_index',
    'map_rows',
]


@dataclass
class RawTable:
    """Headers and rows of a delimited file; every row has len(headers) fields."""
    headers: List[str]
    rows: List[List[str]] = field(default_factory=list)
    line_numbers: List[int] = field(default_factory=list)  # 1-based source line of each row
    skipped_lines: List[int] = field(default_factory=list)  # 1-based lines dropped for a field-count mismatch


def decode_csv_bytes(content: bytes) -> str:
    """
    Decode uploaded file content as UTF-8, tolerating a byte-order mark.

    Raises:
        FormatError: If the content is not UTF-8 text
    """
    try:
        return content.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        logger.warning(f"Uploaded file is not UTF-8 text: {str(e)}")
        raise FormatError("File is not valid UTF-8 text")


def _strip_field(value: str) -> str:
    value = value.strip()
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value.strip()


def parse_csv_line(line: str) -> List[str]:
    """
    Split one line into fields.

    A double quote toggles quoted mode and is not kept; commas inside quotes
    belong to the field.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == ',' and not in_quotes:
            fields.append(''.join(current))
            current = []
        else:
            current.append(char)

    fields.append(''.join(current))
    return [_strip_field(value) for value in fields]


def tokenize_csv(text: str) -> RawTable:
    """
    Parse CSV text into a header row and data rows.

    Blank lines are ignored. Rows whose field count differs from the header's
    are left out of the table and their line numbers recorded in skipped_lines.

    Raises:
        FormatError: If there is no header row plus at least one data row
    """
    lines = [
        (number, line)
        for number, line in enumerate(text.split('\n'), start=1)
        if line.strip()
    ]
    if len(lines) < 2:
        raise FormatError("CSV file must contain at least a header row and one data row")

    _, header_line = lines[0]
    table = RawTable(headers=parse_csv_line(header_line))
    expected_fields = len(table.headers)

    for number, line in lines[1:]:
        fields = parse_csv_line(line)
        if len(fields) != expected_fields:
            logger.debug(f"Skipping line {number}: {len(fields)} fields, expected {expected_fields}")
            table.skipped_lines.append(number)
            continue
        table.rows.append(fields)
        table.line_numbers.append(number)

    logger.info(
        f"Tokenized {len(table.rows)} rows with {expected_fields} columns "
        f"({len(table.skipped_lines)} skipped)"
    )
    return table


def find_column_index(headers: Sequence[str], column: Optional[str]) -> int:
    """Index of the first header named exactly ``column``, or -1."""
    if not column:
        return -1
    try:
        return list(headers).index(column)
    except ValueError:
        return -1


def map_rows(table: RawTable, mapping: ColumnMapping) -> List[CandidateTransaction]:
    """
    Turn every data row into a candidate transaction using a column mapping.

    Category and type fall back to the mapping defaults when their column is
    not mapped or the cell is blank. Unmapped columns are carried in ``extra``.
    """
    date_idx = find_column_index(table.headers, mapping.date_column)
    amount_idx = find_column_index(table.headers, mapping.amount_column)
    description_idx = find_column_index(table.headers, mapping.description_column)
    category_idx = find_column_index(table.headers, mapping.category_column)
    type_idx = find_column_index(table.headers, mapping.type_column)
    consumed = {date_idx, amount_idx, description_idx, category_idx, type_idx}

    candidates: List[CandidateTransaction] = []
    for row_index, row in enumerate(table.rows):
        extra: Dict[str, str] = {
            header: row[idx]
            for idx, header in enumerate(table.headers)
            if idx not in consumed
        }
        raw_type = row[type_idx] if type_idx >= 0 else None
        candidates.append(CandidateTransaction(
            raw_row_index=row_index,
            source_line=table.line_numbers[row_index] if row_index < len(table.line_numbers) else None,
            date=row[date_idx] if date_idx >= 0 else '',
            amount=row[amount_idx] if amount_idx >= 0 else '',
            description=row[description_idx] if description_idx >= 0 else '',
            category=(row[category_idx] if category_idx >= 0 else '') or mapping.default_category,
            type=normalize_transaction_type(raw_type, mapping.default_type),
            extra=extra,
        ))

    logger.info(f"Mapped {len(candidates)} candidate transactions")
    return candidates
