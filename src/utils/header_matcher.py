"""
Match template header labels onto the headers found in an uploaded file.
"""
import re
import logging
from typing import Optional, Sequence

from models.column_mapping import ColumnMapping
from models.import_template import SourceTemplate

logger = logging.getLogger(__name__)

__all__ = [
    'normalize_header',
    'find_best_matching_header',
    'build_template_mapping',
]

_HEADER_NOISE = re.compile(r'[_\s]')


def normalize_header(value: str) -> str:
    """Lower-case and drop underscores and whitespace, so 'Transaction_Date' == 'transaction date'."""
    return _HEADER_NOISE.sub('', value.lower())


def find_best_matching_header(headers: Sequence[str], target: str) -> str:
    """
    Find the header that best matches a template label.

    An exact match after normalization beats a partial one (either string
    containing the other); within each tier the first header wins.

    Args:
        headers: Headers in file order
        target: Label the template expects

    Returns:
        The matching header as it appears in the file, or "" if none matches
    """
    normalized_target = normalize_header(target)
    if not normalized_target:
        return ""

    # A blank header would partially match every target
    candidates = [(header, normalize_header(header)) for header in headers]
    candidates = [(header, normalized) for header, normalized in candidates if normalized]

    for header, normalized in candidates:
        if normalized == normalized_target:
            return header

    for header, normalized in candidates:
        if normalized_target in normalized or normalized in normalized_target:
            return header

    return ""


def _match_optional(headers: Sequence[str], target: Optional[str]) -> Optional[str]:
    if not target:
        return None
    return find_best_matching_header(headers, target) or None


def build_template_mapping(template: SourceTemplate, headers: Sequence[str]) -> ColumnMapping:
    """
    Resolve a template against a file's headers.

    Never fails: a required field with no matching header is left empty and
    reported when the mapping is checked.
    """
    expected = template.expected_headers
    mapping = ColumnMapping(
        date_column=find_best_matching_header(headers, expected.date),
        amount_column=find_best_matching_header(headers, expected.amount),
        description_column=find_best_matching_header(headers, expected.description),
        category_column=_match_optional(headers, expected.category),
        type_column=_match_optional(headers, expected.type),
        date_layout=template.date_layout,
    )
    logger.info(f"Resolved template '{template.id}' mapping: {mapping.to_dict()}")
    return mapping
