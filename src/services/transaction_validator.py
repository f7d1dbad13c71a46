"""
Validation of candidate transactions before they can be previewed or committed.
"""
import logging
from datetime import date, datetime, timezone
from typing import List, Optional, Sequence

from models.import_session import ValidationIssue
from models.import_template import DateLayout
from models.transaction import MAX_DESCRIPTION_LENGTH, CandidateTransaction
from utils.date_parser import parse_date
from utils.transaction_utils import parse_amount

logger = logging.getLogger(__name__)


def check_candidate(candidate: CandidateTransaction, date_layout: DateLayout, today: date) -> List[ValidationIssue]:
    """Run every check on one candidate; a failed check never hides a later one."""
    issues: List[ValidationIssue] = []
    row_label = f"Row {candidate.raw_row_index + 1}"

    def add(message: str) -> None:
        issues.append(ValidationIssue(row_index=candidate.raw_row_index, message=f"{row_label}: {message}"))

    parsed_date = parse_date(candidate.date, date_layout)
    if parsed_date is None:
        add(f'Invalid date format "{candidate.date}"')
    elif parsed_date > today:
        add(f'Date "{candidate.date}" is in the future')

    if parse_amount(candidate.amount) is None:
        add(f'Invalid amount "{candidate.amount}"')

    description = candidate.description.strip()
    if not description:
        add("Missing description")
    elif len(description) > MAX_DESCRIPTION_LENGTH:
        add(f"Description is longer than {MAX_DESCRIPTION_LENGTH} characters")

    return issues


def validate_transactions(
    candidates: Sequence[CandidateTransaction],
    date_layout: DateLayout,
    today: Optional[date] = None
) -> List[ValidationIssue]:
    """
    Validate every candidate transaction.

    Args:
        candidates: Rows produced by the row mapper
        date_layout: Layout used to parse each candidate's date
        today: Latest acceptable transaction date; defaults to the current UTC date

    Returns:
        All issues in row order; empty only if every candidate passed every check
    """
    today = today or datetime.now(timezone.utc).date()
    issues: List[ValidationIssue] = []
    for candidate in candidates:
        issues.extend(check_candidate(candidate, date_layout, today))

    if issues:
        flagged_rows = len({issue.row_index for issue in issues})
        logger.info(f"Validation found {len(issues)} issue(s) in {flagged_rows} of {len(candidates)} row(s)")
    else:
        logger.info(f"Validated {len(candidates)} candidate transaction(s)")
    return issues
