"""
Import session state machine for CSV statement imports.

Drives one user-initiated import from file selection to commit:

    idle --process--> parsing --> preview              (standard mode)
                              --> mapping --submit--> preview   (advanced mode)
    preview --import_selected--> inserting --> success
    parsing / mapping / inserting --failure--> error
    any state --reset--> idle

Failures of the uploaded data or of the commit never escape the session: they
become the error state with a message (and, for validation, every issue).
Calls that make no sense in the current state raise InvalidStateTransition.
"""
import logging
from datetime import date, datetime, timezone
from typing import Callable, Iterable, List, Optional, Sequence

from models.column_mapping import ColumnMapping
from models.import_session import (
    ImportMode,
    ImportSession,
    ImportStatus,
    StagedFile,
)
from models.import_template import TemplateCatalog, default_catalog
from models.transaction import CandidateTransaction, PersistableTransaction
from services.transaction_validator import validate_transactions
from utils.date_parser import parse_date, to_iso_timestamp
from utils.header_matcher import build_template_mapping
from utils.import_config import ImportConfig, get_import_config
from utils.import_errors import (
    BatchValidationError,
    CommitError,
    FormatError,
    ImportLimitExceeded,
    ImportPipelineError,
    InvalidStateTransition,
    SelectionError,
)
from utils.transaction_parser import RawTable, decode_csv_bytes, map_rows, tokenize_csv
from utils.transaction_utils import parse_amount, signed_amount

logger = logging.getLogger(__name__)

# Persistence collaborator: inserts the whole batch or raises, returns the count inserted
BatchWriter = Callable[[List[PersistableTransaction]], int]
Clock = Callable[[], datetime]

CSV_CONTENT_TYPES = {'text/csv', 'application/csv', 'application/vnd.ms-excel'}

# Progress checkpoints reported while a file is processed
PROGRESS_STARTED = 10
PROGRESS_READ = 30
PROGRESS_TOKENIZED = 50
PROGRESS_DONE = 100


def _dynamodb_batch_writer(batch_size: int) -> BatchWriter:
    # Imported lazily so the pipeline can run without DynamoDB configured
    from utils.db.transactions import insert_transactions_batch

    def write(transactions: List[PersistableTransaction]) -> int:
        return insert_transactions_batch(transactions, batch_size=batch_size)
    return write


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_csv_upload(file_name: str, content_type: Optional[str]) -> bool:
    """Accept files declared as CSV by content type or by extension."""
    if content_type and content_type.split(';')[0].strip().lower() in CSV_CONTENT_TYPES:
        return True
    return file_name.lower().endswith('.csv')


class ImportSessionService:
    """
    Owns one ImportSession and applies user actions to it.

    Args:
        user_id: Authenticated user the imported transactions belong to
        batch_writer: Persistence collaborator used by import_selected
        catalog: Template catalog used for standard-mode mapping
        config: Upload limits
        clock: Source of the current time (for created_at and the future-date check)
    """

    def __init__(
        self,
        user_id: str,
        batch_writer: Optional[BatchWriter] = None,
        catalog: Optional[TemplateCatalog] = None,
        config: Optional[ImportConfig] = None,
        clock: Optional[Clock] = None
    ):
        if not user_id:
            raise ValueError("User ID is required")
        self.session = ImportSession(user_id=user_id)
        self._catalog = catalog or default_catalog
        self._config = config or get_import_config()
        self._batch_writer = batch_writer or _dynamodb_batch_writer(self._config.commit_batch_size)
        self._clock = clock or _utc_now
        self._table: Optional[RawTable] = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def status(self) -> ImportStatus:
        return self.session.status

    @property
    def catalog(self) -> TemplateCatalog:
        return self._catalog

    def snapshot(self) -> dict:
        return self.session.to_response()

    def selected_candidates(self) -> List[CandidateTransaction]:
        """Selected candidates in file order."""
        return [c for c in self.session.candidates if c.raw_row_index in self.session.selection]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require(self, *allowed: ImportStatus) -> None:
        if self.session.status not in allowed:
            expected = ', '.join(status.value for status in allowed)
            raise InvalidStateTransition(
                f"Cannot do that while the import is {self.session.status.value} (expected {expected})"
            )

    def _transition(self, status: ImportStatus, progress: Optional[int] = None) -> None:
        logger.info(f"Import session {self.session.session_id}: {self.session.status.value} -> {status.value}")
        self.session.status = status
        if progress is not None:
            self.session.progress = progress

    def _fail(self, error: Exception) -> None:
        self.session.error_message = str(error)
        if isinstance(error, BatchValidationError):
            self.session.issues = error.issues
        logger.warning(f"Import session {self.session.session_id} failed: {str(error)}")
        self._transition(ImportStatus.ERROR, progress=0)

    def _today(self) -> date:
        return self._clock().astimezone(timezone.utc).date()

    def _accept_mapping(self, mapping: ColumnMapping) -> None:
        """Map and validate rows; all rows pass or the batch is rejected."""
        assert self._table is not None
        self.session.mapping = mapping
        candidates = map_rows(self._table, mapping)
        issues = validate_transactions(candidates, mapping.date_layout, today=self._today())
        if issues:
            raise BatchValidationError(issues)

        self.session.candidates = candidates
        self.session.issues = []
        self.session.selection = {c.raw_row_index for c in candidates}
        self._transition(ImportStatus.PREVIEW, progress=PROGRESS_DONE)

    # ------------------------------------------------------------------
    # Idle-state actions
    # ------------------------------------------------------------------

    def select_file(self, file_name: str, content: bytes, content_type: Optional[str] = None) -> None:
        """
        Stage a file for processing, discarding any earlier results.

        Raises:
            FormatError: If the file is not a CSV or is larger than the configured limit
        """
        self._require(
            ImportStatus.IDLE, ImportStatus.MAPPING, ImportStatus.PREVIEW,
            ImportStatus.SUCCESS, ImportStatus.ERROR
        )
        self.reset()
        if not is_csv_upload(file_name, content_type):
            raise FormatError("Please upload a CSV file")
        staged = StagedFile(file_name=file_name, content=content, content_type=content_type)
        if staged.size > self._config.max_file_bytes:
            raise ImportLimitExceeded(
                f"File is {staged.size} bytes; the limit is {self._config.max_file_bytes} bytes"
            )
        self.session.file = staged
        logger.info(f"Staged '{file_name}' ({staged.size} bytes) for user {self.session.user_id}")

    def set_mode(self, mode: ImportMode) -> None:
        self._require(ImportStatus.IDLE)
        self.session.mode = ImportMode(mode)

    def select_template(self, template_id: str) -> None:
        """Raises TemplateNotFound for ids outside the catalog."""
        self._require(ImportStatus.IDLE)
        self._catalog.get(template_id)
        self.session.template_id = template_id

    def process(self) -> ImportStatus:
        """
        Read, tokenize and (in standard mode) map and validate the staged file.

        Returns:
            The resulting status: preview, mapping or error
        """
        self._require(ImportStatus.IDLE)
        if self.session.file is None:
            raise InvalidStateTransition("No file has been selected")

        self.session.clear_results()
        self._transition(ImportStatus.PARSING, progress=PROGRESS_STARTED)
        try:
            text = decode_csv_bytes(self.session.file.content)
            self.session.progress = PROGRESS_READ

            table = tokenize_csv(text)
            if not table.rows:
                raise FormatError("No rows match the header's column count")
            if len(table.rows) > self._config.max_rows:
                raise ImportLimitExceeded(
                    f"File has {len(table.rows)} rows; the limit is {self._config.max_rows}"
                )
            self._table = table
            self.session.headers = table.headers
            self.session.rows = table.rows
            self.session.line_numbers = table.line_numbers
            self.session.skipped_lines = table.skipped_lines
            self.session.progress = PROGRESS_TOKENIZED

            template = self._catalog.get(self.session.template_id)
            mapping = build_template_mapping(template, table.headers)

            if self.session.mode == ImportMode.ADVANCED:
                self.session.suggested_mapping = mapping
                self._transition(ImportStatus.MAPPING, progress=PROGRESS_DONE)
            else:
                missing = mapping.unresolved_required_fields()
                if missing:
                    self.session.mapping = mapping
                    raise FormatError(f"Could not find columns for: {', '.join(missing)}")
                self._accept_mapping(mapping)
        except ImportPipelineError as e:
            self._fail(e)
        return self.session.status

    # ------------------------------------------------------------------
    # Mapping-state actions
    # ------------------------------------------------------------------

    def submit_mapping(self, mapping: ColumnMapping) -> ImportStatus:
        """
        Apply a user-chosen column mapping (advanced mode).

        Returns:
            The resulting status: preview or error
        """
        self._require(ImportStatus.MAPPING)
        try:
            mapping.check_against_headers(self.session.headers)
            self._accept_mapping(mapping)
        except ImportPipelineError as e:
            self.session.mapping = mapping
            self._fail(e)
        return self.session.status

    # ------------------------------------------------------------------
    # Preview-state actions
    # ------------------------------------------------------------------

    def _check_row(self, row_index: int) -> None:
        if not 0 <= row_index < len(self.session.candidates):
            raise SelectionError(f"Row index {row_index} is out of range")

    def select_row(self, row_index: int) -> None:
        self._require(ImportStatus.PREVIEW)
        self._check_row(row_index)
        self.session.selection.add(row_index)

    def deselect_row(self, row_index: int) -> None:
        self._require(ImportStatus.PREVIEW)
        self._check_row(row_index)
        self.session.selection.discard(row_index)

    def set_selection(self, row_indices: Iterable[int]) -> None:
        self._require(ImportStatus.PREVIEW)
        indices = set(row_indices)
        for row_index in indices:
            self._check_row(row_index)
        self.session.selection = indices

    def select_all(self) -> None:
        self._require(ImportStatus.PREVIEW)
        self.session.selection = {c.raw_row_index for c in self.session.candidates}

    def clear_selection(self) -> None:
        self._require(ImportStatus.PREVIEW)
        self.session.selection = set()

    def build_persistable(self, candidates: Sequence[CandidateTransaction]) -> List[PersistableTransaction]:
        """Convert validated candidates into transactions for the batch writer."""
        assert self.session.mapping is not None
        layout = self.session.mapping.date_layout
        created_at = self._clock().astimezone(timezone.utc).isoformat()
        transactions = []
        for candidate in candidates:
            parsed_date = parse_date(candidate.date, layout)
            amount = parse_amount(candidate.amount)
            if parsed_date is None or amount is None:
                # Validation guarantees both parse; a miss means rows changed under the session
                raise CommitError(f"Row {candidate.raw_row_index + 1} is no longer valid")
            transactions.append(PersistableTransaction(
                transaction_date=to_iso_timestamp(parsed_date),
                description=candidate.description.strip(),
                amount=signed_amount(amount, candidate.type),
                category=candidate.category,
                type=candidate.type,
                user_id=self.session.user_id,
                created_at=created_at,
            ))
        return transactions

    def import_selected(self) -> ImportStatus:
        """
        Commit the selected rows as one batch.

        Raises:
            SelectionError: If no row is selected (the session stays in preview)

        Returns:
            The resulting status: success or error
        """
        self._require(ImportStatus.PREVIEW)
        selected = self.selected_candidates()
        if not selected:
            raise SelectionError("No transactions selected for import")

        self._transition(ImportStatus.INSERTING, progress=0)
        try:
            transactions = self.build_persistable(selected)
            inserted = self._batch_writer(transactions)
        except Exception as e:
            logger.error(f"Commit of {len(selected)} transaction(s) failed: {str(e)}")
            self._fail(e)
            return self.session.status

        self.session.inserted_count = inserted
        self._transition(ImportStatus.SUCCESS, progress=PROGRESS_DONE)
        logger.info(f"{inserted} transactions imported successfully for user {self.session.user_id}")
        return self.session.status

    # ------------------------------------------------------------------
    # Any state
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Return to idle, dropping the staged file and all results."""
        if self.session.status != ImportStatus.IDLE:
            self._transition(ImportStatus.IDLE)
        self.session.file = None
        self.session.clear_results()
        self.session.progress = 0
        self._table = None
