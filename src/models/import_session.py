import enum
import uuid
from typing import Optional, Dict, Any, List, Set

from pydantic import BaseModel, Field, ConfigDict

from models.column_mapping import ColumnMapping
from models.import_template import DEFAULT_TEMPLATE_ID
from models.transaction import CandidateTransaction


class ImportStatus(str, enum.Enum):
    IDLE = "idle"
    PARSING = "parsing"
    MAPPING = "mapping"
    PREVIEW = "preview"
    INSERTING = "inserting"
    SUCCESS = "success"
    ERROR = "error"


class ImportMode(str, enum.Enum):
    STANDARD = "standard"  # template-driven mapping
    ADVANCED = "advanced"  # user submits the column mapping


class ValidationIssue(BaseModel):
    """A defect in one candidate row; several issues may share a row."""
    row_index: int = Field(alias="rowIndex", ge=0)
    message: str

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class StagedFile(BaseModel):
    """An uploaded statement waiting to be processed."""
    file_name: str = Field(alias="fileName", min_length=1)
    content_type: Optional[str] = Field(default=None, alias="contentType")
    content: bytes = Field(exclude=True, repr=False)

    model_config = ConfigDict(populate_by_name=True)

    @property
    def size(self) -> int:
        return len(self.content)


class ImportSession(BaseModel):
    """State of one user-initiated CSV import."""
    session_id: uuid.UUID = Field(default_factory=uuid.uuid4, alias="sessionId")
    user_id: str = Field(alias="userId")
    status: ImportStatus = ImportStatus.IDLE
    progress: int = Field(default=0, ge=0, le=100)
    mode: ImportMode = ImportMode.STANDARD
    template_id: str = Field(default=DEFAULT_TEMPLATE_ID, alias="templateId")
    file: Optional[StagedFile] = None
    headers: List[str] = Field(default_factory=list)
    rows: List[List[str]] = Field(default_factory=list)
    line_numbers: List[int] = Field(default_factory=list, alias="lineNumbers")
    skipped_lines: List[int] = Field(default_factory=list, alias="skippedLines")
    mapping: Optional[ColumnMapping] = None
    suggested_mapping: Optional[ColumnMapping] = Field(default=None, alias="suggestedMapping")
    candidates: List[CandidateTransaction] = Field(default_factory=list)
    issues: List[ValidationIssue] = Field(default_factory=list)
    selection: Set[int] = Field(default_factory=set)
    error_message: Optional[str] = Field(default=None, alias="errorMessage")
    inserted_count: Optional[int] = Field(default=None, alias="insertedCount")

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True
    )

    def clear_results(self) -> None:
        """Drop everything derived from the staged file."""
        self.headers = []
        self.rows = []
        self.line_numbers = []
        self.skipped_lines = []
        self.mapping = None
        self.suggested_mapping = None
        self.candidates = []
        self.issues = []
        self.selection = set()
        self.error_message = None
        self.inserted_count = None

    def to_response(self) -> Dict[str, Any]:
        """JSON-ready view for API responses; raw rows and file bytes are left out."""
        return {
            'sessionId': str(self.session_id),
            'status': self.status.value,
            'progress': self.progress,
            'mode': self.mode.value,
            'templateId': self.template_id,
            'fileName': self.file.file_name if self.file else None,
            'headers': list(self.headers),
            'rowCount': len(self.rows),
            'skippedLines': list(self.skipped_lines),
            'mapping': self.mapping.to_dict() if self.mapping else None,
            'suggestedMapping': self.suggested_mapping.to_dict() if self.suggested_mapping else None,
            'candidates': [candidate.to_dict() for candidate in self.candidates],
            'issues': [issue.model_dump(by_alias=True) for issue in self.issues],
            'selection': sorted(self.selection),
            'errorMessage': self.error_message,
            'insertedCount': self.inserted_count,
        }
