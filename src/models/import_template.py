"""
Bank statement templates for the CSV import pipeline.

A template names the header labels a bank uses for the date, description and
amount columns (and optionally category and type), plus the date layout its
exports use. The catalog is built once and passed to whatever needs it; adding
a bank means adding a template, never touching the matching code.
"""
import enum
import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from pydantic import BaseModel, Field, ConfigDict

from utils.import_errors import TemplateNotFound

logger = logging.getLogger(__name__)


class DateLayout(str, enum.Enum):
    """Order of the year, month and day components in a statement date"""
    YMD = "YYYY-MM-DD"
    MDY = "MM/DD/YYYY"
    DMY = "DD/MM/YYYY"


class ExpectedHeaders(BaseModel):
    """Header labels a template expects for each logical transaction field"""
    date: str = Field(min_length=1)
    description: str = Field(min_length=1)
    amount: str = Field(min_length=1)
    category: Optional[str] = None
    type: Optional[str] = None

    model_config = ConfigDict(frozen=True, extra='forbid')


class SourceTemplate(BaseModel):
    """Represents a known bank export format."""
    id: str = Field(min_length=1)
    display_name: str = Field(alias="name", min_length=1)
    expected_headers: ExpectedHeaders = Field(alias="headers")
    date_layout: DateLayout = Field(alias="dateFormat")

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra='forbid'
    )

    def to_dict(self) -> Dict[str, object]:
        """Serialize for the template picker."""
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)


DEFAULT_TEMPLATES: Tuple[SourceTemplate, ...] = (
    SourceTemplate(
        id="generic",
        name="Generic Format",
        headers=ExpectedHeaders(
            date="date",
            description="description",
            amount="amount",
            category="category",
            type="type",
        ),
        dateFormat=DateLayout.YMD,
    ),
    SourceTemplate(
        id="chase",
        name="Chase Bank",
        headers=ExpectedHeaders(
            date="transaction_date",
            description="description",
            amount="amount",
            type="transaction_type",
        ),
        dateFormat=DateLayout.MDY,
    ),
    SourceTemplate(
        id="bankofamerica",
        name="Bank of America",
        headers=ExpectedHeaders(date="date", description="description", amount="amount"),
        dateFormat=DateLayout.MDY,
    ),
    SourceTemplate(
        id="wells_fargo",
        name="Wells Fargo",
        headers=ExpectedHeaders(date="date", description="description", amount="amount"),
        dateFormat=DateLayout.MDY,
    ),
    SourceTemplate(
        id="hsbc",
        name="HSBC",
        headers=ExpectedHeaders(date="date", description="description", amount="amount"),
        dateFormat=DateLayout.DMY,
    ),
)

DEFAULT_TEMPLATE_ID = "generic"


class TemplateCatalog:
    """
    Immutable, ordered collection of source templates.

    Usage:
        catalog = TemplateCatalog(DEFAULT_TEMPLATES)
        template = catalog.get("hsbc")
    """

    def __init__(self, templates: Iterable[SourceTemplate]):
        self._templates: Tuple[SourceTemplate, ...] = tuple(templates)
        self._by_id: Dict[str, SourceTemplate] = {}
        for template in self._templates:
            if template.id in self._by_id:
                raise ValueError(f"Duplicate template id: {template.id}")
            self._by_id[template.id] = template

    def __iter__(self) -> Iterator[SourceTemplate]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._by_id

    def ids(self) -> List[str]:
        return [template.id for template in self._templates]

    def get(self, template_id: str) -> SourceTemplate:
        """
        Look up a template by id.

        Raises:
            TemplateNotFound: If no template has that id
        """
        template = self._by_id.get(template_id)
        if template is None:
            logger.warning(f"Unknown import template requested: {template_id}")
            raise TemplateNotFound("Selected template not found")
        return template

    def with_templates(self, *templates: SourceTemplate) -> "TemplateCatalog":
        """Return a new catalog extended with extra templates."""
        return TemplateCatalog(self._templates + templates)


default_catalog = TemplateCatalog(DEFAULT_TEMPLATES)
