"""Per-section ingestion context passed explicitly through the services."""

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from spl_ingest.core.config import IngestionSettings, settings
from spl_ingest.database.models import Document, Section, StructuredBody

if TYPE_CHECKING:
    from spl_ingest.repositories.natural_key_store import NaturalKeyStore


@dataclass(frozen=True)
class IngestionContext:
    """Immutable view of where ingestion currently is.

    A child section gets a derived copy through for_section(), so a parent's
    context never changes underneath its siblings.

    Attributes:
        store: Natural-key store all writes go through
        document: Document being ingested
        structured_body: Structured body of the document
        section: Section currently being processed
        file_name: Source file name, used for log correlation
        depth: Nesting depth of the current section (0 for top level)
        report_progress: Optional observer for progress messages
        options: Ingestion behaviour switches
    """

    store: "NaturalKeyStore"
    document: Optional[Document] = None
    structured_body: Optional[StructuredBody] = None
    section: Optional[Section] = None
    file_name: Optional[str] = None
    depth: int = 0
    report_progress: Optional[Callable[[str], None]] = None
    options: IngestionSettings = field(default_factory=lambda: settings.ingestion)

    def for_document(self, document: Document, structured_body: StructuredBody) -> "IngestionContext":
        """Context for the sections of a document."""
        return replace(self, document=document, structured_body=structured_body)

    def for_section(self, section: Section) -> "IngestionContext":
        """Context for processing the given section."""
        return replace(self, section=section)

    def for_child_section(self) -> "IngestionContext":
        """Context handed to a nested section (one level deeper)."""
        return replace(self, depth=self.depth + 1)

    @property
    def document_code(self) -> Optional[str]:
        return self.document.document_code if self.document is not None else None

    @property
    def section_code(self) -> Optional[str]:
        return self.section.section_code if self.section is not None else None

    def log_extra(self, **fields: Any) -> Dict[str, Any]:
        """Correlation fields for log records."""
        extra: Dict[str, Any] = {
            "file_name": self.file_name,
            "document_id": str(self.document.id) if self.document is not None else None,
            "section_id": str(self.section.id) if self.section is not None else None,
        }
        extra.update(fields)
        return extra

    def progress(self, message: str) -> None:
        if self.report_progress is not None:
            self.report_progress(message)
