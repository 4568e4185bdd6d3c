"""Aggregated outcome of an ingestion step."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class ParseResult:
    """Counts, warnings and errors collected while ingesting.

    Results are merged upward at every recursive boundary, so the result of a
    document describes all of its sections.

    Attributes:
        success: False once any error has been recorded
        errors: Error messages, one per failed item
        warnings: Recoverable problems (lookup misses, dangling references)
        created: Number of new records per entity name
        sections_processed: Sections handled, nested ones included
    """

    success: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    created: Dict[str, int] = field(default_factory=Counter)
    sections_processed: int = 0

    def add_error(self, message: str) -> None:
        self.errors.append(message)
        self.success = False

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def record_created(self, entity: str, count: int = 1) -> None:
        self.created[entity] = self.created.get(entity, 0) + count

    @property
    def total_created(self) -> int:
        return sum(self.created.values())

    def merge_from(self, other: "ParseResult") -> "ParseResult":
        """Fold another result into this one.

        Args:
            other: Result of a nested step

        Returns:
            This result, for chaining
        """
        if not other.success:
            self.success = False
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        for entity, count in other.created.items():
            self.record_created(entity, count)
        self.sections_processed += other.sections_processed
        return self

    @classmethod
    def failure(cls, message: str) -> "ParseResult":
        result = cls()
        result.add_error(message)
        return result
