"""Shared plumbing for the index resolvers."""

from typing import Any, Awaitable, Callable, Optional

from spl_ingest.schemas.context import IngestionContext
from spl_ingest.schemas.parse_result import ParseResult
from spl_ingest.services.indexing.pending_references import PendingReferenceService
from spl_ingest.utils.logging import get_logger

LOGGER = get_logger(__name__)


class BaseResolver:
    """Base class for resolvers that walk many independent references.

    A failure while handling one reference is logged and recorded on the
    result; its siblings are still processed.
    """

    def __init__(self, pending: Optional[PendingReferenceService] = None):
        """Initialize the resolver.

        Args:
            pending: Ledger service for references whose target is missing
        """
        self.pending = pending or PendingReferenceService()
        self.logger = LOGGER

    async def _guard(
        self,
        result: ParseResult,
        ctx: IngestionContext,
        label: str,
        operation: Callable[[], Awaitable[ParseResult]],
    ) -> None:
        try:
            result.merge_from(await operation())
        except Exception as e:
            self.logger.error(
                f"Error indexing {label}: {str(e)}",
                exc_info=True,
                extra=ctx.log_extra(resolver=self.__class__.__name__),
            )
            result.add_error(f"Error indexing {label}: {str(e)}")

    def _warn(self, result: ParseResult, ctx: IngestionContext, message: str, **fields: Any) -> None:
        self.logger.warning(message, extra=ctx.log_extra(**fields))
        result.add_warning(message)
