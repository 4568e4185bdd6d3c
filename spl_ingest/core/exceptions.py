"""Custom exception hierarchy."""

from typing import Optional


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class IngestionError(AppError):
    """Base exception for ingestion errors."""
    pass


class ContextError(IngestionError):
    """Required ingestion context (document, structured body, section) is missing."""
    pass


class MarkupError(IngestionError):
    """Markup could not be parsed or lacks a required identifier."""
    pass
