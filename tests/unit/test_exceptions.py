from spl_ingest.core.exceptions import AppError, ContextError, IngestionError, MarkupError


def test_markup_error_keeps_original_error():
    cause = ValueError("bad guid")
    error = MarkupError("Invalid GUID 'x'", original_error=cause)

    assert isinstance(error, IngestionError)
    assert isinstance(error, AppError)
    assert error.original_error is cause
    assert str(error) == "Invalid GUID 'x'"


def test_original_error_defaults_to_none():
    error = ContextError("Content tree requires a current section")

    assert error.original_error is None
