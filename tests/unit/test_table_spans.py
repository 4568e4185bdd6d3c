import pytest

from spl_ingest.services.content.table_builder import parse_span


@pytest.mark.parametrize(
    "value, expected",
    [("2", 2), ("1", 1), ("0", None), ("-3", None), ("two", None), ("", None), (None, None)],
)
def test_parse_span(value, expected):
    assert parse_span(value) == expected
