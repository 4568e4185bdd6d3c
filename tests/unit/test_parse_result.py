from spl_ingest.schemas.parse_result import ParseResult


class TestParseResult:
    """Aggregation of step outcomes."""

    def test_add_error_marks_failure(self):
        result = ParseResult()
        result.add_warning("minor")
        assert result.success is True

        result.add_error("broken")
        assert result.success is False
        assert result.errors == ["broken"]

    def test_merge_from_folds_counts_and_messages(self):
        parent = ParseResult()
        parent.record_created("Section")
        parent.sections_processed = 1

        child = ParseResult()
        child.record_created("Section")
        child.record_created("ContentBlock", 3)
        child.add_warning("dangling media")
        child.sections_processed = 2

        assert parent.merge_from(child) is parent
        assert parent.created == {"Section": 2, "ContentBlock": 3}
        assert parent.total_created == 5
        assert parent.sections_processed == 3
        assert parent.warnings == ["dangling media"]
        assert parent.success is True

    def test_merge_from_failed_child_fails_parent(self):
        parent = ParseResult()
        parent.merge_from(ParseResult.failure("no section"))
        assert parent.success is False
        assert parent.errors == ["no section"]
