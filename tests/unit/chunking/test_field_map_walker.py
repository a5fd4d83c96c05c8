"""Tests for the field-map walker: shape/depth validation, nested writes, shared quota."""

import copy

import pytest

from chunking_service.config.chunking.models import RuntimeParameters
from chunking_service.services.chunking.errors import DepthLimitError, QuotaExceededError, ShapeError
from chunking_service.services.chunking.quota import ChunkQuota
from chunking_service.services.chunking.strategies.delimiter import DelimiterStrategy
from chunking_service.services.chunking.walker import FieldMapWalker


def nested_maps(levels: int) -> dict:
    inner: dict = {}
    for _ in range(levels - 1):
        inner = {"body": inner}
    return inner


@pytest.fixture
def walker(fixed_output_strategy):
    return FieldMapWalker(fixed_output_strategy, max_depth=20)


class TestProcessing:
    def test_string_field_written_as_sibling(self, walker):
        doc = {"body": "a"}
        walker.process(doc, {"body": "body_chunks"}, ChunkQuota())
        assert doc == {"body": "a", "body_chunks": ["a#0", "a#1"]}

    def test_list_of_strings_flattened_in_order(self, walker):
        doc = {"body": ["a", "b"]}
        walker.process(doc, {"body": "out"}, ChunkQuota())
        assert doc["out"] == ["a#0", "a#1", "b#0", "b#1"]
        assert doc["body"] == ["a", "b"]

    def test_empty_list_gives_empty_chunks(self, walker):
        doc = {"body": []}
        walker.process(doc, {"body": "out"}, ChunkQuota())
        assert doc["out"] == []

    def test_nested_map(self, walker):
        doc = {"section": {"text": "a", "title": "t"}}
        walker.process(doc, {"section": {"text": "text_chunks"}}, ChunkQuota())
        assert doc == {"section": {"text": "a", "title": "t", "text_chunks": ["a#0", "a#1"]}}

    def test_list_of_maps(self, walker):
        doc = {"sections": [{"text": "a"}, {"text": "b"}, {"other": "c"}]}
        walker.process(doc, {"sections": {"text": "text_chunks"}}, ChunkQuota())
        assert doc["sections"] == [
            {"text": "a", "text_chunks": ["a#0", "a#1"]},
            {"text": "b", "text_chunks": ["b#0", "b#1"]},
            {"other": "c"},
        ]

    def test_nested_target_over_string_source_skipped(self, walker, fixed_output_strategy):
        doc = {"section": "plain"}
        walker.process(doc, {"section": {"text": "out"}}, ChunkQuota())
        assert doc == {"section": "plain"}
        assert fixed_output_strategy.calls == []

    def test_list_with_strings_under_nested_target_skips_strings(self, walker):
        doc = {"sections": ["loose", {"text": "a"}]}
        walker.process(doc, {"sections": {"text": "out"}}, ChunkQuota())
        assert doc["sections"] == ["loose", {"text": "a", "out": ["a#0", "a#1"]}]

    def test_absent_or_null_source_writes_nothing(self, walker):
        doc = {"other": "x", "empty": None}
        walker.process(doc, {"body": "out", "empty": "empty_out"}, ChunkQuota())
        assert doc == {"other": "x", "empty": None}

    def test_deeply_nested_field_map(self, walker):
        doc = {"a": {"b": [{"c": {"text": "x"}}]}}
        walker.process(doc, {"a": {"b": {"c": {"text": "chunks"}}}}, ChunkQuota())
        assert doc["a"]["b"][0]["c"]["chunks"] == ["x#0", "x#1"]

    def test_runtime_parameters_passed_to_strategy(self, walker, fixed_output_strategy):
        runtime = RuntimeParameters(max_token_count=42)
        walker.process({"body": "a"}, {"body": "out"}, ChunkQuota(), runtime)
        assert fixed_output_strategy.calls == [("a", runtime)]

    def test_map_source_for_output_name_rejected(self, walker):
        doc = {"body": {"text": "a"}}
        with pytest.raises(ShapeError, match=r"field \[body\] is neither string nor list of strings"):
            walker.process(doc, {"body": "out"}, ChunkQuota())
        assert "out" not in doc

    def test_real_strategy(self):
        walker = FieldMapWalker(DelimiterStrategy({"delimiter": "\n"}), max_depth=20)
        doc = {"body": "a\nb", "notes": [{"text": "c\n"}]}
        walker.process(doc, {"body": "body_chunks", "notes": {"text": "text_chunks"}}, ChunkQuota())
        assert doc["body_chunks"] == ["a\n", "b"]
        assert doc["notes"][0]["text_chunks"] == ["c\n"]


class TestValidation:
    def test_top_level_non_string(self, walker):
        with pytest.raises(ShapeError, match=r"field \[body\] is neither string nor nested type") as exc_info:
            walker.process({"body": 1}, {"body": "out"}, ChunkQuota())
        assert exc_info.value.field == "body"

    def test_list_with_null(self, walker):
        with pytest.raises(ShapeError, match=r"list type field \[body\] has null, cannot process it"):
            walker.process({"body": ["a", None]}, {"body": "out"}, ChunkQuota())

    def test_list_with_non_string(self, walker):
        with pytest.raises(ShapeError, match=r"list type field \[body\] has non string value, cannot process it"):
            walker.process({"body": ["a", 1]}, {"body": "out"}, ChunkQuota())

    def test_nested_map_with_non_string(self, walker):
        doc = {"section": {"text": {"inner": 1}}}
        with pytest.raises(ShapeError, match=r"map type field \[section\] has non-string type, cannot process it"):
            walker.process(doc, {"section": {"text": "out"}}, ChunkQuota())

    def test_nested_nulls_allowed(self, walker):
        doc = {"section": {"text": "a", "missing": None}}
        walker.process(doc, {"section": {"text": "out"}}, ChunkQuota())
        assert doc["section"]["out"] == ["a#0", "a#1"]

    def test_depth_limit_exceeded(self, walker, fixed_output_strategy):
        doc = {"section": nested_maps(22), "body": "a"}
        original = copy.deepcopy(doc)
        with pytest.raises(DepthLimitError, match=r"map type field \[section\] reached max depth limit"):
            walker.process(doc, {"body": "out", "section": {"body": "out"}}, ChunkQuota())
        assert doc == original
        assert fixed_output_strategy.calls == []

    def test_depth_counts_from_first_descent(self, fixed_output_strategy):
        doc = {"a": {"b": {"c": "text"}}}
        FieldMapWalker(fixed_output_strategy, max_depth=3).process(
            copy.deepcopy(doc), {"a": {"b": {"c": "out"}}}, ChunkQuota()
        )
        with pytest.raises(DepthLimitError):
            FieldMapWalker(fixed_output_strategy, max_depth=2).process(doc, {"a": {"b": {"c": "out"}}}, ChunkQuota())

    def test_unmapped_fields_not_validated(self, walker):
        doc = {"body": "a", "count": 3}
        walker.process(doc, {"body": "out"}, ChunkQuota())
        assert doc["count"] == 3


class TestQuota:
    def test_quota_shared_across_fields_and_branches(self, walker):
        quota = ChunkQuota()
        doc = {"body": "a", "sections": [{"text": "b"}, {"text": "c"}]}
        walker.process(doc, {"body": "out", "sections": {"text": "out"}}, quota)
        assert quota.count == 6

    def test_overflow_aborts_and_stops_chunking(self, walker, fixed_output_strategy):
        doc = {"a": "x", "b": "y", "c": "z"}
        with pytest.raises(QuotaExceededError) as exc_info:
            walker.process(doc, {"a": "a_out", "b": "b_out", "c": "c_out"}, ChunkQuota(3))
        assert exc_info.value.chunk_count == 4
        assert exc_info.value.max_chunk_limit == 3
        assert [text for text, _ in fixed_output_strategy.calls] == ["x", "y"]

    def test_overflow_leaves_document_unchanged(self, walker):
        doc = {"a": "x", "b": ["y", "z"]}
        with pytest.raises(QuotaExceededError):
            walker.process(doc, {"a": "a_out", "b": "b_out"}, ChunkQuota(3))
        assert doc == {"a": "x", "b": ["y", "z"]}

    def test_exact_limit_allowed(self, walker):
        doc = {"a": "x", "b": "y"}
        walker.process(doc, {"a": "a_out", "b": "b_out"}, ChunkQuota(4))
        assert doc["b_out"] == ["y#0", "y#1"]
