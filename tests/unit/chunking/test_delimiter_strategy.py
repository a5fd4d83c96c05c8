"""Tests for the delimiter chunking strategy."""

import pytest

from chunking_service.services.chunking.errors import ConfigurationError
from chunking_service.services.chunking.strategies.delimiter import DelimiterStrategy


class TestValidateParameters:
    def test_missing_delimiter(self):
        with pytest.raises(ConfigurationError, match=r"You must contain field: \[delimiter\]") as exc_info:
            DelimiterStrategy({"": ""})
        assert exc_info.value.field == "delimiter"

    def test_delimiter_not_string(self):
        with pytest.raises(ConfigurationError, match=r"Parameter \[delimiter\] must be a string"):
            DelimiterStrategy({"delimiter": [""]})

    def test_delimiter_empty(self):
        with pytest.raises(ConfigurationError, match=r"Parameter \[delimiter\] should not be empty"):
            DelimiterStrategy({"delimiter": ""})

    def test_unknown_parameter_rejected(self):
        with pytest.raises(ConfigurationError, match="does not support parameters"):
            DelimiterStrategy({"delimiter": "\n", "token_limit": 10})

    def test_no_runtime_parameters_needed(self):
        assert DelimiterStrategy({"delimiter": "\n"}).requires_max_token_count is False


class TestChunk:
    def test_chunk(self):
        assert DelimiterStrategy({"delimiter": "\n"}).chunk("a\nb\nc\nd") == ["a\n", "b\n", "c\n", "d"]

    def test_delimiter_at_end(self):
        assert DelimiterStrategy({"delimiter": "\n"}).chunk("a\nb\nc\nd\n") == ["a\n", "b\n", "c\n", "d\n"]

    def test_only_delimiter(self):
        assert DelimiterStrategy({"delimiter": "\n"}).chunk("\n") == ["\n"]

    def test_all_delimiters(self):
        assert DelimiterStrategy({"delimiter": "\n"}).chunk("\n\n\n") == ["\n", "\n", "\n"]

    def test_different_delimiter(self):
        assert DelimiterStrategy({"delimiter": "."}).chunk("a.b.cc.d.") == ["a.", "b.", "cc.", "d."]

    def test_multi_character_delimiter(self):
        assert DelimiterStrategy({"delimiter": "\n\n"}).chunk("\n\na\n\n\n") == ["\n\n", "a\n\n", "\n"]

    def test_delimiter_is_literal_not_pattern(self):
        assert DelimiterStrategy({"delimiter": ".*"}).chunk("a.*b.c") == ["a.*", "b.c"]

    def test_no_delimiter_in_text(self):
        assert DelimiterStrategy({"delimiter": "|"}).chunk("plain text") == ["plain text"]

    def test_empty_text(self):
        assert DelimiterStrategy({"delimiter": "\n"}).chunk("") == []

    def test_chunks_rejoin_to_text(self, sample_text):
        chunks = DelimiterStrategy({"delimiter": "."}).chunk(sample_text)
        assert chunks == [
            "This is an example document to be chunked.",
            " The document contains a single paragraph, two sentences and 24 tokens by standard tokenizer in OpenSearch.",
        ]
        assert "".join(chunks) == sample_text
