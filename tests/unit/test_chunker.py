"""Unit tests for the TextChunker: sentence-greedy bounded chunking."""

from __future__ import annotations

import pytest

from bizknowledge.services.ingestion.chunker import SENTENCE_DELIMITER, TextChunker, chunk_text


def _make_chunker(max_length: int = 1000) -> TextChunker:
    return TextChunker(max_length=max_length)


class TestEmptyAndRunOnInput:
    def test_empty_string_returns_no_chunks(self) -> None:
        assert _make_chunker().chunk("") == []

    def test_whitespace_only_returns_no_chunks(self) -> None:
        assert _make_chunker().chunk("   \n\t  ") == []

    def test_text_without_terminator_is_one_chunk(self) -> None:
        assert _make_chunker().chunk("  Hello world  ") == ["Hello world"]

    def test_run_on_text_is_truncated_to_max_length(self) -> None:
        chunks = _make_chunker(1000).chunk("a" * 1500)
        assert chunks == ["a" * 1000]


class TestSentencePacking:
    def test_short_document_is_single_chunk(self, sample_budget_text: str) -> None:
        chunks = _make_chunker().chunk(sample_budget_text)

        assert len(chunks) == 1
        assert chunks[0].startswith("The Q3 budget allocates")
        assert "development. Marketing receives" in chunks[0]
        # Terminators are normalised to the delimiter and the last one dropped.
        assert "10 percent. Is the remaining spend committed. Yes" in chunks[0]
        assert chunks[0].endswith("office costs")

    def test_sentences_are_packed_greedily(self) -> None:
        chunks = _make_chunker(20).chunk("Alpha one. Beta two. Gamma three.")
        assert chunks == ["Alpha one. Beta two", "Gamma three"]

    def test_oversized_sentence_is_emitted_whole(self) -> None:
        long_sentence = "x" * 50
        chunks = _make_chunker(20).chunk(f"Short. {long_sentence}. End.")
        assert chunks == ["Short", long_sentence, "End"]

    def test_terminator_runs_count_as_one_boundary(self) -> None:
        chunks = _make_chunker().chunk("Wait... what?! Really.")
        assert chunks == ["Wait. what. Really"]

    def test_chunks_respect_max_length(self) -> None:
        text = " ".join(f"Sentence number {i} talks about budgets." for i in range(100))
        chunks = _make_chunker(200).chunk(text)

        assert len(chunks) > 1
        assert all(0 < len(c) <= 200 for c in chunks)

    def test_chunks_preserve_sentence_order(self) -> None:
        text = " ".join(f"Item {i} is listed." for i in range(30))
        chunks = _make_chunker(60).chunk(text)
        rejoined = SENTENCE_DELIMITER.join(chunks)
        positions = [rejoined.index(f"Item {i} is listed") for i in range(30)]
        assert positions == sorted(positions)

    @pytest.mark.parametrize("max_length", [15, 40, 60, 1000])
    def test_every_sentence_appears_exactly_once(self, max_length: int) -> None:
        sentences = [f"Line {i} covers {'spend ' * (i % 4)}item" for i in range(25)]
        text = "  ".join(f"{s}." for s in sentences)

        chunks = _make_chunker(max_length).chunk(text)

        rejoined = SENTENCE_DELIMITER.join(chunks)
        assert rejoined.split(SENTENCE_DELIMITER) == [s.strip() for s in sentences]


class TestConfiguration:
    @pytest.mark.parametrize("bad", [0, -5])
    def test_non_positive_max_length_rejected(self, bad: int) -> None:
        with pytest.raises(ValueError, match="max_length"):
            TextChunker(max_length=bad)

    def test_max_length_property(self) -> None:
        assert _make_chunker(321).max_length == 321

    def test_chunk_text_wrapper_matches_chunker(self, sample_policy_text: str) -> None:
        assert chunk_text(sample_policy_text, 60) == TextChunker(60).chunk(sample_policy_text)
