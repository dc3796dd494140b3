"""
Unit tests for the chunking strategies.

Token-budgeted strategies are tested with a word counter patched in for
the tokenizer, so no encoding has to be downloaded.
"""

import pytest

from chunking import (
    AdaptiveChunker,
    ContextualChunker,
    EntityChunker,
    HybridChunker,
    RegexChunker,
    SemanticChunker,
    SentenceSplitter,
    SlidingWindowChunker,
    TokenWindowChunker,
    extract_paragraphs,
    first_sentence_context,
    split_into_sentences,
)


def word_count(text: str) -> int:
    return len(text.split())


@pytest.fixture
def word_tokens(monkeypatch):
    monkeypatch.setattr("chunking.sentence_splitter.num_tokens", word_count)
    monkeypatch.setattr("chunking.semantic_chunker.num_tokens", word_count)


class TestSlidingWindowChunker:
    def test_windows_overlap(self):
        text = " ".join(f"w{i}" for i in range(10))
        chunks = SlidingWindowChunker(window_size=4, overlap=2).chunk(text)

        assert chunks == [
            "w0 w1 w2 w3",
            "w2 w3 w4 w5",
            "w4 w5 w6 w7",
            "w6 w7 w8 w9",
        ]

    def test_short_text_is_one_chunk(self):
        assert SlidingWindowChunker(100, 20).chunk("just a few words") == [
            "just a few words"
        ]

    def test_empty_text(self):
        assert SlidingWindowChunker(100, 20).chunk("   ") == []

    @pytest.mark.parametrize("window, overlap", [(0, 0), (10, 10), (10, -1)])
    def test_invalid_parameters(self, window, overlap):
        with pytest.raises(ValueError):
            SlidingWindowChunker(window, overlap)

    def test_token_window_is_not_content_preserving(self):
        assert not TokenWindowChunker().content_preserving
        with pytest.raises(ValueError):
            TokenWindowChunker(max_tokens=10, overlap_tokens=10)


class TestRegexChunker:
    def test_sentence_boundaries(self):
        chunks = RegexChunker().chunk("First one. Second one!  Third one?")
        assert chunks == ["First one.", "Second one!", "Third one?"]

    def test_custom_pattern_drops_empty_segments(self):
        assert RegexChunker(r",").chunk("a,,b, ,c") == ["a", "b", "c"]


class TestAdaptiveChunker:
    def test_chunks_respect_max_size(self, document):
        chunker = AdaptiveChunker(min_size=200, max_size=400)
        chunks = chunker.chunk(document)

        assert chunks
        assert all(len(c) <= 400 for c in chunks)
        assert " ".join(chunks).split() == document.split()

    def test_oversized_segment_is_split(self):
        text = " ".join(["word"] * 50)
        chunks = AdaptiveChunker(min_size=20, max_size=40).chunk(text)

        assert len(chunks) > 1
        assert all(len(c) <= 40 for c in chunks)
        assert " ".join(chunks).split() == text.split()

    def test_invalid_band(self):
        with pytest.raises(ValueError):
            AdaptiveChunker(min_size=500, max_size=100)


class TestEntityChunker:
    def test_new_chunk_at_entity_mention(self):
        text = (
            "Berlin is large. It has many parks. "
            "Germany is in Europe. Its economy is strong."
        )
        chunks = EntityChunker(["Berlin", "Germany"]).chunk(text)

        assert chunks == [
            "Berlin is large. It has many parks.",
            "Germany is in Europe. Its economy is strong.",
        ]

    def test_leading_sentences_without_entity_form_first_chunk(self):
        chunks = EntityChunker(["Berlin"]).chunk("Intro here. Berlin follows.")
        assert chunks == ["Intro here.", "Berlin follows."]

    def test_requires_entities(self):
        with pytest.raises(ValueError):
            EntityChunker([])


class TestCompositeChunkers:
    def test_contextual_prefixes_first_sentence(self):
        text = "Berlin is the capital. Its population is large."
        chunker = ContextualChunker(RegexChunker())

        chunks = chunker.chunk(text)

        assert not chunker.content_preserving
        assert chunks == [
            "Context: Berlin is the capital.\n\nBerlin is the capital.",
            "Context: Berlin is the capital.\n\nIts population is large.",
        ]

    def test_contextual_custom_generator(self):
        chunker = ContextualChunker(RegexChunker(), context_generator=lambda doc: "CTX")
        assert chunker.chunk("A. B.") == ["Context: CTX\n\nA.", "Context: CTX\n\nB."]

    def test_contextual_empty_document(self):
        assert ContextualChunker(RegexChunker()).chunk("") == []

    def test_first_sentence_context_is_truncated(self):
        context = first_sentence_context("x" * 300 + ".", max_chars=50)
        assert len(context) == 50
        assert context.endswith("...")

    def test_hybrid_refines_primary_chunks(self):
        text = "Berlin is big. It is old. Berlin is green. It is calm."
        chunker = HybridChunker(SlidingWindowChunker(100, 20), EntityChunker(["Berlin"]))

        assert chunker.chunk(text) == [
            "Berlin is big. It is old.",
            "Berlin is green. It is calm.",
        ]
        assert chunker.content_preserving

    def test_hybrid_inherits_synthesizing_component(self):
        chunker = HybridChunker(ContextualChunker(RegexChunker()), RegexChunker())
        assert not chunker.content_preserving


class TestSentenceSplitting:
    def test_abbreviations_and_decimals_are_protected(self):
        text = "Dr. Smith paid 3.85 euros. He left at noon."
        sentences = split_into_sentences(text)

        assert [s.text for s in sentences] == [
            "Dr. Smith paid 3.85 euros.",
            "He left at noon.",
        ]
        assert sentences[1].index == 1
        assert text[sentences[1].start : sentences[1].end] == "He left at noon."

    def test_blank_text(self):
        assert split_into_sentences("   ") == []

    def test_sentence_splitter_groups_under_budget(self, word_tokens):
        text = "One two three. Four five six. Seven eight nine."
        chunks = SentenceSplitter(max_tokens=6, overlap_sentences=0).chunk(text)

        assert chunks == [
            "One two three. Four five six.",
            "Seven eight nine.",
        ]

    def test_sentence_splitter_overlap(self, word_tokens):
        text = "One two three. Four five six. Seven eight nine."
        chunks = SentenceSplitter(max_tokens=6, overlap_sentences=1).chunk(text)

        assert chunks == [
            "One two three. Four five six.",
            "Four five six. Seven eight nine.",
        ]


class TestSemanticChunking:
    def test_extract_paragraphs_tracks_headings(self):
        text = "# Overview\n\nFirst paragraph.\n\n1.2 Details here\n\nHISTORY\n\nOld times."
        paragraphs = extract_paragraphs(text)

        assert [p.text for p in paragraphs] == [
            "First paragraph.",
            "Details here",
            "Old times.",
        ]
        assert paragraphs[0].title == "Overview"
        assert paragraphs[1].section == "1.2"
        assert paragraphs[2].title == "HISTORY"

    def test_paragraphs_grouped_under_budget(self, word_tokens):
        text = "a b c\n\nd e f\n\ng h i"
        chunks = SemanticChunker(max_tokens=6, overlap_tokens=0).chunk(text)

        assert chunks == ["a b c\n\nd e f", "g h i"]

    def test_oversized_paragraph_split_on_sentences(self, word_tokens):
        text = "One two three. Four five six. Seven eight nine."
        chunks = SemanticChunker(max_tokens=4, overlap_tokens=0).chunk(text)

        assert chunks == ["One two three.", "Four five six.", "Seven eight nine."]

    def test_headings_make_chunks_synthesized(self, word_tokens):
        chunker = SemanticChunker(max_tokens=50, overlap_tokens=0, include_headings=True)

        chunks = chunker.chunk("# Intro\n\nBody text.")

        assert not chunker.content_preserving
        assert chunks == ["[Section: Intro]\n\nBody text."]
