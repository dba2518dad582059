"""Character-bounded text chunking at natural boundaries.

Splits flattened document text into :class:`~cms_context.models.rag.Chunk`
objects no longer than ``max_size`` characters, preferring the largest
natural unit that fits:

1. **Paragraphs** (blank-line boundaries) are packed greedily, joined by
   ``"\\n\\n"``.
2. A paragraph longer than ``max_size`` is split into **sentences** (a period
   followed by whitespace) packed the same way, joined by a single space.
3. A sentence longer than ``max_size`` is **hard-split** into slices of
   ``max_size - 3`` characters, each suffixed with ``"..."``; the final
   remainder keeps accumulating with whatever follows.

Text that already fits is returned whole and untouched.  The chunker keeps
no state between calls.
"""

from __future__ import annotations

import re

import structlog

from cms_context.models.rag import Chunk
from cms_context.utils.logging import get_logger

logger: structlog.BoundLogger = get_logger(__name__)

PARAGRAPH_JOINER = "\n\n"
SENTENCE_JOINER = " "
ELLIPSIS = "..."

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_SENTENCE_BREAK = re.compile(r"(?<=\.)\s+")


class TextChunker:
    """Splits text into ordered chunks of at most ``max_size`` characters.

    Parameters
    ----------
    max_size:
        Maximum characters per chunk.  Only hard-split pieces (which end in
        ``"..."``) may reach this limit exactly; with ``max_size <= 3`` they
        necessarily exceed it.
    """

    def __init__(self, max_size: int = 1000) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self._max_size = max_size

    @property
    def max_size(self) -> int:
        return self._max_size

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def split(self, text: str) -> list[str]:
        """Return the chunk texts for *text* in left-to-right order."""
        if not text:
            return []
        if len(text) <= self._max_size:
            return [text]

        chunks: list[str] = []
        current = ""
        for para in self._split_paragraphs(text):
            if len(para) > self._max_size:
                if current:
                    chunks.append(current)
                current = self._accumulate_sentences(para, chunks)
                continue

            if current and len(current) + len(para) + len(PARAGRAPH_JOINER) > self._max_size:
                chunks.append(current)
                current = para
            else:
                current = f"{current}{PARAGRAPH_JOINER}{para}" if current else para

        if current:
            chunks.append(current)
        return chunks

    def chunk(self, text: str) -> list[Chunk]:
        """Split *text* into indexed :class:`Chunk` objects."""
        texts = self.split(text)
        chunks = [
            Chunk(index=i, total_in_group=len(texts), text=t, char_count=len(t))
            for i, t in enumerate(texts)
        ]
        logger.debug(
            "chunking_complete",
            num_chunks=len(chunks),
            input_chars=len(text),
            max_size=self._max_size,
        )
        return chunks

    # ------------------------------------------------------------------
    # Paragraph / sentence splitting
    # ------------------------------------------------------------------

    @staticmethod
    def _split_paragraphs(text: str) -> list[str]:
        """Split *text* on blank lines, discarding empty paragraphs."""
        return [p.strip() for p in _PARAGRAPH_BREAK.split(text) if p.strip()]

    @staticmethod
    def _split_sentences(paragraph: str) -> list[str]:
        """Split at a period followed by whitespace; the period stays with its sentence."""
        return [s.strip() for s in _SENTENCE_BREAK.split(paragraph) if s.strip()]

    # ------------------------------------------------------------------
    # Accumulation
    # ------------------------------------------------------------------

    def _accumulate_sentences(self, paragraph: str, chunks: list[str]) -> str:
        """Pack the sentences of an oversized paragraph into *chunks*.

        Returns the trailing, not yet flushed accumulator.
        """
        current = ""
        for sentence in self._split_sentences(paragraph):
            if len(sentence) > self._max_size:
                if current:
                    chunks.append(current)
                current = self._hard_split(sentence, chunks)
                continue

            if current and len(current) + len(sentence) + len(SENTENCE_JOINER) > self._max_size:
                chunks.append(current)
                current = sentence
            else:
                current = f"{current}{SENTENCE_JOINER}{sentence}" if current else sentence
        return current

    def _hard_split(self, sentence: str, chunks: list[str]) -> str:
        """Cut *sentence* into ellipsis-marked slices; return the remainder that fits."""
        piece = max(1, self._max_size - len(ELLIPSIS))
        remainder = sentence
        while len(remainder) > self._max_size:
            chunks.append(remainder[:piece] + ELLIPSIS)
            remainder = remainder[piece:]
        return remainder
