"""Shared building blocks for segmentation strategies.

A strategy turns one document's text into an ordered list of
:class:`Segment` objects (text, section tag, heading).  Numbering, chunk
ids and metadata are attached afterwards by
:class:`~src.services.ingestion.segmenters.dispatch.DocumentSegmenter`, so
every strategy can stay a pure text transformation.
"""

from __future__ import annotations

import itertools
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

from src.models.documents import ExtractedDocument, SectionType

_PARAGRAPH_BREAK = re.compile(r"\n\n+")
_PARAGRAPH_JOINER = "\n\n"

# Process-wide, so ids stay unique across documents within one process.
_chunk_counter = itertools.count(1)


def new_chunk_uid() -> str:
    """Return ``chunk_{epoch_ms}_{counter}``."""
    return f"chunk_{int(time.time() * 1000)}_{next(_chunk_counter)}"


@dataclass(frozen=True)
class Segment:
    """One piece of a document before it becomes a chunk."""

    text: str
    section_type: SectionType
    heading: str


def split_paragraphs(text: str, min_length: int = 0) -> list[str]:
    """Split on blank lines, keeping paragraphs longer than *min_length*."""
    paragraphs = (part.strip() for part in _PARAGRAPH_BREAK.split(text))
    return [p for p in paragraphs if p and len(p) > min_length]


def accumulate_paragraphs(paragraphs: list[str], budget: int) -> list[str]:
    """Group whole paragraphs into blocks of at most *budget* characters.

    A block is closed when adding the next paragraph (plus its separator)
    would exceed the budget.  A paragraph longer than the budget on its own
    becomes its own block, unsplit.
    """
    blocks: list[str] = []
    current: list[str] = []
    current_length = 0

    for paragraph in paragraphs:
        added = len(paragraph) + (len(_PARAGRAPH_JOINER) if current else 0)
        if current and current_length + added > budget:
            blocks.append(_PARAGRAPH_JOINER.join(current))
            current, current_length = [], 0
            added = len(paragraph)
        current.append(paragraph)
        current_length += added

    if current:
        blocks.append(_PARAGRAPH_JOINER.join(current))
    return blocks


class Segmenter(ABC):
    """Strategy interface: split an extracted document into segments."""

    @abstractmethod
    async def segment(self, doc: ExtractedDocument) -> list[Segment]:
        """Return the document's segments in reading order."""


class DeterministicSegmenter(Segmenter):
    """A strategy that depends only on the text."""

    async def segment(self, doc: ExtractedDocument) -> list[Segment]:
        return self.split(doc.text)

    @abstractmethod
    def split(self, text: str) -> list[Segment]:
        """Synchronous form of :meth:`segment`."""


class SizeSegmenter(DeterministicSegmenter):
    """Paragraph grouping under a character budget, tagged ``full_document``.

    The fallback for every other strategy.  Text with no paragraph content
    becomes a single "Full Document" segment, so non-blank input always
    produces at least one segment.
    """

    def __init__(self, budget: int = 1500) -> None:
        self._budget = budget

    @property
    def budget(self) -> int:
        return self._budget

    def split(self, text: str) -> list[Segment]:
        blocks = accumulate_paragraphs(split_paragraphs(text), self._budget)
        segments = [
            Segment(block, SectionType.FULL_DOCUMENT, f"Section {i}")
            for i, block in enumerate(blocks, start=1)
        ]
        if not segments and text.strip():
            segments.append(Segment(text, SectionType.FULL_DOCUMENT, "Full Document"))
        return segments
