"""Deterministic transcript segmentation.

Conversation transcripts carry no reliable structure, so paragraphs are
grouped into ~1500-character blocks and tagged ``progress``.  Very short
paragraphs (speaker labels, "Thanks!", timestamps) are dropped first.
This is also the fallback for the LLM-assisted segmenter.
"""

from __future__ import annotations

from src.models.documents import SectionType
from src.services.ingestion.segmenters.base import (
    DeterministicSegmenter,
    Segment,
    accumulate_paragraphs,
    split_paragraphs,
)

MIN_PARAGRAPH_LENGTH = 20


class ParagraphTranscriptSegmenter(DeterministicSegmenter):
    def __init__(self, budget: int = 1500) -> None:
        self._budget = budget

    def split(self, text: str) -> list[Segment]:
        paragraphs = split_paragraphs(text, min_length=MIN_PARAGRAPH_LENGTH)
        blocks = accumulate_paragraphs(paragraphs, self._budget)
        if not blocks and text.strip():
            # Nothing but short lines; keep the transcript rather than lose it.
            blocks = [text.strip()]
        return [
            Segment(block, SectionType.PROGRESS, f"Transcript segment {i}")
            for i, block in enumerate(blocks, start=1)
        ]
