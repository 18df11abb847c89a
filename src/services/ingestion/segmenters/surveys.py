"""Survey documents: split into question/answer blocks.

Both survey types share the question splitter.  Impact surveys tag each
block by keywords in its question; midpoint surveys are short (four
questions in the standard form) and are tagged by position instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from src.models.documents import SectionType
from src.services.ingestion.segmenters.base import DeterministicSegmenter, Segment, SizeSegmenter

# Block starts: "Q:", "Q3.", "Question 2", "4." / "4)", markdown headings.
_QUESTION_START = re.compile(
    r"(?=^Q\d*[:.]|^Question\s+\d|^\d+[.)]\s|^#+\s)",
    re.IGNORECASE | re.MULTILINE,
)

MAX_HEADING_LENGTH = 200
_UNBROKEN_QUESTION_LENGTH = 100


@dataclass(frozen=True)
class QABlock:
    question: str
    text: str


def split_by_questions(text: str) -> list[QABlock]:
    """Split *text* before every question marker.

    The question is the block's first line; a block with no line break
    (or one that starts with a line break) uses its first 100 characters.
    """
    blocks: list[QABlock] = []
    for part in _QUESTION_START.split(text):
        if not part.strip():
            continue
        newline = part.find("\n")
        if newline > 0:
            question = part[:newline].strip()
        else:
            question = part[:_UNBROKEN_QUESTION_LENGTH].strip()
        blocks.append(QABlock(question=question, text=part.strip()))
    return blocks


# ---------------------------------------------------------------------------
# Impact surveys
# ---------------------------------------------------------------------------

_IMPACT_PATTERNS: list[tuple[re.Pattern[str], SectionType]] = [
    (re.compile(pattern, re.IGNORECASE), section)
    for pattern, section in [
        (r"breadth|scale|reach|how\s+many|users|participants", SectionType.BREADTH_SCALE),
        (r"depth|outcome|impact|change|benefit|income", SectionType.DEPTH_OUTCOMES),
        (r"learn(ing)?|lesson|insight|takeaway", SectionType.LEARNINGS),
        (r"challeng|obstacle|barrier|difficult", SectionType.CHALLENGES),
        (r"future|plan|next|forward", SectionType.FUTURE_PLANS),
        (r"feedback|experience|cohort|relationship", SectionType.FEEDBACK),
        (r"financ|fund|invest|co-invest|budget|revenue", SectionType.FINANCIAL),
    ]
]

MIN_ANSWER_LENGTH = 20


def classify_question(question: str) -> SectionType:
    for pattern, section in _IMPACT_PATTERNS:
        if pattern.search(question):
            return section
    return SectionType.DEPTH_OUTCOMES


class ImpactSurveySegmenter(DeterministicSegmenter):
    """One segment per Q&A block, tagged by the question's keywords."""

    def __init__(self, fallback: SizeSegmenter | None = None) -> None:
        self._fallback = fallback or SizeSegmenter(1500)

    def split(self, text: str) -> list[Segment]:
        blocks = split_by_questions(text)
        if len(blocks) <= 1:
            return self._fallback.split(text)

        segments = [
            Segment(block.text, classify_question(block.question), block.question[:MAX_HEADING_LENGTH])
            for block in blocks
            if len(block.text) >= MIN_ANSWER_LENGTH
        ]
        return segments or self._fallback.split(text)


# ---------------------------------------------------------------------------
# Midpoint surveys
# ---------------------------------------------------------------------------

MIDPOINT_POSITIONS: tuple[SectionType, ...] = (
    SectionType.STAGE,
    SectionType.PROGRESS,
    SectionType.EARLY_SIGNALS,
    SectionType.CHALLENGES,
)
MAX_MIDPOINT_QUESTIONS = 6


class MidpointSurveySegmenter(DeterministicSegmenter):
    """Positional tags for 2-6 blocks; otherwise the whole survey as one segment."""

    def split(self, text: str) -> list[Segment]:
        blocks = split_by_questions(text)
        if not 1 < len(blocks) <= MAX_MIDPOINT_QUESTIONS:
            return [Segment(text, SectionType.FULL_DOCUMENT, "Midpoint Survey")]

        return [
            Segment(
                block.text,
                MIDPOINT_POSITIONS[i] if i < len(MIDPOINT_POSITIONS) else SectionType.FULL_DOCUMENT,
                block.question[:MAX_HEADING_LENGTH],
            )
            for i, block in enumerate(blocks)
        ]
