"""Grant descriptions: split on heading lines and tag each section.

A heading line is short (3 to 99 characters once trimmed) and is either
all capitals, a markdown heading (``#``) or a numbered heading (``2. ``).
The cleaned heading text is matched against ordered keyword patterns to
pick the section tag.  Documents with fewer than two sections fall back to
paragraph grouping at 2000 characters.
"""

from __future__ import annotations

import re

import structlog

from src.models.documents import SectionType
from src.services.ingestion.segmenters.base import DeterministicSegmenter, Segment, SizeSegmenter

logger = structlog.get_logger(logger_name=__name__)

_SECTION_PATTERNS: list[tuple[re.Pattern[str], SectionType]] = [
    (re.compile(pattern, re.IGNORECASE), section)
    for pattern, section in [
        (r"project\s+summary|executive\s+summary|overview", SectionType.PROJECT_SUMMARY),
        (r"scope\s+of\s+work|scope", SectionType.SCOPE_OF_WORK),
        (r"partner(ship)?s?|collaborat", SectionType.PARTNERSHIPS),
        (r"technolog|tech\s+|digital|ai\s+|software", SectionType.TECHNOLOGY),
        (r"timeline|schedule|milestones|implementation\s+plan", SectionType.TIMELINE),
        (r"outcome|impact|result|who\?|how\s+many|what\s+impact", SectionType.OUTCOMES),
        (r"measur|evaluation|m&e|metrics|indicator", SectionType.MEASUREMENT),
        (r"budget|financ|cost", SectionType.BUDGET),
    ]
]

_NUMBERED = re.compile(r"^\d+\.\s")
_HEADING_PREFIX = re.compile(r"^#+\s*")
_NUMBER_PREFIX = re.compile(r"^\d+\.\s*")

MIN_HEADING_LENGTH = 3
MAX_HEADING_LENGTH = 99
MIN_SECTION_LENGTH = 20
FALLBACK_BUDGET = 2000


def is_heading(line: str) -> bool:
    trimmed = line.strip()
    if not MIN_HEADING_LENGTH <= len(trimmed) <= MAX_HEADING_LENGTH:
        return False
    return trimmed.isupper() or trimmed.startswith("#") or bool(_NUMBERED.match(trimmed))


def clean_heading(line: str) -> str:
    return _NUMBER_PREFIX.sub("", _HEADING_PREFIX.sub("", line.strip()))


def classify_heading(heading: str) -> SectionType:
    for pattern, section in _SECTION_PATTERNS:
        if pattern.search(heading):
            return section
    return SectionType.PROJECT_SUMMARY


class GrantDescriptionSegmenter(DeterministicSegmenter):
    def __init__(self, fallback: SizeSegmenter | None = None) -> None:
        self._fallback = fallback or SizeSegmenter(FALLBACK_BUDGET)

    def _sections(self, text: str) -> list[tuple[str, list[str]]]:
        sections: list[tuple[str, list[str]]] = []
        heading = ""
        body: list[str] = []
        for line in text.split("\n"):
            if is_heading(line):
                if body:
                    sections.append((heading, body))
                heading = clean_heading(line)
                body = []
            else:
                body.append(line)
        if body:
            sections.append((heading, body))
        return sections

    def split(self, text: str) -> list[Segment]:
        sections = self._sections(text)
        if len(sections) < 2:
            return self._fallback.split(text)

        segments: list[Segment] = []
        for heading, body_lines in sections:
            body = "\n".join(body_lines).strip()
            if len(body) < MIN_SECTION_LENGTH:
                continue
            segments.append(Segment(body, classify_heading(heading), heading))

        if not segments:
            logger.debug("grant_description_sections_empty", sections=len(sections))
            return self._fallback.split(text)
        return segments
