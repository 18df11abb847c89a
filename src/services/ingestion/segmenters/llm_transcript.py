"""LLM-assisted transcript segmentation with a deterministic fallback.

The model is asked to drop the small talk at either end of a check-in or
closeout call, cut the substantive middle into topic segments from a fixed
label set, and write a summary.  Each segment becomes one chunk and the
summary one more, tagged ``transcript_summary``.

Any problem (no provider, no credentials, an API error, a reply that is not
the expected JSON shape, or no usable segments) is logged as a warning and
the wrapped fallback segmenter's result is returned instead.  This class
never raises.
"""

from __future__ import annotations

import json
import re
from typing import Any

import structlog
from pydantic import BaseModel, Field

from src.interfaces.llm_provider import ILLMProvider
from src.models.documents import DocumentType, ExtractedDocument, SectionType
from src.services.ingestion.segmenters.base import Segment, Segmenter
from src.utils.errors import LLMError, SegmentationError

logger = structlog.get_logger(logger_name=__name__)

TOPIC_LABELS: dict[str, SectionType] = {
    "progress": SectionType.PROGRESS,
    "challenges": SectionType.CHALLENGES,
    "pivots": SectionType.PIVOTS,
    "data_measurement": SectionType.DATA_MEASUREMENT,
    "org_changes": SectionType.ORG_CHANGES,
    "future_plans": SectionType.FUTURE_PLANS,
    "support_requests": SectionType.SUPPORT_REQUESTS,
    "notable_quotes": SectionType.NOTABLE_QUOTES,
}

TRUNCATION_MARKER = "\n\n[TRUNCATED]"
DEFAULT_MAX_CHARS = 100_000
_MAX_OUTPUT_TOKENS = 8000

_FENCE = re.compile(r"```(?:json)?\s*\n?(.*?)```", re.DOTALL)

_SYSTEM_PROMPT = (
    "You segment grant check-in and closeout call transcripts for a "
    "search index. Return ONLY valid JSON, with no markdown code fences "
    "and no other text."
)

_USER_PROMPT = """You are processing a {call_kind} transcript between the foundation's program officers and a grantee organization.

Your tasks:
1. Identify where the substantive discussion begins (skip greetings, small talk, scheduling, weather, personal catch-up).
2. Identify where substantive discussion ends (skip goodbyes, scheduling next call).
3. Segment the substantive middle into topic blocks. For each block, provide:
   - topic_label: one of [{labels}]
   - heading: a descriptive 5-10 word heading summarizing the topic
   - text: the full text of that segment (preserve speaker names/attribution)
4. Generate a {summary_length} word summary of the key takeaways.

Return JSON of this shape:
{{
  "segments": [
    {{ "topic_label": "...", "heading": "...", "text": "..." }}
  ],
  "summary": "..."
}}

TRANSCRIPT:
{transcript}"""


class _TranscriptSegment(BaseModel):
    topic_label: str = "progress"
    heading: str = ""
    text: str


class _TranscriptSegmentation(BaseModel):
    segments: list[_TranscriptSegment]
    summary: str = Field(default="")


def truncate_transcript(text: str, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


def build_prompt(text: str, document_type: DocumentType, max_chars: int = DEFAULT_MAX_CHARS) -> str:
    closeout = document_type == DocumentType.CLOSEOUT_TRANSCRIPT
    return _USER_PROMPT.format(
        call_kind="closeout" if closeout else "midpoint check-in",
        labels=", ".join(f'"{label}"' for label in TOPIC_LABELS),
        summary_length="500-1000" if closeout else "300-500",
        transcript=truncate_transcript(text, max_chars),
    )


def _extract_json(response: str) -> Any:
    """Parse the reply, tolerating code fences and surrounding prose."""
    cleaned = response.strip()
    fence_match = _FENCE.search(cleaned)
    if fence_match:
        cleaned = fence_match.group(1).strip()
    else:
        brace_start = cleaned.find("{")
        brace_end = cleaned.rfind("}")
        if brace_start != -1 and brace_end > brace_start:
            cleaned = cleaned[brace_start : brace_end + 1]
    return json.loads(cleaned)


def parse_segmentation(response: str, document_type: DocumentType) -> list[Segment]:
    """Convert a model reply to segments.

    Raises
    ------
    SegmentationError
        If the reply is not JSON of the expected shape or has no segments
        with text.
    """
    try:
        result = _TranscriptSegmentation.model_validate(_extract_json(response))
    except ValueError as exc:
        raise SegmentationError(message=f"Unusable segmentation reply: {exc}") from exc

    segments = [
        Segment(
            text=item.text.strip(),
            section_type=TOPIC_LABELS.get(item.topic_label.strip().lower(), SectionType.PROGRESS),
            heading=item.heading.strip(),
        )
        for item in result.segments
        if item.text.strip()
    ]
    if not segments:
        raise SegmentationError(message="Model returned no usable segments")

    if result.summary.strip():
        closeout = document_type == DocumentType.CLOSEOUT_TRANSCRIPT
        segments.append(
            Segment(
                text=result.summary.strip(),
                section_type=SectionType.TRANSCRIPT_SUMMARY,
                heading=f"{'Closeout' if closeout else 'Midpoint'} Transcript Summary",
            )
        )
    return segments


class LLMTranscriptSegmenter(Segmenter):
    """Topic segmentation through an :class:`ILLMProvider`, wrapping a fallback."""

    def __init__(
        self,
        llm: ILLMProvider | None,
        fallback: Segmenter,
        max_chars: int = DEFAULT_MAX_CHARS,
    ) -> None:
        self._llm = llm
        self._fallback = fallback
        self._max_chars = max_chars

    @property
    def fallback(self) -> Segmenter:
        return self._fallback

    async def segment(self, doc: ExtractedDocument) -> list[Segment]:
        if self._llm is None or not self._llm.is_available():
            logger.warning("llm_segmentation_unavailable", file=doc.file.name)
            return await self._fallback.segment(doc)

        try:
            response = await self._llm.complete(
                system_prompt=_SYSTEM_PROMPT,
                user_prompt=build_prompt(doc.text, doc.document_type, self._max_chars),
                temperature=0.2,
                max_tokens=_MAX_OUTPUT_TOKENS,
            )
            segments = parse_segmentation(response, doc.document_type)
        except (LLMError, SegmentationError) as exc:
            logger.warning(
                "llm_segmentation_fallback",
                file=doc.file.name,
                provider=self._llm.get_provider_name(),
                error=str(exc),
            )
            return await self._fallback.segment(doc)
        except Exception as exc:
            # SDK-level surprises (transport errors the adapter did not wrap).
            logger.warning(
                "llm_segmentation_fallback",
                file=doc.file.name,
                provider=self._llm.get_provider_name(),
                error=repr(exc),
            )
            return await self._fallback.segment(doc)

        logger.info(
            "llm_segmentation_complete",
            file=doc.file.name,
            segments=len(segments),
            truncated=len(doc.text) > self._max_chars,
        )
        return segments
