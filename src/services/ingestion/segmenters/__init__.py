"""Segmentation strategies, one per document type, plus the dispatcher."""

from src.services.ingestion.segmenters.base import (
    Segment,
    Segmenter,
    SizeSegmenter,
    accumulate_paragraphs,
    new_chunk_uid,
    split_paragraphs,
)
from src.services.ingestion.segmenters.dispatch import DocumentSegmenter
from src.services.ingestion.segmenters.grant_description import GrantDescriptionSegmenter
from src.services.ingestion.segmenters.llm_transcript import LLMTranscriptSegmenter
from src.services.ingestion.segmenters.surveys import ImpactSurveySegmenter, MidpointSurveySegmenter
from src.services.ingestion.segmenters.transcripts import ParagraphTranscriptSegmenter

__all__ = [
    "DocumentSegmenter",
    "GrantDescriptionSegmenter",
    "ImpactSurveySegmenter",
    "LLMTranscriptSegmenter",
    "MidpointSurveySegmenter",
    "ParagraphTranscriptSegmenter",
    "Segment",
    "Segmenter",
    "SizeSegmenter",
    "accumulate_paragraphs",
    "new_chunk_uid",
    "split_paragraphs",
]
