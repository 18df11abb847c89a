"""Pick a segmentation strategy per document type and build the chunks."""

from __future__ import annotations

import structlog

from src.models.documents import ChunkMetadata, DocumentChunk, DocumentType, ExtractedDocument
from src.services.ingestion.segmenters.base import Segment, Segmenter, SizeSegmenter, new_chunk_uid
from src.services.ingestion.segmenters.grant_description import GrantDescriptionSegmenter
from src.services.ingestion.segmenters.surveys import ImpactSurveySegmenter, MidpointSurveySegmenter
from src.services.ingestion.segmenters.transcripts import ParagraphTranscriptSegmenter

logger = structlog.get_logger(logger_name=__name__)

_TRANSCRIPT_TYPES = frozenset(
    {DocumentType.MIDPOINT_CHECKIN_TRANSCRIPT, DocumentType.CLOSEOUT_TRANSCRIPT}
)


class DocumentSegmenter:
    """Route an :class:`ExtractedDocument` to its strategy.

    Parameters
    ----------
    llm_segmenter:
        Optional transcript strategy used when a run asks for LLM-assisted
        chunking.  Without it, transcripts always use paragraph grouping.
    """

    def __init__(self, llm_segmenter: Segmenter | None = None) -> None:
        self._llm_segmenter = llm_segmenter
        self._generic = SizeSegmenter(1500)
        self._transcripts = ParagraphTranscriptSegmenter(1500)
        self._strategies: dict[DocumentType, Segmenter] = {
            DocumentType.GRANT_DESCRIPTION: GrantDescriptionSegmenter(),
            DocumentType.IMPACT_SURVEY: ImpactSurveySegmenter(),
            DocumentType.MIDPOINT_SURVEY: MidpointSurveySegmenter(),
        }

    def strategy_for(self, document_type: DocumentType, use_llm: bool = False) -> Segmenter:
        if document_type in _TRANSCRIPT_TYPES:
            if use_llm and self._llm_segmenter is not None:
                return self._llm_segmenter
            return self._transcripts
        return self._strategies.get(document_type, self._generic)

    async def segment(
        self,
        doc: ExtractedDocument,
        base_metadata: ChunkMetadata,
        use_llm: bool = False,
    ) -> list[DocumentChunk]:
        """Split *doc* and attach metadata.

        Chunk indexes are sequential from 0 in reading order and every
        chunk gets a fresh uid.  Non-blank text always yields at least one
        chunk.
        """
        strategy = self.strategy_for(doc.document_type, use_llm)
        segments = await strategy.segment(doc)
        if not segments and doc.text.strip():
            logger.warning(
                "segmentation_empty_fallback",
                file=doc.file.name,
                strategy=type(strategy).__name__,
            )
            segments = self._generic.split(doc.text)

        chunks = [self._to_chunk(segment, index, base_metadata) for index, segment in enumerate(segments)]
        logger.debug(
            "document_segmented",
            file=doc.file.name,
            strategy=type(strategy).__name__,
            chunks=len(chunks),
        )
        return chunks

    @staticmethod
    def _to_chunk(segment: Segment, index: int, base_metadata: ChunkMetadata) -> DocumentChunk:
        uid = new_chunk_uid()
        metadata = base_metadata.model_copy(
            update={
                "chunk_index": index,
                "chunk_uid": uid,
                "section_type": segment.section_type,
                "section_heading": segment.heading,
            }
        )
        return DocumentChunk(chunk_uid=uid, text=segment.text, metadata=metadata)
