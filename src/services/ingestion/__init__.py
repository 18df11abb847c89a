"""Grant document ingestion: drive folders in, searchable chunks out.

Pipeline stages overview:

1. **Classify** (filename_parser.py) -- reference number, document type and
   grantee name parsed from the filename.

2. **Resolve** (grant_lookup.py) -- match the parsed identity to a grant
   registry record: exact reference number, then name containment, then
   word overlap.

3. **Extract** (text_extractor.py) -- Google Doc export, PDF, DOCX, RTF
   and plain text to a single string.

4. **Segment** (segmenters/) -- one strategy per document type, with
   LLM-assisted topic segmentation available for transcripts.

5. **Enrich** (metadata_enricher.py) -- flat registry, document and sync
   metadata on every chunk.

6. **Store** (via IVectorStoreProvider) -- old chunks for the file are
   deleted and the new ones upserted; sync_state.py reads the same store to
   decide what can be skipped next time.

The IngestionService class orchestrates all stages.
"""

from src.services.ingestion.grant_lookup import GrantRegistryCache, GrantResolver
from src.services.ingestion.ingestion_service import IngestionService, IngestionState
from src.services.ingestion.sync_state import SyncStateTracker
from src.services.ingestion.text_extractor import TextExtractor

__all__ = [
    "GrantRegistryCache",
    "GrantResolver",
    "IngestionService",
    "IngestionState",
    "SyncStateTracker",
    "TextExtractor",
]
