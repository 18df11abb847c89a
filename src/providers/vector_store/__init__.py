"""Vector store provider implementations.

ChromaDB is the sole chunk store implementation. Data persists at
CHROMADB_PERSIST_DIR (default: ./data/chromadb).

To swap ChromaDB for another vector database, create a new class
implementing IVectorStoreProvider and wire it up in src/cli/ingest.py.
"""

from src.providers.vector_store.chromadb_provider import ChromaDBProvider

__all__ = ["ChromaDBProvider"]
