"""Command-line tools for the grant document ingestion pipeline.

- ``python -m src.cli.ingest`` - sync drive folders into the chunk store,
  list and classify files, or purge one file's chunks.
"""
