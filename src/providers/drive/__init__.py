"""Document drive provider implementations.

    - GoogleDriveProvider - Drive v3 REST over httpx (production)
    - LocalDriveProvider  - a local directory tree (offline runs, tests)
"""

from src.providers.drive.google_drive_provider import GoogleDriveProvider
from src.providers.drive.local_drive_provider import LocalDriveProvider

__all__ = ["GoogleDriveProvider", "LocalDriveProvider"]
