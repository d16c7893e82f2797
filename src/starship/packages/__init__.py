"""Source fetching for Starship.

This module handles downloading source archives and checking out the
component codebases of a new project.
"""

from .downloader import ArchiveDownloader, ChecksumError, DownloadError, ExtractionError
from .fetcher import CodebaseFetcher

__all__ = [
    "CodebaseFetcher",
    "ArchiveDownloader",
    "DownloadError",
    "ChecksumError",
    "ExtractionError",
]
