"""Package management for coregen.

This module handles locating, downloading and caching Arduino platform
packages.
"""

from .cache import Cache
from .downloader import ChecksumError, DownloadError, ExtractionError, PackageDownloader
from .platform_package import PlatformPackage, PlatformPackageError

__all__ = [
    "Cache",
    "PackageDownloader",
    "DownloadError",
    "ChecksumError",
    "ExtractionError",
    "PlatformPackage",
    "PlatformPackageError",
]
