"""Arduino platform package management.

A project's ``platform`` option names either a local platform directory or a
URL of a platform archive (e.g., an ArduinoCore-avr release tarball). Archives
are downloaded once and extracted into the cache.
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from .cache import Cache
from .downloader import PackageDownloader

logger = logging.getLogger(__name__)


class PlatformPackageError(Exception):
    """Raised when a platform cannot be located or obtained."""

    pass


class PlatformPackage:
    """Resolves a platform reference to a directory containing boards.txt."""

    ARCHIVE_SUFFIXES = (".tar.gz", ".tgz", ".tar.bz2", ".tar.xz", ".zip")

    def __init__(
        self,
        cache: Cache,
        downloader: Optional[PackageDownloader] = None,
        show_progress: bool = True,
    ):
        self.cache = cache
        self._downloader = downloader
        self.show_progress = show_progress

    @property
    def downloader(self) -> PackageDownloader:
        if self._downloader is None:
            self._downloader = PackageDownloader()
        return self._downloader

    @staticmethod
    def is_url(reference: str) -> bool:
        return urlparse(reference).scheme in ("http", "https")

    @classmethod
    def version_from_url(cls, url: str) -> str:
        """
        Derive a cache version string from the archive name.

        Example:
            .../ArduinoCore-avr/archive/refs/tags/1.8.6.tar.gz -> "1.8.6"
        """
        filename = Path(urlparse(url).path).name
        for suffix in cls.ARCHIVE_SUFFIXES:
            if filename.endswith(suffix):
                return filename[: -len(suffix)] or "latest"
        return filename or "latest"

    def ensure_platform(
        self,
        reference: str,
        base_dir: Optional[Path] = None,
        checksum: Optional[str] = None,
    ) -> Path:
        """
        Ensure a platform is available locally.

        Args:
            reference: Local path or http(s) URL of a platform archive
            base_dir: Directory relative paths are resolved against
            checksum: Optional SHA256 of the archive

        Returns:
            Platform root directory (contains boards.txt)

        Raises:
            PlatformPackageError: If the platform cannot be found
        """
        if not self.is_url(reference):
            platform_dir = Path(reference)
            if not platform_dir.is_absolute() and base_dir is not None:
                platform_dir = Path(base_dir) / platform_dir
            return self.find_platform_root(platform_dir.resolve())

        version = self.version_from_url(reference)
        extract_dir = self.cache.get_platform_path(reference, version)

        if not self.cache.is_platform_cached(reference, version):
            filename = Path(urlparse(reference).path).name
            archive_path = self.cache.get_package_path(reference, version, filename)
            if not archive_path.exists():
                logger.info(f"Downloading platform {reference}")
                self.downloader.download(
                    reference, archive_path, checksum, self.show_progress
                )
            elif checksum:
                self.downloader.verify_checksum(archive_path, checksum)
            self.downloader.extract_archive(archive_path, extract_dir)
        else:
            logger.debug(f"Using cached platform {reference} ({version})")

        return self.find_platform_root(extract_dir)

    @staticmethod
    def find_platform_root(directory: Path) -> Path:
        """
        Locate boards.txt in a directory or one level below it.

        Release archives usually wrap the platform in a single top-level
        folder (e.g., ArduinoCore-avr-1.8.6/).

        Raises:
            PlatformPackageError: If no boards.txt is found
        """
        if (directory / "boards.txt").exists():
            return directory

        if directory.is_dir():
            for child in sorted(directory.iterdir()):
                if child.is_dir() and (child / "boards.txt").exists():
                    return child

        raise PlatformPackageError(f"No boards.txt found in {directory}")
