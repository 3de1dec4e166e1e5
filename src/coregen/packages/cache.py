"""Cache management for coregen.

Cache Structure:
    .coregen/
    ├── cache/
    │   ├── packages/
    │   │   └── {url_hash}/         # SHA256 hash of the platform URL
    │   │       └── {version}/
    │   │           └── archive     # Downloaded platform archive
    │   └── platforms/
    │       └── {url_hash}/
    │           └── {version}/      # Extracted platform (boards.txt, cores/, variants/)
    └── build/
        ├── graph.json              # Generated build graph
        └── {env_name}/             # Generated files per environment (sketch.cpp)

Different versions from the same URL never share a directory.
"""

import hashlib
import os
from pathlib import Path
from typing import Optional


class Cache:
    """Manages the coregen cache directory structure.

    The cache lives in the project directory (.coregen/) unless the
    COREGEN_CACHE_DIR environment variable points elsewhere.
    """

    ENV_VAR = "COREGEN_CACHE_DIR"

    def __init__(self, project_dir: Optional[Path] = None):
        """Initialize cache manager.

        Args:
            project_dir: Project directory. If None, uses current directory.
        """
        if project_dir is None:
            project_dir = Path.cwd()

        self.project_dir = Path(project_dir).resolve()

        cache_env = os.environ.get(self.ENV_VAR)
        if cache_env:
            self.cache_root = Path(cache_env).resolve()
        else:
            self.cache_root = self.project_dir / ".coregen" / "cache"

        self.build_root = self.project_dir / ".coregen" / "build"

    @staticmethod
    def hash_url(url: str) -> str:
        """First 16 hex characters of the URL's SHA256."""
        return hashlib.sha256(url.encode("utf-8")).hexdigest()[:16]

    @property
    def packages_dir(self) -> Path:
        return self.cache_root / "packages"

    @property
    def platforms_dir(self) -> Path:
        return self.cache_root / "platforms"

    @property
    def graph_path(self) -> Path:
        return self.build_root / "graph.json"

    def get_build_dir(self, env_name: str) -> Path:
        return self.build_root / env_name

    def get_package_path(self, url: str, version: str, filename: str) -> Path:
        return self.packages_dir / self.hash_url(url) / version / filename

    def get_platform_path(self, url: str, version: str) -> Path:
        return self.platforms_dir / self.hash_url(url) / version

    def is_platform_cached(self, url: str, version: str) -> bool:
        platform_path = self.get_platform_path(url, version)
        return platform_path.exists() and any(platform_path.iterdir())

    def clean_build(self) -> None:
        """Remove all generated build files."""
        import shutil

        if self.build_root.exists():
            shutil.rmtree(self.build_root)
