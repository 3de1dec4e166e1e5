"""
Host identification used by source discovery.

Some Linux distributions ship an Arduino core whose entry point is supplied
separately, so the core's own main.c* file has to be left out of the core
library on those hosts.
"""

import platform
from dataclasses import dataclass
from typing import Optional

EXCLUDED_DISTRIBUTIONS = frozenset({"debian", "ubuntu"})


@dataclass(frozen=True)
class HostContext:
    """Operating system family and, on Linux, the distribution id."""

    os_family: str
    distribution_id: Optional[str] = None

    @property
    def excludes_entry_points(self) -> bool:
        """True when core entry-point sources must be dropped on this host."""
        return (
            self.os_family == "linux"
            and self.distribution_id is not None
            and self.distribution_id in EXCLUDED_DISTRIBUTIONS
        )

    @classmethod
    def detect(cls) -> "HostContext":
        """
        Detect the current host.

        Returns:
            HostContext for the running interpreter's host
        """
        os_family = platform.system().lower()
        distribution_id = None
        if os_family == "linux":
            try:
                os_release = platform.freedesktop_os_release()
            except OSError:
                os_release = {}
            distribution_id = os_release.get("ID", "").lower() or None
        return cls(os_family=os_family, distribution_id=distribution_id)
