"""
Unit tests for host detection.
"""

from unittest.mock import patch

import pytest

from coregen.config.host_context import HostContext


class TestHostContext:
    """Test suite for HostContext."""

    @pytest.mark.parametrize("distribution", ["debian", "ubuntu"])
    def test_excluded_distributions(self, distribution):
        """Test entry points are excluded on the listed distributions."""
        assert HostContext("linux", distribution).excludes_entry_points

    @pytest.mark.parametrize(
        "os_family,distribution",
        [("linux", "fedora"), ("linux", "arch"), ("linux", None), ("darwin", None), ("windows", None)],
    )
    def test_other_hosts(self, os_family, distribution):
        """Test no exclusion elsewhere."""
        assert not HostContext(os_family, distribution).excludes_entry_points

    def test_detect_linux(self):
        """Test detection reads the os-release ID."""
        with (
            patch("coregen.config.host_context.platform.system", return_value="Linux"),
            patch(
                "coregen.config.host_context.platform.freedesktop_os_release",
                return_value={"ID": "Ubuntu", "ID_LIKE": "debian"},
            ),
        ):
            host = HostContext.detect()
        assert host == HostContext("linux", "ubuntu")
        assert host.excludes_entry_points

    def test_detect_linux_without_os_release(self):
        """Test detection when /etc/os-release is unavailable."""
        with (
            patch("coregen.config.host_context.platform.system", return_value="Linux"),
            patch(
                "coregen.config.host_context.platform.freedesktop_os_release",
                side_effect=OSError("missing"),
            ),
        ):
            host = HostContext.detect()
        assert host == HostContext("linux", None)
        assert not host.excludes_entry_points

    def test_detect_windows(self):
        """Test non-Linux hosts carry no distribution."""
        with patch("coregen.config.host_context.platform.system", return_value="Windows"):
            host = HostContext.detect()
        assert host == HostContext("windows", None)
        assert not host.excludes_entry_points
