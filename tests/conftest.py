"""Shared fixtures for the coregen test suite."""

from pathlib import Path

import pytest

from coregen.config import BoardProperties, HostContext, discover_platform

BOARDS_TXT = """
# Menu titles are not boards
menu.cpu=Processor

uno.name=Arduino Uno
uno.build.mcu=atmega328p
uno.build.f_cpu=16000000L
uno.build.board=AVR_UNO
uno.build.core=arduino
uno.build.variant=standard

uno_clone.name=Uno Clone
uno_clone.build.mcu=atmega328p
uno_clone.build.f_cpu=16000000L
uno_clone.build.board=AVR_UNO_CLONE
uno_clone.build.core=Arduino
uno_clone.build.variant=STANDARD

mega.name=Arduino Mega 2560
mega.build.mcu=atmega2560
mega.build.f_cpu=16000000L
mega.build.board=AVR_MEGA2560
mega.build.core=arduino
mega.build.variant=mega
mega.build.extra_flags=-DMEGA_EXTRA

ghost.name=Ghost Board
ghost.build.mcu=atmega328p
ghost.build.core=phantom
ghost.build.variant=standard

lost.name=Lost Variant
lost.build.mcu=atmega328p
lost.build.core=arduino
lost.build.variant=nowhere

empty.name=Empty Core
empty.build.mcu=atmega328p
empty.build.core=hollow
empty.build.variant=bare
"""

PLATFORM_TXT = """
name=Arduino AVR Boards
version=1.8.6

compiler.warning_flags=-w
compiler.S.flags=-c -g -x assembler-with-cpp -flto -MMD
compiler.c.flags=-c -g -Os {compiler.warning_flags} -std=gnu11 -ffunction-sections
compiler.cpp.flags=-c -g -Os {compiler.warning_flags} -std=gnu++11 -fno-exceptions
compiler.c.elf.flags={compiler.warning_flags} -Os -g -flto -Wl,--gc-sections
compiler.c.extra_flags=
compiler.ldflags=
"""


def write_platform(root: Path) -> Path:
    """Create a small AVR-like platform tree under root and return it."""
    platform_dir = root / "hardware" / "arduino" / "avr"
    platform_dir.mkdir(parents=True)
    (platform_dir / "boards.txt").write_text(BOARDS_TXT)
    (platform_dir / "platform.txt").write_text(PLATFORM_TXT)

    core = platform_dir / "cores" / "arduino"
    (core / "avr-libc").mkdir(parents=True)
    (core / "Arduino.h").write_text("#pragma once\n")
    (core / "main.cpp").write_text("int main(void) { return 0; }\n")
    (core / "wiring.c").write_text("void init(void) {}\n")
    (core / "WString.cpp").write_text("\n")
    (core / "wiring_pulse.S").write_text("\n")
    (core / "avr-libc" / "malloc.c").write_text("\n")

    (platform_dir / "cores" / "hollow").mkdir()
    (platform_dir / "cores" / "hollow" / "README").write_text("no sources\n")

    for variant in ("standard", "mega", "bare"):
        variant_dir = platform_dir / "variants" / variant
        variant_dir.mkdir(parents=True)
        (variant_dir / "pins_arduino.h").write_text("#pragma once\n")
    (platform_dir / "variants" / "mega" / "variant.cpp").write_text("\n")

    return platform_dir


@pytest.fixture
def platform_dir(tmp_path):
    """Platform directory with boards.txt, platform.txt, cores and variants."""
    return write_platform(tmp_path)


@pytest.fixture
def descriptor(platform_dir):
    return discover_platform(platform_dir)


@pytest.fixture
def properties(platform_dir, descriptor):
    return BoardProperties.from_platform_dir(platform_dir, architecture=descriptor.architecture)


@pytest.fixture
def generic_host():
    """A host without entry point exclusion."""
    return HostContext(os_family="linux", distribution_id="fedora")


@pytest.fixture
def debian_host():
    """A host that excludes core entry points."""
    return HostContext(os_family="linux", distribution_id="debian")


@pytest.fixture
def make_platform():
    """Factory creating the platform tree under a given root."""
    return write_platform
