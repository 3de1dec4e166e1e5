"""coregen - core library and firmware target generator for Arduino-style boards."""

__version__ = "0.1.0"
