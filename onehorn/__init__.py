"""Baldur's Gate 3 mod manager: package reading, profiles, mod settings and a command line."""

__version__ = "0.1.0"