"""Keyscope: namespace-aware i18n key detection for source files."""

__version__ = "0.3.0"
