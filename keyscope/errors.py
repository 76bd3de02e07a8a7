"""Exceptions raised by keyscope components."""

from __future__ import annotations


class KeyscopeError(Exception):
    """Base class for keyscope errors."""


class PatternCompileError(KeyscopeError):
    """A usage-match template could not be compiled into a regular expression."""

    def __init__(self, template: str, reason: str):
        self.template = template
        self.reason = reason
        super().__init__(f"Failed to parse custom regex {template!r}: {reason}")


class DictionaryWriteError(KeyscopeError):
    """Writing a value back into a locale file failed."""

    def __init__(self, keypath: str, filepath: str, reason: str):
        self.keypath = keypath
        self.filepath = filepath
        self.reason = reason
        super().__init__(f"Could not write '{keypath}' to {filepath}: {reason}")
