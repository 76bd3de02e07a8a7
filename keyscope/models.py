"""Core data models shared by scope extraction, matching, and resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

RewriteKeySource = Literal["reference", "source", "write"]


@dataclass(frozen=True)
class ScopeRange:
    """Span of text over which a set of namespaces is active.

    ``start`` is inclusive and ``end`` exclusive. ``namespace`` is the
    preferred candidate, ``namespaces`` the full ordered list.
    """

    start: int
    end: int
    namespace: str
    namespaces: List[str] = field(default_factory=list)

    def contains(self, offset: int) -> bool:
        return self.start < offset < self.end


@dataclass(frozen=True)
class RawMatch:
    """A single regex hit, before namespace resolution."""

    text: str
    key: str
    ns_index: int
    match_start: int
    start: int
    end: int

    @property
    def match_end(self) -> int:
        return self.match_start + len(self.text)


@dataclass(frozen=True)
class KeyInDocument:
    key: str
    start: int
    end: int
    quoted: bool


@dataclass
class RewriteKeyContext:
    target_file: Optional[str] = None
    namespace: Optional[str] = None
    namespaces: List[str] = field(default_factory=list)


@dataclass
class KeyUsages:
    """Keys found in one document, as reported to the editor layer."""

    type: Literal["code", "locale"]
    keys: List[KeyInDocument]
    locale: str
    namespace: Optional[str] = None


@dataclass(frozen=True)
class KeyRange:
    """A key located around a cursor offset."""

    key: str
    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.key} [{self.start}:{self.end}]"
