"""Scope extraction: which namespaces are active at a given offset.

A scope opens at every namespace-declaring marker, for example
``useTranslation(['settings', 'common'])``, and stays open until the end
of the document. There is no closing marker, so scopes overlap and the
one that applies at an offset is the nearest preceding marker.
"""

from __future__ import annotations

import bisect
import logging
import re
from typing import Iterator, List, Optional, Pattern, Sequence

from .config import DEFAULT_NAMESPACE
from .models import ScopeRange

logger = logging.getLogger(__name__)

NAMESPACE_MARKER = re.compile(
    r"""useTranslation\(\s*\[\s*(['"`](?:\w+(?:\.\w+)*)['"`](?:\s*,\s*['"`](?:\w+(?:\.\w+)*)['"`])*)\s*\]"""
)


def split_namespace_list(raw: str) -> List[str]:
    """``"'a', \"b.c\""`` -> ``['a', 'b.c']``"""
    names = []
    for item in raw.split(","):
        name = re.sub(r"""['"`,\s]""", "", item)
        if name:
            names.append(name)
    return names


class ScopeExtractor:
    """Find namespace scopes in document text."""

    def __init__(
        self,
        default_namespace: str = DEFAULT_NAMESPACE,
        common_namespace: str = DEFAULT_NAMESPACE,
        marker: Pattern[str] = NAMESPACE_MARKER,
        enabled: bool = True,
    ) -> None:
        self.default_namespace = default_namespace
        self.common_namespace = common_namespace
        self.marker = marker
        self.enabled = enabled

    def iter_markers(self, text: str, start: int = 0, end: Optional[int] = None) -> Iterator[re.Match]:
        return self.marker.finditer(text, start, len(text) if end is None else end)

    def declared_namespaces(self, match: re.Match) -> List[str]:
        """Namespaces exactly as written in a marker, before filtering."""
        return split_namespace_list(match.group(1))

    def extract_scopes(self, text: str) -> List[ScopeRange]:
        if not self.enabled:
            return []

        ranges: List[ScopeRange] = []
        for match in self.iter_markers(text):
            namespaces = [
                ns for ns in self.declared_namespaces(match)
                if ns != self.common_namespace
            ]
            if not namespaces:
                namespaces = [self.default_namespace]

            ranges.append(ScopeRange(
                start=match.start(),
                end=len(text),
                namespace=namespaces[0] or self.default_namespace,
                namespaces=namespaces,
            ))

        if ranges:
            logger.debug("Found %d namespace scope(s)", len(ranges))
        return ranges

    def declares_only(self, text: str, scope: ScopeRange, namespace: str) -> bool:
        """True if a marker inside *scope* declares exactly ``[namespace]``."""
        return any(
            self.declared_namespaces(m) == [namespace]
            for m in self.iter_markers(text, scope.start, scope.end)
        )


class ScopeIndex:
    """Scopes sorted by start offset, queried by binary search."""

    def __init__(self, scopes: Sequence[ScopeRange]) -> None:
        self._scopes = sorted(scopes, key=lambda s: s.start)
        self._starts = [s.start for s in self._scopes]

    def __len__(self) -> int:
        return len(self._scopes)

    def __iter__(self):
        return iter(self._scopes)

    def first(self) -> Optional[ScopeRange]:
        return self._scopes[0] if self._scopes else None

    def containing(self, offset: int) -> Optional[ScopeRange]:
        """Nearest preceding scope that still covers *offset*."""
        pos = bisect.bisect_left(self._starts, offset)
        for scope in reversed(self._scopes[:pos]):
            if scope.contains(offset):
                return scope
        return None
