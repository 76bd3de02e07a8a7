"""Result aggregation: resolve, dedupe, rewrite and sort key matches."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Pattern, Sequence, Set

from .config import KEY_SEPARATOR, QUOTE_SYMBOLS
from .matcher import find_usages
from .models import KeyInDocument, RewriteKeyContext, ScopeRange
from .resolver import NamespaceResolver
from .rewriter import RewritePolicy
from .scopes import ScopeIndex

logger = logging.getLogger(__name__)


def accepts_key(key: str, dot_ending: bool) -> bool:
    """Dot-ending mode keeps only partial keys; normal mode only complete ones."""
    if dot_ending:
        return not key or key.endswith(KEY_SEPARATOR)
    return not key.endswith(KEY_SEPARATOR)


def find_keys(
    text: str,
    patterns: Iterable[Pattern[str]],
    resolver: NamespaceResolver,
    rewriter: RewritePolicy,
    dot_ending: bool = False,
    rewrite_context: Optional[RewriteKeyContext] = None,
    scopes: Sequence[ScopeRange] = (),
    disable_path_parsing: bool = False,
) -> List[KeyInDocument]:
    """Find every key reference in *text*, sorted by start offset.

    The first pattern to claim a start offset wins; later matches at the
    same offset are dropped.
    """
    if disable_path_parsing:
        dot_ending = True

    index = ScopeIndex(scopes)
    context = rewrite_context or RewriteKeyContext()
    starts: Set[int] = set()
    keys: List[KeyInDocument] = []

    for raw in find_usages(text, patterns):
        if raw.start in starts:
            continue
        starts.add(raw.start)

        key, namespace = resolver.resolve(text, raw, index)
        if not accepts_key(key, dot_ending):
            continue

        key = rewriter.rewrite_key(key, "reference", replace(context, namespace=namespace))
        quoted = raw.start > 0 and text[raw.start - 1] in QUOTE_SYMBOLS
        keys.append(KeyInDocument(key=key, start=raw.start, end=raw.end, quoted=quoted))

    return sorted(keys, key=lambda k: k.start)


class KeyCache:
    """Last computed keys per document path.

    Entries live until :meth:`invalidate` is called for that path.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, List[KeyInDocument]] = {}

    def get(self, path: str) -> Optional[List[KeyInDocument]]:
        return self._entries.get(path)

    def put(self, path: str, keys: List[KeyInDocument]) -> None:
        self._entries[path] = keys

    def invalidate(self, path: str) -> bool:
        removed = self._entries.pop(path, None) is not None
        if removed:
            logger.debug("Invalidated key cache for %s", path)
        return removed

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, path: str) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)
