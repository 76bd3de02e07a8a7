"""Key detection facade used by the CLI and editor integrations.

Ties together the framework registry (patterns and scopes), the namespace
resolver, the rewrite policy and the per-document result cache.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Pattern, Sequence, Tuple, Union

from .aggregator import KeyCache, find_keys
from .config import KEY_SEPARATOR, DetectorConfig, language_id_for_path
from .dictionary import LocaleDictionary, NullDictionary, locate_keys
from .errors import PatternCompileError
from .frameworks import FrameworkRegistry
from .models import KeyInDocument, KeyRange, KeyUsages, RewriteKeyContext, RewriteKeySource, ScopeRange
from .resolver import KeyOracle, NamespaceResolver
from .scopes import ScopeExtractor, ScopeIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Document:
    """An immutable text snapshot of one source or locale file."""

    path: str
    text: str
    language_id: str = ""

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "Document":
        path = Path(path)
        return cls(
            path=str(path),
            text=path.read_text(encoding="utf-8", errors="ignore"),
            language_id=language_id_for_path(path),
        )


class KeyDetector:
    """Find, locate and resolve translation keys in documents."""

    def __init__(
        self,
        config: Optional[DetectorConfig] = None,
        dictionary: Optional[KeyOracle] = None,
        registry: Optional[FrameworkRegistry] = None,
        cache: Optional[KeyCache] = None,
    ) -> None:
        self.config = config or DetectorConfig()
        self.dictionary = dictionary if dictionary is not None else NullDictionary()
        self.registry = registry or FrameworkRegistry(self.config)
        self.cache = cache if cache is not None else KeyCache()
        self.resolver = NamespaceResolver(
            self.dictionary,
            default_namespace=self.config.default_namespace,
            translation_function=self.config.translation_function,
            extractor=ScopeExtractor(
                default_namespace=self.config.default_namespace,
                common_namespace=self.config.common_namespace,
            ),
        )

    # ------------------------------------------------------------------
    # Patterns
    # ------------------------------------------------------------------

    def patterns_for(self, language_id: Optional[str] = None) -> List[Pattern[str]]:
        return self.registry.usage_patterns(language_id).patterns

    def pattern_errors(self, language_id: Optional[str] = None) -> List[PatternCompileError]:
        return self.registry.usage_patterns(language_id).errors

    # ------------------------------------------------------------------
    # Whole-document scans
    # ------------------------------------------------------------------

    def get_keys(
        self,
        document: Union[Document, str],
        patterns: Optional[Sequence[Pattern[str]]] = None,
        dot_ending: bool = False,
        scopes: Optional[Sequence[ScopeRange]] = None,
    ) -> List[KeyInDocument]:
        """All keys referenced in *document*, sorted by offset.

        Documents are cached by path when called with the default pattern
        set and scopes; plain strings are never cached.
        """
        if isinstance(document, str):
            return find_keys(
                document,
                patterns if patterns is not None else self.patterns_for(),
                self.resolver,
                self.registry,
                dot_ending=dot_ending,
                scopes=scopes or (),
                disable_path_parsing=self.config.disable_path_parsing,
            )

        cacheable = patterns is None and scopes is None and not dot_ending
        if cacheable:
            cached = self.cache.get(document.path)
            if cached is not None:
                return list(cached)

        if patterns is None:
            patterns = self.patterns_for(document.language_id)
        if scopes is None:
            scopes = self.registry.scope_ranges(document.text, document.language_id)

        context = RewriteKeyContext(
            target_file=document.path,
            namespaces=[scope.namespace for scope in scopes],
            namespace=None,
        )
        keys = find_keys(
            document.text,
            patterns,
            self.resolver,
            self.registry,
            dot_ending=dot_ending,
            rewrite_context=context,
            scopes=scopes,
            disable_path_parsing=self.config.disable_path_parsing,
        )
        logger.debug("Scanned %s: %d key(s), %d scope(s)", document.path, len(keys), len(scopes))
        if cacheable:
            self.cache.put(document.path, list(keys))
        return keys

    def get_key_by_content(self, text: str) -> List[str]:
        """Unique raw keys (as written, unresolved) in order of discovery."""
        keys: List[str] = []
        for pattern in self.patterns_for():
            for match in pattern.finditer(text):
                key = match.group(1) if pattern.groups else ""
                if key and key not in keys:
                    keys.append(key)
        return keys

    def notify_changed(self, path: Union[str, Path]) -> bool:
        """Drop the cached keys of one document after it was edited."""
        return self.cache.invalidate(str(path))

    # ------------------------------------------------------------------
    # Offset lookups
    # ------------------------------------------------------------------

    def _match_at(
        self, text: str, offset: int, language_id: Optional[str], dot_ending: bool
    ) -> Optional[Tuple[str, int, int]]:
        if self.config.disable_path_parsing:
            dot_ending = True

        for pattern in self.patterns_for(language_id):
            if not pattern.groups:
                continue
            for match in pattern.finditer(text):
                if match.start() > offset:
                    break
                if offset > match.end():
                    continue
                key = match.group(1) or ""
                if dot_ending and key and not key.endswith(KEY_SEPARATOR):
                    break
                return key, match.start(), match.end()
        return None

    def get_key_range(
        self,
        text: str,
        offset: int,
        language_id: Optional[str] = None,
        dot_ending: bool = False,
    ) -> Optional[KeyRange]:
        """The whole usage match covering *offset* and its raw key."""
        found = self._match_at(text, offset, language_id, dot_ending)
        if found is None:
            return None
        key, start, end = found
        return KeyRange(key=key, start=start, end=end)

    def get_key(
        self,
        text: str,
        offset: int,
        language_id: Optional[str] = None,
        dot_ending: bool = False,
    ) -> Optional[str]:
        found = self.get_key_range(text, offset, language_id, dot_ending)
        return found.key if found else None

    def get_key_and_range(
        self,
        text: str,
        offset: int,
        language_id: Optional[str] = None,
        dot_ending: bool = False,
    ) -> Optional[KeyRange]:
        """Like :meth:`get_key_range` but spanning only the key literal."""
        found = self._match_at(text, offset, language_id, dot_ending)
        if found is None or not found[0]:
            return None
        key, start, end = found
        key_start = start + text[start:end].rfind(key)
        return KeyRange(key=key, start=key_start, end=key_start + len(key))

    def get_scoped_namespace(self, text: str, offset: int, language_id: str) -> str:
        """Namespace of the nearest scope enclosing *offset*."""
        scopes = self.registry.scope_ranges(text, language_id)
        if scopes:
            scope = ScopeIndex(scopes).containing(offset)
            if scope and scope.namespace:
                return scope.namespace
        return self.config.default_namespace

    def rewrite_for(
        self,
        key: str,
        document: Document,
        offset: int,
        source: RewriteKeySource = "write",
    ) -> str:
        """Canonical key for a new reference inserted at *offset*."""
        scopes = self.registry.scope_ranges(document.text, document.language_id)
        context = RewriteKeyContext(
            target_file=document.path,
            namespace=self.get_scoped_namespace(document.text, offset, document.language_id),
            namespaces=[scope.namespace for scope in scopes],
        )
        return self.registry.rewrite_key(key, source, context)

    # ------------------------------------------------------------------
    # Usages
    # ------------------------------------------------------------------

    def get_usages(self, document: Document) -> Optional[KeyUsages]:
        """Keys of a locale file or of a supported source file."""
        locale_file = None
        if isinstance(self.dictionary, LocaleDictionary):
            locale_file = self.dictionary.file_for(document.path)

        if locale_file is not None:
            namespace = locale_file.namespace if self.config.namespace_enabled else None
            keys = [
                KeyInDocument(key=key, start=start, end=end, quoted=True)
                for key, start, end in locate_keys(document.text, locale_file.namespace)
                if self.dictionary.exists(key, locale_file.locale)
            ]
            return KeyUsages(type="locale", keys=keys, locale=locale_file.locale, namespace=namespace)

        if self.registry.is_language_supported(document.language_id):
            return KeyUsages(
                type="code",
                keys=self.get_keys(document),
                locale=self.config.display_language,
            )

        return None
