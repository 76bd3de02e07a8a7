"""Namespace resolution for raw key matches."""

from __future__ import annotations

import logging
import re
from typing import Optional, Protocol, Sequence, Tuple

from .config import DEFAULT_NAMESPACE, KEY_SEPARATOR
from .models import RawMatch, ScopeRange
from .scopes import ScopeExtractor, ScopeIndex

logger = logging.getLogger(__name__)

_CALL_IDENTIFIER = re.compile(r"([A-Za-z_$][\w$]*)\s*\(")


class KeyOracle(Protocol):
    """Anything that can tell whether a fully-qualified key exists."""

    def exists(self, key: str) -> bool: ...


def call_identifier(match_text: str) -> str:
    """Identifier directly before the first opening parenthesis of a call."""
    found = _CALL_IDENTIFIER.search(match_text)
    return found.group(1) if found else ""


class NamespaceResolver:
    """Pick the namespace for a raw match and build the qualified key.

    A bare ``tr(...)`` call uses the first scope in the document. An alias such
    as ``trSettings(...)`` uses the scope whose marker statement binds that
    name, then the first scope whose marker declares only its own namespace,
    then the first scope. When the scoped key is not in the dictionary the
    key is assumed to live in the default namespace.
    """

    def __init__(
        self,
        oracle: KeyOracle,
        default_namespace: str = DEFAULT_NAMESPACE,
        translation_function: str = "tr",
        extractor: Optional[ScopeExtractor] = None,
    ) -> None:
        self.oracle = oracle
        self.default_namespace = default_namespace
        self.translation_function = translation_function
        self.extractor = extractor or ScopeExtractor(default_namespace=default_namespace)

    def is_alias(self, identifier: str) -> bool:
        bare = self.translation_function
        return identifier != bare and identifier.startswith(bare)

    def bound_scope(self, text: str, identifier: str, index: ScopeIndex) -> Optional[ScopeRange]:
        """Scope whose marker statement binds *identifier*, e.g. ``{ t: trUser } = useTranslation([...])``."""
        name = re.compile(rf"(?<![\w$]){re.escape(identifier)}(?![\w$])")
        for scope in index:
            line_start = text.rfind("\n", 0, scope.start) + 1
            if name.search(text, line_start, scope.start):
                return scope
        return None

    def target_scope(self, text: str, raw: RawMatch, index: ScopeIndex) -> Optional[ScopeRange]:
        if not len(index):
            return None

        identifier = call_identifier(raw.text)
        if self.is_alias(identifier):
            bound = self.bound_scope(text, identifier, index)
            if bound is not None:
                return bound
            for scope in index:
                if self.extractor.declares_only(text, scope, scope.namespace):
                    return scope
            logger.debug("No scope bound to alias '%s'; using first scope", identifier)
            return index.first()

        return index.first()

    def namespace_candidates(self, scope: Optional[ScopeRange]) -> Sequence[str]:
        if scope is None or not scope.namespaces:
            return [self.default_namespace]
        return scope.namespaces

    def pick_namespace(self, candidates: Sequence[str], ns_index: int) -> str:
        if 0 <= ns_index < len(candidates) and candidates[ns_index]:
            return candidates[ns_index]
        if candidates and candidates[0]:
            return candidates[0]
        return self.default_namespace

    def qualify(self, key: str, namespace: str) -> str:
        if namespace != self.default_namespace:
            candidate = f"{namespace}{KEY_SEPARATOR}{key}"
            if self.oracle.exists(candidate):
                return candidate
            return f"{self.default_namespace}{KEY_SEPARATOR}{key}"
        return f"{namespace}{KEY_SEPARATOR}{key}"

    def resolve(
        self,
        text: str,
        raw: RawMatch,
        scopes: Sequence[ScopeRange] | ScopeIndex = (),
    ) -> Tuple[str, str]:
        """Return ``(qualified_key, namespace)`` for *raw*."""
        index = scopes if isinstance(scopes, ScopeIndex) else ScopeIndex(scopes)
        scope = self.target_scope(text, raw, index)
        namespace = self.pick_namespace(self.namespace_candidates(scope), raw.ns_index)
        return self.qualify(raw.key, namespace), namespace
