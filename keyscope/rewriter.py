"""Key rewrite policy: namespace prefixing for bare keys."""

from __future__ import annotations

from typing import Optional, Protocol

from .config import DEFAULT_NAMESPACE, KEY_SEPARATOR
from .models import RewriteKeyContext, RewriteKeySource


class RewritePolicy(Protocol):
    def rewrite_key(
        self,
        key: str,
        source: RewriteKeySource = "reference",
        context: Optional[RewriteKeyContext] = None,
    ) -> str: ...


class KeyRewriter:
    """Prefix bare keys with the active namespace.

    Keys that already contain a separator are returned untouched, so
    applying the rewrite twice gives the same result as applying it once.
    """

    def __init__(self, enable_key_prefix: bool = True, default_namespace: str = DEFAULT_NAMESPACE) -> None:
        self.enable_key_prefix = enable_key_prefix
        self.default_namespace = default_namespace

    def rewrite_key(
        self,
        key: str,
        source: RewriteKeySource = "reference",
        context: Optional[RewriteKeyContext] = None,
    ) -> str:
        if not self.enable_key_prefix:
            return key
        if KEY_SEPARATOR in key:
            return key
        namespace = (context.namespace if context else None) or self.default_namespace
        return f"{namespace}{KEY_SEPARATOR}{key}"
