"""Tests for the key rewrite policy."""

import pytest

from keyscope.models import RewriteKeyContext
from keyscope.rewriter import KeyRewriter


@pytest.mark.parametrize("key", ["title", "home.title", "", "a.b.c", "trailing."])
def test_rewrite_is_idempotent(rewriter, key):
    context = RewriteKeyContext(namespace="settings")
    once = rewriter.rewrite_key(key, "reference", context)
    assert rewriter.rewrite_key(once, "reference", context) == once


def test_bare_key_gets_context_namespace(rewriter):
    assert rewriter.rewrite_key("title", "reference", RewriteKeyContext(namespace="settings")) == "settings.title"


def test_bare_key_without_namespace_uses_default(rewriter):
    assert rewriter.rewrite_key("title") == "common.title"
    assert rewriter.rewrite_key("title", "write", RewriteKeyContext()) == "common.title"


def test_qualified_key_is_unchanged(rewriter):
    assert rewriter.rewrite_key("home.title", "reference", RewriteKeyContext(namespace="x")) == "home.title"


def test_disabled_prefix_returns_key():
    rewriter = KeyRewriter(enable_key_prefix=False)
    assert rewriter.rewrite_key("title", "reference", RewriteKeyContext(namespace="x")) == "title"
