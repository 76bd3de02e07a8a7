"""Tests for key aggregation: dedup, ordering, dot-ending and caching."""

import re

import pytest

from keyscope.aggregator import KeyCache, accepts_key, find_keys
from keyscope.models import KeyInDocument, RewriteKeyContext
from keyscope.patterns import DEFAULT_CALL_PATTERN
from keyscope.scopes import ScopeExtractor


def _find(text, resolver, rewriter, patterns=(DEFAULT_CALL_PATTERN,), **kwargs):
    scopes = ScopeExtractor().extract_scopes(text)
    return find_keys(text, list(patterns), resolver, rewriter, scopes=scopes, **kwargs)


def test_single_unscoped_reference(resolver_factory, rewriter):
    text = "a(); tr('home.title'); b();"
    keys = _find(text, resolver_factory(), rewriter)

    start = text.index("home.title")
    assert keys == [KeyInDocument(key="common.home.title", start=start, end=start + 10, quoted=True)]


def test_scoped_reference_resolves_against_dictionary(resolver_factory, rewriter):
    text = "const { tr } = useTranslation(['settings'])\nconst a = tr('label')"
    assert [k.key for k in _find(text, resolver_factory({"settings.label"}), rewriter)] == ["settings.label"]
    assert [k.key for k in _find(text, resolver_factory({"common.label"}), rewriter)] == ["common.label"]


def test_same_start_from_two_patterns_keeps_first(resolver_factory, rewriter):
    text = " tr('home.title')"
    prefix_only = re.compile(r"\('(home)")

    keys = _find(text, resolver_factory(), rewriter, patterns=[DEFAULT_CALL_PATTERN, prefix_only])
    assert [k.key for k in keys] == ["common.home.title"]

    keys = _find(text, resolver_factory(), rewriter, patterns=[prefix_only, DEFAULT_CALL_PATTERN])
    assert [k.key for k in keys] == ["common.home"]


def test_output_is_sorted_and_unique_by_start(resolver_factory, rewriter):
    text = " tr('b') x('a') tr('c') x('d')"
    second = re.compile(r"\Wx\('(\w+)'\)")
    keys = _find(text, resolver_factory(), rewriter, patterns=[DEFAULT_CALL_PATTERN, second])

    starts = [k.start for k in keys]
    assert starts == sorted(starts)
    assert len(set(starts)) == len(starts)
    assert [k.key for k in keys] == ["common.b", "common.a", "common.c", "common.d"]


def test_results_are_deterministic(resolver_factory, rewriter):
    text = "useTranslation(['s'])\n tr('x') tr('y', {nsIndex: 0})"
    resolver = resolver_factory({"s.x"})
    assert _find(text, resolver, rewriter) == _find(text, resolver, rewriter)


@pytest.mark.parametrize("key,dot_ending,accepted", [
    ("a.b", False, True),
    ("a.", False, False),
    ("a.", True, True),
    ("", True, True),
    ("a.b", True, False),
])
def test_accepts_key(key, dot_ending, accepted):
    assert accepts_key(key, dot_ending) is accepted


def test_normal_mode_drops_trailing_separator(resolver_factory, rewriter):
    text = " tr('user.') tr('user.name')"
    keys = _find(text, resolver_factory(), rewriter)
    assert [k.key for k in keys] == ["common.user.name"]
    assert not any(k.key.endswith(".") for k in keys)


def test_disabled_path_parsing_forces_dot_ending(resolver_factory, rewriter):
    text = " tr('user.') tr('user.name')"
    keys = _find(text, resolver_factory(), rewriter, dot_ending=False, disable_path_parsing=True)
    assert [k.key for k in keys] == ["common.user."]
    assert all(not k.key or k.key.endswith(".") for k in keys)


def test_quoted_flag(resolver_factory, rewriter):
    text = " tr(home.title)"
    unquoted = re.compile(r"\Wtr\(([\w.]+)\)")
    [key] = _find(text, resolver_factory(), rewriter, patterns=[unquoted])
    assert key.quoted is False


def test_rewrite_context_receives_namespace(resolver_factory):
    seen = []

    class RecordingRewriter:
        def rewrite_key(self, key, source="reference", context=None):
            seen.append((key, source, context))
            return key

    text = "useTranslation(['settings'])\n tr('label')"
    context = RewriteKeyContext(target_file="a.tsx", namespaces=["settings"])
    _find(text, resolver_factory({"settings.label"}), RecordingRewriter(), rewrite_context=context)

    [(key, source, passed)] = seen
    assert key == "settings.label"
    assert source == "reference"
    assert passed.namespace == "settings"
    assert passed.target_file == "a.tsx"
    assert context.namespace is None


class TestKeyCache:
    def test_put_get_invalidate(self):
        cache = KeyCache()
        keys = [KeyInDocument("common.a", 1, 2, True)]
        cache.put("/a.ts", keys)
        cache.put("/b.ts", [])

        assert cache.get("/a.ts") is keys
        assert cache.invalidate("/a.ts") is True
        assert cache.get("/a.ts") is None
        assert "/b.ts" in cache
        assert cache.invalidate("/a.ts") is False

    def test_clear(self):
        cache = KeyCache()
        cache.put("/a.ts", [])
        cache.clear()
        assert len(cache) == 0
