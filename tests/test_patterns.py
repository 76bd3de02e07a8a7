"""Tests for usage pattern compilation."""

import logging
import re

from keyscope.config import DEFAULT_REGEX_KEY
from keyscope.patterns import DEFAULT_CALL_PATTERN, PatternCache, compile_template, compile_usage_patterns


def test_template_placeholder_is_replaced():
    pattern = compile_template(r"\Wt\(\s*['\"`]({key})['\"`]", r"[\w.]+")
    assert pattern.pattern == r"\Wt\(\s*['\"`]([\w.]+)['\"`]"
    assert pattern.flags & re.MULTILINE


def test_default_regex_key_matches_dotted_keys():
    pattern = compile_template(r"\Wt\('({key})'\)", DEFAULT_REGEX_KEY)
    assert pattern.search(" t('a.b-c d')").group(1) == "a.b-c d"


def test_precompiled_patterns_pass_through():
    compiled = compile_usage_patterns([DEFAULT_CALL_PATTERN])
    assert compiled.patterns == [DEFAULT_CALL_PATTERN]
    assert compiled.errors == []


def test_malformed_template_is_skipped_and_logged(caplog):
    with caplog.at_level(logging.ERROR, logger="keyscope.patterns"):
        compiled = compile_usage_patterns([r"\Wt\(({key}", r"\Wx\('({key})'\)"])

    assert len(compiled) == 1
    assert compiled.patterns[0].search(" x('ok')").group(1) == "ok"
    assert len(compiled.errors) == 1
    assert compiled.errors[0].template == r"\Wt\(({key}"
    assert "Failed to parse custom regex" in caplog.text


def test_order_is_preserved():
    compiled = compile_usage_patterns([r"a({key})", DEFAULT_CALL_PATTERN, r"b({key})"])
    assert compiled.patterns[1] is DEFAULT_CALL_PATTERN
    assert compiled.patterns[0].pattern.startswith("a(")
    assert compiled.patterns[2].pattern.startswith("b(")


def test_pattern_cache_compiles_once():
    cache = PatternCache()
    first = cache.get([r"a({key})"])
    second = cache.get([r"a({key})"])
    other = cache.get([r"a({key})"], regex_key=r"\w+")

    assert first is second
    assert other is not first
    assert len(cache) == 2
    cache.clear()
    assert len(cache) == 0


def test_default_call_pattern_groups():
    text = " tr('a.b', {x: 1}, {nsIndex: 2})"
    match = DEFAULT_CALL_PATTERN.search(text)
    assert match.group(1) == "a.b"
    assert match.group(2) == "2"
