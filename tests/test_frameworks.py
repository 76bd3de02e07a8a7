"""Tests for framework adapters and the registry."""

from keyscope.config import DetectorConfig
from keyscope.frameworks import FlutterFramework, FrameworkRegistry, VueSFCFramework
from keyscope.models import RewriteKeyContext
from keyscope.patterns import DEFAULT_CALL_PATTERN


def test_vue_refactor_templates():
    vue = VueSFCFramework()
    assert vue.refactor_templates("home.title") == [
        "{{ $tr('home.title') }}",
        "tr('home.title')",
        "home.title",
    ]
    assert vue.refactor_templates("count", ["n", "m"])[1] == "tr('count', [n, m])"


def test_flutter_refactor_templates():
    assert FlutterFramework().refactor_templates("a.b") == [
        'FlutterI18n.translate(buildContext, "a.b")',
        "a.b",
    ]


def test_vue_scope_ranges_respect_language_and_prefix_option():
    text = "useTranslation(['settings'])"
    assert VueSFCFramework().get_scope_ranges(text, "typescript")[0].namespace == "settings"
    assert VueSFCFramework().get_scope_ranges(text, "dart") is None
    disabled = VueSFCFramework(DetectorConfig(enable_key_prefix=False))
    assert disabled.get_scope_ranges(text, "typescript") is None


def test_vue_rewrite_uses_context_namespace():
    vue = VueSFCFramework()
    assert vue.rewrite_keys("title", "write", RewriteKeyContext(namespace="settings")) == "settings.title"
    assert vue.rewrite_keys("a.title", "write", RewriteKeyContext(namespace="settings")) == "a.title"


def test_flutter_pattern_matches_translate_call():
    [pattern] = FlutterFramework.usage_match_regex
    match = pattern.search('Text(FlutterI18n.translate(context, "home.title"))')
    assert match.group(1) == "home.title"


class TestFrameworkRegistry:
    def test_default_enables_all(self):
        registry = FrameworkRegistry()
        assert [f.id for f in registry.frameworks] == ["vue-sfc", "flutter"]

    def test_enabled_frameworks_from_config(self):
        registry = FrameworkRegistry(DetectorConfig(enabled_frameworks=["flutter", "nope"]))
        assert [f.id for f in registry.frameworks] == ["flutter"]

    def test_language_support(self):
        registry = FrameworkRegistry()
        assert registry.is_language_supported("vue")
        assert registry.is_language_supported("dart")
        assert not registry.is_language_supported("python")

    def test_usage_patterns_per_language(self):
        registry = FrameworkRegistry()
        ts = registry.usage_patterns("typescript").patterns
        dart = registry.usage_patterns("dart").patterns
        every = registry.usage_patterns().patterns

        assert ts[0] is DEFAULT_CALL_PATTERN
        assert len(ts) == 2
        assert len(dart) == 1
        assert len(every) == 3

    def test_config_override_replaces_framework_patterns(self):
        registry = FrameworkRegistry(DetectorConfig(usage_match_regex=[r"\W_\('({key})'\)", r"bad(({key}"]))
        compiled = registry.usage_patterns("typescript")
        assert len(compiled.patterns) == 1
        assert len(compiled.errors) == 1
        assert registry.usage_patterns("typescript") is compiled

    def test_scope_ranges_and_rewrite(self):
        registry = FrameworkRegistry()
        scopes = registry.scope_ranges("useTranslation(['a'])", "vue")
        assert [s.namespace for s in scopes] == ["a"]
        assert registry.rewrite_key("x", "write", RewriteKeyContext(namespace="a")) == "a.x"

    def test_refactor_templates_for_language(self):
        registry = FrameworkRegistry()
        assert registry.refactor_templates("k", "dart")[0].startswith("FlutterI18n")
        assert registry.refactor_templates("k", "python") == ["k"]
