"""Framework adapters: usage patterns, scope markers and key templates.

Each framework contributes the call syntax it recognises, optionally the
namespace scopes its hooks declare, and the snippets used when a new
reference is inserted into source code.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence

from .config import DetectorConfig
from .models import RewriteKeyContext, RewriteKeySource, ScopeRange
from .patterns import DEFAULT_CALL_PATTERN, CompiledPatterns, PatternCache, PatternSpec
from .rewriter import KeyRewriter
from .scopes import ScopeExtractor

logger = logging.getLogger(__name__)


class Framework:
    """Base adapter. Subclasses override what their framework supports."""

    id: str = ""
    display: str = ""
    language_ids: Sequence[str] = ()
    usage_match_regex: Sequence[PatternSpec] = ()

    def __init__(self, config: Optional[DetectorConfig] = None) -> None:
        self.config = config or DetectorConfig()

    def supports(self, language_id: str) -> bool:
        return language_id in self.language_ids

    def get_scope_ranges(self, text: str, language_id: str) -> Optional[List[ScopeRange]]:
        return None

    def rewrite_keys(
        self,
        key: str,
        source: RewriteKeySource = "reference",
        context: Optional[RewriteKeyContext] = None,
    ) -> str:
        return key

    def refactor_templates(self, keypath: str, args: Sequence[str] = ()) -> List[str]:
        return [keypath]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"


class VueSFCFramework(Framework):
    id = "vue-sfc"
    display = "Vue SFC"
    language_ids = (
        "vue",
        "vue-html",
        "javascript",
        "typescript",
        "javascriptreact",
        "typescriptreact",
        "ejs",
    )
    usage_match_regex = (
        DEFAULT_CALL_PATTERN,
        r"""\Wt\(\s*['"`]({key})['"`]""",
    )

    def __init__(self, config: Optional[DetectorConfig] = None) -> None:
        super().__init__(config)
        self.extractor = ScopeExtractor(
            default_namespace=self.config.default_namespace,
            common_namespace=self.config.common_namespace,
        )
        self.rewriter = KeyRewriter(
            enable_key_prefix=self.config.enable_key_prefix,
            default_namespace=self.config.default_namespace,
        )

    def get_scope_ranges(self, text: str, language_id: str) -> Optional[List[ScopeRange]]:
        if not self.supports(language_id) or not self.config.enable_key_prefix:
            return None
        return self.extractor.extract_scopes(text)

    def rewrite_keys(
        self,
        key: str,
        source: RewriteKeySource = "reference",
        context: Optional[RewriteKeyContext] = None,
    ) -> str:
        return self.rewriter.rewrite_key(key, source, context)

    def refactor_templates(self, keypath: str, args: Sequence[str] = ()) -> List[str]:
        params = f"'{keypath}'"
        if args:
            params += f", [{', '.join(args)}]"
        return [
            f"{{{{ $tr({params}) }}}}",
            f"tr({params})",
            keypath,
        ]


class FlutterFramework(Framework):
    id = "flutter"
    display = "Flutter"
    language_ids = ("dart",)
    usage_match_regex = (
        re.compile(
            r"""[^\w\d]FlutterI18n\.(?:plural|translate)\([\w\d]+,\s?['"`]([\w\d\. \-\[\]]*?)['"`]"""
        ),
    )

    def refactor_templates(self, keypath: str, args: Sequence[str] = ()) -> List[str]:
        return [
            f'FlutterI18n.translate(buildContext, "{keypath}")',
            keypath,
        ]


FRAMEWORKS: Dict[str, type] = {
    VueSFCFramework.id: VueSFCFramework,
    FlutterFramework.id: FlutterFramework,
}


class FrameworkRegistry:
    """The enabled frameworks and the pattern set they produce together."""

    def __init__(
        self,
        config: Optional[DetectorConfig] = None,
        frameworks: Optional[Iterable[Framework]] = None,
        pattern_cache: Optional[PatternCache] = None,
    ) -> None:
        self.config = config or DetectorConfig()
        if frameworks is None:
            ids = self.config.enabled_frameworks or list(FRAMEWORKS)
            frameworks = []
            for framework_id in ids:
                cls = FRAMEWORKS.get(framework_id)
                if cls is None:
                    logger.warning("Unknown framework '%s' ignored", framework_id)
                    continue
                frameworks.append(cls(self.config))
        self.frameworks: List[Framework] = list(frameworks)
        self.pattern_cache = pattern_cache or PatternCache()

    def for_language(self, language_id: Optional[str]) -> List[Framework]:
        if language_id is None:
            return list(self.frameworks)
        return [f for f in self.frameworks if f.supports(language_id)]

    def is_language_supported(self, language_id: str) -> bool:
        return bool(self.for_language(language_id))

    def usage_specs(self, language_id: Optional[str] = None) -> List[PatternSpec]:
        if self.config.usage_match_regex:
            return list(self.config.usage_match_regex)
        specs: List[PatternSpec] = []
        for framework in self.for_language(language_id):
            for spec in framework.usage_match_regex:
                if spec not in specs:
                    specs.append(spec)
        return specs

    def usage_patterns(self, language_id: Optional[str] = None) -> CompiledPatterns:
        return self.pattern_cache.get(self.usage_specs(language_id), self.config.regex_key)

    def scope_ranges(self, text: str, language_id: str) -> List[ScopeRange]:
        ranges: List[ScopeRange] = []
        for framework in self.frameworks:
            ranges.extend(framework.get_scope_ranges(text, language_id) or [])
        return ranges

    def rewrite_key(
        self,
        key: str,
        source: RewriteKeySource = "reference",
        context: Optional[RewriteKeyContext] = None,
    ) -> str:
        for framework in self.frameworks:
            key = framework.rewrite_keys(key, source, context)
        return key

    def refactor_templates(self, keypath: str, language_id: str, args: Sequence[str] = ()) -> List[str]:
        templates: List[str] = []
        for framework in self.for_language(language_id):
            for template in framework.refactor_templates(keypath, args):
                if template not in templates:
                    templates.append(template)
        return templates or [keypath]
