"""Usage-match pattern compilation.

Patterns arrive either precompiled or as template strings in which every
``{key}`` placeholder is replaced by the configured key regex before
compilation. A template that fails to compile is logged and skipped; the
rest of the set is still usable.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Pattern, Sequence, Tuple, Union

from .config import DEFAULT_REGEX_KEY
from .errors import PatternCompileError

logger = logging.getLogger(__name__)

KEY_PLACEHOLDER = "{key}"

PatternSpec = Union[str, Pattern[str]]

# tr('key'), trX('key', [args] | {opts}), tr('key', {nsIndex: 1})
DEFAULT_CALL_PATTERN = re.compile(
    r"\Wtr\w*\('([\w.-]+)'"
    r"(?:\s*,\s*(?:\[[^\]]*\]|\{[^}]*\}))??"
    r"(?:\s*,\s*\{\s*nsIndex:\s*(\d+)\s*\})?\)"
)


@dataclass
class CompiledPatterns:
    patterns: List[Pattern[str]] = field(default_factory=list)
    errors: List[PatternCompileError] = field(default_factory=list)

    def __iter__(self):
        return iter(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)


def compile_template(template: str, regex_key: str = DEFAULT_REGEX_KEY) -> Pattern[str]:
    """Substitute the key placeholder and compile one template.

    Raises:
        PatternCompileError: If the resulting expression is invalid.
    """
    expanded = template.replace(KEY_PLACEHOLDER, regex_key)
    try:
        return re.compile(expanded, re.MULTILINE)
    except re.error as exc:
        raise PatternCompileError(template, str(exc)) from exc


def compile_usage_patterns(
    specs: Iterable[PatternSpec],
    regex_key: str = DEFAULT_REGEX_KEY,
) -> CompiledPatterns:
    """Compile a mixed list of templates and patterns, order preserved."""
    result = CompiledPatterns()
    for spec in specs:
        if isinstance(spec, re.Pattern):
            result.patterns.append(spec)
            continue
        try:
            result.patterns.append(compile_template(spec, regex_key))
        except PatternCompileError as exc:
            logger.error("%s", exc)
            result.errors.append(exc)
    return result


class PatternCache:
    """Compile each (specs, regex_key) combination once."""

    def __init__(self) -> None:
        self._compiled: Dict[Tuple[Tuple[PatternSpec, ...], str], CompiledPatterns] = {}

    def get(self, specs: Sequence[PatternSpec], regex_key: str = DEFAULT_REGEX_KEY) -> CompiledPatterns:
        cache_key = (tuple(specs), regex_key)
        compiled = self._compiled.get(cache_key)
        if compiled is None:
            compiled = compile_usage_patterns(specs, regex_key)
            self._compiled[cache_key] = compiled
        return compiled

    def clear(self) -> None:
        self._compiled.clear()

    def __len__(self) -> int:
        return len(self._compiled)
