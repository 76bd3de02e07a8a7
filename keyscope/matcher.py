"""Usage matching: raw key occurrences found by the compiled patterns."""

from __future__ import annotations

from typing import Iterable, Iterator, Pattern

from .models import RawMatch


def _group(match, index: int) -> str:
    if match.re.groups < index:
        return ""
    return match.group(index) or ""


def find_usages(text: str, patterns: Iterable[Pattern[str]]) -> Iterator[RawMatch]:
    """Yield raw matches for each pattern in order.

    Group 1 holds the key literal, optional group 2 the namespace index.
    Matches with an empty key are dropped.
    """
    for pattern in patterns:
        for match in pattern.finditer(text):
            key = _group(match, 1)
            if not key:
                continue
            ns_hint = _group(match, 2)
            match_text = match.group(0)
            start = match.start() + match_text.rfind(key)
            yield RawMatch(
                text=match_text,
                key=key,
                ns_index=int(ns_hint) if ns_hint.isdigit() else 0,
                match_start=match.start(),
                start=start,
                end=start + len(key),
            )
