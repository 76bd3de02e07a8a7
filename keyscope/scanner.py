"""Project-wide scan: detected keys per file, checked against the dictionary."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from .config import SKIP_DIRS, language_id_for_path
from .detector import Document, KeyDetector
from .dictionary import LocaleDictionary

logger = logging.getLogger(__name__)


@dataclass
class KeyReport:
    key: str
    line: int
    column: int
    start: int
    end: int
    exists: bool


@dataclass
class FileReport:
    path: str
    language_id: str
    keys: List[KeyReport] = field(default_factory=list)

    @property
    def missing(self) -> List[KeyReport]:
        return [k for k in self.keys if not k.exists]


def line_and_column(text: str, offset: int) -> tuple[int, int]:
    """1-based line and column of *offset*."""
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column


class ProjectScanner:
    """Walk a source tree and report the keys referenced in each file."""

    def __init__(self, project_root: Path, detector: KeyDetector) -> None:
        self.project_root = Path(project_root)
        self.detector = detector

    def _locale_root(self) -> Optional[Path]:
        dictionary = self.detector.dictionary
        if isinstance(dictionary, LocaleDictionary):
            return dictionary.root.resolve()
        return None

    def iter_files(self) -> Iterator[Path]:
        locale_root = self._locale_root()
        for path in sorted(self.project_root.rglob("*")):
            if not path.is_file():
                continue
            if any(part in SKIP_DIRS for part in path.relative_to(self.project_root).parts):
                continue
            if locale_root is not None and path.resolve().is_relative_to(locale_root):
                continue
            language_id = language_id_for_path(path)
            if language_id and self.detector.registry.is_language_supported(language_id):
                yield path

    def scan_file(self, path: Path) -> FileReport:
        document = Document.from_path(path)
        report = FileReport(
            path=str(path.relative_to(self.project_root)) if path.is_relative_to(self.project_root) else str(path),
            language_id=document.language_id,
        )
        for found in self.detector.get_keys(document):
            line, column = line_and_column(document.text, found.start)
            report.keys.append(KeyReport(
                key=found.key,
                line=line,
                column=column,
                start=found.start,
                end=found.end,
                exists=self.detector.dictionary.exists(found.key),
            ))
        return report

    def scan(self) -> List[FileReport]:
        reports: List[FileReport] = []
        for path in self.iter_files():
            try:
                report = self.scan_file(path)
            except OSError as exc:
                logger.warning("Failed to read %s: %s", path, exc)
                continue
            if report.keys:
                reports.append(report)
        return reports

    @staticmethod
    def summarize(reports: List[FileReport]) -> Dict[str, int]:
        return {
            "files": len(reports),
            "keys": sum(len(r.keys) for r in reports),
            "missing": sum(len(r.missing) for r in reports),
        }
