"""Configuration paths and detector settings for keyscope."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List

BASE_DIR = Path(os.environ.get("KEYSCOPE_HOME", str(Path.home() / ".keyscope"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

DEFAULT_NAMESPACE = "common"
DEFAULT_REGEX_KEY = r"[\w\d\. \-\[\]]*?"
KEY_SEPARATOR = "."
QUOTE_SYMBOLS = ("'", '"', "`")

SOURCE_LANGUAGES: Dict[str, str] = {
    ".vue": "vue",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".ejs": "ejs",
    ".dart": "dart",
}

SKIP_DIRS = {
    ".git", "node_modules", "dist", "build", ".next", ".nuxt",
    ".venv", "venv", "__pycache__", ".dart_tool", "coverage",
}


@dataclass
class DetectorConfig:
    """Options read by the detection engine.

    Loaded from the ``[detector]`` table of ``config.toml``; anything not
    set there keeps the default below.
    """

    disable_path_parsing: bool = False
    default_namespace: str = DEFAULT_NAMESPACE
    common_namespace: str = DEFAULT_NAMESPACE
    enable_key_prefix: bool = True
    regex_key: str = DEFAULT_REGEX_KEY
    usage_match_regex: List[str] = field(default_factory=list)
    translation_function: str = "tr"
    display_language: str = "en"
    namespace_enabled: bool = True
    locales_dir: str = "locales"
    enabled_frameworks: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "DetectorConfig":
        known = {f.name: f for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for name, value in values.items():
            if name not in known:
                continue
            default = getattr(cls(), name)
            if isinstance(default, bool):
                kwargs[name] = _coerce_bool(value)
            elif isinstance(default, list):
                kwargs[name] = [value] if isinstance(value, str) else list(value)
            else:
                kwargs[name] = str(value)
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def language_id_for_path(path: str | Path) -> str:
    """Map a file path to an editor-style language id ("" when unknown)."""
    return SOURCE_LANGUAGES.get(Path(path).suffix.lower(), "")
