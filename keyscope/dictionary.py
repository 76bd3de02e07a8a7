"""In-memory locale dictionary backed by JSON files.

Expected layout::

    locales/
      en/
        common.json        -> namespace "common"
        settings.json      -> namespace "settings"
        admin/users.json   -> namespace "admin.users"
        share/links.json   -> namespace "global"

Nested JSON objects are flattened into dot-separated keypaths prefixed by
the namespace, e.g. ``settings.profile.title``.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .config import DEFAULT_NAMESPACE, KEY_SEPARATOR
from .errors import DictionaryWriteError

logger = logging.getLogger(__name__)

SHARE_DIR = "share"
SHARE_NAMESPACE = "global"


@dataclass(frozen=True)
class LocaleFile:
    filepath: str
    locale: str
    namespace: str


def flatten(obj: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in obj.items():
        full_key = f"{prefix}{KEY_SEPARATOR}{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(flatten(value, full_key))
        else:
            flat[full_key] = value
    return flat


class LocaleDictionary:
    """Flattened view over every locale file under *root*."""

    def __init__(self, root: Path, default_namespace: str = DEFAULT_NAMESPACE) -> None:
        self.root = Path(root).resolve()
        self.default_namespace = default_namespace
        self._values: Dict[str, Dict[str, Any]] = {}
        self._files: Dict[str, LocaleFile] = {}
        self.reload()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def reload(self) -> None:
        self._values = {}
        self._files = {}
        if not self.root.is_dir():
            logger.debug("Locale directory %s does not exist", self.root)
            return

        for locale_dir in sorted(p for p in self.root.iterdir() if p.is_dir()):
            for path in sorted(locale_dir.rglob("*.json")):
                self._load_file(path, locale_dir.name)

        logger.debug(
            "Loaded %d locale file(s) for %d locale(s)", len(self._files), len(self._values)
        )

    def _namespace_for(self, path: Path, locale_dir: Path) -> str:
        rel = path.relative_to(locale_dir).with_suffix("")
        if rel.parts and rel.parts[0] == SHARE_DIR:
            return SHARE_NAMESPACE
        return KEY_SEPARATOR.join(rel.parts)

    def _load_file(self, path: Path, locale: str) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Failed to load %s: %s", path, exc)
            return
        if not isinstance(data, dict):
            logger.warning("Skipping %s: top level is not an object", path)
            return

        namespace = self._namespace_for(path, self.root / locale)
        self._files[str(path)] = LocaleFile(str(path), locale, namespace)
        values = self._values.setdefault(locale, {})
        values.update(flatten(data, namespace))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def locales(self) -> List[str]:
        return sorted(self._values)

    @property
    def files(self) -> List[LocaleFile]:
        return list(self._files.values())

    def exists(self, key: str, locale: Optional[str] = None) -> bool:
        if locale is not None:
            return key in self._values.get(locale, {})
        return any(key in values for values in self._values.values())

    def get(self, key: str, locale: str) -> Optional[Any]:
        return self._values.get(locale, {}).get(key)

    def keys(self, locale: Optional[str] = None) -> Iterator[str]:
        if locale is not None:
            yield from sorted(self._values.get(locale, {}))
            return
        seen = set()
        for values in self._values.values():
            seen.update(values)
        yield from sorted(seen)

    def file_for(self, filepath: str | Path) -> Optional[LocaleFile]:
        return self._files.get(str(Path(filepath).resolve()))

    def get_namespace_from_filepath(self, filepath: str | Path) -> Optional[str]:
        entry = self.file_for(filepath)
        return entry.namespace if entry else None

    # ------------------------------------------------------------------
    # Write-back
    # ------------------------------------------------------------------

    def _target_for(self, keypath: str, locale: str) -> tuple[Path, str]:
        namespace, sep, rest = keypath.partition(KEY_SEPARATOR)
        if not sep:
            namespace, rest = self.default_namespace, keypath
        ns_path = Path(*namespace.split(KEY_SEPARATOR))
        return self.root / locale / ns_path.with_suffix(".json"), rest

    def write(
        self,
        value: Any,
        keypath: str,
        locale: str,
        filepath: Optional[str | Path] = None,
    ) -> Path:
        """Store *value* at *keypath* and update the in-memory index.

        Without *filepath* the namespace segment of the keypath selects
        ``<root>/<locale>/<namespace>.json``. With an explicit *filepath*
        the keypath is written relative to that file.

        Raises:
            DictionaryWriteError: If the file cannot be read or written or
                the keypath collides with an existing leaf value.
        """
        if filepath is not None:
            target, inner = Path(filepath).resolve(), keypath
        else:
            target, inner = self._target_for(keypath, locale)
        if not inner:
            raise DictionaryWriteError(keypath, str(target), "empty keypath")

        data: Dict[str, Any] = {}
        if target.exists():
            try:
                data = json.loads(target.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                raise DictionaryWriteError(keypath, str(target), str(exc)) from exc

        node = data
        parts = inner.split(KEY_SEPARATOR)
        for part in parts[:-1]:
            child = node.setdefault(part, {})
            if not isinstance(child, dict):
                raise DictionaryWriteError(keypath, str(target), f"'{part}' is not an object")
            node = child
        node[parts[-1]] = value

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise DictionaryWriteError(keypath, str(target), str(exc)) from exc

        logger.info("Wrote '%s' (%s) to %s", keypath, locale, target)
        if target.is_relative_to(self.root / locale):
            self._load_file(target, locale)
        return target


class NullDictionary:
    """Oracle used when no locale files are loaded: nothing exists."""

    def exists(self, key: str, locale: Optional[str] = None) -> bool:
        return False


_JSON_TOKEN = re.compile(r'"(?:\\.|[^"\\])*"|[{}\[\]:,]')


def locate_keys(text: str, prefix: str = "") -> List[Tuple[str, int, int]]:
    """Leaf keypaths of a JSON locale file with the offsets of their names.

    Returns ``(keypath, start, end)`` where ``start``/``end`` delimit the
    key name without its quotes. Keys inside arrays are skipped.
    """
    tokens = list(_JSON_TOKEN.finditer(text))
    containers: List[Tuple[str, Optional[str]]] = []
    pending: Optional[str] = None
    found: List[Tuple[str, int, int]] = []

    for i, tok in enumerate(tokens):
        value = tok.group(0)
        if value in ("{", "["):
            containers.append(("obj" if value == "{" else "arr", pending))
            pending = None
        elif value in ("}", "]"):
            if containers:
                containers.pop()
        elif value in (":", ","):
            continue
        else:
            next_tok = tokens[i + 1].group(0) if i + 1 < len(tokens) else ""
            if not containers or containers[-1][0] != "obj" or next_tok != ":":
                continue
            try:
                name = json.loads(value)
            except ValueError:
                name = value[1:-1]
            pending = name
            value_tok = tokens[i + 2].group(0) if i + 2 < len(tokens) else ""
            if value_tok in ("{", "["):
                continue
            if any(kind == "arr" for kind, _ in containers):
                continue
            parts = [prefix] if prefix else []
            parts += [key for _, key in containers if key is not None]
            parts.append(name)
            found.append((KEY_SEPARATOR.join(parts), tok.start() + 1, tok.end() - 1))

    return found
