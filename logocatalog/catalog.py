from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

DEFAULT_BACKGROUND_COLOR = "ffffff"
DEFAULT_CATEGORY = ""
DEFAULT_BARCODE_FORMAT = "CODE_128"

logger = logging.getLogger("catalog")


@dataclass
class StoreEntry:
    name: str
    source: str
    background_color: str = DEFAULT_BACKGROUND_COLOR
    aliases: str | None = None
    category: str = DEFAULT_CATEGORY
    barcode_format: str = DEFAULT_BARCODE_FORMAT

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "backgroundColor": self.background_color,
            "source": self.source,
            "aliases": self.aliases,
            "category": self.category,
            "barcodeFormat": self.barcode_format,
        }


def build_entry(name: str, identifier: str) -> StoreEntry:
    return StoreEntry(name=name, source=identifier)


def load_catalog(path: Path) -> list[Any]:
    """Load the catalog as a list, treating unusable content as empty.

    A single JSON object is wrapped into a one-element list. Invalid JSON or a
    top-level scalar is logged as a warning and discarded; the catalog is
    rebuilt from scratch on the next save.
    """
    if not path.exists():
        return []
    raw = path.read_bytes()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        logger.warning("CATALOG WARNING %s is not UTF-8, starting empty (%s)", path, exc)
        return []
    if not text.strip():
        return []
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("CATALOG WARNING %s is not valid JSON, starting empty (%s)", path, exc)
        return []
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return [data]
    logger.warning("CATALOG WARNING %s holds %s, starting empty", path, type(data).__name__)
    return []


def append_entry(entries: list[Any], entry: StoreEntry) -> list[Any]:
    return [*entries, entry.to_dict()]


def save_catalog(path: Path, entries: list[Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(entries, ensure_ascii=False, indent=2) + "\n"
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
