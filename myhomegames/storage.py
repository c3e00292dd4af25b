"""JSON file persistence and per-entity content directories.

Metadata files are read whole and written whole. Reads are fail-open: a
missing or corrupt file is logged and treated as its default value, so one
bad file degrades that resource to "empty" instead of taking the server down.
"""
from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Iterable

from .api_utils import StorageError
from .utils import is_within

logger = logging.getLogger(__name__)

LIBRARY_FILE = "games-library.json"
RECOMMENDED_FILE = "games-recommended.json"
CATEGORIES_FILE = "games-categories.json"
COLLECTIONS_FILE = "games-collections.json"
SETTINGS_FILE = "settings.json"
TOKENS_FILE = "tokens.json"


def read_json(path: Path, default: Any = None) -> Any:
    try:
        return json.loads(Path(path).read_text("utf-8"))
    except (OSError, ValueError) as e:
        logger.error("Failed to load %s: %s", Path(path).name, e)
        return default


def read_json_strict(path: Path) -> Any:
    try:
        return json.loads(Path(path).read_text("utf-8"))
    except (OSError, ValueError) as e:
        raise StorageError(f"Failed to read {Path(path).name}: {e}") from e


def write_json(path: Path, data: Any) -> None:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as e:
        logger.error("Failed to save %s: %s", path.name, e)
        raise StorageError(f"Failed to save {path.name}") from e


class MetadataLayout:
    """Where every file lives under the metadata root."""

    def __init__(self, root: Path):
        self.root = Path(root)

    @property
    def metadata_dir(self) -> Path:
        return self.root / "metadata"

    @property
    def content_root(self) -> Path:
        return self.root / "content"

    def resource(self, filename: str) -> Path:
        return self.metadata_dir / filename

    @property
    def settings_file(self) -> Path:
        return self.root / SETTINGS_FILE

    @property
    def tokens_file(self) -> Path:
        return self.root / TOKENS_FILE

    def content_dir(self, kind: str, entity_id: str) -> Path:
        """``content/<kind>/<id>``; ids that would escape ``content/<kind>`` raise ValueError."""
        base = self.content_root / kind
        target = base / str(entity_id)
        if not str(entity_id) or not is_within(target, base) or target.resolve() == base.resolve():
            raise ValueError(f"invalid {kind} id: {entity_id!r}")
        return target

    def content_file(self, kind: str, entity_id: str, filename: str) -> Path:
        return self.content_dir(kind, entity_id) / filename


def remove_files(folder: Path, names: Iterable[str]) -> None:
    """Delete the named files from ``folder``; failures are logged and ignored."""
    for name in names:
        p = Path(folder) / name
        try:
            if p.exists():
                p.unlink()
        except OSError as e:
            logger.warning("Failed to delete %s: %s", p, e)


def remove_tree(folder: Path) -> None:
    if not Path(folder).exists():
        return
    try:
        shutil.rmtree(folder)
    except OSError as e:
        logger.warning("Failed to delete content directory %s: %s", folder, e)
