from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class Scalar:
    value: str


@dataclass(frozen=True)
class Many:
    values: List[str]


GenreValue = Union[Scalar, Many, None]


class Genre:
    """A game's ``genre`` field, which is stored either as one string or a list."""

    @staticmethod
    def parse(raw: Any) -> GenreValue:
        """Strict parse used for client input; raises ValueError on bad shapes."""
        if raw is None:
            return None
        if isinstance(raw, str):
            return Scalar(raw)
        if isinstance(raw, list) and all(isinstance(v, str) for v in raw):
            return Many(list(raw))
        raise ValueError("genre must be a string or a list of strings")

    @staticmethod
    def coerce(raw: Any) -> GenreValue:
        """Lenient parse for stored records; non-string list items are dropped."""
        if isinstance(raw, str):
            return Scalar(raw) if raw else None
        if isinstance(raw, list):
            return Many([v for v in raw if isinstance(v, str)])
        return None

    @staticmethod
    def dump(value: GenreValue) -> Union[str, List[str], None]:
        if isinstance(value, Scalar):
            return value.value
        if isinstance(value, Many):
            return list(value.values)
        return None

    @staticmethod
    def values(value: GenreValue) -> List[str]:
        if isinstance(value, Scalar):
            return [value.value]
        if isinstance(value, Many):
            return list(value.values)
        return []

    @staticmethod
    def matches(value: GenreValue, *candidates: str) -> bool:
        wanted = {c.strip().lower() for c in candidates if c}
        return any(v.strip().lower() in wanted for v in Genre.values(value))


def normalize_title(title: str) -> str:
    return title.strip().lower()


def category_id_for(title: str) -> str:
    return "genre_" + re.sub(r"\s+", "_", normalize_title(title))


@dataclass
class Category:
    id: str
    title: str
    # keys written by other tools, carried through rewrites of the file
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_title(cls, title: str) -> "Category":
        return cls(id=category_id_for(title), title=normalize_title(title))

    @classmethod
    def from_stored(cls, item: Any) -> Optional["Category"]:
        # older files stored bare titles
        if isinstance(item, str) and item.strip():
            return cls(id=category_id_for(item), title=item)
        if isinstance(item, dict) and item.get("title"):
            title = str(item["title"])
            extra = {k: v for k, v in item.items() if k not in ("id", "title")}
            return cls(id=str(item.get("id") or category_id_for(title)), title=title, extra=extra)
        return None

    def to_dict(self) -> dict:
        data = dict(self.extra)
        data.update({"id": self.id, "title": self.title})
        return data


@dataclass
class RecommendedSection:
    id: str
    games: List[str] = field(default_factory=list)


@dataclass
class LaunchResult:
    ok: bool
    status: int
    pid: Optional[int] = None
    detail: str = ""
