import os
from pathlib import Path
from typing import Union
from urllib.parse import quote

PathLike = Union[str, Path]


def is_windows() -> bool:
    return os.name == "nt"


def encode_id(value) -> str:
    """URL-encode an id the way ``encodeURIComponent`` does for path segments."""
    return quote(str(value), safe="!'()*-._~")


def resolve_path(p: PathLike) -> Path:
    return Path(os.path.abspath(os.path.expanduser(str(p)))).resolve()


def is_within(path: PathLike, root: PathLike) -> bool:
    """True when ``path`` resolves to ``root`` or somewhere below it."""
    try:
        resolve_path(path).relative_to(resolve_path(root))
    except ValueError:
        return False
    return True


def normalize_exec_tag(value) -> str:
    """'.SH' -> 'sh'; anything that is not a string becomes ''."""
    if not isinstance(value, str):
        return ""
    tag = value.strip().lower()
    if tag.startswith("."):
        tag = tag[1:]
    return tag
