"""Finding nodelist files on disk and reading duplicate-key error messages."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional, Union

PathLike = Union[str, "os.PathLike[str]"]

_NODELIST_PREFIXES = ("nodelist", "nodelist.")
_DUPLICATE_KEY = re.compile(r'duplicate key "([^"]+)"')
_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class ConflictKey:
    """The node address and nodelist date named in a duplicate-key error."""

    zone: int
    net: int
    node: int
    date: str

    @property
    def address(self) -> str:
        return f"{self.zone}:{self.net}/{self.node}"


def is_nodelist_file(file_path: PathLike) -> bool:
    """Return True if the file name looks like a nodelist (starts with "nodelist")."""
    filename = os.path.basename(os.fspath(file_path)).lower()
    return filename.startswith(_NODELIST_PREFIXES)


def _walk(directory: str, recursive: bool, found: list[str]) -> None:
    with os.scandir(directory) as entries:
        ordered = sorted(entries, key=lambda entry: entry.name)
    for entry in ordered:
        full_path = os.path.join(directory, entry.name)
        if entry.is_dir(follow_symlinks=False):
            if recursive:
                _walk(full_path, recursive, found)
            continue
        if is_nodelist_file(full_path):
            found.append(full_path)


def find_nodelist_files(path: PathLike, recursive: bool = False) -> list[str]:
    """Return the nodelist files at a path, in lexical order.

    A file path yields itself if it is a nodelist file. A directory yields the
    nodelist files directly inside it, and those of all subdirectories too
    when recursive is set.
    """
    root = os.fspath(path)
    if not os.path.lexists(root):
        raise FileNotFoundError(f"path not found: {root}")
    if not os.path.isdir(root):
        return [root] if is_nodelist_file(root) else []
    found: list[str] = []
    try:
        _walk(root, recursive, found)
    except OSError as exc:
        raise OSError(f"error walking directory: {exc}") from exc
    return found


def _atoi(text: str) -> Optional[int]:
    return int(text) if _INTEGER.fullmatch(text) else None


def parse_conflict_key(error_msg: str) -> Optional[ConflictKey]:
    """Extract zone, net, node and date from a duplicate-key error; None if absent."""
    match = _DUPLICATE_KEY.search(error_msg)
    if not match:
        return None
    parts = match.group(1).split(", ")
    if len(parts) < 4:
        return None
    zone = _atoi(parts[0].strip())
    net = _atoi(parts[1].strip())
    node = _atoi(parts[2].strip())
    if zone is None or net is None or node is None:
        return None
    return ConflictKey(zone=zone, net=net, node=node, date=parts[3].strip())