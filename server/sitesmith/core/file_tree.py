# sitesmith/core/file_tree.py
"""
Virtual file tree over a flat path-keyed file map.

The flat map ({"src/a.js": {"content", "language", "lastModified"}, ...}) is
the only stored representation. build_tree() derives the folder hierarchy
from it on demand; the edit operations take a map and return a new one,
validating everything before anything changes.
"""
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Union

from sitesmith.utils.file_helpers import extension_of, is_safe_name, language_for_path

SEPARATOR = "/"

FlatFileMap = Dict[str, Dict[str, Any]]


class FileTreeError(Exception):
    pass


class AlreadyExistsError(FileTreeError):
    pass


class NotFoundError(FileTreeError):
    pass


class InvalidNameError(FileTreeError):
    pass


class PathConflictError(AlreadyExistsError):
    """A path segment would be both a file and a folder."""


@dataclass(frozen=True)
class FileLeaf:
    name: str
    path: str
    content: str
    language: str
    last_modified: Optional[int] = None


@dataclass
class FileBranch:
    name: str
    path: str
    children: Dict[str, Union["FileBranch", FileLeaf]] = field(default_factory=dict)


FileNode = Union[FileBranch, FileLeaf]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _leaf(path: str, entry: Any) -> FileLeaf:
    if isinstance(entry, dict):
        content = entry.get("content", "")
        language = entry.get("language") or language_for_path(path)
        last_modified = entry.get("lastModified")
    else:
        content, language, last_modified = str(entry), language_for_path(path), None
    return FileLeaf(
        name=path.rsplit(SEPARATOR, 1)[-1],
        path=path,
        content=content,
        language=language,
        last_modified=last_modified,
    )


def build_tree(flat_map: FlatFileMap) -> FileBranch:
    """Fold each flat key into nested folders; raises PathConflictError on file/folder clashes."""
    root = FileBranch(name="", path="")
    for path in sorted(flat_map):
        segments = path.split(SEPARATOR)
        node = root
        for depth, segment in enumerate(segments[:-1]):
            child = node.children.get(segment)
            if child is None:
                child = FileBranch(name=segment, path=SEPARATOR.join(segments[:depth + 1]))
                node.children[segment] = child
            elif isinstance(child, FileLeaf):
                raise PathConflictError(f"'{child.path}' is a file and cannot contain '{path}'")
            node = child
        name = segments[-1]
        if name in node.children:
            raise PathConflictError(f"'{path}' is a folder and cannot also be a file")
        node.children[name] = _leaf(path, flat_map[path])
    return root


def iter_leaves(node: FileNode) -> Iterator[FileLeaf]:
    if isinstance(node, FileLeaf):
        yield node
        return
    for child in node.children.values():
        yield from iter_leaves(child)


def tree_to_dict(node: FileNode) -> Dict[str, Any]:
    if isinstance(node, FileLeaf):
        return {
            "type": "file",
            "name": node.name,
            "path": node.path,
            "language": node.language,
            "lastModified": node.last_modified,
        }
    return {
        "type": "folder",
        "name": node.name,
        "path": node.path,
        "children": [tree_to_dict(child) for child in node.children.values()],
    }


# ----------------------------
# Validation helpers
# ----------------------------
def _validate_name(path: str) -> None:
    if not is_safe_name(path):
        raise InvalidNameError(
            f"Invalid file name {path!r}. Use only letters, numbers, underscores, "
            "hyphens, spaces, dots and '/' between non-empty folder names."
        )


def _check_conflicts(keys, path: str) -> None:
    for key in keys:
        if key.startswith(path + SEPARATOR):
            raise PathConflictError(f"'{path}' is already a folder")
        if path.startswith(key + SEPARATOR):
            raise PathConflictError(f"'{key}' is a file and cannot be used as a folder")


def _folder_keys(flat_map: FlatFileMap, path: str) -> List[str]:
    prefix = path + SEPARATOR
    return sorted(k for k in flat_map if k.startswith(prefix))


# ----------------------------
# Operations (flat map in, new flat map out)
# ----------------------------
def select_file(flat_map: FlatFileMap, path: str) -> FileLeaf:
    if path not in flat_map:
        raise NotFoundError(f"File '{path}' does not exist")
    return _leaf(path, flat_map[path])


def create_file(flat_map: FlatFileMap,
                path: str,
                content: str = "",
                language: Optional[str] = None,
                now: Optional[int] = None) -> FlatFileMap:
    _validate_name(path)
    if path in flat_map:
        raise AlreadyExistsError(f"A file named '{path}' already exists")
    _check_conflicts(flat_map, path)

    updated = dict(flat_map)
    updated[path] = {
        "content": content,
        "language": language or language_for_path(path),
        "lastModified": now if now is not None else _now_ms(),
    }
    return updated


def rename_path(flat_map: FlatFileMap, old_path: str, new_path: str,
                now: Optional[int] = None) -> FlatFileMap:
    """Rename a file, or move a folder with everything under it."""
    _validate_name(old_path)
    _validate_name(new_path)
    stamp = now if now is not None else _now_ms()

    if old_path in flat_map:
        if new_path in flat_map:
            raise AlreadyExistsError(f"'{new_path}' already exists")
        remaining = [k for k in flat_map if k != old_path]
        _check_conflicts(remaining, new_path)
        updated = {k: v for k, v in flat_map.items() if k != old_path}
        entry = dict(flat_map[old_path])
        if extension_of(new_path) != extension_of(old_path) or not entry.get("language"):
            entry["language"] = language_for_path(new_path)
        entry["lastModified"] = stamp
        updated[new_path] = entry
        return updated

    moving = _folder_keys(flat_map, old_path)
    if not moving:
        raise NotFoundError(f"'{old_path}' does not exist")
    if new_path in flat_map or _folder_keys(flat_map, new_path):
        raise AlreadyExistsError(f"'{new_path}' already exists")
    if new_path.startswith(old_path + SEPARATOR):
        raise InvalidNameError(f"Cannot move '{old_path}' into itself")

    remaining = [k for k in flat_map if k not in moving]
    targets = {k: new_path + k[len(old_path):] for k in moving}
    for target in targets.values():
        _check_conflicts(remaining, target)

    updated = {k: v for k, v in flat_map.items() if k not in targets}
    for source, target in targets.items():
        entry = dict(flat_map[source])
        entry["lastModified"] = stamp
        updated[target] = entry
    return updated


def delete_path(flat_map: FlatFileMap, path: str) -> FlatFileMap:
    """Delete a file, or a folder with everything under it."""
    if path in flat_map:
        return {k: v for k, v in flat_map.items() if k != path}
    doomed = set(_folder_keys(flat_map, path))
    if not doomed:
        raise NotFoundError(f"'{path}' does not exist")
    return {k: v for k, v in flat_map.items() if k not in doomed}


class VirtualFileTree:
    """Editing session over a flat map: current files plus the selected path."""

    def __init__(self, files: Optional[FlatFileMap] = None):
        self._files: FlatFileMap = dict(files or {})
        self.selected: Optional[str] = None

    @property
    def files(self) -> FlatFileMap:
        return dict(self._files)

    @property
    def tree(self) -> FileBranch:
        return build_tree(self._files)

    def select(self, path: str) -> FileLeaf:
        leaf = select_file(self._files, path)
        self.selected = path
        return leaf

    def create(self, path: str, content: str = "", language: Optional[str] = None) -> FileLeaf:
        self._files = create_file(self._files, path, content, language)
        return select_file(self._files, path)

    def rename(self, old_path: str, new_path: str) -> None:
        self._files = rename_path(self._files, old_path, new_path)
        if self.selected == old_path:
            self.selected = new_path
        elif self.selected and self.selected.startswith(old_path + SEPARATOR):
            self.selected = new_path + self.selected[len(old_path):]

    def delete(self, path: str) -> None:
        self._files = delete_path(self._files, path)
        if self.selected and self.selected not in self._files:
            self.selected = None
