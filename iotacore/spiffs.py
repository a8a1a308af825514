"""A small flat flash-style file store kept under a directory on disk."""

from __future__ import annotations

import json
import shutil
from pathlib import Path, PurePosixPath


class Spiffs:
    """File store whose names look like absolute paths ("/config/device/burden.txt").

    Directories are emulated from the names of the files: a directory
    exists only while some file name starts with it.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.mounted = False

    def _host_path(self, path: str) -> Path:
        parts = PurePosixPath("/" + path.lstrip("/")).parts[1:]
        if any(part in ("", ".", "..") for part in parts):
            raise ValueError(f"invalid file name {path!r}")
        return self.root.joinpath(*parts)

    def _names(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(
            "/" + item.relative_to(self.root).as_posix()
            for item in self.root.rglob("*")
            if item.is_file()
        )

    def _prune_empty_dirs(self) -> None:
        for item in sorted(self.root.rglob("*"), key=lambda p: len(p.parts), reverse=True):
            if item.is_dir() and not any(item.iterdir()):
                item.rmdir()

    def format(self) -> bool:
        """Erase every file in the store."""
        try:
            if self.root.exists():
                shutil.rmtree(self.root)
            self.root.mkdir(parents=True)
        except OSError:
            return False
        return True

    def begin(self) -> bool:
        """Mount the store; return False if it cannot be mounted."""
        if self.mounted:
            return True
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError:
            return False
        self.mounted = self.root.is_dir()
        return self.mounted

    def file_exists(self, path: str) -> bool:
        """Return True if a file of that name exists."""
        if not self.begin():
            return False
        return self._host_path(path).is_file()

    def file_size(self, path: str) -> int:
        """Return the size of a file in bytes, or 0 if it does not exist."""
        if not self.file_exists(path):
            return 0
        return self._host_path(path).stat().st_size

    def remove(self, path: str) -> bool:
        """Remove every file whose name starts with ``path``."""
        if not self.begin():
            return False
        for name in self._names():
            if name.startswith(path):
                self._host_path(name).unlink()
        self._prune_empty_dirs()
        return True

    def write(self, path: str, contents: str | bytes, append: bool = False) -> int:
        """Write or append contents to a file; return the number of bytes written."""
        if not self.begin():
            return 0
        data = contents.encode("utf-8") if isinstance(contents, str) else bytes(contents)
        target = self._host_path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with target.open("ab" if append else "wb") as handle:
                return handle.write(data)
        except OSError:
            return 0

    def read(self, path: str) -> str:
        """Return the contents of a file, or an empty string if it cannot be read."""
        if not self.begin():
            return ""
        target = self._host_path(path)
        try:
            return target.read_bytes().decode("utf-8", errors="replace")
        except OSError:
            return ""

    def directory(self, path: str) -> str:
        """Return a JSON array of the files and pseudo directories under ``path``."""
        if not self.begin():
            return "[]"
        entries: list[dict[str, str]] = []
        for full_name in self._names():
            if not full_name.startswith(path):
                continue
            name = full_name[len(path) + 1:]
            slash = name.find("/")
            if slash > 0:
                dir_name = name[:slash]
                if any(entry["name"] == dir_name for entry in entries):
                    continue
                entries.append({"type": "dir", "name": dir_name})
            else:
                entries.append({"type": "file", "name": name})
        return json.dumps(entries, separators=(",", ":"))