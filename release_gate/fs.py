"""File-system access used by package discovery.

RealFs reads the disk; MemoryFs serves a simulated tree from a dict so
discovery can run without touching storage.
"""
from __future__ import annotations

import asyncio
from pathlib import Path, PurePosixPath
from typing import Iterable, Mapping, Protocol, runtime_checkable


@runtime_checkable
class Fs(Protocol):
    """Read-only file-system capability."""

    async def read_text(self, path: Path) -> str:
        """Return the UTF-8 content of a file."""
        ...

    async def find_files(self, root: Path, file_name: str,
                         exclude_dirs: Iterable[str] = ()) -> list[Path]:
        """Return every file called file_name under root, sorted."""
        ...


def _is_excluded(rel_parts: tuple[str, ...], exclude_dirs: set[str]) -> bool:
    # Directory components only; the last part is the file itself.
    return any(part in exclude_dirs for part in rel_parts[:-1])


class RealFs:
    """Fs backed by the real disk. Blocking calls run in a worker thread."""

    async def read_text(self, path: Path) -> str:
        return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")

    async def find_files(self, root: Path, file_name: str,
                         exclude_dirs: Iterable[str] = ()) -> list[Path]:
        return await asyncio.to_thread(self._find_files, Path(root), file_name, set(exclude_dirs))

    @staticmethod
    def _find_files(root: Path, file_name: str, exclude_dirs: set[str]) -> list[Path]:
        if not root.is_dir():
            raise FileNotFoundError(f"Not a directory: {root}")
        found = []
        for path in root.rglob(file_name):
            if not path.is_file():
                continue
            if _is_excluded(path.relative_to(root).parts, exclude_dirs):
                continue
            found.append(path)
        return sorted(found)


class MemoryFs:
    """Fs over an in-memory {path: text} mapping."""

    def __init__(self, files: Mapping[str | Path, str] | None = None):
        self._files: dict[PurePosixPath, str] = {}
        for path, text in (files or {}).items():
            self.write_text(path, text)

    def write_text(self, path: str | Path, text: str) -> None:
        self._files[PurePosixPath(Path(path).as_posix())] = text

    async def read_text(self, path: Path) -> str:
        key = PurePosixPath(Path(path).as_posix())
        try:
            return self._files[key]
        except KeyError:
            raise FileNotFoundError(f"No such file: {path}") from None

    async def find_files(self, root: Path, file_name: str,
                         exclude_dirs: Iterable[str] = ()) -> list[Path]:
        root_key = PurePosixPath(Path(root).as_posix())
        if root_key in self._files:
            raise FileNotFoundError(f"Not a directory: {root}")
        excluded = set(exclude_dirs)
        found = []
        for key in self._files:
            if key.name != file_name:
                continue
            try:
                rel = key.relative_to(root_key)
            except ValueError:
                continue
            if _is_excluded(rel.parts, excluded):
                continue
            found.append(Path(key))
        if not found and not any(self._is_under(k, root_key) for k in self._files):
            raise FileNotFoundError(f"Not a directory: {root}")
        return sorted(found)

    @staticmethod
    def _is_under(key: PurePosixPath, root: PurePosixPath) -> bool:
        return key == root or root in key.parents
