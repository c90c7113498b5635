"""In-memory filesystem used by the pipeline tests."""

from __future__ import annotations

from pathlib import Path

from media_size import FileSystem


class FakeFileSystem(FileSystem):
    """Directory listings keep insertion order, like an unsorted OS enumeration."""

    def __init__(self) -> None:
        self.files: dict[Path, int] = {}
        self.dirs: dict[Path, list[Path]] = {}
        self.texts: dict[Path, list[str]] = {}
        self.symlinks: set[Path] = set()
        self.specials: set[Path] = set()
        self.vanished: set[Path] = set()
        self.unwritable: set[Path] = set()
        self.appended: dict[Path, list[str]] = {}

    def _register(self, path: Path) -> None:
        # Walks up iteratively so very deep trees can be built
        child = path
        for parent in path.parents:
            children = self.dirs.setdefault(parent, [])
            if child not in children:
                children.append(child)
            child = parent

    def add_dir(self, path: str | Path) -> Path:
        path = Path(path)
        if path not in self.dirs:
            self.dirs[path] = []
            self._register(path)
        return path

    def add_file(self, path: str | Path, size: int = 0) -> Path:
        path = Path(path)
        self.files[path] = size
        self._register(path)
        return path

    def add_text(self, path: str | Path, lines: list[str]) -> Path:
        path = self.add_file(path, sum(len(line) + 1 for line in lines))
        self.texts[path] = list(lines)
        return path

    def add_dir_symlink(self, path: str | Path, target: str | Path) -> Path:
        path = Path(path)
        self.dirs[path] = self.dirs[self.add_dir(target)]
        self.symlinks.add(path)
        self._register(path)
        return path

    def add_special(self, path: str | Path) -> Path:
        path = Path(path)
        self.specials.add(path)
        self._register(path)
        return path

    def exists(self, path: Path) -> bool:
        return path in self.files or path in self.dirs or path in self.specials

    def is_dir(self, path: Path) -> bool:
        return path in self.dirs

    def is_file(self, path: Path) -> bool:
        return path in self.files

    def is_symlink(self, path: Path) -> bool:
        return path in self.symlinks

    def list_dir(self, path: Path) -> list[Path]:
        if path not in self.dirs:
            raise NotADirectoryError(str(path))
        return list(self.dirs[path])

    def file_size(self, path: Path) -> int:
        if path in self.vanished or path not in self.files:
            raise FileNotFoundError(str(path))
        return self.files[path]

    def read_lines(self, path: Path) -> list[str]:
        if path not in self.texts:
            raise FileNotFoundError(str(path))
        return list(self.texts[path])

    def append_line(self, path: Path, line: str) -> None:
        if path in self.unwritable:
            raise PermissionError(str(path))
        self.appended.setdefault(path, []).append(line)
