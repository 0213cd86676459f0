"""Baseline and working-tree sources.

A baseline source is the pristine portal source, either a zip archive or an
unpacked directory; entry names are archive-relative POSIX paths. The working
tree is the plugin SDK; its locations are absolute POSIX paths.
"""

import logging
import threading
import zipfile
from pathlib import Path
from typing import Protocol

from upgrade_differ.index.exceptions import EntryReadError, SourceUnreadableError

logger = logging.getLogger(__name__)


class BaselineSource(Protocol):
    """Read access to the baseline source set."""

    label: str

    def entries(self) -> list[str]:
        ...

    def read(self, name: str) -> bytes:
        ...

    def __contains__(self, name: object) -> bool:
        ...


class ZipBaselineSource:
    """Baseline entries read from a zip archive.

    The archive is opened on first use and shared between threads; reads
    are serialised.
    """

    def __init__(self, archive_path: str | Path):
        self.archive_path = Path(archive_path)
        self.label = str(self.archive_path)
        self._zip: zipfile.ZipFile | None = None
        self._lock = threading.Lock()

    def _archive(self) -> zipfile.ZipFile:
        if self._zip is None:
            try:
                self._zip = zipfile.ZipFile(self.archive_path, "r")
            except (OSError, zipfile.BadZipFile) as exc:
                raise SourceUnreadableError(
                    f"Cannot open baseline archive {self.archive_path}: {exc}"
                ) from exc
        return self._zip

    def entries(self) -> list[str]:
        with self._lock:
            archive = self._archive()
            try:
                return [info.filename for info in archive.infolist() if not info.is_dir()]
            except (OSError, zipfile.BadZipFile) as exc:
                raise SourceUnreadableError(
                    f"Cannot enumerate baseline archive {self.archive_path}: {exc}"
                ) from exc

    def read(self, name: str) -> bytes:
        with self._lock:
            try:
                return self._archive().read(name)
            except KeyError as exc:
                raise EntryReadError(f"No entry {name!r} in {self.archive_path}") from exc
            except (OSError, zipfile.BadZipFile, SourceUnreadableError) as exc:
                raise EntryReadError(f"Cannot read {name!r} from {self.archive_path}: {exc}") from exc

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        with self._lock:
            try:
                self._archive().getinfo(name)
            except KeyError:
                return False
        return True

    def close(self) -> None:
        with self._lock:
            if self._zip is not None:
                self._zip.close()
                self._zip = None

    def __enter__(self) -> "ZipBaselineSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class DirectoryBaselineSource:
    """Baseline entries read from an unpacked source directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()
        self.label = str(self.root)

    def entries(self) -> list[str]:
        if not self.root.is_dir():
            raise SourceUnreadableError(f"Baseline directory not found: {self.root}")
        try:
            return [
                path.relative_to(self.root).as_posix()
                for path in sorted(self.root.rglob("*"), key=lambda path: path.parts)
                if not path.is_symlink() and path.is_file()
            ]
        except OSError as exc:
            raise SourceUnreadableError(f"Cannot enumerate baseline directory {self.root}: {exc}") from exc

    def _resolve(self, name: str) -> Path:
        path = (self.root / name).resolve()
        if ".." in Path(name).parts or not path.is_relative_to(self.root):
            raise EntryReadError(f"Entry {name!r} escapes {self.root}")
        return path

    def read(self, name: str) -> bytes:
        path = self._resolve(name)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise EntryReadError(f"Cannot read {name!r} from {self.root}: {exc}") from exc

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        try:
            return self._resolve(name).is_file()
        except EntryReadError:
            return False


def open_baseline_source(path: str | Path) -> BaselineSource:
    """Pick a directory or zip source for the given path.

    Nothing is read here; unreadable archives surface on enumeration.
    """
    path = Path(path)
    if path.is_dir():
        return DirectoryBaselineSource(path)
    return ZipBaselineSource(path)


class WorkingTree:
    """The locally modified plugin SDK tree."""

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def walk(self) -> list[str]:
        """Return absolute POSIX paths of all regular files, sorted.

        Raises:
            SourceUnreadableError: If the root is missing or cannot be listed.
        """
        if not self.root.is_dir():
            raise SourceUnreadableError(f"Working tree not found: {self.root}")

        locations = []
        try:
            for path in sorted(self.root.rglob("*"), key=lambda path: path.parts):
                # Skip symlinks so the walk never leaves the tree
                if path.is_symlink() or not path.is_file():
                    continue
                locations.append(path.as_posix())
        except OSError as exc:
            raise SourceUnreadableError(f"Cannot walk working tree {self.root}: {exc}") from exc

        logger.debug("Discovered %d files under %s", len(locations), self.root)
        return locations

    def read(self, location: str) -> bytes:
        try:
            return Path(location).read_bytes()
        except OSError as exc:
            raise EntryReadError(f"Cannot read {location}: {exc}") from exc

    def relative_path(self, location: str) -> str:
        path = Path(location)
        if path.is_relative_to(self.root):
            return path.relative_to(self.root).as_posix()
        return path.as_posix().lstrip("/")

    def destination_for(self, location: str, output_dir: str, suffix: str) -> Path:
        """Patch path for a working file: <root>/<output_dir>/<relative><suffix>."""
        return self.root / output_dir / f"{self.relative_path(location)}{suffix}"
