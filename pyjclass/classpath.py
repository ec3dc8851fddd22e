"""
Class lookup over directories and JAR/ZIP archives.
"""

from pathlib import Path
from typing import Iterator, Optional
import logging
import zipfile

from .model import ClassFile
from .reader import parse_class

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIXES = (".jar", ".zip", ".war", ".ear")


class ClassPath:
    """Manages a classpath for looking up classes."""

    def __init__(self, **options):
        """`options` are passed through to parse_class (strict_utf8, max_depth)."""
        self.entries: list[Path | zipfile.ZipFile] = []
        self.options = options
        self._cache: dict[str, ClassFile] = {}
        self._zip_files: list[zipfile.ZipFile] = []

    def add_path(self, path: str | Path):
        """Add a path to the classpath (directory or jar/zip)."""
        path = Path(path)
        if path.suffix in ARCHIVE_SUFFIXES:
            logger.debug("opening archive %s", path)
            zf = zipfile.ZipFile(path, "r")
            self._zip_files.append(zf)
            self.entries.append(zf)
        elif path.is_dir():
            self.entries.append(path)
        else:
            raise ValueError(f"Invalid classpath entry: {path}")

    def add_paths(self, classpath: str, sep: str = ":"):
        """Add every non-empty entry of a separator-joined classpath string."""
        for entry in classpath.split(sep):
            if entry:
                self.add_path(entry)

    def find_class_bytes(self, class_name: str) -> Optional[bytes]:
        """Return the raw bytes of a class (e.g., 'java/lang/String'), or None."""
        class_file = class_name + ".class"

        for entry in self.entries:
            if isinstance(entry, zipfile.ZipFile):
                try:
                    return entry.read(class_file)
                except KeyError:
                    continue
            else:
                path = entry / class_file
                if path.exists():
                    return path.read_bytes()

        logger.debug("class %s not found on classpath", class_name)
        return None

    def find_class(self, class_name: str) -> Optional[ClassFile]:
        """Find and decode a class by internal name."""
        if class_name in self._cache:
            return self._cache[class_name]

        data = self.find_class_bytes(class_name)
        if data is None:
            return None

        info = parse_class(data, **self.options)
        self._cache[class_name] = info
        return info

    def close(self):
        """Close all zip files."""
        for zf in self._zip_files:
            zf.close()
        self._zip_files.clear()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def iter_archive_classes(path: str | Path) -> Iterator[tuple[str, bytes]]:
    """Yield (entry name, bytes) for every .class entry of a JAR/ZIP archive."""
    with zipfile.ZipFile(path, "r") as zf:
        for info in zf.infolist():
            if info.is_dir() or not info.filename.endswith(".class"):
                continue
            yield info.filename, zf.read(info)
