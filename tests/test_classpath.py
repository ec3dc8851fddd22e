"""Tests for classpath lookup over directories and archives."""

import zipfile
import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from pyjclass.classpath import ClassPath, iter_archive_classes
from pyjclass.errors import InvalidMagic, NestingTooDeep

from classbuilder import ClassBuilder


@pytest.fixture
def class_dir(tmp_path):
    root = tmp_path / "classes"
    (root / "com" / "example").mkdir(parents=True)
    (root / "com" / "example" / "Foo.class").write_bytes(ClassBuilder("com/example/Foo").to_bytes())
    return root


@pytest.fixture
def class_jar(tmp_path):
    path = tmp_path / "lib.jar"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("META-INF/MANIFEST.MF", "Manifest-Version: 1.0\n")
        zf.writestr("com/example/Bar.class", ClassBuilder("com/example/Bar").to_bytes())
        zf.writestr("com/example/Broken.class", b"\x00\x01\x02\x03")
    return path


class TestClassPath:
    def test_directory_lookup(self, class_dir):
        with ClassPath() as cp:
            cp.add_path(class_dir)
            info = cp.find_class("com/example/Foo")
            assert info.name == "com/example/Foo"

    def test_archive_lookup(self, class_jar):
        with ClassPath() as cp:
            cp.add_path(class_jar)
            assert cp.find_class("com/example/Bar").name == "com/example/Bar"
            assert cp.find_class_bytes("META-INF/MANIFEST") is None

    def test_missing_class(self, class_dir, class_jar):
        with ClassPath() as cp:
            cp.add_paths(f"{class_dir}:{class_jar}")
            assert cp.find_class("com/example/Missing") is None

    def test_order_and_cache(self, class_dir, class_jar):
        with ClassPath() as cp:
            cp.add_paths(f"{class_jar}::{class_dir}")
            assert len(cp.entries) == 2
            first = cp.find_class("com/example/Foo")
            assert cp.find_class("com/example/Foo") is first

    def test_decode_errors_propagate(self, class_jar):
        with ClassPath() as cp:
            cp.add_path(class_jar)
            with pytest.raises(InvalidMagic):
                cp.find_class("com/example/Broken")

    def test_invalid_entry(self, tmp_path):
        cp = ClassPath()
        with pytest.raises(ValueError):
            cp.add_path(tmp_path / "nope")

    def test_options_are_passed_through(self, class_dir):
        with ClassPath(max_depth=0) as cp:
            cp.add_path(class_dir)
            with pytest.raises(NestingTooDeep):
                cp.find_class("com/example/Foo")


class TestArchiveIteration:
    def test_only_class_entries(self, class_jar):
        names = [name for name, _ in iter_archive_classes(class_jar)]
        assert names == ["com/example/Bar.class", "com/example/Broken.class"]

    def test_entry_bytes(self, class_jar):
        entries = dict(iter_archive_classes(class_jar))
        assert entries["com/example/Broken.class"] == b"\x00\x01\x02\x03"
