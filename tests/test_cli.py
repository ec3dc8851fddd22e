"""Tests for the pyjclass command line."""

import json
import zipfile
import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from pyjclass.cli import build_parser, describe, main
from pyjclass.reader import parse_class

from classbuilder import ClassBuilder


def sample_class(name: str = "com/example/Sample") -> bytes:
    builder = ClassBuilder(name, major=61)
    builder.add_interface("java/lang/Runnable")
    builder.add_field("count", "I", flags=0x0002)
    builder.add_field("NAMES", "[Ljava/lang/String;", flags=0x0019)
    builder.add_method("<init>", "(J)V")
    builder.add_method("<clinit>", "()V", flags=0x0008)
    builder.add_method("run", "(I[Ljava/lang/String;)J", flags=0x0009)
    builder.add_method("odd", "not-a-descriptor", flags=0x0001)
    return builder.to_bytes()


@pytest.fixture
def class_file(tmp_path):
    path = tmp_path / "Sample.class"
    path.write_bytes(sample_class())
    return path


class TestDescribe:
    def test_describe_output(self):
        text = describe(parse_class(sample_class()))
        assert text.splitlines() == [
            "// version 61.0 (Java SE 17)",
            "public class com.example.Sample implements java.lang.Runnable {",
            "  private int count;",
            "  public static final java.lang.String[] NAMES;",
            "  public com.example.Sample(long);",
            "  static {};",
            "  public static long run(int, java.lang.String[]);",
            "  public oddnot-a-descriptor;",
            "}",
        ]

    def test_describe_interface(self):
        builder = ClassBuilder("com/example/Api")
        builder.access_flags = 0x0601
        builder.add_interface("java/io/Closeable")
        text = describe(parse_class(builder.to_bytes()))
        assert "public interface com.example.Api extends java.io.Closeable {" in text

    def test_describe_module(self):
        builder = ClassBuilder("module-info", super_name="java/lang/Object")
        builder.access_flags = 0x8000
        text = describe(parse_class(builder.to_bytes()))
        assert text.splitlines()[-1] == "module module-info"

    def test_describe_command(self, class_file, capsys):
        main(["describe", str(class_file)])
        out = capsys.readouterr().out
        assert "public class com.example.Sample" in out

    def test_describe_from_classpath(self, tmp_path, capsys):
        root = tmp_path / "classes" / "com" / "example"
        root.mkdir(parents=True)
        (root / "Sample.class").write_bytes(sample_class())
        main(["describe", "-cp", str(tmp_path / "classes"), "com.example.Sample"])
        assert "com.example.Sample" in capsys.readouterr().out


class TestDump:
    def test_dump_json(self, class_file, capsys):
        main(["dump", "--indent", "0", str(class_file)])
        data = json.loads(capsys.readouterr().out)
        assert data["_type"] == "ClassFile"
        assert data["major_version"] == 61
        assert len(data["methods"]) == 4


class TestScan:
    @pytest.fixture
    def jar(self, tmp_path):
        path = tmp_path / "app.jar"
        with zipfile.ZipFile(path, "w") as zf:
            zf.writestr("com/example/Sample.class", sample_class())
            zf.writestr("com/example/Other.class", sample_class("com/example/Other"))
            zf.writestr("com/example/Broken.class", b"\xca\xfe\xba\xbe\x00")
            zf.writestr("README.txt", "not a class")
        return path

    def test_scan_report(self, jar, capsys):
        main(["scan", "-j", "2", str(jar)])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == f"jar_path={jar}"
        assert "class_files=3" in lines
        assert "parsed_ok=2 failed=1" in lines
        assert any(line.startswith("mb_per_s=") for line in lines)
        assert not any(line.startswith("FAILED") for line in lines)

    def test_scan_verbose_lists_failures(self, jar, capsys):
        main(["-v", "scan", str(jar)])
        out = capsys.readouterr().out
        assert "FAILED com/example/Broken.class" in out


class TestErrors:
    def test_no_command(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1

    def test_invalid_class(self, tmp_path):
        path = tmp_path / "Bad.class"
        path.write_bytes(b"\x00\x00\x00\x00")
        with pytest.raises(SystemExit) as exc_info:
            main(["dump", str(path)])
        assert exc_info.value.code == 1

    def test_missing_class(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["describe", str(tmp_path / "Missing.class")])
        assert exc_info.value.code == 1

    def test_not_a_zip(self, tmp_path):
        path = tmp_path / "broken.jar"
        path.write_bytes(b"garbage")
        with pytest.raises(SystemExit) as exc_info:
            main(["scan", str(path)])
        assert exc_info.value.code == 1

    def test_decoder_flags(self):
        args = build_parser().parse_args(["dump", "--strict-utf8", "--max-depth", "8", "A.class"])
        assert args.strict_utf8 is True
        assert args.max_depth == 8

    @pytest.mark.parametrize("depth", ["-1", "100000"])
    def test_max_depth_out_of_range(self, depth):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["dump", "--max-depth", depth, "A.class"])
        assert exc_info.value.code == 2
