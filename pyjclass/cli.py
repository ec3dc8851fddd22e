#!/usr/bin/env python3
"""
Command-line interface for pyjclass - Java class file decoder.
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
import argparse
import logging
import os
import sys
import time
import zipfile

from .classpath import ClassPath, iter_archive_classes
from .descriptors import DescriptorError, parse_field_descriptor, parse_method_descriptor
from .errors import ClassFileError
from .model import CLASS_FLAGS, FIELD_FLAGS, METHOD_FLAGS, AccessFlags, ClassFile, flag_names
from .reader import DEFAULT_MAX_DEPTH, max_supported_depth, parse_class

logger = logging.getLogger(__name__)


def _decoder_options(args) -> dict:
    return {"strict_utf8": args.strict_utf8, "max_depth": args.max_depth}


def _load_classes(args):
    """Yield (label, ClassFile) for each argument: a .class path or, with -cp, a class name."""
    classpath = None
    if args.classpath:
        classpath = ClassPath(**_decoder_options(args))
        classpath.add_paths(args.classpath, os.pathsep)

    try:
        for target in args.targets:
            path = Path(target)
            if path.is_file():
                yield target, parse_class(path.read_bytes(), **_decoder_options(args))
                continue

            info = classpath.find_class(target.replace(".", "/")) if classpath else None
            if info is None:
                raise FileNotFoundError(f"Class not found: {target}")
            yield target, info
    finally:
        if classpath:
            classpath.close()


def dump_command(args):
    """Decode class files and print them as JSON."""
    for _, info in _load_classes(args):
        print(info.to_json(indent=args.indent))


def _render_field(info: ClassFile, f) -> str:
    name = info.member_name(f)
    descriptor = info.member_descriptor(f)
    try:
        type_name = parse_field_descriptor(descriptor).java_name
    except DescriptorError:
        type_name = descriptor
    return " ".join(flag_names(f.access_flags, FIELD_FLAGS) + [type_name, name]) + ";"


def _render_method(info: ClassFile, m) -> str:
    name = info.member_name(m)
    descriptor = info.member_descriptor(m)
    flags = flag_names(m.access_flags, METHOD_FLAGS)
    if name == "<clinit>":
        return "static {};"

    try:
        method = parse_method_descriptor(descriptor)
    except DescriptorError:
        return " ".join(flags + [f"{name}{descriptor}"]) + ";"

    if name == "<init>":
        # Constructors are printed with the class name and no return type
        params = ", ".join(p.java_name for p in method.parameters)
        rendered = f"{info.name.replace('/', '.')}({params})"
    else:
        rendered = method.java_signature(name)
    return " ".join(flags + [rendered]) + ";"


def describe(info: ClassFile) -> str:
    """Return a javap-like summary of a decoded class."""
    lines = [
        f"// version {info.major_version}.{info.minor_version} ({info.java_version})",
    ]

    if info.access_flags & AccessFlags.MODULE:
        lines.append(f"module {info.name}")
        return "\n".join(lines)

    flags = flag_names(info.access_flags, CLASS_FLAGS)
    if info.access_flags & AccessFlags.ANNOTATION:
        kind = "@interface"
        flags = [f for f in flags if f != "abstract"]
    elif info.access_flags & AccessFlags.INTERFACE:
        kind = "interface"
        flags = [f for f in flags if f != "abstract"]
    elif info.access_flags & AccessFlags.ENUM:
        kind = "enum"
    else:
        kind = "class"

    header = " ".join(flags + [kind, info.name.replace("/", ".")])
    if info.super_name and info.super_name != "java/lang/Object":
        header += f" extends {info.super_name.replace('/', '.')}"
    interfaces = [name.replace("/", ".") for name in info.interface_names]
    if interfaces:
        keyword = "extends" if kind in ("interface", "@interface") else "implements"
        header += f" {keyword} {', '.join(interfaces)}"
    lines.append(header + " {")

    for f in info.fields:
        lines.append("  " + _render_field(info, f))
    for m in info.methods:
        lines.append("  " + _render_method(info, m))

    lines.append("}")
    return "\n".join(lines)


def describe_command(args):
    """Print a javap-like summary of class files."""
    for _, info in _load_classes(args):
        print(describe(info))


def _try_parse(item, options) -> tuple[str, int, bool]:
    name, data = item
    try:
        parse_class(data, **options)
    except ClassFileError as e:
        logger.debug("%s: %s", name, e)
        return name, len(data), False
    return name, len(data), True


def scan_command(args):
    """Decode every class in JAR/ZIP archives and report throughput."""
    options = _decoder_options(args)

    for archive in args.archives:
        entries = list(iter_archive_classes(archive))
        total_bytes = sum(len(data) for _, data in entries)

        start = time.perf_counter()
        with ThreadPoolExecutor(max_workers=args.jobs) as executor:
            results = list(executor.map(lambda item: _try_parse(item, options), entries))
        elapsed = time.perf_counter() - start

        parsed = sum(1 for _, _, ok in results if ok)
        failed = len(results) - parsed
        mb = total_bytes / (1024.0 * 1024.0)

        print(f"jar_path={archive}")
        print(f"class_files={len(entries)}")
        print(f"parsed_ok={parsed} failed={failed}")
        print(f"total_mb={mb:.3f}")
        print(f"parse_time_ms={elapsed * 1000.0:.3f}")
        print(f"ns_per_class={(elapsed * 1e9 / parsed) if parsed else 0.0:.1f}")
        print(f"mb_per_s={(mb / elapsed) if elapsed > 0 else 0.0:.2f}")

        if args.verbose:
            for name, _, ok in results:
                if not ok:
                    print(f"FAILED {name}")


def _max_depth(value: str) -> int:
    depth = int(value)
    limit = max_supported_depth()
    if not 0 <= depth <= limit:
        raise argparse.ArgumentTypeError(f"must be between 0 and {limit}, got {depth}")
    return depth


def _add_decoder_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--strict-utf8",
        action="store_true",
        help="Reject constant pool strings that are not modified UTF-8 instead of replacing bad bytes",
    )
    parser.add_argument(
        "--max-depth",
        type=_max_depth,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum attribute/annotation nesting depth (default: {DEFAULT_MAX_DEPTH})",
    )


def _add_target_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        "targets",
        nargs="+",
        help=".class files, or class names (java/lang/String) looked up on --classpath",
    )
    parser.add_argument(
        "-cp", "--classpath",
        help="Classpath entries (directories, .jar or .zip files) separated by the OS path separator",
    )
    _add_decoder_arguments(parser)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyjclass",
        description="Decode Java class files (Java SE 8 through 27)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Dump command
    dump_parser = subparsers.add_parser(
        "dump",
        help="Decode class files and print the structure as JSON",
    )
    _add_target_arguments(dump_parser)
    dump_parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: 2)",
    )
    dump_parser.set_defaults(func=dump_command)

    # Describe command
    describe_parser = subparsers.add_parser(
        "describe",
        help="Print a javap-like summary of class files",
    )
    _add_target_arguments(describe_parser)
    describe_parser.set_defaults(func=describe_command)

    # Scan command
    scan_parser = subparsers.add_parser(
        "scan",
        help="Decode every class in JAR/ZIP archives and report throughput",
    )
    scan_parser.add_argument(
        "archives",
        nargs="+",
        help="JAR or ZIP files to scan",
    )
    scan_parser.add_argument(
        "-j", "--jobs",
        type=int,
        default=os.cpu_count() or 1,
        help="Number of worker threads (default: CPU count)",
    )
    _add_decoder_arguments(scan_parser)
    scan_parser.set_defaults(func=scan_command)

    return parser


def main(argv=None):
    """Main entry point for pyjclass CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except (ClassFileError, OSError, ValueError, zipfile.BadZipFile) as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
