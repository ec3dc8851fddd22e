"""
Constant pool entries and the constant pool decoder.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Iterator, Optional
import logging

from .cursor import Cursor
from .errors import InvalidConstantPoolIndex, InvalidConstantPoolTag, InvalidUtf8
from .node import ClassNode

logger = logging.getLogger(__name__)


class ConstantPoolTag(IntEnum):
    UTF8 = 1
    INTEGER = 3
    FLOAT = 4
    LONG = 5
    DOUBLE = 6
    CLASS = 7
    STRING = 8
    FIELDREF = 9
    METHODREF = 10
    INTERFACE_METHODREF = 11
    NAME_AND_TYPE = 12
    METHOD_HANDLE = 15
    METHOD_TYPE = 16
    DYNAMIC = 17
    INVOKE_DYNAMIC = 18
    MODULE = 19
    PACKAGE = 20


class ReferenceKind(IntEnum):
    """reference_kind values of CONSTANT_MethodHandle."""
    GET_FIELD = 1
    GET_STATIC = 2
    PUT_FIELD = 3
    PUT_STATIC = 4
    INVOKE_VIRTUAL = 5
    INVOKE_STATIC = 6
    INVOKE_SPECIAL = 7
    NEW_INVOKE_SPECIAL = 8
    INVOKE_INTERFACE = 9


class Constant(ClassNode):
    """Base class for constant pool entries."""
    tag: ClassVar[ConstantPoolTag]


@dataclass(frozen=True)
class ConstantUtf8(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.UTF8
    value: str


@dataclass(frozen=True)
class ConstantInteger(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.INTEGER
    value: int


@dataclass(frozen=True)
class ConstantFloat(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.FLOAT
    value: float


@dataclass(frozen=True)
class ConstantLong(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.LONG
    value: int


@dataclass(frozen=True)
class ConstantDouble(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.DOUBLE
    value: float


@dataclass(frozen=True)
class ConstantClass(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.CLASS
    name_index: int


@dataclass(frozen=True)
class ConstantString(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.STRING
    string_index: int


@dataclass(frozen=True)
class ConstantFieldref(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.FIELDREF
    class_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class ConstantMethodref(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.METHODREF
    class_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class ConstantInterfaceMethodref(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.INTERFACE_METHODREF
    class_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class ConstantNameAndType(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.NAME_AND_TYPE
    name_index: int
    descriptor_index: int


@dataclass(frozen=True)
class ConstantMethodHandle(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.METHOD_HANDLE
    reference_kind: int
    reference_index: int


@dataclass(frozen=True)
class ConstantMethodType(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.METHOD_TYPE
    descriptor_index: int


@dataclass(frozen=True)
class ConstantDynamic(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.DYNAMIC
    bootstrap_method_attr_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class ConstantInvokeDynamic(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.INVOKE_DYNAMIC
    bootstrap_method_attr_index: int
    name_and_type_index: int


@dataclass(frozen=True)
class ConstantModule(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.MODULE
    name_index: int


@dataclass(frozen=True)
class ConstantPackage(Constant):
    tag: ClassVar[ConstantPoolTag] = ConstantPoolTag.PACKAGE
    name_index: int


class ConstantPool(ClassNode):
    """
    The decoded constant pool.

    Indices are 1-based. Slot 0 is reserved and the slot following a Long or
    Double is a hole; both hold None and neither resolves.
    """

    def __init__(self, entries, count: Optional[int] = None):
        self._entries: tuple[Optional[Constant], ...] = tuple(entries)
        self._count = len(self._entries) if count is None else count

    def __len__(self) -> int:
        """The declared constant_pool_count (slot 0 included)."""
        return self._count

    def __iter__(self) -> Iterator[tuple[int, Constant]]:
        for index, entry in enumerate(self._entries):
            if entry is not None:
                yield index, entry

    def __eq__(self, other) -> bool:
        if not isinstance(other, ConstantPool):
            return NotImplemented
        return self._count == other._count and self._entries == other._entries

    def __hash__(self) -> int:
        return hash((self._count, self._entries))

    def __repr__(self) -> str:
        return f"ConstantPool({max(self._count - 1, 0)} slots)"

    def get(self, index: int) -> Constant:
        # A Long or Double in the last slot leaves its hole past the declared count
        if index <= 0 or index >= min(self._count, len(self._entries)):
            raise InvalidConstantPoolIndex(index)
        entry = self._entries[index]
        if entry is None:
            raise InvalidConstantPoolIndex(index, "second slot of a Long or Double")
        return entry

    def get_utf8(self, index: int) -> str:
        entry = self.get(index)
        if not isinstance(entry, ConstantUtf8):
            raise InvalidConstantPoolIndex(index, f"expected Utf8, got {entry.tag.name}")
        return entry.value

    def get_class_name(self, index: int) -> str:
        """Resolve a CONSTANT_Class index to its internal name."""
        entry = self.get(index)
        if not isinstance(entry, ConstantClass):
            raise InvalidConstantPoolIndex(index, f"expected Class, got {entry.tag.name}")
        return self.get_utf8(entry.name_index)

    def to_dict(self) -> dict:
        return {str(index): entry.to_dict() for index, entry in self}


def decode_modified_utf8(raw: bytes) -> str:
    """
    Decode the JVM's modified UTF-8.

    NUL is stored as the two bytes C0 80 and supplementary characters as two
    separately encoded surrogates. Unpaired surrogates are kept as-is.
    Raises UnicodeDecodeError on anything else that is not UTF-8.
    """
    text = raw.replace(b"\xc0\x80", b"\x00").decode("utf-8", "surrogatepass")
    if b"\xed" in raw:
        text = text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")
    return text


def _read_utf8(cursor: Cursor, index: int, strict: bool) -> ConstantUtf8:
    length = cursor.read_u2()
    raw = cursor.read_bytes(length)
    try:
        return ConstantUtf8(decode_modified_utf8(raw))
    except UnicodeDecodeError:
        if strict:
            raise InvalidUtf8(index) from None
    return ConstantUtf8(raw.replace(b"\xc0\x80", b"\x00").decode("utf-8", errors="replace"))


def read_constant_pool(cursor: Cursor, strict_utf8: bool = False) -> ConstantPool:
    """Read a count-prefixed constant pool."""
    count = cursor.read_u2()
    entries: list[Optional[Constant]] = [None]  # 1-indexed
    i = 1
    while i < count:
        tag = cursor.read_u1()

        if tag == ConstantPoolTag.UTF8:
            entry = _read_utf8(cursor, i, strict_utf8)

        elif tag == ConstantPoolTag.INTEGER:
            entry = ConstantInteger(cursor.read_i4())

        elif tag == ConstantPoolTag.FLOAT:
            entry = ConstantFloat(cursor.read_f4())

        elif tag in (ConstantPoolTag.LONG, ConstantPoolTag.DOUBLE):
            if tag == ConstantPoolTag.LONG:
                entries.append(ConstantLong(cursor.read_i8()))
            else:
                entries.append(ConstantDouble(cursor.read_f8()))
            entries.append(None)  # Long and Double take two slots
            i += 2
            continue

        elif tag == ConstantPoolTag.CLASS:
            entry = ConstantClass(cursor.read_u2())

        elif tag == ConstantPoolTag.STRING:
            entry = ConstantString(cursor.read_u2())

        elif tag == ConstantPoolTag.FIELDREF:
            entry = ConstantFieldref(cursor.read_u2(), cursor.read_u2())

        elif tag == ConstantPoolTag.METHODREF:
            entry = ConstantMethodref(cursor.read_u2(), cursor.read_u2())

        elif tag == ConstantPoolTag.INTERFACE_METHODREF:
            entry = ConstantInterfaceMethodref(cursor.read_u2(), cursor.read_u2())

        elif tag == ConstantPoolTag.NAME_AND_TYPE:
            entry = ConstantNameAndType(cursor.read_u2(), cursor.read_u2())

        elif tag == ConstantPoolTag.METHOD_HANDLE:
            entry = ConstantMethodHandle(cursor.read_u1(), cursor.read_u2())

        elif tag == ConstantPoolTag.METHOD_TYPE:
            entry = ConstantMethodType(cursor.read_u2())

        elif tag == ConstantPoolTag.DYNAMIC:
            entry = ConstantDynamic(cursor.read_u2(), cursor.read_u2())

        elif tag == ConstantPoolTag.INVOKE_DYNAMIC:
            entry = ConstantInvokeDynamic(cursor.read_u2(), cursor.read_u2())

        elif tag == ConstantPoolTag.MODULE:
            entry = ConstantModule(cursor.read_u2())

        elif tag == ConstantPoolTag.PACKAGE:
            entry = ConstantPackage(cursor.read_u2())

        else:
            raise InvalidConstantPoolTag(tag)

        entries.append(entry)
        i += 1

    logger.debug("read %d constant pool slots", len(entries) - 1)
    return ConstantPool(entries, count)
