"""
Top-level class file structures.
"""

from dataclasses import dataclass
from enum import IntFlag
from typing import Optional

from .attributes import Attribute, CodeAttribute, find_attribute
from .constants import ConstantPool
from .node import ClassNode


class AccessFlags(IntFlag):
    PUBLIC = 0x0001
    PRIVATE = 0x0002
    PROTECTED = 0x0004
    STATIC = 0x0008
    FINAL = 0x0010
    SUPER = 0x0020  # For classes (invokespecial semantics)
    SYNCHRONIZED = 0x0020  # For methods
    VOLATILE = 0x0040
    BRIDGE = 0x0040
    TRANSIENT = 0x0080
    VARARGS = 0x0080
    NATIVE = 0x0100
    INTERFACE = 0x0200
    ABSTRACT = 0x0400
    STRICT = 0x0800
    SYNTHETIC = 0x1000
    ANNOTATION = 0x2000
    ENUM = 0x4000
    MODULE = 0x8000  # For classes
    MANDATED = 0x8000  # For parameters and module directives


# Flag names in the order javap prints them, per context.
CLASS_FLAGS = (
    ("public", AccessFlags.PUBLIC),
    ("final", AccessFlags.FINAL),
    ("abstract", AccessFlags.ABSTRACT),
)

FIELD_FLAGS = (
    ("public", AccessFlags.PUBLIC),
    ("private", AccessFlags.PRIVATE),
    ("protected", AccessFlags.PROTECTED),
    ("static", AccessFlags.STATIC),
    ("final", AccessFlags.FINAL),
    ("volatile", AccessFlags.VOLATILE),
    ("transient", AccessFlags.TRANSIENT),
)

METHOD_FLAGS = (
    ("public", AccessFlags.PUBLIC),
    ("private", AccessFlags.PRIVATE),
    ("protected", AccessFlags.PROTECTED),
    ("static", AccessFlags.STATIC),
    ("final", AccessFlags.FINAL),
    ("synchronized", AccessFlags.SYNCHRONIZED),
    ("native", AccessFlags.NATIVE),
    ("abstract", AccessFlags.ABSTRACT),
    ("strictfp", AccessFlags.STRICT),
)


def flag_names(flags: int, table) -> list[str]:
    """Return the keyword for each flag in `table` that is set in `flags`."""
    return [name for name, flag in table if flags & flag]


class _HasAttributes:
    attributes: tuple[Attribute, ...]

    def get_attribute(self, kind) -> Optional[Attribute]:
        """Return the first attribute of type `kind`, or None."""
        return find_attribute(self.attributes, kind)

    def get_attributes(self, kind) -> list[Attribute]:
        return [attr for attr in self.attributes if isinstance(attr, kind)]


@dataclass(frozen=True)
class FieldInfo(ClassNode, _HasAttributes):
    """A field as stored in the class file."""
    access_flags: int
    name_index: int
    descriptor_index: int
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class MethodInfo(ClassNode, _HasAttributes):
    """A method as stored in the class file."""
    access_flags: int
    name_index: int
    descriptor_index: int
    attributes: tuple[Attribute, ...] = ()

    @property
    def code(self) -> Optional[CodeAttribute]:
        return self.get_attribute(CodeAttribute)


_LEGACY_VERSIONS = {
    45: "JDK 1.1",
    46: "JDK 1.2",
    47: "JDK 1.3",
    48: "JDK 1.4",
    49: "J2SE 5.0",
    50: "Java SE 6",
}


@dataclass(frozen=True)
class ClassFile(ClassNode, _HasAttributes):
    """A decoded class file. Cross references stay as constant pool indices."""
    minor_version: int
    major_version: int
    constant_pool: ConstantPool
    access_flags: int
    this_class: int
    super_class: int
    interfaces: tuple[int, ...] = ()
    fields: tuple[FieldInfo, ...] = ()
    methods: tuple[MethodInfo, ...] = ()
    attributes: tuple[Attribute, ...] = ()

    @property
    def version(self) -> tuple[int, int]:
        return (self.major_version, self.minor_version)

    @property
    def java_version(self) -> str:
        """Human-readable Java release for the major version."""
        if self.major_version in _LEGACY_VERSIONS:
            return _LEGACY_VERSIONS[self.major_version]
        if self.major_version > 50:
            return f"Java SE {self.major_version - 44}"
        return "unknown"

    @property
    def name(self) -> str:
        """Internal name of this class, e.g. java/lang/String."""
        return self.constant_pool.get_class_name(self.this_class)

    @property
    def super_name(self) -> Optional[str]:
        # java/lang/Object and module-info have no superclass
        if self.super_class == 0:
            return None
        return self.constant_pool.get_class_name(self.super_class)

    @property
    def interface_names(self) -> tuple[str, ...]:
        return tuple(self.constant_pool.get_class_name(i) for i in self.interfaces)

    def member_name(self, member) -> str:
        return self.constant_pool.get_utf8(member.name_index)

    def member_descriptor(self, member) -> str:
        return self.constant_pool.get_utf8(member.descriptor_index)

    def find_method(self, name: str, descriptor: Optional[str] = None) -> Optional[MethodInfo]:
        for method in self.methods:
            if self.member_name(method) != name:
                continue
            if descriptor is None or self.member_descriptor(method) == descriptor:
                return method
        return None

    def find_field(self, name: str) -> Optional[FieldInfo]:
        for f in self.fields:
            if self.member_name(f) == name:
                return f
        return None
