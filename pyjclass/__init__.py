"""pyjclass - a decoder for the Java class file format (Java SE 8 through 27)."""

from .attributes import *
from .constants import (
    Constant,
    ConstantClass,
    ConstantDouble,
    ConstantDynamic,
    ConstantFieldref,
    ConstantFloat,
    ConstantInteger,
    ConstantInterfaceMethodref,
    ConstantInvokeDynamic,
    ConstantLong,
    ConstantMethodHandle,
    ConstantMethodref,
    ConstantMethodType,
    ConstantModule,
    ConstantNameAndType,
    ConstantPackage,
    ConstantPool,
    ConstantPoolTag,
    ConstantString,
    ConstantUtf8,
    ReferenceKind,
)
from .cursor import Cursor
from .errors import (
    ClassFileError,
    InvalidAttribute,
    InvalidConstantPoolIndex,
    InvalidConstantPoolTag,
    InvalidMagic,
    InvalidUtf8,
    NestingTooDeep,
    UnexpectedEof,
)
from .model import AccessFlags, ClassFile, FieldInfo, MethodInfo
from .reader import DEFAULT_MAX_DEPTH, ClassReader, max_supported_depth, parse_class, read_class_file

__version__ = "0.1.0"
__all__ = [
    "ClassFile",
    "ClassReader",
    "ConstantPool",
    "ClassFileError",
    "parse_class",
    "read_class_file",
]
