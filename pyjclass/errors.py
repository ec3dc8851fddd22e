"""
Exceptions raised while decoding class files.
"""

from typing import Optional


class ClassFileError(Exception):
    """Base class for all class file decoding errors."""
    pass


class UnexpectedEof(ClassFileError):
    """A read ran past the end of the buffer."""

    def __init__(self, requested: int = 0, remaining: int = 0):
        self.requested = requested
        self.remaining = remaining
        super().__init__(
            f"unexpected end of file (wanted {requested} bytes, {remaining} left)"
        )


class InvalidMagic(ClassFileError):
    """The buffer does not start with 0xCAFEBABE."""

    def __init__(self, value: int):
        self.value = value
        super().__init__(f"invalid magic: {value:#x}")


class InvalidConstantPoolIndex(ClassFileError):
    """Index 0, out of range, the hole after a Long/Double, or the wrong kind."""

    def __init__(self, index: int, reason: Optional[str] = None):
        self.index = index
        message = f"invalid constant pool index: {index}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidConstantPoolTag(ClassFileError):
    """Unrecognized constant pool tag."""

    def __init__(self, tag: int):
        self.tag = tag
        super().__init__(f"invalid constant pool tag: {tag}")


class InvalidUtf8(ClassFileError):
    """A Utf8 constant could not be decoded in strict mode."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"invalid UTF-8 in constant pool entry {index}")


class InvalidAttribute(ClassFileError):
    """
    An attribute body did not end where its declared length said it would,
    or one of its sub-grammar tags was not recognized.
    """

    def __init__(self, name: str, reason: Optional[str] = None):
        self.name = name
        self.reason = reason
        message = f"invalid attribute: {name}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class NestingTooDeep(InvalidAttribute):
    """Attribute or element value nesting exceeded the configured limit."""

    def __init__(self, name: str, depth: int):
        self.depth = depth
        super().__init__(name, f"nesting deeper than {depth}")
