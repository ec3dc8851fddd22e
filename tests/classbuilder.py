"""Byte-level builders for class file test fixtures."""

import struct


def u1(value: int) -> bytes:
    return struct.pack(">B", value)


def u2(value: int) -> bytes:
    return struct.pack(">H", value)


def u4(value: int) -> bytes:
    return struct.pack(">I", value)


def attr(name_index: int, info: bytes, length: int = None) -> bytes:
    """Encode an attribute; `length` overrides the declared length."""
    if length is None:
        length = len(info)
    return u2(name_index) + u4(length) + info


def u2_list(values) -> bytes:
    return u2(len(values)) + b"".join(u2(v) for v in values)


class ConstantPoolBuilder:
    """Appends constant pool entries and hands back their indices."""

    def __init__(self):
        self.entries: list[bytes] = []
        self.slots = 0
        self._utf8: dict[str, int] = {}

    def _push(self, entry: bytes, width: int = 1) -> int:
        index = self.slots + 1
        self.entries.append(entry)
        self.slots += width
        return index

    def utf8(self, value: str) -> int:
        if value not in self._utf8:
            self._utf8[value] = self.utf8_raw(value.encode("utf-8"))
        return self._utf8[value]

    def utf8_raw(self, raw: bytes) -> int:
        return self._push(u1(1) + u2(len(raw)) + raw)

    def integer(self, value: int) -> int:
        return self._push(u1(3) + struct.pack(">i", value))

    def float_(self, value: float) -> int:
        return self._push(u1(4) + struct.pack(">f", value))

    def long(self, value: int) -> int:
        return self._push(u1(5) + struct.pack(">q", value), width=2)

    def double(self, value: float) -> int:
        return self._push(u1(6) + struct.pack(">d", value), width=2)

    def class_(self, name_index: int) -> int:
        return self._push(u1(7) + u2(name_index))

    def string(self, string_index: int) -> int:
        return self._push(u1(8) + u2(string_index))

    def fieldref(self, class_index: int, nat_index: int) -> int:
        return self._push(u1(9) + u2(class_index) + u2(nat_index))

    def methodref(self, class_index: int, nat_index: int) -> int:
        return self._push(u1(10) + u2(class_index) + u2(nat_index))

    def interface_methodref(self, class_index: int, nat_index: int) -> int:
        return self._push(u1(11) + u2(class_index) + u2(nat_index))

    def name_and_type(self, name_index: int, descriptor_index: int) -> int:
        return self._push(u1(12) + u2(name_index) + u2(descriptor_index))

    def method_handle(self, kind: int, reference_index: int) -> int:
        return self._push(u1(15) + u1(kind) + u2(reference_index))

    def method_type(self, descriptor_index: int) -> int:
        return self._push(u1(16) + u2(descriptor_index))

    def dynamic(self, bootstrap_index: int, nat_index: int) -> int:
        return self._push(u1(17) + u2(bootstrap_index) + u2(nat_index))

    def invoke_dynamic(self, bootstrap_index: int, nat_index: int) -> int:
        return self._push(u1(18) + u2(bootstrap_index) + u2(nat_index))

    def module(self, name_index: int) -> int:
        return self._push(u1(19) + u2(name_index))

    def package(self, name_index: int) -> int:
        return self._push(u1(20) + u2(name_index))

    @property
    def count(self) -> int:
        return self.slots + 1

    def to_bytes(self) -> bytes:
        return u2(self.count) + b"".join(self.entries)


class ClassBuilder:
    """Assembles a complete class file from encoded pieces."""

    def __init__(self, this_name: str = "Test", super_name: str = "java/lang/Object",
                 major: int = 52, minor: int = 0):
        self.cp = ConstantPoolBuilder()
        self.major = major
        self.minor = minor
        self.access_flags = 0x0021
        this_utf8 = self.cp.utf8(this_name)
        super_utf8 = self.cp.utf8(super_name)
        self.this_class = self.cp.class_(this_utf8)
        self.super_class = self.cp.class_(super_utf8)
        self.interfaces: list[int] = []
        self.fields: list[bytes] = []
        self.methods: list[bytes] = []
        self.attributes: list[bytes] = []

    def attribute(self, name: str, info: bytes, length: int = None) -> bytes:
        """Encode an attribute, adding its name to the constant pool."""
        return attr(self.cp.utf8(name), info, length)

    def _member(self, flags: int, name: str, descriptor: str, attributes) -> bytes:
        return (
            u2(flags) + u2(self.cp.utf8(name)) + u2(self.cp.utf8(descriptor))
            + u2(len(attributes)) + b"".join(attributes)
        )

    def add_field(self, name: str, descriptor: str, flags: int = 0x0001, attributes=()):
        self.fields.append(self._member(flags, name, descriptor, attributes))

    def add_method(self, name: str, descriptor: str, flags: int = 0x0001, attributes=()):
        self.methods.append(self._member(flags, name, descriptor, attributes))

    def add_attribute(self, name: str, info: bytes, length: int = None):
        self.attributes.append(self.attribute(name, info, length))

    def add_interface(self, name: str):
        self.interfaces.append(self.cp.class_(self.cp.utf8(name)))

    def to_bytes(self) -> bytes:
        return (
            u4(0xCAFEBABE) + u2(self.minor) + u2(self.major)
            + self.cp.to_bytes()
            + u2(self.access_flags) + u2(self.this_class) + u2(self.super_class)
            + u2_list(self.interfaces)
            + u2(len(self.fields)) + b"".join(self.fields)
            + u2(len(self.methods)) + b"".join(self.methods)
            + u2(len(self.attributes)) + b"".join(self.attributes)
        )


def code_info(code: bytes = b"\xb1", max_stack: int = 1, max_locals: int = 1,
              exception_table=(), attributes=()) -> bytes:
    """Encode the body of a Code attribute."""
    table = b"".join(u2(a) + u2(b) + u2(c) + u2(d) for a, b, c, d in exception_table)
    return (
        u2(max_stack) + u2(max_locals) + u4(len(code)) + code
        + u2(len(exception_table)) + table
        + u2(len(attributes)) + b"".join(attributes)
    )
