"""
Field and method descriptor parser using Lark.

Descriptors are the type strings stored in the constant pool for fields and
methods, e.g. "I", "[Ljava/lang/String;" or "(IJ)V".
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from lark import Lark, LarkError, Transformer

from .node import ClassNode

GRAMMAR_FILE = Path(__file__).parent / "descriptor.lark"

_BASE_TYPE_NAMES = {
    "B": "byte", "C": "char", "D": "double", "F": "float",
    "I": "int", "J": "long", "S": "short", "Z": "boolean",
}


class DescriptorError(ValueError):
    """A descriptor string does not follow the descriptor grammar."""
    pass


class FieldType(ClassNode):
    """Base class for descriptor types."""

    @property
    def java_name(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class BaseType(FieldType):
    """Primitive type (B, C, D, F, I, J, S, Z)."""
    descriptor: str

    @property
    def java_name(self) -> str:
        return _BASE_TYPE_NAMES[self.descriptor]


@dataclass(frozen=True)
class ObjectType(FieldType):
    """Class or interface type, L<internal name>;"""
    class_name: str

    @property
    def java_name(self) -> str:
        return self.class_name.replace("/", ".")


@dataclass(frozen=True)
class ArrayType(FieldType):
    component: FieldType

    @property
    def dimensions(self) -> int:
        if isinstance(self.component, ArrayType):
            return self.component.dimensions + 1
        return 1

    @property
    def java_name(self) -> str:
        return f"{self.component.java_name}[]"


@dataclass(frozen=True)
class VoidType(FieldType):
    """Return type V."""

    @property
    def java_name(self) -> str:
        return "void"


@dataclass(frozen=True)
class MethodDescriptor(ClassNode):
    parameters: tuple[FieldType, ...]
    return_type: FieldType

    def java_signature(self, name: str) -> str:
        """Render as Java source, e.g. 'int max(int, int)'."""
        params = ", ".join(p.java_name for p in self.parameters)
        return f"{self.return_type.java_name} {name}({params})"


class DescriptorTransformer(Transformer):
    """Transforms the Lark parse tree into descriptor types."""

    def field_descriptor(self, items):
        return items[0]

    def method_descriptor(self, items):
        return MethodDescriptor(parameters=tuple(items[:-1]), return_type=items[-1])

    def base_type(self, items):
        return BaseType(str(items[0]))

    def object_type(self, items):
        return ObjectType(str(items[0]))

    def array_type(self, items):
        return ArrayType(items[0])

    def void_type(self, items):
        return VoidType()


@lru_cache(maxsize=None)
def _parser() -> Lark:
    with open(GRAMMAR_FILE, "r") as f:
        grammar = f.read()
    return Lark(
        grammar,
        parser="lalr",
        start=["field_descriptor", "method_descriptor"],
        maybe_placeholders=False,
    )


def _parse(text: str, start: str):
    try:
        tree = _parser().parse(text, start=start)
    except LarkError as e:
        raise DescriptorError(f"invalid {start.replace('_', ' ')}: {text!r}") from e
    return DescriptorTransformer().transform(tree)


@lru_cache(maxsize=4096)
def parse_field_descriptor(text: str) -> FieldType:
    """Parse a field descriptor such as '[Ljava/lang/String;'."""
    return _parse(text, "field_descriptor")


@lru_cache(maxsize=4096)
def parse_method_descriptor(text: str) -> MethodDescriptor:
    """Parse a method descriptor such as '(IJ)V'."""
    return _parse(text, "method_descriptor")
