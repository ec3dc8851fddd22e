"""
Attribute structures for Java class files.
All nodes are frozen dataclasses; nested sequences are tuples.
Layouts follow chapter 4.7 of the JVM Specification.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional

from .node import ClassNode


__all__ = [
    "Attribute",
    "VerificationTypeInfo",
    "TopVariableInfo",
    "IntegerVariableInfo",
    "FloatVariableInfo",
    "DoubleVariableInfo",
    "LongVariableInfo",
    "NullVariableInfo",
    "UninitializedThisVariableInfo",
    "ObjectVariableInfo",
    "UninitializedVariableInfo",
    "StackMapFrame",
    "SameFrame",
    "SameLocals1StackItemFrame",
    "SameLocals1StackItemFrameExtended",
    "ChopFrame",
    "SameFrameExtended",
    "AppendFrame",
    "FullFrame",
    "ElementValue",
    "ConstElementValue",
    "EnumConstElementValue",
    "ClassElementValue",
    "AnnotationElementValue",
    "ArrayElementValue",
    "ElementValuePair",
    "Annotation",
    "TargetInfo",
    "TypeParameterTarget",
    "SupertypeTarget",
    "TypeParameterBoundTarget",
    "EmptyTarget",
    "FormalParameterTarget",
    "ThrowsTarget",
    "LocalvarTargetEntry",
    "LocalvarTarget",
    "CatchTarget",
    "OffsetTarget",
    "TypeArgumentTarget",
    "TypePathEntry",
    "TypeAnnotation",
    "ExceptionTableEntry",
    "InnerClassInfo",
    "LineNumberEntry",
    "LocalVariableEntry",
    "LocalVariableTypeEntry",
    "BootstrapMethod",
    "MethodParameter",
    "ModuleRequires",
    "ModuleExports",
    "ModuleOpens",
    "ModuleProvides",
    "ModuleHash",
    "RecordComponent",
    "ConstantValueAttribute",
    "CodeAttribute",
    "StackMapTableAttribute",
    "ExceptionsAttribute",
    "InnerClassesAttribute",
    "EnclosingMethodAttribute",
    "SyntheticAttribute",
    "SignatureAttribute",
    "SourceFileAttribute",
    "SourceDebugExtensionAttribute",
    "LineNumberTableAttribute",
    "LocalVariableTableAttribute",
    "LocalVariableTypeTableAttribute",
    "DeprecatedAttribute",
    "RuntimeVisibleAnnotationsAttribute",
    "RuntimeInvisibleAnnotationsAttribute",
    "RuntimeVisibleParameterAnnotationsAttribute",
    "RuntimeInvisibleParameterAnnotationsAttribute",
    "RuntimeVisibleTypeAnnotationsAttribute",
    "RuntimeInvisibleTypeAnnotationsAttribute",
    "AnnotationDefaultAttribute",
    "BootstrapMethodsAttribute",
    "MethodParametersAttribute",
    "ModuleAttribute",
    "ModulePackagesAttribute",
    "ModuleMainClassAttribute",
    "ModuleHashesAttribute",
    "ModuleTargetAttribute",
    "ModuleResolutionAttribute",
    "NestHostAttribute",
    "NestMembersAttribute",
    "RecordAttribute",
    "PermittedSubclassesAttribute",
    "UnknownAttribute",
    "find_attribute",
]


class Attribute(ClassNode):
    """Base class for all attributes."""
    attribute_name: ClassVar[str]


# ==================== VERIFICATION TYPES ====================

class VerificationTypeInfo(ClassNode):
    """Base class for stack map verification types."""
    tag: ClassVar[int]


@dataclass(frozen=True)
class TopVariableInfo(VerificationTypeInfo):
    tag: ClassVar[int] = 0


@dataclass(frozen=True)
class IntegerVariableInfo(VerificationTypeInfo):
    tag: ClassVar[int] = 1


@dataclass(frozen=True)
class FloatVariableInfo(VerificationTypeInfo):
    tag: ClassVar[int] = 2


@dataclass(frozen=True)
class DoubleVariableInfo(VerificationTypeInfo):
    tag: ClassVar[int] = 3


@dataclass(frozen=True)
class LongVariableInfo(VerificationTypeInfo):
    tag: ClassVar[int] = 4


@dataclass(frozen=True)
class NullVariableInfo(VerificationTypeInfo):
    tag: ClassVar[int] = 5


@dataclass(frozen=True)
class UninitializedThisVariableInfo(VerificationTypeInfo):
    tag: ClassVar[int] = 6


@dataclass(frozen=True)
class ObjectVariableInfo(VerificationTypeInfo):
    tag: ClassVar[int] = 7
    cpool_index: int


@dataclass(frozen=True)
class UninitializedVariableInfo(VerificationTypeInfo):
    tag: ClassVar[int] = 8
    offset: int


# ==================== STACK MAP FRAMES ====================

class StackMapFrame(ClassNode):
    """Base class for StackMapTable entries."""
    offset_delta: int


@dataclass(frozen=True)
class SameFrame(StackMapFrame):
    """frame_type 0-63."""
    offset_delta: int


@dataclass(frozen=True)
class SameLocals1StackItemFrame(StackMapFrame):
    """frame_type 64-127."""
    offset_delta: int
    stack: VerificationTypeInfo


@dataclass(frozen=True)
class SameLocals1StackItemFrameExtended(StackMapFrame):
    """frame_type 247."""
    offset_delta: int
    stack: VerificationTypeInfo


@dataclass(frozen=True)
class ChopFrame(StackMapFrame):
    """frame_type 248-250; the last k locals are absent."""
    offset_delta: int
    k: int


@dataclass(frozen=True)
class SameFrameExtended(StackMapFrame):
    """frame_type 251."""
    offset_delta: int


@dataclass(frozen=True)
class AppendFrame(StackMapFrame):
    """frame_type 252-254."""
    offset_delta: int
    locals: tuple[VerificationTypeInfo, ...]


@dataclass(frozen=True)
class FullFrame(StackMapFrame):
    """frame_type 255."""
    offset_delta: int
    locals: tuple[VerificationTypeInfo, ...]
    stack: tuple[VerificationTypeInfo, ...]


# ==================== ANNOTATIONS ====================

class ElementValue(ClassNode):
    """Base class for annotation element values."""
    pass


@dataclass(frozen=True)
class ConstElementValue(ElementValue):
    """One of B C D F I J S Z s, pointing at a constant pool entry."""
    tag: str
    const_value_index: int


@dataclass(frozen=True)
class EnumConstElementValue(ElementValue):
    type_name_index: int
    const_name_index: int


@dataclass(frozen=True)
class ClassElementValue(ElementValue):
    class_info_index: int


@dataclass(frozen=True)
class AnnotationElementValue(ElementValue):
    annotation: "Annotation"


@dataclass(frozen=True)
class ArrayElementValue(ElementValue):
    values: tuple[ElementValue, ...]


@dataclass(frozen=True)
class ElementValuePair(ClassNode):
    element_name_index: int
    value: ElementValue


@dataclass(frozen=True)
class Annotation(ClassNode):
    type_index: int
    element_value_pairs: tuple[ElementValuePair, ...] = ()


# ==================== TYPE ANNOTATIONS ====================

class TargetInfo(ClassNode):
    """Base class for type annotation targets."""
    pass


@dataclass(frozen=True)
class TypeParameterTarget(TargetInfo):
    """target_type 0x00-0x01."""
    type_parameter_index: int


@dataclass(frozen=True)
class SupertypeTarget(TargetInfo):
    """target_type 0x10. 65535 means the superclass."""
    supertype_index: int


@dataclass(frozen=True)
class TypeParameterBoundTarget(TargetInfo):
    """target_type 0x11-0x12."""
    type_parameter_index: int
    bound_index: int


@dataclass(frozen=True)
class EmptyTarget(TargetInfo):
    """target_type 0x13-0x15."""
    pass


@dataclass(frozen=True)
class FormalParameterTarget(TargetInfo):
    """target_type 0x16."""
    formal_parameter_index: int


@dataclass(frozen=True)
class ThrowsTarget(TargetInfo):
    """target_type 0x17."""
    throws_type_index: int


@dataclass(frozen=True)
class LocalvarTargetEntry(ClassNode):
    start_pc: int
    length: int
    index: int


@dataclass(frozen=True)
class LocalvarTarget(TargetInfo):
    """target_type 0x40-0x41."""
    table: tuple[LocalvarTargetEntry, ...]


@dataclass(frozen=True)
class CatchTarget(TargetInfo):
    """target_type 0x42."""
    exception_table_index: int


@dataclass(frozen=True)
class OffsetTarget(TargetInfo):
    """target_type 0x43-0x46."""
    offset: int


@dataclass(frozen=True)
class TypeArgumentTarget(TargetInfo):
    """target_type 0x47-0x4B."""
    offset: int
    type_argument_index: int


@dataclass(frozen=True)
class TypePathEntry(ClassNode):
    type_path_kind: int
    type_argument_index: int


@dataclass(frozen=True)
class TypeAnnotation(ClassNode):
    target_type: int
    target_info: TargetInfo
    target_path: tuple[TypePathEntry, ...]
    type_index: int
    element_value_pairs: tuple[ElementValuePair, ...] = ()


# ==================== TABLE ENTRIES ====================

@dataclass(frozen=True)
class ExceptionTableEntry(ClassNode):
    start_pc: int
    end_pc: int
    handler_pc: int
    catch_type: int


@dataclass(frozen=True)
class InnerClassInfo(ClassNode):
    inner_class_info_index: int
    outer_class_info_index: int
    inner_name_index: int
    inner_class_access_flags: int


@dataclass(frozen=True)
class LineNumberEntry(ClassNode):
    start_pc: int
    line_number: int


@dataclass(frozen=True)
class LocalVariableEntry(ClassNode):
    start_pc: int
    length: int
    name_index: int
    descriptor_index: int
    index: int


@dataclass(frozen=True)
class LocalVariableTypeEntry(ClassNode):
    start_pc: int
    length: int
    name_index: int
    signature_index: int
    index: int


@dataclass(frozen=True)
class BootstrapMethod(ClassNode):
    bootstrap_method_ref: int
    bootstrap_arguments: tuple[int, ...]


@dataclass(frozen=True)
class MethodParameter(ClassNode):
    name_index: int
    access_flags: int


@dataclass(frozen=True)
class ModuleRequires(ClassNode):
    requires_index: int
    requires_flags: int
    requires_version_index: int


@dataclass(frozen=True)
class ModuleExports(ClassNode):
    exports_index: int
    exports_flags: int
    exports_to: tuple[int, ...]


@dataclass(frozen=True)
class ModuleOpens(ClassNode):
    opens_index: int
    opens_flags: int
    opens_to: tuple[int, ...]


@dataclass(frozen=True)
class ModuleProvides(ClassNode):
    provides_index: int
    provides_with: tuple[int, ...]


@dataclass(frozen=True)
class ModuleHash(ClassNode):
    module_name_index: int
    hash: bytes


@dataclass(frozen=True)
class RecordComponent(ClassNode):
    name_index: int
    descriptor_index: int
    attributes: tuple[Attribute, ...] = ()


# ==================== ATTRIBUTES ====================

@dataclass(frozen=True)
class ConstantValueAttribute(Attribute):
    attribute_name: ClassVar[str] = "ConstantValue"
    constantvalue_index: int


@dataclass(frozen=True)
class CodeAttribute(Attribute):
    """Method body. The bytecode itself is kept as an opaque byte string."""
    attribute_name: ClassVar[str] = "Code"
    max_stack: int
    max_locals: int
    code: bytes
    exception_table: tuple[ExceptionTableEntry, ...] = ()
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class StackMapTableAttribute(Attribute):
    attribute_name: ClassVar[str] = "StackMapTable"
    entries: tuple[StackMapFrame, ...]


@dataclass(frozen=True)
class ExceptionsAttribute(Attribute):
    attribute_name: ClassVar[str] = "Exceptions"
    exception_index_table: tuple[int, ...]


@dataclass(frozen=True)
class InnerClassesAttribute(Attribute):
    attribute_name: ClassVar[str] = "InnerClasses"
    classes: tuple[InnerClassInfo, ...]


@dataclass(frozen=True)
class EnclosingMethodAttribute(Attribute):
    attribute_name: ClassVar[str] = "EnclosingMethod"
    class_index: int
    method_index: int


@dataclass(frozen=True)
class SyntheticAttribute(Attribute):
    attribute_name: ClassVar[str] = "Synthetic"


@dataclass(frozen=True)
class SignatureAttribute(Attribute):
    attribute_name: ClassVar[str] = "Signature"
    signature_index: int


@dataclass(frozen=True)
class SourceFileAttribute(Attribute):
    attribute_name: ClassVar[str] = "SourceFile"
    sourcefile_index: int


@dataclass(frozen=True)
class SourceDebugExtensionAttribute(Attribute):
    attribute_name: ClassVar[str] = "SourceDebugExtension"
    debug_extension: bytes


@dataclass(frozen=True)
class LineNumberTableAttribute(Attribute):
    attribute_name: ClassVar[str] = "LineNumberTable"
    entries: tuple[LineNumberEntry, ...]


@dataclass(frozen=True)
class LocalVariableTableAttribute(Attribute):
    attribute_name: ClassVar[str] = "LocalVariableTable"
    entries: tuple[LocalVariableEntry, ...]


@dataclass(frozen=True)
class LocalVariableTypeTableAttribute(Attribute):
    attribute_name: ClassVar[str] = "LocalVariableTypeTable"
    entries: tuple[LocalVariableTypeEntry, ...]


@dataclass(frozen=True)
class DeprecatedAttribute(Attribute):
    attribute_name: ClassVar[str] = "Deprecated"


@dataclass(frozen=True)
class RuntimeVisibleAnnotationsAttribute(Attribute):
    attribute_name: ClassVar[str] = "RuntimeVisibleAnnotations"
    annotations: tuple[Annotation, ...]


@dataclass(frozen=True)
class RuntimeInvisibleAnnotationsAttribute(Attribute):
    attribute_name: ClassVar[str] = "RuntimeInvisibleAnnotations"
    annotations: tuple[Annotation, ...]


@dataclass(frozen=True)
class RuntimeVisibleParameterAnnotationsAttribute(Attribute):
    """One annotation tuple per formal parameter."""
    attribute_name: ClassVar[str] = "RuntimeVisibleParameterAnnotations"
    parameter_annotations: tuple[tuple[Annotation, ...], ...]


@dataclass(frozen=True)
class RuntimeInvisibleParameterAnnotationsAttribute(Attribute):
    """One annotation tuple per formal parameter."""
    attribute_name: ClassVar[str] = "RuntimeInvisibleParameterAnnotations"
    parameter_annotations: tuple[tuple[Annotation, ...], ...]


@dataclass(frozen=True)
class RuntimeVisibleTypeAnnotationsAttribute(Attribute):
    attribute_name: ClassVar[str] = "RuntimeVisibleTypeAnnotations"
    annotations: tuple[TypeAnnotation, ...]


@dataclass(frozen=True)
class RuntimeInvisibleTypeAnnotationsAttribute(Attribute):
    attribute_name: ClassVar[str] = "RuntimeInvisibleTypeAnnotations"
    annotations: tuple[TypeAnnotation, ...]


@dataclass(frozen=True)
class AnnotationDefaultAttribute(Attribute):
    attribute_name: ClassVar[str] = "AnnotationDefault"
    default_value: ElementValue


@dataclass(frozen=True)
class BootstrapMethodsAttribute(Attribute):
    attribute_name: ClassVar[str] = "BootstrapMethods"
    methods: tuple[BootstrapMethod, ...]


@dataclass(frozen=True)
class MethodParametersAttribute(Attribute):
    attribute_name: ClassVar[str] = "MethodParameters"
    parameters: tuple[MethodParameter, ...]


@dataclass(frozen=True)
class ModuleAttribute(Attribute):
    attribute_name: ClassVar[str] = "Module"
    module_name_index: int
    module_flags: int
    module_version_index: int
    requires: tuple[ModuleRequires, ...] = ()
    exports: tuple[ModuleExports, ...] = ()
    opens: tuple[ModuleOpens, ...] = ()
    uses: tuple[int, ...] = ()
    provides: tuple[ModuleProvides, ...] = ()


@dataclass(frozen=True)
class ModulePackagesAttribute(Attribute):
    attribute_name: ClassVar[str] = "ModulePackages"
    packages: tuple[int, ...]


@dataclass(frozen=True)
class ModuleMainClassAttribute(Attribute):
    attribute_name: ClassVar[str] = "ModuleMainClass"
    main_class_index: int


@dataclass(frozen=True)
class ModuleHashesAttribute(Attribute):
    attribute_name: ClassVar[str] = "ModuleHashes"
    algorithm_index: int
    modules: tuple[ModuleHash, ...]


@dataclass(frozen=True)
class ModuleTargetAttribute(Attribute):
    attribute_name: ClassVar[str] = "ModuleTarget"
    target_platform_index: int


@dataclass(frozen=True)
class ModuleResolutionAttribute(Attribute):
    attribute_name: ClassVar[str] = "ModuleResolution"
    resolution_flags: int


@dataclass(frozen=True)
class NestHostAttribute(Attribute):
    attribute_name: ClassVar[str] = "NestHost"
    host_class_index: int


@dataclass(frozen=True)
class NestMembersAttribute(Attribute):
    attribute_name: ClassVar[str] = "NestMembers"
    classes: tuple[int, ...]


@dataclass(frozen=True)
class RecordAttribute(Attribute):
    attribute_name: ClassVar[str] = "Record"
    components: tuple[RecordComponent, ...]


@dataclass(frozen=True)
class PermittedSubclassesAttribute(Attribute):
    attribute_name: ClassVar[str] = "PermittedSubclasses"
    classes: tuple[int, ...]


@dataclass(frozen=True)
class UnknownAttribute(Attribute):
    """Any attribute whose name is not recognized; the body is kept verbatim."""
    name: str
    info: bytes

    @property
    def attribute_name(self) -> str:
        return self.name


def find_attribute(attributes, kind) -> Optional[Attribute]:
    """Return the first attribute of type `kind`, or None."""
    for attr in attributes:
        if isinstance(attr, kind):
            return attr
    return None
