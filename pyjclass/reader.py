"""
Java class file reader.
Decodes class files from Java SE 8 through 27 (and any other version; the
version number is not checked) into the structures of `model` and `attributes`.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Optional
import logging
import sys

from .attributes import (
    Annotation, AnnotationDefaultAttribute, AnnotationElementValue, AppendFrame,
    ArrayElementValue, Attribute, BootstrapMethod, BootstrapMethodsAttribute,
    CatchTarget, ChopFrame, ClassElementValue, CodeAttribute, ConstElementValue,
    ConstantValueAttribute, DeprecatedAttribute, DoubleVariableInfo, ElementValue,
    ElementValuePair, EmptyTarget, EnclosingMethodAttribute, EnumConstElementValue,
    ExceptionTableEntry, ExceptionsAttribute, FloatVariableInfo,
    FormalParameterTarget, FullFrame, InnerClassInfo, InnerClassesAttribute,
    IntegerVariableInfo, LineNumberEntry, LineNumberTableAttribute,
    LocalVariableEntry, LocalVariableTableAttribute, LocalVariableTypeEntry,
    LocalVariableTypeTableAttribute, LocalvarTarget, LocalvarTargetEntry,
    LongVariableInfo, MethodParameter, MethodParametersAttribute, ModuleAttribute,
    ModuleExports, ModuleHash, ModuleHashesAttribute, ModuleMainClassAttribute,
    ModuleOpens, ModulePackagesAttribute, ModuleProvides, ModuleRequires,
    ModuleResolutionAttribute, ModuleTargetAttribute, NestHostAttribute,
    NestMembersAttribute, NullVariableInfo, ObjectVariableInfo, OffsetTarget,
    PermittedSubclassesAttribute, RecordAttribute, RecordComponent,
    RuntimeInvisibleAnnotationsAttribute,
    RuntimeInvisibleParameterAnnotationsAttribute,
    RuntimeInvisibleTypeAnnotationsAttribute, RuntimeVisibleAnnotationsAttribute,
    RuntimeVisibleParameterAnnotationsAttribute,
    RuntimeVisibleTypeAnnotationsAttribute, SameFrame, SameFrameExtended,
    SameLocals1StackItemFrame, SameLocals1StackItemFrameExtended,
    SignatureAttribute, SourceDebugExtensionAttribute, SourceFileAttribute,
    StackMapFrame, StackMapTableAttribute, SupertypeTarget, SyntheticAttribute,
    TargetInfo, ThrowsTarget, TopVariableInfo, TypeAnnotation, TypeArgumentTarget,
    TypeParameterBoundTarget, TypeParameterTarget, TypePathEntry, UnknownAttribute,
    UninitializedThisVariableInfo, UninitializedVariableInfo, VerificationTypeInfo,
)
from .constants import ConstantPool, read_constant_pool
from .cursor import Cursor
from .errors import InvalidAttribute, InvalidMagic, NestingTooDeep, UnexpectedEof
from .model import ClassFile, FieldInfo, MethodInfo

logger = logging.getLogger(__name__)

MAGIC = 0xCAFEBABE

# Limit on nested attribute lists and element values.
DEFAULT_MAX_DEPTH = 64

# Worst-case Python frames per nesting level, and frames kept free for callers
_FRAMES_PER_LEVEL = 4
_RESERVED_FRAMES = 200

_SIMPLE_VERIFICATION_TYPES = {
    cls.tag: cls for cls in (
        TopVariableInfo, IntegerVariableInfo, FloatVariableInfo,
        DoubleVariableInfo, LongVariableInfo, NullVariableInfo,
        UninitializedThisVariableInfo,
    )
}

_CONST_ELEMENT_TAGS = "BCDFIJSZs"


def max_supported_depth() -> int:
    """Deepest nesting the decoder can follow under the current recursion limit."""
    return max((sys.getrecursionlimit() - _RESERVED_FRAMES) // _FRAMES_PER_LEVEL, 0)


class ClassReader:
    """Reads Java class files."""

    def __init__(self, data: bytes, strict_utf8: bool = False,
                 max_depth: int = DEFAULT_MAX_DEPTH):
        self.data = data
        self.strict_utf8 = strict_utf8
        if max_depth < 0:
            raise ValueError(f"max_depth must not be negative, got {max_depth}")
        limit = max_supported_depth()
        if max_depth > limit:
            logger.debug("clamping max_depth %d to %d", max_depth, limit)
            max_depth = limit
        self.max_depth = max_depth
        self.constant_pool: Optional[ConstantPool] = None
        self._depth = 0
        self._readers: dict[str, Callable[[Cursor, str], Attribute]] = {
            "ConstantValue": self._read_constant_value,
            "Code": self._read_code,
            "StackMapTable": self._read_stack_map_table,
            "Exceptions": self._read_exceptions,
            "InnerClasses": self._read_inner_classes,
            "EnclosingMethod": self._read_enclosing_method,
            "Synthetic": lambda r, name: SyntheticAttribute(),
            "Signature": lambda r, name: SignatureAttribute(r.read_u2()),
            "SourceFile": lambda r, name: SourceFileAttribute(r.read_u2()),
            "SourceDebugExtension": self._read_source_debug_extension,
            "LineNumberTable": self._read_line_number_table,
            "LocalVariableTable": self._read_local_variable_table,
            "LocalVariableTypeTable": self._read_local_variable_type_table,
            "Deprecated": lambda r, name: DeprecatedAttribute(),
            "RuntimeVisibleAnnotations": lambda r, name: RuntimeVisibleAnnotationsAttribute(
                self._read_annotations(r, name)),
            "RuntimeInvisibleAnnotations": lambda r, name: RuntimeInvisibleAnnotationsAttribute(
                self._read_annotations(r, name)),
            "RuntimeVisibleParameterAnnotations": lambda r, name: RuntimeVisibleParameterAnnotationsAttribute(
                self._read_parameter_annotations(r, name)),
            "RuntimeInvisibleParameterAnnotations": lambda r, name: RuntimeInvisibleParameterAnnotationsAttribute(
                self._read_parameter_annotations(r, name)),
            "RuntimeVisibleTypeAnnotations": lambda r, name: RuntimeVisibleTypeAnnotationsAttribute(
                self._read_type_annotations(r, name)),
            "RuntimeInvisibleTypeAnnotations": lambda r, name: RuntimeInvisibleTypeAnnotationsAttribute(
                self._read_type_annotations(r, name)),
            "AnnotationDefault": lambda r, name: AnnotationDefaultAttribute(
                self._read_element_value(r, name)),
            "BootstrapMethods": self._read_bootstrap_methods,
            "MethodParameters": self._read_method_parameters,
            "Module": self._read_module,
            "ModulePackages": lambda r, name: ModulePackagesAttribute(self._read_u2_list(r)),
            "ModuleMainClass": lambda r, name: ModuleMainClassAttribute(r.read_u2()),
            "ModuleHashes": self._read_module_hashes,
            "ModuleTarget": lambda r, name: ModuleTargetAttribute(r.read_u2()),
            "ModuleResolution": lambda r, name: ModuleResolutionAttribute(r.read_u2()),
            "NestHost": lambda r, name: NestHostAttribute(r.read_u2()),
            "NestMembers": lambda r, name: NestMembersAttribute(self._read_u2_list(r)),
            "Record": self._read_record,
            "PermittedSubclasses": lambda r, name: PermittedSubclassesAttribute(self._read_u2_list(r)),
        }

    @contextmanager
    def _nested(self, name: str):
        """Track one level of nesting, failing once max_depth is exceeded."""
        self._depth += 1
        try:
            if self._depth > self.max_depth:
                raise NestingTooDeep(name, self.max_depth)
            yield
        finally:
            self._depth -= 1

    @staticmethod
    def _read_u2_list(r: Cursor) -> tuple[int, ...]:
        count = r.read_u2()
        return tuple(r.read_u2() for _ in range(count))

    # ==================== ATTRIBUTES ====================

    def _read_attributes(self, r: Cursor, owner: str) -> tuple[Attribute, ...]:
        """Read a count-prefixed attribute list."""
        with self._nested(owner):
            count = r.read_u2()
            attrs = []
            for _ in range(count):
                name_idx = r.read_u2()
                length = r.read_u4()
                name = self.constant_pool.get_utf8(name_idx)
                sub = r.sub_cursor(length)
                attrs.append(self._read_attribute(sub, name))
            return tuple(attrs)

    def _read_attribute(self, sub: Cursor, name: str) -> Attribute:
        """Decode one attribute body, which must fill its declared length exactly."""
        reader = self._readers.get(name)
        if reader is None:
            logger.debug("keeping unknown attribute %r (%d bytes)", name, sub.remaining())
            return UnknownAttribute(name, sub.read_bytes(sub.remaining()))

        try:
            attr = reader(sub, name)
        except UnexpectedEof as e:
            raise InvalidAttribute(name, "body runs past its declared length") from e
        sub.expect_end(name)
        return attr

    def _read_constant_value(self, r: Cursor, name: str) -> ConstantValueAttribute:
        return ConstantValueAttribute(r.read_u2())

    def _read_code(self, r: Cursor, name: str) -> CodeAttribute:
        max_stack = r.read_u2()
        max_locals = r.read_u2()
        code_length = r.read_u4()
        code = r.read_bytes(code_length)

        count = r.read_u2()
        exception_table = tuple(
            ExceptionTableEntry(r.read_u2(), r.read_u2(), r.read_u2(), r.read_u2())
            for _ in range(count)
        )

        # LineNumberTable, LocalVariableTable, StackMapTable, ...
        attributes = self._read_attributes(r, name)

        return CodeAttribute(
            max_stack=max_stack,
            max_locals=max_locals,
            code=code,
            exception_table=exception_table,
            attributes=attributes,
        )

    def _read_exceptions(self, r: Cursor, name: str) -> ExceptionsAttribute:
        return ExceptionsAttribute(self._read_u2_list(r))

    def _read_inner_classes(self, r: Cursor, name: str) -> InnerClassesAttribute:
        count = r.read_u2()
        classes = tuple(
            InnerClassInfo(r.read_u2(), r.read_u2(), r.read_u2(), r.read_u2())
            for _ in range(count)
        )
        return InnerClassesAttribute(classes)

    def _read_enclosing_method(self, r: Cursor, name: str) -> EnclosingMethodAttribute:
        class_index = r.read_u2()
        method_index = r.read_u2()
        return EnclosingMethodAttribute(class_index, method_index)

    def _read_source_debug_extension(self, r: Cursor, name: str) -> SourceDebugExtensionAttribute:
        # No inner length; the attribute length covers the whole string.
        return SourceDebugExtensionAttribute(r.read_bytes(r.remaining()))

    def _read_line_number_table(self, r: Cursor, name: str) -> LineNumberTableAttribute:
        count = r.read_u2()
        entries = tuple(LineNumberEntry(r.read_u2(), r.read_u2()) for _ in range(count))
        return LineNumberTableAttribute(entries)

    def _read_local_variable_table(self, r: Cursor, name: str) -> LocalVariableTableAttribute:
        count = r.read_u2()
        entries = tuple(
            LocalVariableEntry(r.read_u2(), r.read_u2(), r.read_u2(), r.read_u2(), r.read_u2())
            for _ in range(count)
        )
        return LocalVariableTableAttribute(entries)

    def _read_local_variable_type_table(self, r: Cursor, name: str) -> LocalVariableTypeTableAttribute:
        count = r.read_u2()
        entries = tuple(
            LocalVariableTypeEntry(r.read_u2(), r.read_u2(), r.read_u2(), r.read_u2(), r.read_u2())
            for _ in range(count)
        )
        return LocalVariableTypeTableAttribute(entries)

    def _read_bootstrap_methods(self, r: Cursor, name: str) -> BootstrapMethodsAttribute:
        count = r.read_u2()
        methods = []
        for _ in range(count):
            method_ref = r.read_u2()
            methods.append(BootstrapMethod(method_ref, self._read_u2_list(r)))
        return BootstrapMethodsAttribute(tuple(methods))

    def _read_method_parameters(self, r: Cursor, name: str) -> MethodParametersAttribute:
        count = r.read_u1()
        parameters = tuple(MethodParameter(r.read_u2(), r.read_u2()) for _ in range(count))
        return MethodParametersAttribute(parameters)

    def _read_record(self, r: Cursor, name: str) -> RecordAttribute:
        count = r.read_u2()
        components = []
        for _ in range(count):
            name_index = r.read_u2()
            descriptor_index = r.read_u2()
            attributes = self._read_attributes(r, name)
            components.append(RecordComponent(name_index, descriptor_index, attributes))
        return RecordAttribute(tuple(components))

    # ==================== STACK MAP FRAMES ====================

    def _read_stack_map_table(self, r: Cursor, name: str) -> StackMapTableAttribute:
        count = r.read_u2()
        entries = tuple(self._read_stack_map_frame(r, name) for _ in range(count))
        return StackMapTableAttribute(entries)

    def _read_stack_map_frame(self, r: Cursor, name: str) -> StackMapFrame:
        frame_type = r.read_u1()

        if frame_type <= 63:
            return SameFrame(frame_type)

        if frame_type <= 127:
            return SameLocals1StackItemFrame(frame_type - 64, self._read_verification_type(r, name))

        if frame_type < 247:
            # 128-246 are reserved
            raise InvalidAttribute(name, f"reserved stack map frame type {frame_type}")

        if frame_type == 247:
            offset_delta = r.read_u2()
            return SameLocals1StackItemFrameExtended(offset_delta, self._read_verification_type(r, name))

        if frame_type <= 250:
            return ChopFrame(r.read_u2(), 251 - frame_type)

        if frame_type == 251:
            return SameFrameExtended(r.read_u2())

        if frame_type <= 254:
            offset_delta = r.read_u2()
            locals_ = tuple(
                self._read_verification_type(r, name) for _ in range(frame_type - 251)
            )
            return AppendFrame(offset_delta, locals_)

        offset_delta = r.read_u2()
        num_locals = r.read_u2()
        locals_ = tuple(self._read_verification_type(r, name) for _ in range(num_locals))
        num_stack = r.read_u2()
        stack = tuple(self._read_verification_type(r, name) for _ in range(num_stack))
        return FullFrame(offset_delta, locals_, stack)

    def _read_verification_type(self, r: Cursor, name: str) -> VerificationTypeInfo:
        tag = r.read_u1()
        simple = _SIMPLE_VERIFICATION_TYPES.get(tag)
        if simple is not None:
            return simple()
        if tag == ObjectVariableInfo.tag:
            return ObjectVariableInfo(r.read_u2())
        if tag == UninitializedVariableInfo.tag:
            return UninitializedVariableInfo(r.read_u2())
        raise InvalidAttribute(name, f"unknown verification type tag {tag}")

    # ==================== ANNOTATIONS ====================

    def _read_annotations(self, r: Cursor, name: str) -> tuple[Annotation, ...]:
        count = r.read_u2()
        return tuple(self._read_annotation(r, name) for _ in range(count))

    def _read_parameter_annotations(self, r: Cursor, name: str) -> tuple[tuple[Annotation, ...], ...]:
        num_parameters = r.read_u1()
        return tuple(self._read_annotations(r, name) for _ in range(num_parameters))

    def _read_annotation(self, r: Cursor, name: str) -> Annotation:
        """Read a single annotation."""
        type_index = r.read_u2()
        return Annotation(type_index, self._read_element_value_pairs(r, name))

    def _read_element_value_pairs(self, r: Cursor, name: str) -> tuple[ElementValuePair, ...]:
        count = r.read_u2()
        pairs = []
        for _ in range(count):
            name_index = r.read_u2()
            pairs.append(ElementValuePair(name_index, self._read_element_value(r, name)))
        return tuple(pairs)

    def _read_element_value(self, r: Cursor, name: str) -> ElementValue:
        """Read an annotation element value."""
        with self._nested(name):
            tag = chr(r.read_u1())

            if tag in _CONST_ELEMENT_TAGS:
                return ConstElementValue(tag, r.read_u2())

            elif tag == "e":
                type_name_index = r.read_u2()
                const_name_index = r.read_u2()
                return EnumConstElementValue(type_name_index, const_name_index)

            elif tag == "c":
                return ClassElementValue(r.read_u2())

            elif tag == "@":
                return AnnotationElementValue(self._read_annotation(r, name))

            elif tag == "[":
                count = r.read_u2()
                return ArrayElementValue(
                    tuple(self._read_element_value(r, name) for _ in range(count))
                )

            raise InvalidAttribute(name, f"unknown element value tag {tag!r}")

    # ==================== TYPE ANNOTATIONS ====================

    def _read_type_annotations(self, r: Cursor, name: str) -> tuple[TypeAnnotation, ...]:
        count = r.read_u2()
        return tuple(self._read_type_annotation(r, name) for _ in range(count))

    def _read_type_annotation(self, r: Cursor, name: str) -> TypeAnnotation:
        target_type = r.read_u1()
        target_info = self._read_target_info(r, target_type, name)

        path_length = r.read_u1()
        target_path = tuple(TypePathEntry(r.read_u1(), r.read_u1()) for _ in range(path_length))

        type_index = r.read_u2()
        pairs = self._read_element_value_pairs(r, name)
        return TypeAnnotation(target_type, target_info, target_path, type_index, pairs)

    def _read_target_info(self, r: Cursor, target_type: int, name: str) -> TargetInfo:
        if target_type in (0x00, 0x01):
            return TypeParameterTarget(r.read_u1())

        elif target_type == 0x10:
            return SupertypeTarget(r.read_u2())

        elif target_type in (0x11, 0x12):
            type_parameter_index = r.read_u1()
            bound_index = r.read_u1()
            return TypeParameterBoundTarget(type_parameter_index, bound_index)

        elif 0x13 <= target_type <= 0x15:
            return EmptyTarget()

        elif target_type == 0x16:
            return FormalParameterTarget(r.read_u1())

        elif target_type == 0x17:
            return ThrowsTarget(r.read_u2())

        elif target_type in (0x40, 0x41):
            count = r.read_u2()
            table = tuple(
                LocalvarTargetEntry(r.read_u2(), r.read_u2(), r.read_u2())
                for _ in range(count)
            )
            return LocalvarTarget(table)

        elif target_type == 0x42:
            return CatchTarget(r.read_u2())

        elif 0x43 <= target_type <= 0x46:
            return OffsetTarget(r.read_u2())

        elif 0x47 <= target_type <= 0x4B:
            offset = r.read_u2()
            return TypeArgumentTarget(offset, r.read_u1())

        raise InvalidAttribute(name, f"unknown type annotation target {target_type:#04x}")

    # ==================== MODULES ====================

    def _read_module(self, r: Cursor, name: str) -> ModuleAttribute:
        module_name_index = r.read_u2()
        module_flags = r.read_u2()
        module_version_index = r.read_u2()

        count = r.read_u2()
        requires = tuple(ModuleRequires(r.read_u2(), r.read_u2(), r.read_u2()) for _ in range(count))

        exports = []
        for _ in range(r.read_u2()):
            exports_index = r.read_u2()
            exports_flags = r.read_u2()
            exports.append(ModuleExports(exports_index, exports_flags, self._read_u2_list(r)))

        opens = []
        for _ in range(r.read_u2()):
            opens_index = r.read_u2()
            opens_flags = r.read_u2()
            opens.append(ModuleOpens(opens_index, opens_flags, self._read_u2_list(r)))

        uses = self._read_u2_list(r)

        provides = []
        for _ in range(r.read_u2()):
            provides_index = r.read_u2()
            provides.append(ModuleProvides(provides_index, self._read_u2_list(r)))

        return ModuleAttribute(
            module_name_index=module_name_index,
            module_flags=module_flags,
            module_version_index=module_version_index,
            requires=requires,
            exports=tuple(exports),
            opens=tuple(opens),
            uses=uses,
            provides=tuple(provides),
        )

    def _read_module_hashes(self, r: Cursor, name: str) -> ModuleHashesAttribute:
        algorithm_index = r.read_u2()
        modules = []
        for _ in range(r.read_u2()):
            module_name_index = r.read_u2()
            hash_length = r.read_u2()
            modules.append(ModuleHash(module_name_index, r.read_bytes(hash_length)))
        return ModuleHashesAttribute(algorithm_index, tuple(modules))

    # ==================== MEMBERS ====================

    def _read_field(self, r: Cursor) -> FieldInfo:
        """Read a field."""
        access = r.read_u2()
        name_idx = r.read_u2()
        desc_idx = r.read_u2()
        attrs = self._read_attributes(r, "field")
        return FieldInfo(access, name_idx, desc_idx, attrs)

    def _read_method(self, r: Cursor) -> MethodInfo:
        """Read a method."""
        access = r.read_u2()
        name_idx = r.read_u2()
        desc_idx = r.read_u2()
        attrs = self._read_attributes(r, "method")
        return MethodInfo(access, name_idx, desc_idx, attrs)

    def read(self) -> ClassFile:
        """Read the class file and return the decoded ClassFile."""
        r = Cursor(self.data)
        self._depth = 0

        # Magic number
        magic = r.read_u4()
        if magic != MAGIC:
            raise InvalidMagic(magic)

        # Version; deliberately not range-checked
        minor = r.read_u2()
        major = r.read_u2()

        self.constant_pool = read_constant_pool(r, self.strict_utf8)

        access_flags = r.read_u2()
        this_class = r.read_u2()
        super_class = r.read_u2()

        interfaces = self._read_u2_list(r)

        fields_count = r.read_u2()
        fields = tuple(self._read_field(r) for _ in range(fields_count))

        methods_count = r.read_u2()
        methods = tuple(self._read_method(r) for _ in range(methods_count))

        attributes = self._read_attributes(r, "ClassFile")

        return ClassFile(
            minor_version=minor,
            major_version=major,
            constant_pool=self.constant_pool,
            access_flags=access_flags,
            this_class=this_class,
            super_class=super_class,
            interfaces=interfaces,
            fields=fields,
            methods=methods,
            attributes=attributes,
        )


def parse_class(data: bytes, strict_utf8: bool = False,
                max_depth: int = DEFAULT_MAX_DEPTH) -> ClassFile:
    """Decode a complete class file held in memory."""
    return ClassReader(data, strict_utf8=strict_utf8, max_depth=max_depth).read()


def read_class_file(path: str | Path, **options) -> ClassFile:
    """Read a single class file."""
    data = Path(path).read_bytes()
    return parse_class(data, **options)
