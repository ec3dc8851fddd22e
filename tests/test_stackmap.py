"""Tests for StackMapTable frame decoding."""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from pyjclass import InvalidAttribute, parse_class
from pyjclass.attributes import (
    AppendFrame, ChopFrame, DoubleVariableInfo, FloatVariableInfo, FullFrame,
    IntegerVariableInfo, LongVariableInfo, NullVariableInfo, ObjectVariableInfo,
    SameFrame, SameFrameExtended, SameLocals1StackItemFrame,
    SameLocals1StackItemFrameExtended, StackMapTableAttribute, TopVariableInfo,
    UninitializedThisVariableInfo, UninitializedVariableInfo,
)

from classbuilder import ClassBuilder, code_info, u1, u2


def decode_frames(*frames: bytes):
    """Decode a StackMapTable holding the given encoded frames."""
    builder = ClassBuilder()
    body = u2(len(frames)) + b"".join(frames)
    smt = builder.attribute("StackMapTable", body)
    builder.add_method("run", "()V", attributes=[builder.attribute("Code", code_info(attributes=[smt]))])
    code = parse_class(builder.to_bytes()).methods[0].code
    attr = code.attributes[0]
    assert isinstance(attr, StackMapTableAttribute)
    return attr.entries


class TestFrameTypes:
    @pytest.mark.parametrize("frame_type", [0, 17, 63])
    def test_same_frame(self, frame_type):
        assert decode_frames(u1(frame_type)) == (SameFrame(frame_type),)

    @pytest.mark.parametrize("frame_type", [64, 127])
    def test_same_locals_1_stack_item(self, frame_type):
        frames = decode_frames(u1(frame_type) + u1(1))
        assert frames == (SameLocals1StackItemFrame(frame_type - 64, IntegerVariableInfo()),)

    @pytest.mark.parametrize("frame_type", [128, 200, 246])
    def test_reserved_frame_types(self, frame_type):
        with pytest.raises(InvalidAttribute) as exc_info:
            decode_frames(u1(frame_type))
        assert exc_info.value.name == "StackMapTable"

    def test_same_locals_1_stack_item_extended(self):
        frames = decode_frames(u1(247) + u2(300) + u1(7) + u2(4))
        assert frames == (SameLocals1StackItemFrameExtended(300, ObjectVariableInfo(4)),)

    @pytest.mark.parametrize("frame_type,k", [(248, 3), (249, 2), (250, 1)])
    def test_chop_frame(self, frame_type, k):
        assert decode_frames(u1(frame_type) + u2(10)) == (ChopFrame(10, k),)

    def test_same_frame_extended(self):
        assert decode_frames(u1(251) + u2(1000)) == (SameFrameExtended(1000),)

    def test_append_frame_one_local(self):
        frames = decode_frames(u1(252) + u2(5) + u1(2))
        assert frames == (AppendFrame(5, (FloatVariableInfo(),)),)

    def test_append_frame_three_locals(self):
        frames = decode_frames(u1(254) + u2(5) + u1(1) + u1(4) + u1(8) + u2(12))
        assert frames == (
            AppendFrame(5, (IntegerVariableInfo(), LongVariableInfo(), UninitializedVariableInfo(12))),
        )

    def test_full_frame(self):
        frames = decode_frames(
            u1(255) + u2(7)
            + u2(2) + u1(6) + u1(3)
            + u2(1) + u1(5)
        )
        assert frames == (
            FullFrame(7, (UninitializedThisVariableInfo(), DoubleVariableInfo()), (NullVariableInfo(),)),
        )

    def test_full_frame_empty(self):
        assert decode_frames(u1(255) + u2(0) + u2(0) + u2(0)) == (FullFrame(0, (), ()),)

    def test_frames_in_sequence(self):
        frames = decode_frames(u1(3), u1(250) + u2(4), u1(0))
        assert frames == (SameFrame(3), ChopFrame(4, 1), SameFrame(0))

    def test_empty_table(self):
        assert decode_frames() == ()


class TestVerificationTypes:
    @pytest.mark.parametrize("encoded,expected", [
        (u1(0), TopVariableInfo()),
        (u1(1), IntegerVariableInfo()),
        (u1(2), FloatVariableInfo()),
        (u1(3), DoubleVariableInfo()),
        (u1(4), LongVariableInfo()),
        (u1(5), NullVariableInfo()),
        (u1(6), UninitializedThisVariableInfo()),
        (u1(7) + u2(9), ObjectVariableInfo(9)),
        (u1(8) + u2(33), UninitializedVariableInfo(33)),
    ])
    def test_each_tag(self, encoded, expected):
        frames = decode_frames(u1(64) + encoded)
        assert frames[0].stack == expected
        assert frames[0].stack.tag == encoded[0]

    @pytest.mark.parametrize("tag", [9, 42, 255])
    def test_unknown_tag(self, tag):
        with pytest.raises(InvalidAttribute) as exc_info:
            decode_frames(u1(64) + u1(tag))
        assert exc_info.value.name == "StackMapTable"

    def test_truncated_object_variable(self):
        with pytest.raises(InvalidAttribute):
            decode_frames(u1(64) + u1(7) + u1(0))
