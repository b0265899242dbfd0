"""NamedBin 流式处理功能测试.

覆盖 namedbin.stream 模块的核心特性:
1. 输出流/输入流契约
2. 内存输出流 (BufferSink)
3. 增量帧读取 (粘包、拆包)
4. 边界条件 (Max buffer size)
"""

import io

import pytest
from conftest import frame_bytes

from namedbin import (
    ByteSink,
    ByteSource,
    FrameError,
    FrameStreamReader,
    NamedBinaryEncoder,
    Option,
    ShortReadError,
)
from namedbin.stream import BufferSink

# --- 1. 契约 ---


def test_file_objects_satisfy_protocols() -> None:
    """二进制文件对象应同时满足 ByteSink 与 ByteSource 契约."""
    buf = io.BytesIO()

    assert isinstance(buf, ByteSink)
    assert isinstance(buf, ByteSource)
    assert isinstance(BufferSink(), ByteSink)
    assert not isinstance(object(), ByteSource)


def test_encoder_writes_to_file_object() -> None:
    """编码器应能直接写入任意二进制文件对象."""
    buf = io.BytesIO()
    with NamedBinaryEncoder(buf) as enc:
        enc.binary("a", b"\x01")

    assert buf.getvalue() == frame_bytes("a", b"\x01")


# --- 2. BufferSink ---


def test_buffer_sink_basic() -> None:
    """BufferSink 应正确累积和清空数据."""
    sink = BufferSink()

    assert sink.write(b"ab") == 2
    assert sink.write(memoryview(b"cd")) == 2
    assert sink.get_buffer() == b"abcd"
    assert len(sink) == 4

    sink.clear()
    assert sink.get_buffer() == b""


# --- 3. 增量帧读取 ---


def test_stream_reader_sticky_packets() -> None:
    """一次喂入多个帧时应全部解析出来 (粘包)."""
    data = frame_bytes("a", b"\x01") + frame_bytes("b", b"\x02\x03")
    reader = FrameStreamReader()
    reader.feed(data)

    frames = list(reader)
    assert [(f.name, f.body) for f in frames] == [("a", b"\x01"), ("b", b"\x02\x03")]
    assert [f.offset for f in frames] == [0, 26]
    assert reader.pending == 0


def test_stream_reader_split_packets() -> None:
    """逐字节喂入数据时, 帧应在完整到达后才产出 (拆包)."""
    data = frame_bytes("name", b"hello") + frame_bytes("x", b"!")
    reader = FrameStreamReader()

    frames = []
    for i in range(len(data)):
        reader.feed(data[i : i + 1])
        frames.extend(reader)

    assert [f.name for f in frames] == ["name", "x"]
    assert frames[1].offset == len(frame_bytes("name", b"hello"))


def test_stream_reader_keeps_partial_tail() -> None:
    """不完整的尾部应保留在缓冲区中."""
    first = frame_bytes("a", b"\x01")
    second = frame_bytes("b", b"\x02")
    reader = FrameStreamReader()
    reader.feed(first + second[:5])

    assert len(list(reader)) == 1
    assert reader.pending == 5

    reader.feed(second[5:])
    assert [f.name for f in reader] == ["b"]


def test_stream_reader_zero_copy() -> None:
    """ZERO_COPY 模式下帧体在缓冲区被消耗后仍然有效."""
    reader = FrameStreamReader(Option.ZERO_COPY)
    reader.feed(frame_bytes("a", b"keep"))

    (frame,) = list(reader)
    reader.feed(frame_bytes("b", b"more"))
    list(reader)

    assert bytes(frame.body) == b"keep"


def test_stream_reader_max_buffer() -> None:
    """超过最大缓冲区时应抛出 BufferError."""
    reader = FrameStreamReader(max_buffer_size=5)
    reader.feed(b"123")

    with pytest.raises(BufferError, match="max size"):
        reader.feed(b"456")


def test_stream_reader_oversized_frame() -> None:
    """声明的整帧大小超过缓冲区上限时应抛出 FrameError."""
    reader = FrameStreamReader(max_buffer_size=40)
    reader.feed(frame_bytes("a", b"\x00" * 20)[:30])

    with pytest.raises(FrameError, match="can never fit"):
        list(reader)


def test_stream_reader_invalid_header() -> None:
    """头部不一致的帧应抛出 FrameError."""
    data = bytearray(frame_bytes("ab", b"\x01"))
    data[8] = 1  # nameLength 2 -> 1
    reader = FrameStreamReader()
    reader.feed(bytes(data))

    with pytest.raises(FrameError):
        list(reader)


def test_stream_reader_total_size_too_small() -> None:
    """totalSize 偏小时应报告帧头部不一致, 而不是数据被截断."""
    data = bytearray(frame_bytes("x", b"\x01\x02\x03\x04"))
    data[0] = 5  # 正确值为 13
    reader = FrameStreamReader()
    reader.feed(bytes(data))

    with pytest.raises(FrameError, match="Inconsistent frame header") as exc_info:
        list(reader)
    assert not isinstance(exc_info.value, ShortReadError)
    assert exc_info.value.offset == 0

    # 坏帧留在缓冲区中, 再次迭代仍报告同一错误
    with pytest.raises(FrameError, match="Inconsistent frame header"):
        list(reader)
    assert reader.pending == len(data)


def test_stream_reader_total_size_below_field_width() -> None:
    """totalSize 不足以容纳 bodySize 字段时应立即拒绝."""
    data = bytearray(frame_bytes("x", b"\x01"))
    data[0] = 3
    reader = FrameStreamReader()
    reader.feed(bytes(data[:8]))

    with pytest.raises(FrameError, match="cannot hold the bodySize field"):
        list(reader)
