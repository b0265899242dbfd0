"""提供 NamedBin 测试的公共 Fixtures 和辅助类."""

import io

import pytest

from namedbin import BufferSink, NamedBinaryEncoder
from namedbin.const import LENGTH_FIELD_SIZE


def length_field(value: int) -> bytes:
    """按线路格式构造 8 字节小端序长度字段."""
    return value.to_bytes(LENGTH_FIELD_SIZE, "little")


def frame_bytes(name: str, body: bytes) -> bytes:
    """按线路格式手工构造一个帧."""
    raw_name = name.encode("utf-8")
    return (
        length_field(len(body) + len(raw_name) + LENGTH_FIELD_SIZE)
        + length_field(len(raw_name))
        + raw_name
        + length_field(len(body))
        + body
    )


class LimitedSink:
    """最多接收 capacity 字节的输出流, 用于模拟短写."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self.data = bytearray()

    def write(self, data: bytes) -> int:
        room = max(0, self.capacity - len(self.data))
        accepted = bytes(data[:room])
        self.data.extend(accepted)
        return len(accepted)


class TrickleSource:
    """每次最多返回 1 字节的输入流, 用于模拟分段到达的数据."""

    def __init__(self, data: bytes) -> None:
        self._inner = io.BytesIO(data)
        self.calls = 0

    def read(self, size: int = -1) -> bytes:
        self.calls += 1
        return self._inner.read(min(size, 1) if size >= 0 else 1)


@pytest.fixture
def sink() -> BufferSink:
    """提供一个空的内存输出流.

    Returns:
        BufferSink 实例.
    """
    return BufferSink()


@pytest.fixture
def encoder(sink: BufferSink) -> NamedBinaryEncoder:
    """提供一个绑定到 `sink` fixture 的编码器.

    Returns:
        NamedBinaryEncoder 实例.
    """
    return NamedBinaryEncoder(sink)
