"""测试 NamedBin API 层."""

import io
import logging

import pytest
from conftest import frame_bytes

from namedbin import (
    Config,
    Frame,
    FrameError,
    NamedBinTypeError,
    Option,
    ShortReadError,
    dump,
    dumps,
    iter_frames,
    load,
    loads,
)


def test_dumps_basic() -> None:
    """dumps() 应为每一项写出一个帧."""
    data = dumps([("x", b"\x2a\x00\x00\x00")])

    assert data == bytes.fromhex(
        "0d00000000000000" "0100000000000000" "78" "0400000000000000" "2a000000"
    )


def test_loads_basic() -> None:
    """loads() 应解析出帧列表."""
    data = frame_bytes("a", b"\x01") + frame_bytes("b", b"\x02\x03")

    frames = loads(data)

    assert frames == [
        Frame(name="a", body=b"\x01", offset=0),
        Frame(name="b", body=b"\x02\x03", offset=26),
    ]


def test_round_trip() -> None:
    """dumps() 与 loads() 应互为逆操作 (帧体非空时)."""
    items = [("first", b"hello"), ("", b"\x00"), ("名字", b"\xff" * 300)]

    frames = loads(dumps(items))

    assert [(f.name, f.body) for f in frames] == items


def test_empty_body_is_elided() -> None:
    """帧体为空的项不产生任何输出."""
    data = dumps([("a", b""), ("b", b"\x01"), ("c", b"")])

    assert data == frame_bytes("b", b"\x01")
    assert [f.name for f in loads(data)] == ["b"]


def test_dumps_accepts_frame_objects() -> None:
    """dumps() 应接受 Frame 对象与二元组混合输入."""
    data = dumps([Frame(name="a", body=b"\x01"), ("b", bytearray(b"\x02"))])

    assert data == frame_bytes("a", b"\x01") + frame_bytes("b", b"\x02")


def test_dumps_invalid_item_logs_and_raises(caplog: pytest.LogCaptureFixture) -> None:
    """非字节帧体应抛出异常并记录错误日志."""
    with caplog.at_level(logging.ERROR, logger="namedbin"):
        with pytest.raises((NamedBinTypeError, TypeError)):
            dumps([("a", 123)])  # type: ignore[list-item]

    assert "Encoding failed" in caplog.text


def test_dump_load_file() -> None:
    """dump() 写入文件并返回字节数, load() 应能读回."""
    buf = io.BytesIO()

    written = dump([("k", b"value")], buf)

    assert written == len(buf.getvalue()) == len(frame_bytes("k", b"value"))
    buf.seek(0)
    assert load(buf) == [Frame(name="k", body=b"value")]


def test_iter_frames_lazy() -> None:
    """iter_frames() 在遇到错误帧之前应产出已解析的帧."""
    data = frame_bytes("a", b"\x01") + frame_bytes("b", b"\x02")[:-1]
    it = iter_frames(data)

    assert next(it).name == "a"
    with pytest.raises(ShortReadError):
        next(it)


def test_legacy_option() -> None:
    """LEGACY_LENGTH_MASK 只影响长度 >= 16 的字段."""
    small = [("a", b"\x01")]
    assert dumps(small, Option.LEGACY_LENGTH_MASK) == dumps(small)

    big = [("a", b"\x00" * 16)]
    legacy = dumps(big, Option.LEGACY_LENGTH_MASK)
    assert legacy != dumps(big)
    with pytest.raises((FrameError, ShortReadError)):
        loads(legacy)


def test_loads_zero_copy() -> None:
    """ZERO_COPY 模式下帧体为 memoryview."""
    frames = loads(frame_bytes("a", b"abc"), Option.ZERO_COPY)

    assert isinstance(frames[0].body, memoryview)
    assert bytes(frames[0].body) == b"abc"


def test_loads_with_config() -> None:
    """显式传入的 Config 应优先于 option."""
    config = Config(max_frame_size=2)

    with pytest.raises(FrameError, match="exceeds limit"):
        loads(frame_bytes("a", b"abc"), Option.ZERO_COPY, config=config)


def test_loads_debug_log(caplog: pytest.LogCaptureFixture) -> None:
    """loads() 应输出解析进度的调试日志."""
    with caplog.at_level(logging.DEBUG, logger="namedbin"):
        loads(frame_bytes("a", b"\x01"))

    assert "成功解析 1 个帧" in caplog.text
