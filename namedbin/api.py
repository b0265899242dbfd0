"""NamedBin API模块.

提供用于帧序列编码和解析的高级接口 `dumps`, `dump`, `loads`, `load`, `iter_frames`.
"""

from collections.abc import Iterable, Iterator
from typing import IO

from .config import Config, resolve_config
from .encoder import NamedBinaryEncoder
from .frame import Frame, FrameReader
from .log import logger
from .options import Option
from .stream import BufferSink, ByteSink

FrameLike = Frame | tuple[str, bytes | bytearray | memoryview]


def _write_frames(
    frames: Iterable[FrameLike], sink: ByteSink, config: Config
) -> NamedBinaryEncoder:
    encoder = NamedBinaryEncoder(sink, config=config)
    try:
        with encoder:
            for item in frames:
                if isinstance(item, Frame):
                    encoder.binary(item.name, item.body)
                else:
                    name, body = item
                    encoder.binary(name, body)
    except Exception as e:
        logger.error("Encoding failed: %s", e)
        raise
    return encoder


def dumps(
    frames: Iterable[FrameLike],
    option: Option = Option.NONE,
    *,
    config: Config | None = None,
) -> bytes:
    """将 (字段名, 帧体) 序列编码为帧字节.

    每一项都在自己的作用域内写入, 帧体为空的项会被省略.

    Args:
        frames: `Frame` 对象或 `(name, body)` 二元组.
        option: 编码选项 (如 `Option.LEGACY_LENGTH_MASK`).
        config: 完整配置, 提供时优先于 option.

    Returns:
        bytes: 编码后的二进制数据.

    Examples:
        >>> from namedbin import dumps
        >>> dumps([("x", b"\\x2a\\x00\\x00\\x00")]).hex()
        '0d0000000000000001000000000000007804000000000000002a000000'
    """
    sink = BufferSink()
    _write_frames(frames, sink, resolve_config(option, config))
    return sink.get_buffer()


def dump(
    frames: Iterable[FrameLike],
    fp: IO[bytes],
    option: Option = Option.NONE,
    *,
    config: Config | None = None,
) -> int:
    """将帧序列编码并写入文件.

    Args:
        frames: `Frame` 对象或 `(name, body)` 二元组.
        fp: 文件类对象, 必须实现 `write(bytes)` 方法.
        option: 编码选项.
        config: 完整配置.

    Returns:
        int: 写入的字节数.
    """
    encoder = _write_frames(frames, fp, resolve_config(option, config))
    return encoder.bytes_written


def iter_frames(
    data: bytes | bytearray | memoryview,
    option: Option = Option.NONE,
    *,
    config: Config | None = None,
) -> Iterator[Frame]:
    """逐帧解析二进制数据.

    Raises:
        FrameError: 帧头部不一致或超出限制.
        ShortReadError: 数据被截断.
    """
    return iter(FrameReader(data, option, config=config))


def loads(
    data: bytes | bytearray | memoryview,
    option: Option = Option.NONE,
    *,
    config: Config | None = None,
) -> list[Frame]:
    """解析帧字节为帧列表.

    Args:
        data: 输入的二进制数据.
        option: 解码选项 (如 `Option.ZERO_COPY`).
        config: 完整配置, 提供时优先于 option.

    Returns:
        list[Frame]: 按流中顺序排列的帧.

    Raises:
        FrameError: 帧头部不一致或超出限制.
        ShortReadError: 数据被截断.
    """
    logger.debug("[loads] 开始解析 %d 字节", len(data))
    frames = list(iter_frames(data, option, config=config))
    logger.debug("[loads] 成功解析 %d 个帧", len(frames))
    return frames


def load(
    fp: IO[bytes],
    option: Option = Option.NONE,
    *,
    config: Config | None = None,
) -> list[Frame]:
    """从文件读取并解析帧.

    封装了 `read()` 和 `loads()`.
    """
    return loads(fp.read(), option, config=config)
