"""NamedBin帧编解码.

帧是一个非空字段在线路上的记录, 所有长度字段均为 8 字节小端序:

    totalSize   = bodySize + nameLength + 8
    nameLength
    name        (UTF-8)
    bodySize
    body

整帧字节数为 `totalSize + FRAME_OVERHEAD`.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass

from .config import Config, resolve_config
from .const import (
    FRAME_OVERHEAD,
    LENGTH_FIELD_SIZE,
    LENGTH_MASK,
    MAX_LENGTH_VALUE,
)
from .exceptions import FrameError, NamedBinValueError, ShortReadError
from .log import get_hexdump, logger
from .options import Option


def pack_length(value: int, mask: int = LENGTH_MASK) -> bytes:
    """将长度打包为 8 字节, 低位字节在前.

    Args:
        value: 长度值.
        mask: 每字节的掩码. 旧版实现使用 `0x0F`, 会截断超过 15 的字节.

    Returns:
        bytes: 8 字节长度字段.

    Raises:
        NamedBinValueError: 如果长度不在 [0, 2**64) 范围内.
    """
    if not 0 <= value <= MAX_LENGTH_VALUE:
        raise NamedBinValueError(f"Length out of range: {value}")
    return bytes((value >> (8 * i)) & mask for i in range(LENGTH_FIELD_SIZE))


def unpack_length(data: bytes | bytearray | memoryview) -> int:
    """解包 8 字节小端序长度字段."""
    return int.from_bytes(data, "little")


def encode_header(name: bytes, body_size: int, mask: int = LENGTH_MASK) -> bytes:
    """构造帧头部 (totalSize | nameLength | name | bodySize)."""
    total_size = body_size + len(name) + LENGTH_FIELD_SIZE
    return b"".join(
        (
            pack_length(total_size, mask),
            pack_length(len(name), mask),
            name,
            pack_length(body_size, mask),
        )
    )


def encode_frame(
    name: str, body: bytes | bytearray | memoryview, mask: int = LENGTH_MASK
) -> bytes:
    """构造完整的帧字节."""
    return encode_header(name.encode("utf-8"), len(body), mask) + bytes(body)


@dataclass(frozen=True)
class Frame:
    """解码出的单个帧.

    Attributes:
        name: 字段名 (可能为空).
        body: 帧体原始字节.
        offset: 帧在输入流中的起始偏移.
    """

    name: str
    body: bytes | memoryview
    offset: int = 0

    @property
    def name_size(self) -> int:
        """字段名编码后的字节数."""
        return len(self.name.encode("utf-8"))

    @property
    def body_size(self) -> int:
        """帧体字节数."""
        return len(self.body)

    @property
    def total_size(self) -> int:
        """totalSize 字段的值."""
        return self.body_size + self.name_size + LENGTH_FIELD_SIZE

    @property
    def wire_size(self) -> int:
        """整帧在线路上占用的字节数."""
        return self.total_size + FRAME_OVERHEAD

    def to_bytes(self) -> bytes:
        """重新编码为帧字节."""
        return encode_frame(self.name, self.body)


def read_frame(
    read: Callable[[int], bytes | memoryview],
    config: Config,
    offset: int = 0,
) -> Frame:
    """通过精确读取函数解析一个帧.

    Args:
        read: 精确读取 n 字节的函数, 数据不足时应抛出 `ShortReadError`.
        config: 配置 (提供长度限制).
        offset: 帧起始偏移, 仅用于错误信息.

    Returns:
        Frame: 解析出的帧.

    Raises:
        FrameError: 帧头部不一致或超出限制.
        ShortReadError: 数据不足.
    """
    total_size = unpack_length(read(LENGTH_FIELD_SIZE))
    name_length = unpack_length(read(LENGTH_FIELD_SIZE))
    if name_length > config.max_name_length:
        raise FrameError(
            f"Name length {name_length} exceeds limit {config.max_name_length}",
            offset,
        )

    raw_name = read(name_length)
    try:
        name = bytes(raw_name).decode("utf-8")
    except UnicodeDecodeError as e:
        raise FrameError(f"Frame name is not valid UTF-8: {e}", offset) from e

    body_size = unpack_length(read(LENGTH_FIELD_SIZE))
    if body_size > config.max_frame_size:
        raise FrameError(
            f"Body size {body_size} exceeds limit {config.max_frame_size}", offset
        )
    if total_size != body_size + name_length + LENGTH_FIELD_SIZE:
        raise FrameError(
            f"Inconsistent frame header: totalSize={total_size}, "
            f"nameLength={name_length}, bodySize={body_size}",
            offset,
        )

    return Frame(name=name, body=read(body_size), offset=offset)


class FrameReader:
    """从内存缓冲区中逐帧解析的读取器.

    包装memoryview以提供流式读取功能, 开启 `Option.ZERO_COPY` 时
    帧体以 memoryview 切片返回而不复制数据.
    """

    __slots__ = ("_config", "_pos", "_view", "length")

    _view: memoryview
    _pos: int
    length: int
    _config: Config

    def __init__(
        self,
        data: bytes | bytearray | memoryview,
        option: Option = Option.NONE,
        *,
        config: Config | None = None,
    ):
        """初始化FrameReader.

        Args:
            data: 要读取的二进制数据.
            option: 选项位掩码.
            config: 完整配置, 提供时优先于 option.
        """
        self._view = memoryview(data)
        self._pos = 0
        self.length = len(self._view)
        self._config = resolve_config(option, config)

    def _read(self, length: int) -> bytes | memoryview:
        if self._pos + length > self.length:
            raise ShortReadError(
                f"Not enough data to read {length} bytes",
                self._pos,
                requested=length,
                received=self.length - self._pos,
            )
        start = self._pos
        self._pos += length
        view = self._view[start : self._pos]
        return view if self._config.zero_copy else view.tobytes()

    def read_frame(self) -> Frame:
        """读取下一个帧."""
        start = self._pos
        try:
            frame = read_frame(self._read, self._config, offset=start)
        except FrameError as e:
            logger.debug("[FrameReader] %s\n%s", e, get_hexdump(self._view, start))
            raise
        logger.debug(
            "[FrameReader] 帧 %r: %d 字节 (偏移 %d)", frame.name, frame.body_size, start
        )
        return frame

    def __iter__(self) -> Iterator[Frame]:
        while not self.eof:
            yield self.read_frame()

    @property
    def position(self) -> int:
        """当前读取位置."""
        return self._pos

    @property
    def eof(self) -> bool:
        """检查是否到达缓冲区末尾."""
        return self._pos >= self.length
