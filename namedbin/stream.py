"""NamedBin流式处理模块.

该模块定义编码器/解码器所依赖的输出流与输入流契约,
并提供内存输出流和增量帧读取器, 用于网络协议和流处理.
"""

from collections.abc import Generator
from typing import Protocol, runtime_checkable

from .config import Config, resolve_config
from .const import FRAME_OVERHEAD, LENGTH_FIELD_SIZE
from .exceptions import FrameError, ShortReadError
from .frame import Frame, FrameReader, unpack_length
from .options import Option


@runtime_checkable
class ByteSink(Protocol):
    """只追加的输出流.

    `write()` 返回实际接收的字节数, 少于请求量视为短写.
    任何二进制文件对象都满足该契约.
    """

    def write(self, data: bytes, /) -> int | None: ...


@runtime_checkable
class ByteSource(Protocol):
    """顺序读取的输入流.

    `read(n)` 最多返回 n 字节, 到达末尾时返回 `b""`.
    """

    def read(self, size: int = ..., /) -> bytes: ...


class BufferSink:
    """内存中的只追加输出流.

    允许多次编码输出到同一个缓冲区.
    """

    __slots__ = ("_buffer",)

    def __init__(self) -> None:
        self._buffer = bytearray()

    def write(self, data: bytes | bytearray | memoryview) -> int:
        """追加字节并返回写入的字节数."""
        self._buffer.extend(data)
        return len(data)

    def get_buffer(self) -> bytes:
        """获取缓冲区数据的副本."""
        return bytes(self._buffer)

    def clear(self) -> None:
        """清空缓冲区."""
        self._buffer.clear()

    def __len__(self) -> int:
        return len(self._buffer)


class FrameStreamReader:
    """增量帧读取器.

    自动处理 TCP 粘包/拆包, 从流中提取完整的帧.
    利用 totalSize 字段判断整帧长度, 不完整的尾部保留在缓冲区中.

    Usage:
        >>> reader = FrameStreamReader()
        >>> reader.feed(received_bytes)
        >>> for frame in reader:
        ...     process(frame)
    """

    def __init__(
        self,
        option: Option = Option.NONE,
        max_buffer_size: int = 10 * 1024 * 1024,  # 10MB
        *,
        config: Config | None = None,
    ):
        """初始化增量帧读取器.

        Args:
            option: 选项.
            max_buffer_size: 最大缓冲区大小 (防止内存耗尽).
            config: 完整配置, 提供时优先于 option.
        """
        self._config = resolve_config(option, config)
        self._buffer = bytearray()
        self._max_buffer_size = max_buffer_size
        self._consumed = 0

    def feed(self, data: bytes | bytearray | memoryview) -> None:
        """输入数据到内部缓冲区."""
        if len(self._buffer) + len(data) > self._max_buffer_size:
            raise BufferError("FrameStreamReader buffer exceeded max size")
        self._buffer.extend(data)

    @property
    def pending(self) -> int:
        """缓冲区中尚未解析的字节数."""
        return len(self._buffer)

    def __iter__(self) -> Generator[Frame, None, None]:
        """从缓冲区解析所有完整的帧.

        Yields:
            Frame: 解析出的帧, offset 为其在整个流中的位置.
        """
        while True:
            # 1. 检查是否有足够数据读取 totalSize
            if len(self._buffer) < LENGTH_FIELD_SIZE:
                break

            # 2. 确定整帧大小
            total_size = unpack_length(self._buffer[:LENGTH_FIELD_SIZE])
            if total_size < LENGTH_FIELD_SIZE:
                raise FrameError(
                    f"Inconsistent frame header: totalSize={total_size} "
                    "cannot hold the bodySize field",
                    self._consumed,
                )
            packet_size = total_size + FRAME_OVERHEAD
            if packet_size > self._max_buffer_size:
                raise FrameError(
                    f"Frame of {packet_size} bytes can never fit the "
                    f"{self._max_buffer_size}-byte buffer",
                    self._consumed,
                )

            # 3. 检查是否有完整帧
            if len(self._buffer) < packet_size:
                break

            # 4. 解码 (复制出来, 以便随后消耗缓冲区)
            # 切片长度由 totalSize 决定, 越界读取说明长度前缀本身有误
            try:
                frame = FrameReader(
                    bytes(self._buffer[:packet_size]), config=self._config
                ).read_frame()
            except ShortReadError as e:
                raise FrameError(
                    f"Inconsistent frame header: totalSize={total_size} "
                    f"is too small for the frame ({e})",
                    self._consumed,
                ) from e

            # 5. 消耗缓冲区
            del self._buffer[:packet_size]
            offset = self._consumed
            self._consumed += packet_size
            yield Frame(name=frame.name, body=frame.body, offset=offset)
