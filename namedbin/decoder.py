"""NamedBin解码器实现.

该模块提供两种解码器:

- `NamedBinaryDecoder`: 顺序直通读取, 作用域与命名调用均为空操作,
  不解析帧头部. 读取序列必须与编码端的叶子写入序列完全一致,
  且只能还原不含帧头部的原始叶子流.
- `FramedDecoder`: 帧感知读取, 解析并校验每个帧头部,
  从帧体中提供叶子数据, 可以还原编码器的完整输出.
"""

import io
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from typing_extensions import Self

from .config import Config, resolve_config
from .exceptions import DecodeError, FrameError, ShortReadError
from .frame import Frame, read_frame
from .log import logger
from .options import Option
from .stream import ByteSource
from .types import SIZE_TAG, LeafType


class NamedBinaryDecoder:
    """顺序直通解码器.

    按需从输入流读取原始字节, 不维护作用域栈.
    """

    __slots__ = ("_pos", "_source")

    _source: ByteSource
    _pos: int

    def __init__(self, source: ByteSource | bytes | bytearray | memoryview):
        """初始化解码器.

        Args:
            source: 输入流, 或直接传入的二进制数据 (会包装为 BytesIO).
        """
        if isinstance(source, bytes | bytearray | memoryview):
            source = io.BytesIO(source)
        self._source = source
        self._pos = 0

    @property
    def position(self) -> int:
        """已从输入流消费的字节数."""
        return self._pos

    def scope_begin(self) -> None:
        """空操作."""

    def scope_end(self) -> None:
        """空操作."""

    def set_pending_name(self, name: str) -> None:
        """空操作, 字段名不参与顺序解码."""

    def _read_exact(self, length: int) -> bytes:
        """从输入流精确读取 length 字节.

        Raises:
            ShortReadError: 输入流在读满之前结束.
        """
        if length < 0:
            raise DecodeError(f"Cannot read negative bytes: {length}", self._pos)

        start = self._pos
        chunks = []
        remaining = length
        # 底层流可能一次返回不足 n 字节, 直到返回空才算结束
        while remaining:
            chunk = self._source.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)

        data = b"".join(chunks)
        self._pos += len(data)
        if remaining:
            raise ShortReadError(
                f"Failed to read {length} bytes from input stream! Read {len(data)}",
                start,
                requested=length,
                received=len(data),
            )
        return data

    def read_bytes(self, length: int) -> bytes:
        """读取 length 个原始字节.

        Raises:
            ShortReadError: 可用字节不足.
        """
        return self._read_exact(length)

    def read_leaf(self, leaf_type: type[LeafType]) -> Any:
        """读取并解包一个数值叶子."""
        return leaf_type.unpack(self.read_bytes(leaf_type.size()))

    def read_size_tag(self) -> int:
        """读取序列长度标签."""
        return self.read_leaf(SIZE_TAG)

    @contextmanager
    def scope(self) -> Iterator[Self]:
        """与编码端 `scope()` 对称."""
        self.scope_begin()
        yield self
        self.scope_end()

    def field(self, name: str, leaf_type: type[LeafType]) -> Any:
        """读取 `NamedBinaryEncoder.field()` 写入的命名叶子."""
        with self.scope():
            self.set_pending_name(name)
            return self.read_leaf(leaf_type)

    def binary(self, name: str, length: int) -> bytes:
        """读取 `NamedBinaryEncoder.binary()` 写入的命名原始缓冲区."""
        with self.scope():
            self.set_pending_name(name)
            return self.read_bytes(length)


class FramedDecoder(NamedBinaryDecoder):
    """帧感知解码器.

    逐帧解析输入流, 叶子读取从当前帧体中获取.
    要求每个叶子都写在自己的作用域内 (遍历约定), 此时帧顺序与叶子写入顺序一致.
    复合值在自己的作用域中直接写入的叶子会排在子字段的帧之后,
    读取顺序因此错位, 只有开启 `Option.STRICT_NAMES` 时才会被发现.
    长度为 0 的读取不会拉取新帧, 与编码端省略空节点相对应;
    帧体为空的帧在拉取时被跳过.
    """

    __slots__ = (
        "_config",
        "_expected_name",
        "_frame",
        "_frame_pos",
        "_frames_read",
    )

    _config: Config
    _frame: Frame | None
    _frame_pos: int
    _expected_name: str
    _frames_read: int

    def __init__(
        self,
        source: ByteSource | bytes | bytearray | memoryview,
        option: Option = Option.NONE,
        *,
        config: Config | None = None,
    ):
        """初始化帧感知解码器.

        Args:
            source: 输入流或二进制数据.
            option: 解码选项 (如 `Option.STRICT_NAMES`).
            config: 完整配置, 提供时优先于 option.
        """
        super().__init__(source)
        self._config = resolve_config(option, config)
        self._frame = None
        self._frame_pos = 0
        self._expected_name = ""
        self._frames_read = 0

    @property
    def current_frame(self) -> Frame | None:
        """正在读取的帧."""
        return self._frame

    @property
    def frames_read(self) -> int:
        """已解析的帧数."""
        return self._frames_read

    def set_pending_name(self, name: str) -> None:
        """记录下一次读取预期的字段名 (后写者胜)."""
        self._expected_name = name

    def next_frame(self) -> Frame:
        """解析输入流中的下一个帧.

        Raises:
            FrameError: 帧头部不一致或超出限制.
            ShortReadError: 数据不足.
        """
        frame = read_frame(self._read_exact, self._config, offset=self._pos)
        self._frames_read += 1
        logger.debug(
            "[FramedDecoder] 帧 %r: %d 字节 (偏移 %d)",
            frame.name,
            frame.body_size,
            frame.offset,
        )
        return frame

    def read_bytes(self, length: int) -> bytes:
        """从当前帧体读取 length 字节, 当前帧耗尽时拉取下一帧.

        Raises:
            FrameError: 读取跨越帧边界, 或严格模式下帧名不匹配.
            ShortReadError: 数据不足.
        """
        expected, self._expected_name = self._expected_name, ""
        if length < 0:
            raise DecodeError(f"Cannot read negative bytes: {length}", self._pos)
        if length == 0:
            return b""

        frame = self._frame
        if frame is None or self._frame_pos >= frame.body_size:
            frame = self._frame = self.next_frame()
            # 帧体为空的帧不对应任何非零读取
            while not frame.body_size:
                frame = self._frame = self.next_frame()
            self._frame_pos = 0
            if expected and self._config.strict_names and frame.name != expected:
                raise FrameError(
                    f"Expected field {expected!r}, found frame {frame.name!r}",
                    frame.offset,
                )

        remaining = frame.body_size - self._frame_pos
        if length > remaining:
            raise FrameError(
                f"Read of {length} bytes crosses the boundary of frame "
                f"{frame.name!r} ({remaining} bytes left)",
                frame.offset,
            )

        start = self._frame_pos
        self._frame_pos += length
        return bytes(frame.body[start : self._frame_pos])
