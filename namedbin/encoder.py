"""NamedBin编码器实现.

该模块提供累积单个字段内容的`Node`和
用于把嵌套作用域展平为帧序列的`NamedBinaryEncoder`.

输出流只支持顺序追加, 而帧的长度前缀必须写在内容之前,
因此每个打开的作用域都在私有缓冲区中完整物化, 直到作用域结束
才计算长度并一次性写出头部与帧体.
"""

import io
from collections.abc import Iterator
from contextlib import contextmanager
from types import TracebackType
from typing import Any

from typing_extensions import Self

from .config import Config, resolve_config
from .exceptions import ScopeError, ShortWriteError
from .frame import encode_header
from .log import logger
from .options import Option
from .stream import ByteSink
from .types import SIZE_TAG, LeafType


class Node:
    """单个待定字段的累积单元.

    Attributes:
        buffer: 该字段作为栈顶时写入的原始内容.
        name: 字段名, 由栈顶时发生的叶子写入赋值, 默认为空.
        written: 已追加到 buffer 的字节总数, 即帧体长度.
    """

    __slots__ = ("buffer", "name", "written")

    buffer: io.BytesIO
    name: str
    written: int

    def __init__(self) -> None:
        self.buffer = io.BytesIO()
        self.name = ""
        self.written = 0

    def getvalue(self) -> bytes:
        """返回累积的全部字节."""
        return self.buffer.getvalue()


class NamedBinaryEncoder:
    """基于作用域栈的命名二进制编码器.

    由外部遍历引擎驱动: 每个字段 (叶子或复合) 先 `scope_begin()`,
    叶子再 `write_bytes()`, 最后 `scope_end()`.

    Examples:
        >>> sink = BufferSink()
        >>> with NamedBinaryEncoder(sink) as enc:
        ...     with enc.scope():  # 复合值, 自身没有叶子写入
        ...         enc.field("x", INT32, 42)
        >>> len(sink.get_buffer())
        29
    """

    __slots__ = (
        "_bytes_written",
        "_config",
        "_frames_written",
        "_nodes",
        "_pending_name",
        "_sink",
    )

    _sink: ByteSink
    _config: Config
    _nodes: list[Node]
    _pending_name: str

    def __init__(
        self,
        sink: ByteSink,
        option: Option = Option.NONE,
        *,
        config: Config | None = None,
    ):
        """初始化编码器.

        Args:
            sink: 输出流, `write()` 须返回实际接收的字节数.
            option: 编码选项.
            config: 完整配置, 提供时优先于 option.
        """
        self._sink = sink
        self._config = resolve_config(option, config)
        # 栈顶 (列表末尾) 是当前活动的节点
        self._nodes = []
        self._pending_name = ""
        self._frames_written = 0
        self._bytes_written = 0

    @property
    def config(self) -> Config:
        """当前配置."""
        return self._config

    @property
    def depth(self) -> int:
        """当前作用域嵌套深度."""
        return len(self._nodes)

    @property
    def pending_name(self) -> str:
        """尚未被叶子写入消费的字段名."""
        return self._pending_name

    @property
    def frames_written(self) -> int:
        """已写出的帧数."""
        return self._frames_written

    @property
    def bytes_written(self) -> int:
        """已写入输出流的字节数."""
        return self._bytes_written

    def scope_begin(self) -> None:
        """压入一个空白节点."""
        self._nodes.append(Node())

    def set_pending_name(self, name: str) -> None:
        """设置下一次叶子写入使用的字段名.

        未消费的旧名字会被覆盖 (后写者胜).
        """
        self._pending_name = name

    def write_bytes(
        self, data: bytes | bytearray | memoryview, name: str | None = None
    ) -> None:
        """向栈顶节点追加原始字节.

        Args:
            data: 叶子数据.
            name: 显式字段名. 未提供时消费待定字段名 (如果有).

        Raises:
            ScopeError: 没有打开的作用域.
            ShortWriteError: 缓冲区接收的字节少于请求量.
        """
        if not self._nodes:
            raise ScopeError("write_bytes() called with no open scope")

        node = self._nodes[-1]
        if name is not None:
            node.name = name
            self._pending_name = ""
        elif self._pending_name:
            node.name = self._pending_name
            self._pending_name = ""

        size = memoryview(data).nbytes
        written = node.buffer.write(data)
        node.written += written
        if written != size:
            logger.error("Buffering field %r failed", node.name)
            raise ShortWriteError(
                f"Failed to write {size} bytes to node buffer! Wrote {written}",
                requested=size,
                written=written,
            )

    def scope_end(self) -> None:
        """弹出栈顶节点, 为空则丢弃, 否则写出一个帧.

        Raises:
            ScopeError: 作用域栈为空.
            ShortWriteError: 输出流接收的字节少于请求量.
        """
        if not self._nodes:
            raise ScopeError("scope_end() called with an empty scope stack")

        node = self._nodes.pop()
        if node.written == 0:
            logger.debug("[NamedBinaryEncoder] 省略空节点 (深度 %d)", self.depth + 1)
            return

        header = encode_header(
            node.name.encode("utf-8"), node.written, self._config.length_mask
        )
        try:
            self._emit(header)
            self._emit(node.getvalue())
        except ShortWriteError as e:
            logger.error("Flushing frame %r failed: %s", node.name, e)
            raise

        self._frames_written += 1
        logger.debug(
            "[NamedBinaryEncoder] 写出帧 %r: %d 字节 (深度 %d)",
            node.name,
            node.written,
            self.depth + 1,
        )

    def _emit(self, data: bytes) -> None:
        written = self._sink.write(data) or 0
        self._bytes_written += written
        if written != len(data):
            raise ShortWriteError(
                f"Failed to write {len(data)} bytes to output stream! Wrote {written}",
                requested=len(data),
                written=written,
            )

    def write_leaf(
        self, leaf_type: type[LeafType], value: Any, name: str | None = None
    ) -> None:
        """按叶子类型打包值并写入栈顶节点."""
        self.write_bytes(leaf_type.pack(value), name=name)

    def write_size_tag(self, size: int, name: str | None = None) -> None:
        """写入序列长度标签 (普通整数叶子, 没有特殊帧)."""
        self.write_leaf(SIZE_TAG, size, name=name)

    @contextmanager
    def scope(self) -> Iterator[Self]:
        """在 with 块内打开一个作用域, 正常退出时结束它."""
        self.scope_begin()
        yield self
        self.scope_end()

    def field(self, name: str, leaf_type: type[LeafType], value: Any) -> None:
        """在独立作用域中写入一个命名叶子."""
        with self.scope():
            self.write_leaf(leaf_type, value, name=name)

    def binary(self, name: str, data: bytes | bytearray | memoryview) -> None:
        """在独立作用域中写入一个命名原始缓冲区."""
        with self.scope():
            self.write_bytes(data, name=name)

    def close(self) -> None:
        """检查作用域栈是否已平衡.

        Raises:
            ScopeError: 仍有未结束的作用域.
        """
        if self._nodes:
            raise ScopeError(f"{len(self._nodes)} scope(s) still open at close")

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.close()
