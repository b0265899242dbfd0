"""NamedBin 特定的异常类.

该模块为 namedbin 库定义了异常层次结构.
"""


class NamedBinError(Exception):
    """所有 namedbin 异常的基类."""

    pass


class EncodeError(NamedBinError):
    """编码失败时抛出.

    Case:
        - 目标缓冲区或输出流接收的字节少于请求量.
        - 叶子值超出指定类型的范围 (如 `UINT8` 存了 300).
        - 长度字段超出 8 字节可表示的范围.
    """

    pass


class ShortWriteError(EncodeError, OSError):
    """写入的字节数少于请求量时抛出.

    帧的长度前缀一旦写入只追加的输出流就无法撤回,
    因此该错误对当前编码操作是致命的.
    """

    def __init__(self, msg: str, requested: int = 0, written: int = 0) -> None:
        """初始化短写错误.

        Args:
            msg: 错误描述信息.
            requested: 请求写入的字节数.
            written: 实际被接收的字节数.
        """
        super().__init__(msg)
        self.requested = requested
        self.written = written


class NamedBinTypeError(EncodeError, TypeError):
    """叶子值类型不匹配时抛出."""

    pass


class NamedBinValueError(EncodeError, ValueError):
    """叶子值无效时抛出 (如超出范围)."""

    pass


class DecodeError(NamedBinError):
    """解码失败时抛出.

    Case:
        - 输入数据被截断.
        - 帧头部不一致 (仅帧感知的读取器).
    """

    def __init__(self, msg: str, offset: int | None = None) -> None:
        """初始化解码错误.

        Args:
            msg: 错误描述信息.
            offset: 错误发生处在输入流中的字节偏移.
        """
        super().__init__(msg)
        self.offset = offset

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.offset is not None:
            return f"{base_msg} (at offset {self.offset})"
        return base_msg


class ShortReadError(DecodeError, OSError):
    """输入源提供的字节少于请求量时抛出."""

    def __init__(
        self,
        msg: str,
        offset: int | None = None,
        requested: int = 0,
        received: int = 0,
    ) -> None:
        """初始化短读错误.

        Args:
            msg: 错误描述信息.
            offset: 读取开始处的字节偏移.
            requested: 请求读取的字节数.
            received: 实际读到的字节数.
        """
        super().__init__(msg, offset)
        self.requested = requested
        self.received = received


class FrameError(DecodeError):
    """帧格式错误或越过帧边界读取时抛出.

    只有解析帧头部的读取器 (`FrameReader`, `FramedDecoder`) 会抛出该异常,
    顺序解码器从不解析帧头部.
    """

    pass


class ScopeError(NamedBinError, RuntimeError):
    """违反作用域调用约定时抛出.

    Case:
        - 作用域栈为空时调用 `scope_end()`.
        - 没有打开的作用域时写入叶子数据.
        - 编码器关闭时作用域栈不平衡.
    """

    pass
